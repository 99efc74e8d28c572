"""Caller-facing file processing surface.

Inputs arrive as plain dicts (decoded JSON) or ready task models; every
call answers with a ProcessingResponse instead of raising.
"""

from typing import Any, List, Optional, Union

from pydantic import ValidationError

from bidbot.core.constants import MAX_BATCH_TASKS
from bidbot.core.logging import get_logger
from bidbot.processing.pipeline import FileProcessingPipeline
from bidbot.processing.schemas import (
    BatchSummary,
    FileProcessingTask,
    ProcessingResponse,
)

logger = get_logger("processing.service")

TaskInput = Union[FileProcessingTask, dict]


def _to_task(raw: TaskInput) -> FileProcessingTask:
    if isinstance(raw, FileProcessingTask):
        return raw
    return FileProcessingTask.model_validate(raw)


def _validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"Invalid task: {location} {first.get('msg', '')}".strip()


class FileProcessorService:
    """Validates requests and hands them to the pipeline."""

    def __init__(self, pipeline: FileProcessingPipeline, max_batch_tasks: int = MAX_BATCH_TASKS):
        self._pipeline = pipeline
        self._max_batch_tasks = min(max_batch_tasks, MAX_BATCH_TASKS)

    async def process_file(self, raw_task: TaskInput) -> ProcessingResponse:
        """Process a single task."""
        try:
            task = _to_task(raw_task)
        except ValidationError as e:
            return ProcessingResponse(success=False, message=_validation_message(e))

        result = await self._pipeline.process(task)
        return ProcessingResponse(success=result.success, message=result.error, data=result)

    async def process_files_parallel(self, raw_tasks: Optional[List[Any]]) -> ProcessingResponse:
        """Process 1..max tasks concurrently.

        Out-of-range or invalid batches are rejected before any task runs.
        """
        if raw_tasks is None or not isinstance(raw_tasks, list):
            return ProcessingResponse(success=False, message="tasks must be a list")
        if not raw_tasks:
            return ProcessingResponse(success=False, message="tasks must not be empty")
        if len(raw_tasks) > self._max_batch_tasks:
            logger.warning(
                "Rejected batch of %d tasks (limit %d)", len(raw_tasks), self._max_batch_tasks
            )
            return ProcessingResponse(
                success=False,
                message=f"Maximum number of tasks: {self._max_batch_tasks}",
            )

        try:
            tasks = [_to_task(raw) for raw in raw_tasks]
        except ValidationError as e:
            return ProcessingResponse(success=False, message=_validation_message(e))

        try:
            results = await self._pipeline.process_many(tasks)
        except Exception as e:
            return ProcessingResponse(success=False, message=str(e))

        successful = sum(1 for r in results if r.success)
        return ProcessingResponse(
            success=True,
            summary=BatchSummary(
                total=len(tasks),
                successful=successful,
                failed=len(results) - successful,
            ),
            results=results,
        )

    async def cleanup(self) -> ProcessingResponse:
        """Remove every temporary artifact from the working directory."""
        try:
            removed = await self._pipeline.cleanup_all_temp_files()
        except OSError as e:
            logger.error("Temp file cleanup failed: %s", e)
            return ProcessingResponse(success=False, message=str(e))
        return ProcessingResponse(success=True, message=f"Temp files removed: {removed}")
