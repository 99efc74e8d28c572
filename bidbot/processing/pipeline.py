"""File processing pipeline.

Per task, strictly in order:
1. Resolve → ask the task endpoint for the document link
2. Download → stream the document into the working directory
3. Sign → sign the document through the signer collaborator
4. Upload → deliver the signed file to the upload endpoint
5. Cleanup → delete both temp files, whatever happened before

Batches run all task pipelines concurrently; one task failing never
affects its siblings.
"""

import asyncio
from pathlib import Path
from time import monotonic
from typing import Iterable, List, Optional

import httpx

from bidbot.core.logging import get_logger
from bidbot.processing.fetcher import DocumentFetcher
from bidbot.processing.schemas import FileProcessingResult, FileProcessingTask
from bidbot.processing.uploader import Uploader
from bidbot.settings import Settings
from bidbot.signing.file_signer import FileSigner
from bidbot.signing.payloads import Signer

logger = get_logger("processing.pipeline")


class FileProcessingPipeline:
    """Runs resolve → download → sign → upload for tasks."""

    def __init__(
        self,
        settings: Settings,
        signer: Signer,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the pipeline.

        Args:
            settings: Application settings
            signer: Signing collaborator
            client: Shared HTTP client; created (and owned) when omitted
            transport: Optional httpx transport for the owned client
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(transport=transport, follow_redirects=True)
        self._temp_dir = Path(settings.temp_dir)
        self.fetcher = DocumentFetcher(settings, self._client)
        self.file_signer = FileSigner(settings, signer)
        self.uploader = Uploader(settings, self._client)

    @property
    def temp_dir(self) -> Path:
        return self._temp_dir

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def process(self, task: FileProcessingTask) -> FileProcessingResult:
        """Process one task. Never raises; failures land in `error`."""
        started = monotonic()
        task_id = task.id
        file_url: Optional[str] = None
        downloaded: Optional[Path] = None
        signed: Optional[Path] = None

        logger.info("[%s] Processing started", task_id)

        try:
            logger.info("[%s] Step 1: resolving document link...", task_id)
            file_url = await self.fetcher.resolve(task)
            logger.info("[%s] Document link: %s", task_id, file_url)

            logger.info("[%s] Step 2: downloading...", task_id)
            downloaded = await self.fetcher.download(file_url, task_id)
            logger.info("[%s] Downloaded: %s", task_id, downloaded)

            logger.info("[%s] Step 3: signing...", task_id)
            signed = await self.file_signer.sign_file(downloaded, task_id)
            logger.info("[%s] Signed: %s", task_id, signed)

            logger.info("[%s] Step 4: uploading...", task_id)
            upload_response = await self.uploader.upload(signed, task)
            logger.info("[%s] Uploaded", task_id)

            duration = int((monotonic() - started) * 1000)
            logger.info("[%s] Processing finished in %d ms", task_id, duration)
            result = FileProcessingResult(
                task_id=task_id,
                success=True,
                file_url=file_url,
                downloaded_file_path=str(downloaded),
                signed_file_path=str(signed),
                upload_response=upload_response,
                duration=duration,
            )
        except Exception as e:
            duration = int((monotonic() - started) * 1000)
            error = str(e) or type(e).__name__
            logger.error("[%s] Processing failed: %s", task_id, error)
            result = FileProcessingResult(
                task_id=task_id,
                success=False,
                file_url=file_url,
                error=error,
                duration=duration,
            )
        finally:
            await self.cleanup_files(path for path in (downloaded, signed) if path)

        return result

    async def process_many(self, tasks: List[FileProcessingTask]) -> List[FileProcessingResult]:
        """Process tasks concurrently, one result per task in input order."""
        logger.info("Starting parallel processing of %d files...", len(tasks))
        started = monotonic()

        try:
            outcomes = await asyncio.gather(
                *(self.process(task) for task in tasks), return_exceptions=True
            )
        except Exception as e:
            logger.error("Parallel processing failed: %s", e)
            raise

        results: List[FileProcessingResult] = []
        for task, outcome in zip(tasks, outcomes):
            if isinstance(outcome, FileProcessingResult):
                results.append(outcome)
            else:
                logger.error("[%s] Pipeline crashed: %s", task.id, outcome)
                results.append(
                    FileProcessingResult(
                        task_id=task.id,
                        success=False,
                        error=str(outcome) or type(outcome).__name__,
                        duration=int((monotonic() - started) * 1000),
                    )
                )

        successful = sum(1 for r in results if r.success)
        logger.info(
            "Parallel processing finished: %d/%d successful in %d ms",
            successful, len(tasks), int((monotonic() - started) * 1000),
        )
        return results

    async def cleanup_files(self, paths: Iterable[Path]) -> None:
        """Delete temp files; failures are only logged."""
        for path in paths:
            try:
                path.unlink()
                logger.debug("Temp file removed: %s", path)
            except OSError as e:
                logger.warning("Could not remove temp file %s: %s", path, e)

    async def cleanup_all_temp_files(self) -> int:
        """Delete every file in the working directory.

        Returns:
            Number of files removed
        """
        if not self._temp_dir.exists():
            logger.info("Temp directory %s does not exist, nothing to clean", self._temp_dir)
            return 0

        removed = 0
        for path in self._temp_dir.iterdir():
            if not path.is_file():
                continue
            try:
                path.unlink()
                removed += 1
            except OSError as e:
                logger.warning("Could not remove file %s: %s", path, e)

        logger.info("Removed %d temp files from %s", removed, self._temp_dir)
        return removed
