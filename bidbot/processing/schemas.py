"""Pydantic schemas for file processing tasks and results."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Accepts and emits camelCase keys, also accepts snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileProcessingTask(_CamelModel):
    """One document to resolve, download, sign and upload."""

    id: str = Field(min_length=1, description="Task id, also used in temp file names")
    url: str = Field(description="Endpoint that answers with the document link")
    method: Literal["GET", "POST"] = Field(
        default="GET", description="Method for the link request"
    )
    request_data: Optional[Any] = Field(
        default=None, description="JSON body for a POST link request"
    )
    upload_url: str = Field(description="Endpoint receiving the signed file")
    upload_method: Literal["POST", "PUT"] = Field(
        default="POST", description="POST sends multipart, PUT sends raw bytes"
    )
    upload_data: Optional[Dict[str, Any]] = Field(
        default=None, description="Extra form fields (POST) or headers (PUT)"
    )


class FileProcessingResult(_CamelModel):
    """Outcome of one task. Every task produces exactly one result."""

    task_id: str
    success: bool
    file_url: Optional[str] = None
    downloaded_file_path: Optional[str] = None
    signed_file_path: Optional[str] = None
    upload_response: Optional[Any] = None
    error: Optional[str] = None
    duration: Optional[int] = Field(default=None, description="Elapsed time in ms")


class BatchSummary(_CamelModel):
    total: int
    successful: int
    failed: int


class ProcessingResponse(_CamelModel):
    """Response of the caller-facing processing surface."""

    success: bool
    message: Optional[str] = None
    data: Optional[FileProcessingResult] = None
    summary: Optional[BatchSummary] = None
    results: List[FileProcessingResult] = Field(default_factory=list)
