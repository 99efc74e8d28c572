"""Processing module - resolve, download, sign and upload documents."""

from bidbot.processing.fetcher import DocumentFetcher, extract_file_url
from bidbot.processing.pipeline import FileProcessingPipeline
from bidbot.processing.schemas import (
    BatchSummary,
    FileProcessingResult,
    FileProcessingTask,
    ProcessingResponse,
)
from bidbot.processing.service import FileProcessorService
from bidbot.processing.uploader import Uploader

__all__ = [
    "DocumentFetcher",
    "extract_file_url",
    "FileProcessingPipeline",
    "BatchSummary",
    "FileProcessingResult",
    "FileProcessingTask",
    "ProcessingResponse",
    "FileProcessorService",
    "Uploader",
]
