"""Delivery of signed files to the task's upload endpoint."""

from pathlib import Path
from typing import Any

import httpx

from bidbot.core.exceptions import TransportError
from bidbot.core.logging import get_logger
from bidbot.processing.schemas import FileProcessingTask
from bidbot.settings import Settings

logger = get_logger("processing.uploader")


def _decode(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class Uploader:
    """Sends a signed file as multipart (POST) or raw bytes (PUT)."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        self._client = client
        self._timeout = settings.upload_timeout_seconds

    async def upload(self, file_path: Path, task: FileProcessingTask) -> Any:
        """Upload the signed file.

        Returns:
            Decoded response body (JSON or text)

        Raises:
            TransportError: On network failure or error status
        """
        content = file_path.read_bytes()
        extra = task.upload_data or {}

        try:
            if task.upload_method == "POST":
                fields = {name: str(value) for name, value in extra.items()}
                response = await self._client.post(
                    task.upload_url,
                    data=fields,
                    files={"file": (file_path.name, content)},
                    timeout=self._timeout,
                )
            else:
                headers = {"Content-Type": "application/octet-stream"}
                headers.update({name: str(value) for name, value in extra.items()})
                response = await self._client.put(
                    task.upload_url,
                    content=content,
                    headers=headers,
                    timeout=self._timeout,
                )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Upload failed with status {e.response.status_code}",
                url=task.upload_url,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Upload failed: {e}", url=task.upload_url) from e

        logger.debug(
            "[%s] Uploaded %s (%d bytes) via %s",
            task.id, file_path.name, len(content), task.upload_method,
        )
        return _decode(response)
