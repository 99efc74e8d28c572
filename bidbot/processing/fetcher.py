"""Document link resolution and download."""

import re
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union
from urllib.parse import urlparse

import httpx

from bidbot.core.constants import (
    DEFAULT_FILE_EXTENSION,
    DOCUMENT_EXTENSIONS,
    FILE_URL_FIELDS,
    MAX_SEARCH_DEPTH,
)
from bidbot.core.exceptions import ParsingError, TransportError
from bidbot.core.logging import get_logger
from bidbot.core.tempfiles import temp_file_name
from bidbot.processing.schemas import FileProcessingTask
from bidbot.settings import Settings

logger = get_logger("processing.fetcher")

JsonValue = Union[Mapping[str, Any], Sequence[Any], str, int, float, bool, None]

_EXT = "|".join(DOCUMENT_EXTENSIONS)

# Tried in order against HTML / text bodies
HTML_LINK_PATTERNS = [
    re.compile(rf"""href\s*=\s*["']([^"']+\.(?:{_EXT}))["']""", re.IGNORECASE),
    re.compile(rf"""src\s*=\s*["']([^"']+\.(?:{_EXT}))["']""", re.IGNORECASE),
    re.compile(r"""download\s*=\s*["']([^"']+)["']""", re.IGNORECASE),
    re.compile(rf"""(https?://[^\s"']+\.(?:{_EXT}))""", re.IGNORECASE),
    re.compile(r"""data-file-identifier\s*=\s*["']([^"']+)["']""", re.IGNORECASE),
]


def _is_absolute_url(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(("http://", "https://"))


def _search_text(text: str) -> Optional[str]:
    for pattern in HTML_LINK_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1):
            return match.group(1)
    stripped = text.strip()
    if _is_absolute_url(stripped):
        return stripped
    return None


def _search_structure(data: JsonValue, depth: int) -> Optional[str]:
    """Depth-first search of decoded JSON for a document URL."""
    if depth > MAX_SEARCH_DEPTH:
        return None

    if isinstance(data, Mapping):
        for name in FILE_URL_FIELDS:
            if _is_absolute_url(data.get(name)):
                return data[name]
        children = list(data.values())
    elif isinstance(data, Sequence) and not isinstance(data, (str, bytes)):
        children = list(data)
    else:
        return None

    for value in children:
        if _is_absolute_url(value):
            return value
        if isinstance(value, (Mapping, list, tuple)):
            found = _search_structure(value, depth + 1)
            if found:
                return found
    return None


def extract_file_url(data: JsonValue) -> Optional[str]:
    """Find the document URL in a response body.

    Text bodies are matched against HTML link patterns, then accepted
    whole when they are a bare absolute URL. Decoded JSON is searched
    by well-known field names first, then recursively.

    Args:
        data: Response body, either text or decoded JSON

    Returns:
        The document URL, or None
    """
    if isinstance(data, str):
        return _search_text(data)
    return _search_structure(data, 0)


def _decode(response: httpx.Response) -> JsonValue:
    """JSON bodies decode regardless of content type, anything else is text."""
    text = response.text
    declared_json = "application/json" in response.headers.get("content-type", "")
    if declared_json or text.lstrip().startswith(("{", "[")):
        try:
            return response.json()
        except ValueError:
            pass
    return text


class DocumentFetcher:
    """Resolves a task's document link and downloads the document."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        self._client = client
        self._temp_dir = Path(settings.temp_dir)
        self._resolve_timeout = settings.resolve_timeout_seconds
        self._download_timeout = settings.download_timeout_seconds

    async def resolve(self, task: FileProcessingTask) -> str:
        """Ask `task.url` for the document link.

        Raises:
            TransportError: On network failure or error status
            ParsingError: If the response contains no document link
        """
        try:
            if task.method == "POST":
                response = await self._client.post(
                    task.url, json=task.request_data or {}, timeout=self._resolve_timeout
                )
            else:
                response = await self._client.get(task.url, timeout=self._resolve_timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Link request failed with status {e.response.status_code}",
                url=task.url,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Link request failed: {e}", url=task.url) from e

        body = _decode(response)
        file_url = extract_file_url(body)
        if not file_url:
            raise ParsingError(
                "Document link not found in response",
                source=task.url,
                raw_preview=body if isinstance(body, str) else str(body),
            )
        return file_url

    def build_download_path(self, file_url: str, task_id: str) -> Path:
        """Unique temp path `<taskId>-<ms timestamp><ext>`."""
        ext = Path(urlparse(file_url).path).suffix or DEFAULT_FILE_EXTENSION
        return self._temp_dir / temp_file_name(task_id, ext)

    async def download(self, file_url: str, task_id: str) -> Path:
        """Stream the document to a temp file.

        Returns only after the last chunk is written. A partially written
        file is removed before the error propagates.

        Raises:
            TransportError: On network failure or error status
        """
        self._temp_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.build_download_path(file_url, task_id)
        logger.debug("[%s] Downloading %s", task_id, file_url)

        try:
            async with self._client.stream(
                "GET", file_url, timeout=self._download_timeout
            ) as response:
                response.raise_for_status()
                with open(file_path, "wb") as f:
                    async for chunk in response.aiter_bytes():
                        f.write(chunk)
        except httpx.HTTPStatusError as e:
            file_path.unlink(missing_ok=True)
            raise TransportError(
                f"Download failed with status {e.response.status_code}",
                url=file_url,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            file_path.unlink(missing_ok=True)
            raise TransportError(f"Download failed: {e}", url=file_url) from e
        except OSError:
            file_path.unlink(missing_ok=True)
            raise

        logger.debug("[%s] Saved %s (%d bytes)", task_id, file_path, file_path.stat().st_size)
        return file_path
