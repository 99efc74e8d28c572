"""Collaborators that start an application for an announcement."""

from typing import Optional, Protocol

import httpx

from bidbot.core.exceptions import SubmissionError
from bidbot.core.logging import get_logger

logger = get_logger("monitor.submission")


class SubmissionGateway(Protocol):
    """Starts the portal-side application for one announcement.

    Raises on failure; returning normally means the submission started.
    """

    async def submit(self, announce_id: str) -> None: ...


class HttpSubmissionGateway:
    """Starts applications through the application service HTTP API."""

    def __init__(
        self,
        url: str,
        timeout: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the gateway.

        Args:
            url: Endpoint accepting POST {"number": announce_id}
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        self._url = url
        self._timeout = timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return self._url

    async def submit(self, announce_id: str) -> None:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(self._url, json={"number": announce_id})
            except httpx.TransportError as e:
                raise SubmissionError(
                    f"Application service unreachable at {self._url}: {e}",
                    announce_id=announce_id,
                ) from e

        if response.status_code >= 400:
            raise SubmissionError(
                f"Application service answered {response.status_code}",
                announce_id=announce_id,
                details={"body": response.text[:500]},
            )
        logger.info(
            "[submit-%s] Application service accepted request (status %d)",
            announce_id, response.status_code,
        )
