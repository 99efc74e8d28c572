"""Authenticated HTTP client for the procurement portal.

Session acquisition happens elsewhere; this client only replays the
session cookie it is given and reports whether the portal answered with
a usable page.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import httpx

from bidbot.core.logging import get_logger
from bidbot.settings import Settings

logger = get_logger("portal.client")

SUCCESS_STATUS_CODES = (200, 201, 302)

# Paths the portal redirects to when the session is gone
AUTH_REDIRECT_MARKERS = ("/user/login", "/user/auth")

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept-Language": "ru-RU,ru;q=0.9",
}


@dataclass
class PortalResponse:
    """Outcome of a portal request."""

    success: bool
    data: Union[str, Dict[str, Any], list, None]
    status_code: int = 0


class PortalClient:
    """Executes requests against the portal with the current session."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            settings: Application settings (base URL, cookie, timeout)
            transport: Optional httpx transport, used by tests
        """
        headers = dict(DEFAULT_HEADERS)
        if settings.portal_cookie:
            headers["Cookie"] = settings.portal_cookie
        self._client = httpx.AsyncClient(
            base_url=settings.portal_base_url,
            headers=headers,
            timeout=settings.portal_timeout_seconds,
            follow_redirects=False,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        url: str,
        method: str = "GET",
        additional_headers: Optional[Dict[str, str]] = None,
        body: Any = None,
    ) -> PortalResponse:
        """Send a request to the portal.

        Args:
            url: Absolute URL or path relative to the portal base URL
            method: HTTP method
            additional_headers: Extra headers for this request only
            body: JSON-serializable body, or form dict for POST forms

        Returns:
            PortalResponse with decoded body

        Raises:
            httpx.TransportError: On network failure or timeout
        """
        kwargs: Dict[str, Any] = {"headers": additional_headers or {}}
        if body is not None:
            if isinstance(body, (str, bytes)):
                kwargs["content"] = body
            else:
                kwargs["json"] = body

        response = await self._client.request(method.upper(), url, **kwargs)

        location = response.headers.get("location", "")
        redirected_to_auth = any(marker in location for marker in AUTH_REDIRECT_MARKERS)
        if redirected_to_auth:
            logger.warning("Portal redirected %s %s to the login page", method, url)

        success = response.status_code in SUCCESS_STATUS_CODES and not redirected_to_auth
        logger.debug("Portal %s %s -> %d", method.upper(), url, response.status_code)

        return PortalResponse(
            success=success,
            data=_decode_body(response),
            status_code=response.status_code,
        )


def _decode_body(response: httpx.Response) -> Union[str, Dict[str, Any], list, None]:
    """Decode JSON bodies to Python objects, everything else to text."""
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text
