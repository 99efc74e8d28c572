"""HTTP client for the NCANode signing service."""

import base64
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from bidbot.core.constants import CERT_CACHE_KEY_PREFIX, CERT_CACHE_TTL_SECONDS
from bidbot.core.exceptions import ConfigurationError, SigningError
from bidbot.core.logging import get_logger
from bidbot.dedup.store import DedupStore
from bidbot.settings import Settings
from bidbot.signing.payloads import (
    RawPayload,
    SignaturePayload,
    SignedPayload,
    TextPayload,
    XmlPayload,
)

logger = get_logger("signing.ncanode")

TSA_POLICY = "TSA_GOST_POLICY"

# Answer fields that may carry the signed XML document
XML_RESULT_FIELDS = ("xml", "data", "result", "signedXml", "signed", "signature")


def _mentions_tsp(response: httpx.Response) -> bool:
    body = response.text
    return "tsp" in body.lower() or "TimeStampToken" in body


class NcanodeSigner:
    """Signs documents through NCANode's /cms/sign and /xml/sign."""

    def __init__(
        self,
        settings: Settings,
        cache: Optional[DedupStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the signer client.

        Args:
            settings: Application settings (service URL, TSP, cache flag)
            cache: Optional store for the base64 key store
            transport: Optional httpx transport, used by tests
        """
        self._base_url = settings.ncanode_url.rstrip("/")
        self._with_tsp = settings.sign_with_tsp
        self._cache = cache if settings.enable_cert_cache else None
        self._client = httpx.AsyncClient(
            timeout=settings.signer_timeout_seconds, transport=transport
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _load_cert_base64(self, cert_path: str) -> str:
        """Read the key store as base64, through the cache when enabled."""
        path = Path(cert_path)
        if not path.is_absolute():
            path = Path.cwd() / path

        try:
            cache_key = f"{CERT_CACHE_KEY_PREFIX}{path}:{path.stat().st_mtime}"
        except OSError as e:
            raise ConfigurationError(
                f"Key store not readable: {path}", setting="cert_path"
            ) from e

        if self._cache is not None:
            cached = await self._cache.get(cache_key)
            if cached:
                logger.debug("Key store loaded from cache: %s", path)
                return cached

        cert_base64 = base64.b64encode(path.read_bytes()).decode("ascii")
        if self._cache is not None:
            await self._cache.set(cache_key, cert_base64, CERT_CACHE_TTL_SECONDS)
            logger.debug("Key store cached: %s", path)
        return cert_base64

    async def _post(self, endpoint: str, body: Dict[str, Any]) -> httpx.Response:
        try:
            return await self._client.post(f"{self._base_url}{endpoint}", json=body)
        except httpx.HTTPError as e:
            raise SigningError(f"Signer unreachable: {e}") from e

    @staticmethod
    def _raise_for_status(response: httpx.Response, endpoint: str) -> None:
        if response.status_code >= 400:
            logger.error(
                "Signer %s failed: %d %s", endpoint, response.status_code, response.text[:300]
            )
            raise SigningError(
                f"Signer {endpoint} answered {response.status_code}",
                status_code=response.status_code,
                response_body=response.text,
            )

    async def sign_binary(
        self, data: bytes, cert_path: str, cert_password: str, detached: bool = True
    ) -> SignedPayload:
        """Create a CMS signature over `data`.

        A timestamp token is requested when enabled; if the service fails
        to obtain one the request is repeated without it.
        """
        body: Dict[str, Any] = {
            "data": base64.b64encode(data).decode("ascii"),
            "signers": [
                {
                    "key": await self._load_cert_base64(cert_path),
                    "password": cert_password,
                    "keyAlias": None,
                }
            ],
            "withTsp": self._with_tsp,
            "detached": detached,
        }
        if self._with_tsp:
            body["tsaPolicy"] = TSA_POLICY

        response = await self._post("/cms/sign", body)
        if self._with_tsp and response.status_code == 500 and _mentions_tsp(response):
            logger.warning("Timestamp token unavailable, signing without TSP")
            body["withTsp"] = False
            body.pop("tsaPolicy", None)
            response = await self._post("/cms/sign", body)
        self._raise_for_status(response, "/cms/sign")

        result = response.json()
        if not isinstance(result, dict):
            return RawPayload(data=result)
        cms = result.get("cms") or result.get("signature")
        if isinstance(cms, str) and cms:
            return SignaturePayload(signature=base64.b64decode(cms))
        return RawPayload(data=result)

    async def sign_xml_text(
        self, text: str, cert_path: str, cert_password: str
    ) -> SignedPayload:
        """Sign an XML document."""
        body = {
            "xml": text,
            "signers": [
                {
                    "key": await self._load_cert_base64(cert_path),
                    "password": cert_password,
                    "keyAlias": None,
                }
            ],
            "clearSignatures": False,
            "trimXml": False,
        }
        response = await self._post("/xml/sign", body)
        self._raise_for_status(response, "/xml/sign")

        try:
            result = response.json()
        except ValueError:
            return TextPayload(text=response.text)

        if isinstance(result, str):
            return TextPayload(text=result)
        if isinstance(result, dict):
            for name in XML_RESULT_FIELDS:
                value = result.get(name)
                if isinstance(value, str) and "<?xml" in value:
                    return XmlPayload(xml=value)
        return RawPayload(data=result)

    async def health_check(self) -> bool:
        try:
            response = await self._client.get(f"{self._base_url}/health", timeout=5.0)
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("NCANode health check failed: %s", e)
            return False
