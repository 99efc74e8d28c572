"""Signer output variants.

The signing service answers in several shapes; the signer client maps
each answer to exactly one of these so callers switch on the type.
"""

from dataclasses import dataclass
from typing import Any, Protocol, Union


@dataclass(frozen=True)
class TextPayload:
    """Signed document returned as plain text."""

    text: str


@dataclass(frozen=True)
class XmlPayload:
    """Signed XML document extracted from a structured answer."""

    xml: str


@dataclass(frozen=True)
class SignaturePayload:
    """CMS signature bytes (already base64-decoded)."""

    signature: bytes


@dataclass(frozen=True)
class RawPayload:
    """Unrecognized answer, kept as decoded JSON."""

    data: Any


SignedPayload = Union[TextPayload, XmlPayload, SignaturePayload, RawPayload]


class Signer(Protocol):
    async def sign_binary(
        self, data: bytes, cert_path: str, cert_password: str, detached: bool = True
    ) -> SignedPayload: ...

    async def sign_xml_text(
        self, text: str, cert_path: str, cert_password: str
    ) -> SignedPayload: ...
