"""Signing module - NCANode client and signed artifact storage."""

from bidbot.signing.file_signer import FileSigner, write_signed_payload
from bidbot.signing.ncanode import NcanodeSigner
from bidbot.signing.payloads import (
    RawPayload,
    SignaturePayload,
    SignedPayload,
    Signer,
    TextPayload,
    XmlPayload,
)

__all__ = [
    "FileSigner",
    "write_signed_payload",
    "NcanodeSigner",
    "RawPayload",
    "SignaturePayload",
    "SignedPayload",
    "Signer",
    "TextPayload",
    "XmlPayload",
]
