"""Signs downloaded documents and stores the signed artifact."""

import json
from pathlib import Path

from bidbot.core.exceptions import ConfigurationError
from bidbot.core.logging import get_logger
from bidbot.core.tempfiles import temp_file_name
from bidbot.settings import Settings
from bidbot.signing.payloads import (
    RawPayload,
    SignaturePayload,
    SignedPayload,
    Signer,
    TextPayload,
    XmlPayload,
)

logger = get_logger("signing.file_signer")


def write_signed_payload(payload: SignedPayload, target: Path) -> None:
    """Persist a signer answer according to its variant."""
    if isinstance(payload, TextPayload):
        target.write_text(payload.text, encoding="utf-8")
    elif isinstance(payload, XmlPayload):
        target.write_text(payload.xml, encoding="utf-8")
    elif isinstance(payload, SignaturePayload):
        target.write_bytes(payload.signature)
    elif isinstance(payload, RawPayload):
        target.write_text(json.dumps(payload.data, ensure_ascii=False), encoding="utf-8")
    else:
        raise TypeError(f"Unsupported signer output: {type(payload).__name__}")


class FileSigner:
    """Reads a file, signs it and writes `<taskId>-signed-<ts><ext>`."""

    def __init__(self, settings: Settings, signer: Signer):
        self._signer = signer
        self._cert_path = settings.cert_path
        self._cert_password = settings.cert_password
        self._temp_dir = Path(settings.temp_dir)

    async def sign_file(self, file_path: Path, task_id: str) -> Path:
        """Sign a downloaded file.

        XML files are signed as text, everything else gets a detached
        CMS signature.

        Raises:
            ConfigurationError: If the key store path or password is missing
        """
        if not self._cert_path or not self._cert_password:
            raise ConfigurationError(
                "Signing key store path or password not configured",
                setting="cert_path",
            )

        content = file_path.read_bytes()
        ext = file_path.suffix.lower()

        if ext == ".xml":
            payload = await self._signer.sign_xml_text(
                content.decode("utf-8"), self._cert_path, self._cert_password
            )
        else:
            payload = await self._signer.sign_binary(
                content, self._cert_path, self._cert_password, detached=True
            )

        signed_path = self._temp_dir / temp_file_name(task_id, file_path.suffix, label="signed")
        write_signed_payload(payload, signed_path)

        logger.debug("[%s] Signed file saved: %s (%s)", task_id, signed_path, type(payload).__name__)
        return signed_path
