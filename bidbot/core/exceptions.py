"""Application exception hierarchy."""


class BidBotError(Exception):
    """Base exception for all bidbot errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransportError(BidBotError):
    """Network, timeout or HTTP status failure on an outbound call."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.url = url
        self.status_code = status_code


class PortalRequestError(TransportError):
    """The portal answered, but not with a usable page."""


class ParsingError(BidBotError):
    """Expected content could not be extracted from a payload."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        raw_preview: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.source = source
        self.raw_preview = raw_preview[:200] if raw_preview else None


class ConfigurationError(BidBotError):
    """A required setting is missing or invalid."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.setting = setting


class SigningError(BidBotError):
    """The signing service rejected a request."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code
        self.response_body = response_body[:500] if response_body else None


class SubmissionError(BidBotError):
    """Starting an application for an announcement failed."""

    def __init__(
        self,
        message: str,
        announce_id: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.announce_id = announce_id
