"""Core module - logging, exceptions, and application infrastructure."""

from bidbot.core.logging import setup_logging, get_logger
from bidbot.core.exceptions import (
    BidBotError,
    TransportError,
    PortalRequestError,
    ParsingError,
    ConfigurationError,
    SigningError,
    SubmissionError,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "BidBotError",
    "TransportError",
    "PortalRequestError",
    "ParsingError",
    "ConfigurationError",
    "SigningError",
    "SubmissionError",
]
