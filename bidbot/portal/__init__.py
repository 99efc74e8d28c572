"""Portal module - HTTP client and favorites parsing."""

from bidbot.portal.client import PortalClient, PortalResponse
from bidbot.portal.favorites_parser import parse_favorites
from bidbot.portal.models import FavoriteAnnouncement, extract_announce_id

__all__ = [
    "PortalClient",
    "PortalResponse",
    "parse_favorites",
    "FavoriteAnnouncement",
    "extract_announce_id",
]
