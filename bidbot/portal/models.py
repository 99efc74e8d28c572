"""Portal data objects."""

from dataclasses import dataclass, field


def extract_announce_id(number: str) -> str:
    """Return the announcement id part of a favorites number.

    "15880798-1" -> "15880798", "7-2-3" -> "7".
    """
    return number.split("-")[0]


@dataclass(frozen=True)
class FavoriteAnnouncement:
    """One row of the portal's favorites table.

    Rebuilt from HTML on every poll; `announce_id` is derived from
    `number` and is the identity used for processing locks.
    """

    number: str
    organizer: str = ""
    title_ru: str = ""
    title_kz: str = ""
    procurement_method: str = ""
    procurement_type: str = ""
    start_date: str = ""
    end_date: str = ""
    lots_count: str = ""
    total_amount: str = ""
    status: str = ""
    url: str = ""
    announce_id: str = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "announce_id", extract_announce_id(self.number))
