"""HTML parsing for the portal favorites page."""

from typing import List

from bs4 import BeautifulSoup, Tag

from bidbot.core.constants import FAVORITES_MIN_CELLS, FAVORITES_TABLE_SELECTOR
from bidbot.core.logging import get_logger
from bidbot.portal.models import FavoriteAnnouncement

logger = get_logger("portal.favorites_parser")


def _cell_text(cell: Tag) -> str:
    return cell.get_text(strip=True)


def _parse_title(cell: Tag) -> tuple[str, str, str]:
    """Extract (title_ru, title_kz, url) from the title cell.

    The link holds one block per language: two blocks are ru + kz, one
    block is ru only, no blocks means the link text is the title.
    """
    link = cell.find("a")
    if link is None:
        return _cell_text(cell), "", ""

    url = link.get("href") or ""
    blocks = link.find_all("div")
    if len(blocks) >= 2:
        return _cell_text(blocks[0]), _cell_text(blocks[1]), url
    if len(blocks) == 1:
        return _cell_text(blocks[0]), "", url
    return _cell_text(link), "", url


def _parse_row(cells: List[Tag]) -> FavoriteAnnouncement:
    title_ru, title_kz, url = _parse_title(cells[2])
    return FavoriteAnnouncement(
        number=_cell_text(cells[0]),
        organizer=_cell_text(cells[1]),
        title_ru=title_ru,
        title_kz=title_kz,
        procurement_method=_cell_text(cells[3]),
        procurement_type=_cell_text(cells[4]),
        start_date=_cell_text(cells[5]),
        end_date=_cell_text(cells[6]),
        lots_count=_cell_text(cells[7]),
        total_amount=_cell_text(cells[8]),
        status=_cell_text(cells[9]),
        url=url,
    )


def parse_favorites(html: str) -> List[FavoriteAnnouncement]:
    """Parse the favorites table into announcements.

    A page without the bordered table means no favorites. Header rows,
    short rows and rows that fail to parse are skipped individually.

    Args:
        html: Favorites page HTML

    Returns:
        List of FavoriteAnnouncement in table order
    """
    soup = BeautifulSoup(html or "", "html.parser")
    table = soup.select_one(FAVORITES_TABLE_SELECTOR)
    if table is None:
        logger.warning("Favorites table not found on page")
        return []

    favorites: List[FavoriteAnnouncement] = []
    data_rows = [row for row in table.find_all("tr") if row.find("th") is None]

    for index, row in enumerate(data_rows, start=1):
        cells = row.find_all("td")
        if len(cells) < FAVORITES_MIN_CELLS:
            logger.warning(
                "Row %d has too few cells (%d instead of %d)",
                index, len(cells), FAVORITES_MIN_CELLS,
            )
            continue

        try:
            favorites.append(_parse_row(cells))
        except Exception as e:
            logger.error("Failed to parse favorites row %d: %s", index, e)

    return favorites
