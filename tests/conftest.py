"""Shared fixtures and in-memory collaborators."""

from typing import List, Optional, Tuple

import pytest

from bidbot.portal.client import PortalResponse
from bidbot.settings import Settings

BIDDABLE = "Опубликовано (прием заявок)"
CLOSED = "Завершено"


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        temp_dir=tmp_path / "files",
        cert_path=str(tmp_path / "key.p12"),
        cert_password="secret",
        telegram_enabled=False,
        portal_base_url="https://portal.test",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


def favorite_row(number: str, status: str, title_blocks: int = 2) -> str:
    if title_blocks == 2:
        title = "<div>Закуп бумаги</div><div>Қағаз сатып алу</div>"
    elif title_blocks == 1:
        title = "<div>Закуп бумаги</div>"
    else:
        title = "Закуп бумаги"
    return (
        "<tr>"
        f"<td>{number}</td>"
        "<td>ГУ Отдел образования</td>"
        f'<td><a href="/ru/announce/index/{number.split("-")[0]}">{title}</a></td>'
        "<td>Запрос ценовых предложений</td>"
        "<td>Товар</td>"
        "<td>2024-05-01 09:00:00</td>"
        "<td>2024-05-08 09:00:00</td>"
        "<td>1</td>"
        "<td>150 000.00</td>"
        f"<td>{status}</td>"
        "</tr>"
    )


def favorites_html(rows: List[Tuple[str, str]]) -> str:
    header = "<tr>" + "".join(f"<th>col{i}</th>" for i in range(10)) + "</tr>"
    body = "".join(favorite_row(number, status) for number, status in rows)
    return (
        "<html><body>"
        f'<table class="table table-bordered">{header}{body}</table>'
        "</body></html>"
    )


class FakePortal:
    """Serves a favorites page and records every request."""

    def __init__(self, html: str = "", success: bool = True):
        self.html = html
        self.success = success
        self.delete_success = True
        self.calls: List[str] = []

    async def request(self, url, method="GET", additional_headers=None, body=None):
        self.calls.append(url)
        if "action=delete" in url:
            return PortalResponse(success=self.delete_success, data="", status_code=200)
        status = 200 if self.success else 500
        return PortalResponse(success=self.success, data=self.html, status_code=status)

    @property
    def delete_calls(self) -> List[str]:
        return [url for url in self.calls if "action=delete" in url]


class FakeGateway:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.submitted: List[str] = []

    async def submit(self, announce_id: str) -> None:
        self.submitted.append(announce_id)
        if self.error is not None:
            raise self.error


class FakeNotifier:
    def __init__(self):
        self.sent: List[dict] = []

    async def notify(
        self, announce_id, status, start_time, end_time, duration_ms, error_message=None
    ) -> bool:
        self.sent.append(
            {
                "announce_id": announce_id,
                "status": status,
                "start_time": start_time,
                "end_time": end_time,
                "duration_ms": duration_ms,
                "error_message": error_message,
            }
        )
        return True
