"""Tests for the portal HTTP client, submission gateway and container wiring."""

import asyncio
import json

import httpx
import pytest
from pydantic import ValidationError

from bidbot.core.container import ApplicationContainer
from bidbot.core.exceptions import SubmissionError
from bidbot.dedup.store import InMemoryDedupStore
from bidbot.monitor.scheduler import MonitorScheduler
from bidbot.monitor.submission import HttpSubmissionGateway
from bidbot.portal.client import PortalClient

from conftest import make_settings


def portal_request(settings, handler, url, **kwargs):
    async def scenario():
        async with PortalClient(settings, transport=httpx.MockTransport(handler)) as portal:
            return await portal.request(url, **kwargs)

    return asyncio.run(scenario())


class TestPortalClient:
    """Tests for request execution and success detection."""

    def test_html_page(self, tmp_path):
        settings = make_settings(tmp_path, portal_cookie="session=abc")
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["cookie"] = request.headers.get("cookie")
            seen["accept"] = request.headers.get("accept")
            return httpx.Response(200, text="<html></html>", headers={"content-type": "text/html"})

        response = portal_request(
            settings, handler, "/ru/favorites", additional_headers={"Accept": "text/html"}
        )

        assert response.success is True
        assert response.data == "<html></html>"
        assert response.status_code == 200
        assert seen == {
            "url": "https://portal.test/ru/favorites",
            "cookie": "session=abc",
            "accept": "text/html",
        }

    def test_json_body_decoded(self, tmp_path):
        handler = lambda request: httpx.Response(201, json={"id": 5})

        response = portal_request(make_settings(tmp_path), handler, "/api", method="POST", body={"a": 1})

        assert response.success is True
        assert response.data == {"id": 5}

    def test_redirect_counts_as_success(self, tmp_path):
        handler = lambda request: httpx.Response(302, headers={"location": "/ru/favorites"})

        response = portal_request(make_settings(tmp_path), handler, "/ru/favorites/fav/?action=delete&id=1")

        assert response.success is True

    def test_login_redirect_is_failure(self, tmp_path):
        handler = lambda request: httpx.Response(302, headers={"location": "/ru/user/login"})

        response = portal_request(make_settings(tmp_path), handler, "/ru/favorites")

        assert response.success is False
        assert response.status_code == 302

    def test_error_status(self, tmp_path):
        handler = lambda request: httpx.Response(500, text="oops")

        response = portal_request(make_settings(tmp_path), handler, "/ru/favorites")

        assert response.success is False
        assert response.data == "oops"


class TestHttpSubmissionGateway:
    def test_posts_number(self):
        bodies = []

        def handler(request):
            bodies.append((str(request.url), json.loads(request.content)))
            return httpx.Response(200, json={"started": True})

        gateway = HttpSubmissionGateway(
            "http://localhost:3000/api/applications/start",
            timeout=5,
            transport=httpx.MockTransport(handler),
        )
        asyncio.run(gateway.submit("15880798"))

        assert bodies == [
            ("http://localhost:3000/api/applications/start", {"number": "15880798"})
        ]

    def test_error_status_raises(self):
        handler = lambda request: httpx.Response(500, text="failed")
        gateway = HttpSubmissionGateway(
            "http://app.test/start", timeout=5, transport=httpx.MockTransport(handler)
        )

        with pytest.raises(SubmissionError) as exc_info:
            asyncio.run(gateway.submit("1"))
        assert exc_info.value.announce_id == "1"

    def test_unreachable_raises(self):
        def handler(request):
            raise httpx.ConnectError("refused")

        gateway = HttpSubmissionGateway(
            "http://app.test/start", timeout=5, transport=httpx.MockTransport(handler)
        )

        with pytest.raises(SubmissionError, match="unreachable"):
            asyncio.run(gateway.submit("1"))


class TestApplicationContainer:
    def test_fallback_url_from_port(self, tmp_path):
        settings = make_settings(tmp_path, main_app_port=4100)
        assert settings.fallback_submission_url == "http://localhost:4100/api/applications/start"

    def test_wiring(self, tmp_path):
        settings = make_settings(tmp_path, monitor_interval_seconds=45)
        container = ApplicationContainer.create(settings)

        assert isinstance(container.store, InMemoryDedupStore)
        assert container.monitor is container.monitor
        assert container.file_processor is container.file_processor
        scheduler = container.scheduler()
        assert isinstance(scheduler, MonitorScheduler)

        asyncio.run(container.aclose())

    def test_default_gateway_uses_long_timeout_on_shared_endpoint(self, tmp_path):
        settings = make_settings(tmp_path, submission_fallback_timeout_seconds=240)
        container = ApplicationContainer.create(settings)

        gateway = container.gateway

        assert gateway.url == settings.fallback_submission_url
        assert gateway._timeout == 240
        assert container.monitor._fallback_targets_primary() is True
        asyncio.run(container.aclose())

    def test_settings_are_frozen(self, tmp_path):
        settings = make_settings(tmp_path)
        with pytest.raises(ValidationError):
            settings.monitor_interval_seconds = 5
