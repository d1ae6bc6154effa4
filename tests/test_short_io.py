"""
tests/test_short_io.py

Pytest unit tests for ShortIOClient with a fake HTTP session.
"""

from __future__ import annotations

import json

import pytest

from app.config import ShortenerSettings
from app.connectors.short_io import ShortenerError, ShortIOClient
from app.scraping.errors import ConfigurationError


class _FakeResponse:
    def __init__(self, status_code: int, text: str) -> None:
        self.status_code = status_code
        self.text = text

    def json(self) -> object:
        return json.loads(self.text)


class _FakeSession:
    def __init__(self, response: _FakeResponse) -> None:
        self._response = response
        self.calls: list[dict] = []

    def post(self, url: str, **kwargs: object) -> _FakeResponse:
        self.calls.append({"url": url, **kwargs})
        return self._response


def _client(response: _FakeResponse, *, api_key: str | None = "sk_test") -> tuple[ShortIOClient, _FakeSession]:
    session = _FakeSession(response)
    client = ShortIOClient(
        settings=ShortenerSettings(api_key=api_key),
        session=session,  # type: ignore[arg-type]
    )
    return client, session


class TestShorten:
    def test_returns_short_url_and_sends_payload(self) -> None:
        client, session = _client(_FakeResponse(200, json.dumps({"shortURL": "https://amazon-dks.short.gy/abc"})))

        short_url = client.shorten(
            "https://www.amazon.es/dp/B0DYDJRD74/ref=nosim?tag=dekolaps-21",
            path="freidora",
        )

        assert short_url == "https://amazon-dks.short.gy/abc"
        call = session.calls[0]
        assert call["url"] == "https://api.short.io/links"
        assert call["headers"]["Authorization"] == "sk_test"
        assert call["json"] == {
            "originalURL": "https://www.amazon.es/dp/B0DYDJRD74/ref=nosim?tag=dekolaps-21",
            "domain": "amazon-dks.short.gy",
            "title": "Producto Amazon",
            "path": "freidora",
        }
        assert call["timeout"] == 15.0

    def test_custom_title_and_no_path(self) -> None:
        client, session = _client(_FakeResponse(201, json.dumps({"shortURL": "https://s.gy/x"})))

        client.shorten("https://www.amazon.es/dp/B0DYDJRD74", title="Freidora de aire")

        payload = session.calls[0]["json"]
        assert payload["title"] == "Freidora de aire"
        assert "path" not in payload

    def test_missing_api_key(self) -> None:
        client, session = _client(_FakeResponse(200, "{}"), api_key=None)

        with pytest.raises(ConfigurationError):
            client.shorten("https://www.amazon.es/dp/B0DYDJRD74")

        assert session.calls == []

    def test_upstream_error_keeps_status_and_details(self) -> None:
        client, _ = _client(_FakeResponse(409, json.dumps({"error": "Link already exists"})))

        with pytest.raises(ShortenerError) as exc_info:
            client.shorten("https://www.amazon.es/dp/B0DYDJRD74", path="taken")

        assert str(exc_info.value) == "Error en Short.io"
        assert exc_info.value.status_code == 409
        assert exc_info.value.details == {"error": "Link already exists"}

    def test_upstream_error_with_non_json_body(self) -> None:
        client, _ = _client(_FakeResponse(500, "<html>oops</html>"))

        with pytest.raises(ShortenerError) as exc_info:
            client.shorten("https://www.amazon.es/dp/B0DYDJRD74")

        assert exc_info.value.details == {}

    def test_success_without_short_url(self) -> None:
        client, _ = _client(_FakeResponse(200, json.dumps({"id": 1})))

        with pytest.raises(ShortenerError) as exc_info:
            client.shorten("https://www.amazon.es/dp/B0DYDJRD74")

        assert exc_info.value.status_code == 502
