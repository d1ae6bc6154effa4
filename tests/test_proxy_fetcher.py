"""
tests/test_proxy_fetcher.py

Pytest unit tests for ProxyFanoutFetcher and response envelope decoding.
"""

from __future__ import annotations

import json
import random

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from app.scraping.envelopes import PayloadShape, decode_payload
from app.scraping.errors import AllCredentialsExhausted, ConfigurationError
from app.scraping.proxy_fetcher import ProxyEndpoint, ProxyFanoutFetcher
from app.scraping.types import AttemptOutcome

PRODUCT_PAGE = "<html><title>Amazon.es</title>" + ("<p>producto</p>" * 50) + "</html>"


class _FakeResponse:
    def __init__(self, status_code: int, text: str = "", content_type: str = "text/html") -> None:
        self.status_code = status_code
        self.text = text
        self.headers = CaseInsensitiveDict({"content-type": content_type})


class _RoutedSession:
    """Answers each proxied URL from a prefix -> outcome map."""

    def __init__(self, routes: dict[str, object]) -> None:
        self._routes = routes
        self.calls: list[dict] = []

    def get(self, url: str, **kwargs: object) -> _FakeResponse:
        self.calls.append({"url": url, **kwargs})
        for prefix, outcome in self._routes.items():
            if url.startswith(prefix):
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        raise AssertionError(f"unexpected url {url}")


def _fetcher(session: _RoutedSession, endpoints: list[ProxyEndpoint], **kwargs: object) -> ProxyFanoutFetcher:
    params: dict = {
        "endpoints": endpoints,
        "session": session,
        "timeout_seconds": 20.0,
        "min_content_length": 200,
        "rng": random.Random(7),
    }
    params.update(kwargs)
    return ProxyFanoutFetcher(**params)


A = ProxyEndpoint(prefix="https://proxy-a.test/?url=")
B = ProxyEndpoint(prefix="https://proxy-b.test/get?url=", suffix="&callback=")
C = ProxyEndpoint(prefix="https://proxy-c.test/")


class TestProxyFanout:
    def test_returns_first_plausible_page(self) -> None:
        session = _RoutedSession(
            {
                A.prefix: _FakeResponse(200, PRODUCT_PAGE),
                B.prefix: _FakeResponse(200, PRODUCT_PAGE),
                C.prefix: _FakeResponse(200, PRODUCT_PAGE),
            }
        )

        html = _fetcher(session, [A, B, C]).fetch("https://www.amazon.es/dp/B0DYDJRD74")

        assert html == PRODUCT_PAGE
        assert len(session.calls) == 1

    def test_skips_blocked_short_and_failed_proxies(self) -> None:
        session = _RoutedSession(
            {
                A.prefix: _FakeResponse(200, "<html>Enter the characters: Captcha</html>" * 20),
                B.prefix: _FakeResponse(503, "unavailable"),
                C.prefix: _FakeResponse(200, PRODUCT_PAGE),
            }
        )
        fetcher = _fetcher(session, [A, B, C])

        assert fetcher.fetch("https://www.amazon.es/dp/B0DYDJRD74") == PRODUCT_PAGE
        assert session.calls[-1]["url"].startswith(C.prefix)

    def test_network_error_moves_to_next_proxy(self) -> None:
        session = _RoutedSession(
            {
                A.prefix: requests.Timeout("timed out"),
                B.prefix: requests.Timeout("timed out"),
                C.prefix: _FakeResponse(200, PRODUCT_PAGE),
            }
        )

        assert _fetcher(session, [A, B, C]).fetch("https://www.amazon.es/dp/X") == PRODUCT_PAGE

    def test_every_attempt_uses_fixed_timeout_and_encoded_target(self) -> None:
        session = _RoutedSession({B.prefix: _FakeResponse(200, PRODUCT_PAGE)})

        _fetcher(session, [B]).fetch("https://www.amazon.es/dp/B0DYDJRD74?th=1")

        call = session.calls[0]
        assert call["timeout"] == 20.0
        assert call["url"] == (
            "https://proxy-b.test/get?url="
            "https%3A%2F%2Fwww.amazon.es%2Fdp%2FB0DYDJRD74%3Fth%3D1&callback="
        )
        assert "User-Agent" in call["headers"]

    def test_json_envelope_from_proxy_is_unwrapped(self) -> None:
        body = json.dumps({"contents": PRODUCT_PAGE, "status": {"http_code": 200}})
        session = _RoutedSession({A.prefix: _FakeResponse(200, body, "application/json; charset=utf-8")})

        assert _fetcher(session, [A]).fetch("https://www.amazon.es/dp/X") == PRODUCT_PAGE

    def test_exhaustion_raises_with_attempt_log(self) -> None:
        session = _RoutedSession(
            {
                A.prefix: _FakeResponse(200, "too short"),
                B.prefix: requests.ConnectionError("refused"),
                C.prefix: _FakeResponse(403, "forbidden"),
            }
        )

        with pytest.raises(AllCredentialsExhausted) as exc_info:
            _fetcher(session, [A, B, C]).fetch("https://www.amazon.es/dp/X")

        assert len(session.calls) == 3
        outcomes = {attempt.outcome for attempt in exc_info.value.attempts}
        assert outcomes == {AttemptOutcome.HARD_ERROR, AttemptOutcome.NETWORK_ERROR}

    def test_order_is_shuffled_per_call(self) -> None:
        endpoints = [ProxyEndpoint(prefix=f"https://proxy-{index}.test/") for index in range(8)]
        routes = {endpoint.prefix: _FakeResponse(500, "") for endpoint in endpoints}
        session = _RoutedSession(routes)
        fetcher = _fetcher(session, endpoints)

        with pytest.raises(AllCredentialsExhausted):
            fetcher.fetch("https://www.amazon.es/dp/X")
        first_order = [call["url"] for call in session.calls]
        session.calls.clear()
        with pytest.raises(AllCredentialsExhausted):
            fetcher.fetch("https://www.amazon.es/dp/X")
        second_order = [call["url"] for call in session.calls]

        assert sorted(first_order) == sorted(second_order)
        assert first_order != second_order

    def test_empty_endpoint_list_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            _fetcher(_RoutedSession({}), []).fetch("https://www.amazon.es/dp/X")


class TestPlausibility:
    @pytest.fixture()
    def fetcher(self) -> ProxyFanoutFetcher:
        return _fetcher(_RoutedSession({}), [A])

    @pytest.mark.parametrize(
        "content",
        [
            "",
            "<html>Sorry, we just need to make sure you're not a robot.</html>" * 10,
            "<html>Our systems have detected unusual traffic</html>" * 10,
            "<html>contact api-services-support@amazon.com</html>" * 10,
        ],
    )
    def test_block_pages_rejected(self, fetcher: ProxyFanoutFetcher, content: str) -> None:
        assert fetcher.rejection_reason(content) is not None

    def test_short_page_rejected(self, fetcher: ProxyFanoutFetcher) -> None:
        assert fetcher.rejection_reason("<html>amazon</html>") == "page too short"

    def test_page_without_required_marker_rejected(self, fetcher: ProxyFanoutFetcher) -> None:
        assert fetcher.rejection_reason("<p>hola</p>" * 100) == "missing 'amazon'"

    def test_product_page_accepted(self, fetcher: ProxyFanoutFetcher) -> None:
        assert fetcher.rejection_reason(PRODUCT_PAGE) is None


class TestDecodePayload:
    def test_raw_text_when_not_json(self) -> None:
        payload = decode_payload("<html></html>", "text/html")
        assert payload.shape is PayloadShape.RAW_TEXT
        assert payload.content == "<html></html>"

    @pytest.mark.parametrize("field", ["contents", "html", "body", "data"])
    def test_known_envelope_fields(self, field: str) -> None:
        payload = decode_payload(json.dumps({field: "<html>x</html>"}), "application/json")
        assert payload.shape.value == field
        assert payload.content == "<html>x</html>"

    def test_contents_takes_precedence(self) -> None:
        body = json.dumps({"data": "<p>data</p>", "contents": "<p>contents</p>"})
        assert decode_payload(body, "application/json").content == "<p>contents</p>"

    def test_unknown_envelope_is_empty(self) -> None:
        payload = decode_payload(json.dumps({"status": "ok"}), "application/json")
        assert payload.is_empty

    def test_invalid_json_falls_back_to_raw_text(self) -> None:
        payload = decode_payload("<html>not json</html>", "application/json")
        assert payload.shape is PayloadShape.RAW_TEXT
        assert payload.content == "<html>not json</html>"
