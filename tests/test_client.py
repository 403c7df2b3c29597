"""Tests for the ingestion endpoint client."""

from __future__ import annotations

import json

import httpx
import pytest

from src.probe.client import IngestionClient
from src.probe.errors import TransportError


def _client(handler) -> IngestionClient:
    return IngestionClient("https://tracker.example.com", transport=httpx.MockTransport(handler))


class TestSubmitEvent:
    def test_posts_json(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        resp = _client(handler).submit_event("/track/v1/hc", {"rowkey": "healthcheckX1X"})
        assert resp.status_code == 200
        assert len(seen) == 1
        req = seen[0]
        assert req.method == "POST"
        assert str(req.url) == "https://tracker.example.com/track/v1/hc"
        assert req.headers["Content-Type"] == "application/json"
        assert json.loads(req.content) == {"rowkey": "healthcheckX1X"}

    def test_non_2xx_is_returned_not_raised(self) -> None:
        resp = _client(lambda r: httpx.Response(500)).submit_event("/x", {})
        assert resp.status_code == 500
        assert resp.reason_phrase == "Internal Server Error"

    def test_connect_error_is_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError, match="unreachable"):
            _client(handler).submit_event("/x", {})

    def test_timeout_is_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(TransportError, match="timed out"):
            _client(handler).submit_event("/x", {})

    def test_transport_error_exit_code(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("nope", request=request)

        with pytest.raises(TransportError) as exc_info:
            _client(handler).submit_event("/x", {})
        assert exc_info.value.exit_code == 3

    def test_url_for(self) -> None:
        client = IngestionClient("https://tracker.example.com/")
        assert client.url_for("/a/b") == "https://tracker.example.com/a/b"
