"""httpx-based client for the tracker's ingestion endpoint.

Any HTTP status comes back to the caller as a response; only failures to
reach the endpoint at all raise TransportError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.config import join_url
from src.probe.errors import TransportError

logger = logging.getLogger(__name__)


class IngestionClient:
    """Synchronous httpx client for posting probe events."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport

    @property
    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    def url_for(self, path: str) -> str:
        return join_url(self._base_url, path)

    def submit_event(self, path: str, payload: dict[str, Any]) -> httpx.Response:
        """POST ``payload`` as JSON to ``path`` under the endpoint base URL."""
        url = self.url_for(path)
        logger.debug("POST %s", url)
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                return client.post(url, headers=self._headers, json=payload)
        except httpx.ConnectError as exc:
            raise TransportError(f"Ingestion endpoint unreachable: {url}: {exc}") from exc
        except httpx.TimeoutException as exc:
            raise TransportError(f"Ingestion request timed out: {url}") from exc
        except httpx.TransportError as exc:
            raise TransportError(f"Ingestion request failed: {url}: {exc}") from exc
