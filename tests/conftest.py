"""Shared test fixtures — in-memory table store and a stub ingestion endpoint."""

from __future__ import annotations

import json

import httpx
import pytest

from src.config import ProbeSettings
from src.probe.client import IngestionClient
from src.probe.errors import StoreUnavailableError

SECRET = "s3cr3t"
PARTITION = "healthcheck-partition"


class FakeEventTable:
    """In-memory EventTable. Rows become visible after ``lag`` queries."""

    def __init__(self, lag: int = 0) -> None:
        self.lag = lag
        self.created = False
        self.create_calls = 0
        self.queries: list[tuple[str, str]] = []
        self.query_error: Exception | None = None
        self._rows: dict[tuple[str, str], int] = {}

    def ensure_table(self) -> None:
        self.create_calls += 1
        self.created = True

    def insert(self, partition_key: str, rowkey: str) -> None:
        self._rows[(partition_key, rowkey)] = len(self.queries) + self.lag

    def count_matches(self, partition_key: str, rowkey: str) -> int:
        if self.query_error is not None:
            raise self.query_error
        self.queries.append((partition_key, rowkey))
        visible_from = self._rows.get((partition_key, rowkey))
        if visible_from is None or len(self.queries) <= visible_from:
            return 0
        return 1


class StubEndpoint:
    """Ingestion endpoint that writes each posted rowkey into the table."""

    def __init__(self, table: FakeEventTable, status_code: int = 202) -> None:
        self.table = table
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = json.loads(request.content)
        if "rowkey" in body:
            self.table.insert(PARTITION, body["rowkey"])
        return httpx.Response(self.status_code)

    @property
    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def settings() -> ProbeSettings:
    return ProbeSettings(
        _env_file=None,
        EndPointUrl="https://tracker.example.com",
        StorageTableName="events",
        PostPath="/track/v1/healthcheck",
        PartitionKey=PARTITION,
        StorageConnectionString="UseDevelopmentStorage=true",
        HealthCheckSharedSecret=SECRET,
        MaxPollAttempts=10,
        PollTimeoutSeconds=0,
    )


@pytest.fixture
def make_table():
    return FakeEventTable


@pytest.fixture
def make_client(settings: ProbeSettings):
    """Build an IngestionClient over an httpx handler function."""

    def _make(handler) -> IngestionClient:
        return IngestionClient(settings.endpoint_url, transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def make_endpoint():
    return StubEndpoint


@pytest.fixture
def table() -> FakeEventTable:
    return FakeEventTable(lag=2)


@pytest.fixture
def endpoint(table: FakeEventTable) -> StubEndpoint:
    return StubEndpoint(table)


@pytest.fixture
def client(endpoint: StubEndpoint, settings: ProbeSettings) -> IngestionClient:
    return IngestionClient(settings.endpoint_url, transport=httpx.MockTransport(endpoint.handler))


@pytest.fixture
def unreachable_store_error() -> StoreUnavailableError:
    return StoreUnavailableError("Query against table 'events' failed: connection refused")
