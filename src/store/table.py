"""Azure Table Storage adapter for the probe.

The probe never reads record contents, only how many rows match an exact
(PartitionKey, RowKey) pair.
"""

from __future__ import annotations

import logging
from typing import Protocol

from azure.core.exceptions import AzureError
from azure.data.tables import TableClient, TableServiceClient

from src.probe.errors import ConfigurationError, StoreUnavailableError

logger = logging.getLogger(__name__)

_KEY_FILTER = "PartitionKey eq @partition_key and RowKey eq @row_key"


class EventTable(Protocol):
    """What the prober needs from the store."""

    def ensure_table(self) -> None: ...

    def count_matches(self, partition_key: str, rowkey: str) -> int: ...


def build_filter(partition_key: str, rowkey: str) -> tuple[str, dict[str, str]]:
    """Parameterised OData filter for an exact key match."""
    return _KEY_FILTER, {"partition_key": partition_key, "row_key": rowkey}


class AzureEventTable:
    """EventTable backed by an Azure storage account table."""

    def __init__(
        self,
        connection_string: str,
        table_name: str,
        timeout: float = 30.0,
        service: TableServiceClient | None = None,
    ) -> None:
        self.table_name = table_name
        self._connection_string = connection_string
        self._timeout = timeout
        self._service = service
        self._table: TableClient | None = None

    def _service_client(self) -> TableServiceClient:
        if self._service is None:
            try:
                self._service = TableServiceClient.from_connection_string(
                    self._connection_string,
                    connection_timeout=self._timeout,
                    read_timeout=self._timeout,
                )
            except ValueError as exc:
                raise ConfigurationError(f"Malformed StorageConnectionString: {exc}") from exc
        return self._service

    def ensure_table(self) -> None:
        """Create the table if it is not there yet. Safe to call repeatedly."""
        self._table_client()

    def _table_client(self) -> TableClient:
        if self._table is not None:
            return self._table
        service = self._service_client()
        try:
            self._table = service.create_table_if_not_exists(self.table_name)
        except AzureError as exc:
            raise StoreUnavailableError(
                f"Could not create or open table {self.table_name!r}: {exc}"
            ) from exc
        logger.debug("Table %s ready", self.table_name)
        return self._table

    def count_matches(self, partition_key: str, rowkey: str) -> int:
        """Number of rows whose PartitionKey and RowKey both match exactly."""
        table = self._table_client()
        query_filter, parameters = build_filter(partition_key, rowkey)
        try:
            entities = table.query_entities(
                query_filter,
                parameters=parameters,
                select=["RowKey"],
            )
            return sum(1 for _ in entities)
        except AzureError as exc:
            raise StoreUnavailableError(
                f"Query against table {self.table_name!r} failed: {exc}"
            ) from exc
