"""Table store access — the probe only ever counts rows by key."""

from .table import AzureEventTable, EventTable, build_filter
