"""Error taxonomy for a probe run.

Every failure that ends a run is a ProbeError subclass; the CLI maps each
one to its own exit code. Non-2xx ingestion responses are not errors.
"""

from __future__ import annotations


class ProbeError(Exception):
    """Base class for fatal probe failures."""

    exit_code = 1

    def __init__(self, message: str, phase: str | None = None) -> None:
        self.phase = phase
        super().__init__(message)


class ConfigurationError(ProbeError):
    """Raised when a required setting is missing or malformed."""

    exit_code = 2


class TransportError(ProbeError):
    """Raised when the ingestion endpoint cannot be reached."""

    exit_code = 3


class StoreUnavailableError(ProbeError):
    """Raised when the table store cannot be reached, created or queried."""

    exit_code = 4


class ProbeTimeoutError(ProbeError):
    """Raised when the probe event did not show up within the poll bound."""

    exit_code = 5

    def __init__(self, identifier: str, attempts: int, elapsed_seconds: float) -> None:
        self.identifier = identifier
        self.attempts = attempts
        self.elapsed_seconds = elapsed_seconds
        super().__init__(
            f"Probe {identifier} not observed after {attempts} attempts "
            f"({elapsed_seconds:.1f}s)",
            phase="polling",
        )
