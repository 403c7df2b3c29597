"""End-to-end pipeline probe — post a signed event, wait for it in storage.

Sequence: INIT → BASELINE_QUERY → SUBMIT → POLLING → (SESSION_EVENT) → DONE.
Any ProbeError ends the run in FAILED, tagged with the phase it came from.
Polling is fixed-interval and bounded by attempts and wall time.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from src.config import ProbeSettings
from src.probe.client import IngestionClient
from src.probe.errors import ProbeError, ProbeTimeoutError
from src.probe.models import SignedPayload, TestSessionEvent
from src.probe.signing import generate_identifier
from src.store.table import EventTable

logger = logging.getLogger(__name__)


class ProbePhase(str, Enum):
    INIT = "init"
    BASELINE_QUERY = "baseline_query"
    SUBMIT = "submit"
    POLLING = "polling"
    SESSION_EVENT = "session_event"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ProbeResult:
    """Outcome of a successful probe run."""

    identifier: str
    baseline_count: int
    status_code: int
    reason: str
    attempts: int
    match_count: int
    elapsed_seconds: float
    session_status_code: int | None = None
    phase: ProbePhase = ProbePhase.DONE


class Prober:
    """Runs one probe against the ingestion endpoint and the table store."""

    def __init__(
        self,
        settings: ProbeSettings,
        client: IngestionClient,
        table: EventTable,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self.client = client
        self.table = table
        self._sleep = sleep
        self._clock = clock
        self.phase = ProbePhase.INIT

    def _enter(self, phase: ProbePhase) -> None:
        logger.debug("Phase %s → %s", self.phase.value, phase.value)
        self.phase = phase

    def count_matches(self, rowkey: str) -> int:
        return self.table.count_matches(self.settings.partition_key, rowkey)

    def run(self) -> ProbeResult:
        """Execute the probe. Raises a ProbeError subclass on fatal failure."""
        try:
            return self._run()
        except ProbeError as exc:
            if exc.phase is None:
                exc.phase = self.phase.value
            self._enter(ProbePhase.FAILED)
            raise

    def _run(self) -> ProbeResult:
        started = self._clock()

        logger.info("HealthCheck: attaching to the storage account")
        self.table.ensure_table()

        self._enter(ProbePhase.BASELINE_QUERY)
        identifier = generate_identifier()
        baseline = self.count_matches(identifier)
        logger.info("HealthCheck: found %d matches initially", baseline)

        self._enter(ProbePhase.SUBMIT)
        payload = SignedPayload.for_identifier(identifier, self.settings.health_check_shared_secret)
        logger.info("HealthCheck: will generate rowkey %s", identifier)
        logger.info("HealthCheck: sending request to %s", self.client.url_for(self.settings.post_path))
        response = self.client.submit_event(self.settings.post_path, payload.to_json())
        logger.info("HealthCheck: response %d %s", response.status_code, response.reason_phrase)
        if not response.is_success:
            logger.warning(
                "HealthCheck: ingestion returned %d, polling anyway", response.status_code
            )

        self._enter(ProbePhase.POLLING)
        attempts, count = self._poll(identifier)
        logger.info("HealthCheck: request was processed")

        session_status: int | None = None
        if self.settings.send_session_event:
            self._enter(ProbePhase.SESSION_EVENT)
            session_status = self._send_session_event(identifier)

        self._enter(ProbePhase.DONE)
        return ProbeResult(
            identifier=identifier,
            baseline_count=baseline,
            status_code=response.status_code,
            reason=response.reason_phrase,
            attempts=attempts,
            match_count=count,
            elapsed_seconds=round(self._clock() - started, 3),
            session_status_code=session_status,
        )

    def _poll(self, identifier: str) -> tuple[int, int]:
        """Query until the identifier shows up. Returns (attempts, count)."""
        max_attempts = self.settings.max_poll_attempts
        timeout = self.settings.poll_timeout_seconds
        interval = self.settings.poll_interval_seconds
        deadline = self._clock() + timeout if timeout else None
        started = self._clock()
        attempts = 0

        while True:
            logger.info("HealthCheck: querying for event")
            count = self.count_matches(identifier)
            attempts += 1
            logger.info("HealthCheck: found %d results", count)
            if count >= 1:
                return attempts, count

            out_of_attempts = max_attempts and attempts >= max_attempts
            out_of_time = deadline is not None and self._clock() + interval > deadline
            if out_of_attempts or out_of_time:
                raise ProbeTimeoutError(identifier, attempts, self._clock() - started)

            self._sleep(interval)

    def _send_session_event(self, identifier: str) -> int | None:
        """Post the session-start event. Failures are logged, never raised."""
        event = TestSessionEvent(user_id=self.settings.test_user_id, healthcheck_id=identifier)
        logger.info("HealthCheck: sending session event %s", event.session_id)
        try:
            response = self.client.submit_event(self.settings.session_event_path, event.to_json())
        except ProbeError as exc:
            logger.warning("HealthCheck: session event failed: %s", exc)
            return None
        logger.info(
            "HealthCheck: session event response %d %s",
            response.status_code,
            response.reason_phrase,
        )
        return response.status_code
