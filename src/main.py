"""Entry point for the Regard health-check probe."""

from __future__ import annotations

import argparse
import logging
import sys

from rich.console import Console
from rich.panel import Panel

from src.config import ProbeSettings, load_settings
from src.probe.client import IngestionClient
from src.probe.errors import ConfigurationError, ProbeError
from src.probe.prober import Prober, ProbeResult
from src.store.table import AzureEventTable

console = Console()
logger = logging.getLogger("src.main")

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_INTERRUPTED = 130


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        stream=sys.stdout,
    )
    for noisy in ("httpx", "httpcore", "azure"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def build_prober(settings: ProbeSettings) -> Prober:
    """Wire the prober to the real endpoint and table store."""
    client = IngestionClient(settings.endpoint_url, timeout=settings.http_timeout_seconds)
    table = AzureEventTable(
        settings.storage_connection_string,
        settings.storage_table_name,
        timeout=settings.http_timeout_seconds,
    )
    return Prober(settings, client, table)


def print_summary(result: ProbeResult) -> None:
    lines = [
        f"Event id:  {result.identifier}",
        f"Response:  {result.status_code} {result.reason}",
        f"Baseline:  {result.baseline_count} matches",
        f"Observed:  {result.match_count} matches after {result.attempts} queries",
        f"Elapsed:   {result.elapsed_seconds:.1f}s",
    ]
    if result.session_status_code is not None:
        lines.append(f"Session:   {result.session_status_code}")
    console.print(Panel("\n".join(lines), title="HealthCheck passed", style="bold green"))


def run_probe(args: argparse.Namespace) -> int:
    """Load configuration, run one probe and map the outcome to an exit code."""
    try:
        settings = load_settings(
            env_file=args.env_file,
            max_poll_attempts=args.max_attempts,
            poll_timeout_seconds=args.timeout,
            log_level=args.log_level,
            send_session_event=False if args.no_session_event else None,
        )
    except ConfigurationError as exc:
        configure_logging(args.log_level or "INFO")
        logger.error("HealthCheck: %s", exc)
        return exc.exit_code

    configure_logging(settings.log_level)
    console.print(Panel(f"Probing {settings.post_url}", title="HealthCheck", style="bold blue"))

    try:
        result = build_prober(settings).run()
    except ProbeError as exc:
        logger.error("HealthCheck: failed during %s: %s", exc.phase, exc)
        logger.debug("HealthCheck: failure detail", exc_info=True)
        console.print(Panel(str(exc), title=type(exc).__name__, style="bold red"))
        return exc.exit_code
    except KeyboardInterrupt:
        logger.warning("HealthCheck: interrupted")
        return EXIT_INTERRUPTED
    except Exception:
        logger.exception("HealthCheck: failed with exception")
        return EXIT_UNEXPECTED

    print_summary(result)
    return EXIT_OK


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Post a signed probe event and wait for it to reach storage"
    )
    parser.add_argument("--env-file", default=None, help="Read settings from this .env file")
    parser.add_argument(
        "--no-session-event",
        action="store_true",
        help="Skip the session-start event after the probe lands",
    )
    parser.add_argument("--max-attempts", type=int, default=None, help="Poll at most N times (0 = no limit)")
    parser.add_argument("--timeout", type=float, default=None, help="Give up after N seconds (0 = no limit)")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING ...")

    args = parser.parse_args(argv)
    sys.exit(run_probe(args))


if __name__ == "__main__":
    main()
