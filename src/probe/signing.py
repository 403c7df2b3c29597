"""Probe identifiers and the shared-secret signature the tracker checks."""

from __future__ import annotations

import hashlib
import time

IDENTIFIER_PREFIX = "healthcheckX"
IDENTIFIER_SUFFIX = "X"

# 100 ns ticks between 0001-01-01 and the Unix epoch
_TICKS_AT_UNIX_EPOCH = 621_355_968_000_000_000

_last_ticks = 0


def _now_ticks() -> int:
    return _TICKS_AT_UNIX_EPOCH + time.time_ns() // 100


def generate_identifier() -> str:
    """Return a fresh probe identifier, e.g. ``healthcheckX638...X``.

    Only letters and digits, so the store keeps it byte-for-byte as the row
    key. Never returns the same tick value twice within a process, even when
    the clock is coarser than 100 ns.
    """
    global _last_ticks
    ticks = _now_ticks()
    if ticks <= _last_ticks:
        ticks = _last_ticks + 1
    _last_ticks = ticks
    return f"{IDENTIFIER_PREFIX}{ticks}{IDENTIFIER_SUFFIX}"


def sign(data: str, shared_secret: str) -> str:
    """Sign ``data`` with the shared secret.

    Lowercase hex SHA-256 of ``secret + "--" + data``. Empty data or an
    empty secret produce an empty signature rather than an error.
    """
    if not data or not shared_secret:
        return ""
    return hashlib.sha256(f"{shared_secret}--{data}".encode("utf-8")).hexdigest()
