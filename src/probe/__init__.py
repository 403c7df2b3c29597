"""Probe subsystem — identifiers, signing, wire models, errors.

The client and the prober itself live in ``src.probe.client`` and
``src.probe.prober``; they depend on ``src.config``, which imports the
errors from here.
"""

from .errors import (
    ConfigurationError,
    ProbeError,
    ProbeTimeoutError,
    StoreUnavailableError,
    TransportError,
)
from .models import SignedPayload, TestSessionEvent
from .signing import generate_identifier, sign
