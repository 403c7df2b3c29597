"""Pydantic models for the events the probe posts."""

from __future__ import annotations

import uuid
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from src.probe.signing import sign

# ── Probe event ──────────────────────────────────────────────────────────────


class SignedPayload(BaseModel):
    rowkey: str
    rowkeysignature: str

    @classmethod
    def for_identifier(cls, identifier: str, shared_secret: str) -> SignedPayload:
        return cls(rowkey=identifier, rowkeysignature=sign(identifier, shared_secret))

    def to_json(self) -> dict[str, Any]:
        return self.model_dump()


# ── Session-start event ──────────────────────────────────────────────────────


class TestSessionEvent(BaseModel):
    """Session-start event attributed to the fixed test user."""

    model_config = ConfigDict(populate_by_name=True)

    new_session: bool = Field(default=True, alias="new-session")
    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="session-id")
    user_id: str = Field(alias="user-id")
    is_a: Literal["HealthCheck"] = Field(default="HealthCheck", alias="is-a")
    healthcheck_id: str = Field(alias="healthcheck-id")

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
