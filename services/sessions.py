"""Helpers for minting interview sessions and reading their deadline."""
from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class InterviewSession(BaseModel):
    """Identity, bearer token and timeout of one interview; never mutated."""

    session_id: str
    session_token: str
    timeout_seconds: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True)

    def token_matches(self, candidate: Any) -> bool:
        if not isinstance(candidate, str) or not candidate:
            return False
        return secrets.compare_digest(candidate.encode("utf-8"), self.session_token.encode("utf-8"))

    @property
    def deadline_at(self) -> Optional[datetime]:
        if self.timeout_seconds <= 0:
            return None
        return _as_utc(self.created_at) + timedelta(seconds=self.timeout_seconds)

    def remaining_seconds(self, now: Optional[datetime] = None) -> Optional[float]:
        """Seconds until the server-side deadline, or None without a timeout."""

        deadline = self.deadline_at
        if deadline is None:
            return None
        current = _as_utc(now) if now else datetime.now(timezone.utc)
        return max(0.0, (deadline - current).total_seconds())


def new_session(timeout_seconds: int) -> InterviewSession:
    """Create a session with a fresh identifier and bearer token."""

    return InterviewSession(
        session_id=str(uuid.uuid4()),
        session_token=secrets.token_urlsafe(24),
        timeout_seconds=max(0, int(timeout_seconds)),
    )


__all__ = ["InterviewSession", "new_session"]
