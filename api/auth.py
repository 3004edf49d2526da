"""Session token checks shared by every endpoint."""
from __future__ import annotations

from typing import Any, Optional

from fastapi import Query

from services.sessions import InterviewSession


class InvalidSessionError(Exception):
    """Missing or mismatched session token; rendered as a 403."""

    def __init__(self, as_json: bool) -> None:
        super().__init__("Invalid session")
        self.as_json = as_json


class SessionGuard:
    """Gate requests on the session's single bearer token.

    GET requests carry the token in the ``session`` query parameter, POST
    requests in the ``token`` field of the JSON body. Both paths use the same
    comparison.
    """

    def __init__(self, session: InterviewSession) -> None:
        self._session = session

    def query(self, session: Optional[str] = Query(default=None)) -> None:
        if not self._session.token_matches(session):
            raise InvalidSessionError(as_json=False)

    def body(self, payload: Any) -> None:
        token = payload.get("token") if isinstance(payload, dict) else None
        if not self._session.token_matches(token):
            raise InvalidSessionError(as_json=True)


__all__ = ["InvalidSessionError", "SessionGuard"]
