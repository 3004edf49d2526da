"""One-shot resolution of an interview's terminal outcome."""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Iterable, List, Literal, Optional

from pydantic import BaseModel, Field

from observability.logger import log_event
from questionnaire.models import ResponseItem

OutcomeStatus = Literal["completed", "cancelled", "timeout", "aborted"]

logger = logging.getLogger(__name__)


class InterviewOutcome(BaseModel):
    status: OutcomeStatus
    responses: List[ResponseItem] = Field(default_factory=list)


class OutcomeResolver:
    """Single-fire future guarding the transition out of ``pending``.

    Submit, cancel, timeout and abort all funnel into :meth:`resolve`. The
    first call sets the future, cancels the armed timer and runs every
    teardown callback once; later calls return False and change nothing.
    """

    def __init__(self, session_id: str, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._session_id = session_id
        self._loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future[InterviewOutcome] = self._loop.create_future()
        self._timer: Optional[asyncio.TimerHandle] = None
        self._teardown: List[Callable[[], None]] = []
        self._released = False

    @property
    def resolved(self) -> bool:
        return self._future.done()

    @property
    def outcome(self) -> Optional[InterviewOutcome]:
        if not self._future.done():
            return None
        return self._future.result()

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None

    def on_teardown(self, callback: Callable[[], None]) -> None:
        """Register ``callback`` to run once when the outcome is decided."""

        if self._released:
            self._run_callback(callback)
            return
        self._teardown.append(callback)

    def arm_timeout(self, seconds: Optional[float]) -> None:
        """Schedule the timeout outcome; ``None`` means the session never expires."""

        if seconds is None or self.resolved:
            return
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._loop.call_later(max(0.0, seconds), self.resolve, "timeout")

    def resolve(self, status: OutcomeStatus, responses: Optional[Iterable[ResponseItem]] = None) -> bool:
        if self._future.done():
            log_event("outcome_ignored", self._session_id, level=logging.DEBUG, outcome=status)
            return False
        self._future.set_result(InterviewOutcome(status=status, responses=list(responses or [])))
        log_event("outcome", self._session_id, outcome=status)
        self._release()
        return True

    def complete(self, responses: Iterable[ResponseItem]) -> bool:
        return self.resolve("completed", responses)

    def cancel(self) -> bool:
        return self.resolve("cancelled")

    def abort(self) -> bool:
        return self.resolve("aborted")

    async def wait(self) -> InterviewOutcome:
        return await asyncio.shield(self._future)

    def _release(self) -> None:
        if self._released:
            return
        self._released = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        callbacks, self._teardown = self._teardown, []
        for callback in callbacks:
            self._run_callback(callback)

    def _run_callback(self, callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception:
            logger.exception("Teardown callback failed for session %s", self._session_id)


__all__ = ["InterviewOutcome", "OutcomeResolver", "OutcomeStatus"]
