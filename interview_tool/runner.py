"""Run one interview end to end: load questions, serve the form, await the outcome."""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from api_server import InterviewServerCallbacks, InterviewServerOptions, start_interview_server
from config.host import HostSettings, load_host_settings, resolve_timeout
from observability.logger import log_event
from questionnaire.errors import BrowserLaunchError
from questionnaire.loader import load_questions
from questionnaire.models import QuestionSet, ResponseItem
from services.outcome import OutcomeResolver, OutcomeStatus
from services.sessions import new_session

from .browser import open_browser

Opener = Callable[[str, Optional[str]], None]

SKIPPED_SUMMARY = "Interview skipped - user has queued input."


class InterviewResult(BaseModel):
    status: OutcomeStatus
    responses: List[ResponseItem] = Field(default_factory=list)
    url: str = ""
    summary: str


def format_responses(responses: Iterable[ResponseItem]) -> str:
    lines = [f"- {item.id}: {item.display_value()}" for item in responses]
    return "\n".join(lines) if lines else "(none)"


def summarize(status: OutcomeStatus, responses: List[ResponseItem], timeout_seconds: int) -> str:
    """Text handed back to the agent for a finished interview."""

    if status == "completed":
        return f"User completed the interview form.\n\nResponses:\n{format_responses(responses)}"
    if status == "cancelled":
        return "User cancelled the interview form."
    if status == "timeout":
        return f"Interview form timed out after {timeout_seconds} seconds."
    return "Interview was aborted."


async def _abort_when_set(abort: asyncio.Event, resolver: OutcomeResolver) -> None:
    await abort.wait()
    resolver.abort()


async def run_interview(
    questions: Union[str, Path, QuestionSet],
    *,
    timeout: Optional[int] = None,
    verbose: bool = False,
    cwd: Optional[Path] = None,
    abort: Optional[asyncio.Event] = None,
    queued_input: bool = False,
    opener: Optional[Opener] = None,
    host: Optional[HostSettings] = None,
    upload_root: Optional[Path] = None,
) -> InterviewResult:
    """Present ``questions`` in a browser form and wait for the single outcome.

    ``questions`` is a path to a questions file (relative paths resolve
    against ``cwd``) or an already validated :class:`QuestionSet`. Setting
    ``abort`` at any point ends the interview with the aborted outcome.
    Cancelling the awaiting task tears the server down before re-raising.
    """

    if queued_input:
        return InterviewResult(status="cancelled", summary=SKIPPED_SUMMARY)

    host = host or load_host_settings()
    timeout_seconds = resolve_timeout(timeout, host)
    question_set = questions if isinstance(questions, QuestionSet) else load_questions(questions, cwd)

    if abort is not None and abort.is_set():
        return InterviewResult(status="aborted", summary=summarize("aborted", [], timeout_seconds))

    session = new_session(timeout_seconds)
    resolver = OutcomeResolver(session.session_id)
    handle = await start_interview_server(
        InterviewServerOptions(
            questions=question_set,
            session=session,
            theme=host.theme,
            verbose=verbose,
            upload_root=upload_root,
        ),
        InterviewServerCallbacks(on_submit=resolver.complete, on_cancel=resolver.cancel),
    )
    resolver.on_teardown(handle.close)

    watcher = asyncio.create_task(_abort_when_set(abort, resolver)) if abort is not None else None
    try:
        try:
            await run_in_threadpool(opener or open_browser, handle.url, host.browser)
        except BrowserLaunchError:
            raise
        except OSError as exc:
            raise BrowserLaunchError(f"Failed to open browser: {exc}") from exc

        resolver.arm_timeout(session.remaining_seconds())
        log_event("interview_waiting", session.session_id, timeout=timeout_seconds)
        outcome = await resolver.wait()
    except BaseException:
        # browser failure, task cancellation or interrupt: release the server before propagating
        resolver.abort()
        await handle.wait_closed()
        raise
    finally:
        if watcher is not None:
            watcher.cancel()

    await handle.wait_closed()
    return InterviewResult(
        status=outcome.status,
        responses=outcome.responses,
        url=handle.url,
        summary=summarize(outcome.status, outcome.responses, timeout_seconds),
    )


__all__ = ["InterviewResult", "Opener", "format_responses", "run_interview", "summarize"]
