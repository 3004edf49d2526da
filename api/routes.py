"""FastAPI routes for one interview form session."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse

from api.auth import SessionGuard
from api.body import read_json_object
from api.schemas import ApiError, ApiResp
from config.settings import settings
from observability.logger import log_event
from observability.tracing import span
from questionnaire.drafts import draft_storage_key
from questionnaire.models import QuestionSet, ResponseItem
from services.sessions import InterviewSession
from services.submission import SESSION_ENDED, SubmissionError, process_submission
from services.uploads import UploadStore

FORM_DIR = Path(__file__).resolve().parent / "form"
TEMPLATE = (FORM_DIR / "index.html").read_text(encoding="utf-8")
STYLES = (FORM_DIR / "styles.css").read_text(encoding="utf-8")
SCRIPT = (FORM_DIR / "script.js").read_text(encoding="utf-8")
THEMES: Dict[str, str] = {
    path.stem[len("theme-"):]: path.read_text(encoding="utf-8")
    for path in sorted(FORM_DIR.glob("theme-*.css"))
}

DATA_PLACEHOLDER = "/* __INTERVIEW_DATA__ */"
TOKEN_PLACEHOLDER = "__SESSION_TOKEN__"
THEME_PLACEHOLDER = "<!-- __THEME_LINK__ -->"


@dataclass
class FormContext:
    """Everything the routes of one session share."""

    questions: QuestionSet
    session: InterviewSession
    on_submit: Callable[[List[ResponseItem]], None]
    on_cancel: Callable[[], None]
    store: UploadStore
    theme: Optional[str] = None
    finished: bool = False


def safe_inline_json(data: Any) -> str:
    """Serialize ``data`` for embedding inside a ``<script>`` element."""

    return (
        json.dumps(data)
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
    )


def _client_data(ctx: FormContext) -> Dict[str, Any]:
    deadline = ctx.session.deadline_at
    return {
        "questions": ctx.questions.client_questions(),
        "title": ctx.questions.title,
        "description": ctx.questions.description,
        "sessionToken": ctx.session.session_token,
        "timeout": ctx.session.timeout_seconds,
        "deadlineAt": int(deadline.timestamp() * 1000) if deadline else None,
        "draftKey": draft_storage_key(ctx.questions),
        "theme": ctx.theme if ctx.theme in THEMES else None,
        "limits": {
            "maxImages": settings.MAX_IMAGES,
            "maxImageBytes": settings.MAX_IMAGE_BYTES,
            "maxDimension": settings.MAX_IMAGE_DIMENSION,
            "allowedTypes": list(settings.ALLOWED_IMAGE_TYPES),
            "urgentThreshold": settings.URGENT_THRESHOLD_SECONDS,
            "closeDelay": settings.CLOSE_DELAY_SECONDS,
            "draftDebounceMs": settings.DRAFT_DEBOUNCE_MS,
        },
    }


def render_form(ctx: FormContext) -> str:
    token = quote(ctx.session.session_token, safe="")
    theme_link = ""
    if ctx.theme in THEMES:
        theme_link = f'<link rel="stylesheet" href="/theme-{ctx.theme}.css?session={token}">'
    # question text is inlined last so it never goes through the other substitutions
    page = TEMPLATE.replace(TOKEN_PLACEHOLDER, token).replace(THEME_PLACEHOLDER, theme_link)
    return page.replace(DATA_PLACEHOLDER, safe_inline_json(_client_data(ctx)))


def _ended() -> JSONResponse:
    return JSONResponse(ApiError(error=SESSION_ENDED).model_dump(exclude_none=True), status_code=409)


def build_router(ctx: FormContext) -> APIRouter:
    guard = SessionGuard(ctx.session)
    router = APIRouter()
    session_id = ctx.session.session_id

    async def _notify_submit(responses: List[ResponseItem]) -> None:
        ctx.on_submit(responses)

    async def _notify_cancel() -> None:
        ctx.on_cancel()

    def _claim() -> bool:
        if ctx.finished:
            return False
        ctx.finished = True
        return True

    @router.get("/", response_class=HTMLResponse, dependencies=[Depends(guard.query)])
    def form() -> HTMLResponse:
        return HTMLResponse(render_form(ctx))

    @router.get("/health", dependencies=[Depends(guard.query)])
    def health() -> Dict[str, bool]:
        return {"ok": True}

    @router.get("/styles.css", dependencies=[Depends(guard.query)])
    def styles() -> Response:
        return Response(STYLES, media_type="text/css; charset=utf-8")

    @router.get("/script.js", dependencies=[Depends(guard.query)])
    def script() -> Response:
        return Response(SCRIPT, media_type="application/javascript; charset=utf-8")

    @router.get("/theme-{name}.css", dependencies=[Depends(guard.query)])
    def theme(name: str) -> Response:
        if name not in THEMES:
            raise HTTPException(status_code=404, detail="Not found")
        return Response(THEMES[name], media_type="text/css; charset=utf-8")

    @router.post("/cancel", response_model=ApiResp)
    async def cancel(request: Request, background: BackgroundTasks):
        payload = await read_json_object(request, settings.MAX_BODY_BYTES)
        guard.body(payload)
        if not _claim():
            return _ended()
        log_event("cancel_accepted", session_id)
        background.add_task(_notify_cancel)
        return ApiResp()

    @router.post("/submit", response_model=ApiResp)
    async def submit(request: Request, background: BackgroundTasks):
        payload = await read_json_object(request, settings.MAX_BODY_BYTES)
        guard.body(payload)
        if ctx.finished:
            return _ended()

        try:
            with span(session_id, "/submit"):
                responses = await process_submission(payload, ctx.questions, ctx.store, claim=_claim)
        except SubmissionError as exc:
            log_event("submit_rejected", session_id, error=exc.message, field=exc.field)
            return JSONResponse(
                ApiError(error=exc.message, field=exc.field).model_dump(exclude_none=True),
                status_code=exc.status_code,
            )
        log_event("submit_accepted", session_id, responses=len(responses))
        background.add_task(_notify_submit, responses)
        return ApiResp()

    return router


__all__ = ["FormContext", "build_router", "render_form", "safe_inline_json"]
