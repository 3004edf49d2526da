from __future__ import annotations  # Loopback FastAPI server hosting one interview form

import asyncio
import contextlib
import logging
import socket
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, List, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.datastructures import MutableHeaders
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from api.auth import InvalidSessionError
from api.body import RequestBodyError
from api.routes import FormContext, build_router
from api.schemas import ApiError
from config.settings import settings
from observability.logger import log_event, set_verbose
from questionnaire.errors import ServerStartError
from questionnaire.models import QuestionSet, ResponseItem
from services.sessions import InterviewSession
from services.uploads import UploadStore


logger = logging.getLogger(__name__)


@dataclass
class InterviewServerOptions:  # What the server needs to host one session
    questions: QuestionSet
    session: InterviewSession
    theme: Optional[str] = None
    verbose: bool = False
    host: Optional[str] = None
    upload_root: Optional[Path] = None


@dataclass
class InterviewServerCallbacks:  # Owner hooks fired after the HTTP reply is sent
    on_submit: Callable[[List[ResponseItem]], None]
    on_cancel: Callable[[], None]


class NoStoreMiddleware:  # Disable caching on every response and log the request line
    def __init__(self, app: ASGIApp, session_id: str) -> None:
        self.app = app
        self.session_id = session_id

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers["Cache-Control"] = "no-store"
                log_event(
                    "request",
                    self.session_id,
                    level=logging.DEBUG,
                    method=scope.get("method"),
                    path=scope.get("path"),
                    status=message["status"],
                )
            await send(message)

        await self.app(scope, receive, send_with_headers)


def create_app(options: InterviewServerOptions, callbacks: InterviewServerCallbacks) -> FastAPI:  # Build the per-session app
    ctx = FormContext(
        questions=options.questions,
        session=options.session,
        on_submit=callbacks.on_submit,
        on_cancel=callbacks.on_cancel,
        store=UploadStore(options.session.session_id, root=options.upload_root),
        theme=options.theme,
    )
    session_id = options.session.session_id

    app = FastAPI(title="Interview Form", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.form = ctx
    app.include_router(build_router(ctx))
    app.add_middleware(NoStoreMiddleware, session_id=session_id)

    @app.exception_handler(InvalidSessionError)
    async def invalid_session(request: Request, exc: InvalidSessionError):
        if exc.as_json:
            return JSONResponse(ApiError(error="Invalid session").model_dump(exclude_none=True), status_code=403)
        return PlainTextResponse("Invalid session", status_code=403)

    @app.exception_handler(RequestBodyError)
    async def bad_body(request: Request, exc: RequestBodyError):
        headers = {"Connection": "close"} if exc.status_code == 413 else None
        return JSONResponse(
            ApiError(error=exc.message).model_dump(exclude_none=True),
            status_code=exc.status_code,
            headers=headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return PlainTextResponse("Not found", status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def server_error(request: Request, exc: Exception):
        logger.exception("Unhandled error for %s %s", request.method, request.url.path)
        return JSONResponse(ApiError(error=str(exc) or "Server error").model_dump(exclude_none=True), status_code=500)

    return app


class _LoopbackServer(uvicorn.Server):  # uvicorn server that leaves signals to the owning process
    def install_signal_handlers(self) -> None:
        return None

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


class InterviewServerHandle:
    """Running server plus the URL that authenticates its one client."""

    def __init__(self, server: _LoopbackServer, task: asyncio.Task, app: FastAPI, url: str, port: int) -> None:
        self._server = server
        self._task = task
        self.app = app
        self.url = url
        self.port = port

    @property
    def closed(self) -> bool:
        return self._server.should_exit

    def close(self) -> None:
        """Stop accepting work; safe to call more than once."""

        self.app.state.form.finished = True
        self._server.should_exit = True

    async def wait_closed(self) -> None:
        self.close()
        await asyncio.shield(self._task)


def _bind_loopback(host: str) -> socket.socket:  # Bind an ephemeral port before uvicorn starts
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.bind((host, 0))
    except OSError as exc:
        sock.close()
        raise ServerStartError(f"Failed to start server: {exc}") from exc
    return sock


async def start_interview_server(
    options: InterviewServerOptions,
    callbacks: InterviewServerCallbacks,
) -> InterviewServerHandle:  # Start serving and return once the socket is accepting
    set_verbose(options.verbose or settings.VERBOSE)
    host = options.host or settings.BIND_HOST
    sock = _bind_loopback(host)
    port = sock.getsockname()[1]

    app = create_app(options, callbacks)
    config = uvicorn.Config(
        app,
        log_level="warning",
        access_log=False,
        lifespan="off",
        timeout_graceful_shutdown=2,
    )
    server = _LoopbackServer(config)
    task = asyncio.create_task(server.serve(sockets=[sock]))

    while not server.started:
        if task.done():
            sock.close()
            error = None if task.cancelled() else task.exception()
            raise ServerStartError(f"Failed to start server: {error or 'server exited during startup'}")
        await asyncio.sleep(0.01)

    url_host = f"[{host}]" if ":" in host else host
    url = f"http://{url_host}:{port}/?session={options.session.session_token}"
    log_event("server_started", options.session.session_id, url=f"http://{url_host}:{port}/")
    return InterviewServerHandle(server, task, app, url, port)


__all__ = [
    "InterviewServerCallbacks",
    "InterviewServerHandle",
    "InterviewServerOptions",
    "create_app",
    "start_interview_server",
]
