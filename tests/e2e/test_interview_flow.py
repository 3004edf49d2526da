import asyncio
import base64
from urllib.parse import parse_qs, urlparse

import httpx

from api_server import InterviewServerCallbacks, InterviewServerOptions, start_interview_server
from config.host import HostSettings
from interview_tool.runner import run_interview
from questionnaire.loader import validate_questions
from services.outcome import OutcomeResolver
from services.sessions import new_session


def _yes_no():
    return validate_questions([{"id": "ship", "type": "single", "question": "Ship it?", "options": ["Yes", "No"]}])


def _token(url):
    return parse_qs(urlparse(url).query)["session"][0]


def test_single_choice_completes_interview():
    def answer_no(url, browser):
        with httpx.Client(base_url=url.split("/?")[0], timeout=5) as client:
            page = client.get("/", params={"session": _token(url)})
            assert page.status_code == 200
            resp = client.post("/submit", json={"token": _token(url), "responses": [{"id": "ship", "value": "No"}], "images": []})
            assert resp.json() == {"ok": True}

    result = asyncio.run(
        asyncio.wait_for(run_interview(_yes_no(), timeout=30, opener=answer_no, host=HostSettings()), timeout=15)
    )
    assert result.status == "completed"
    assert [r.model_dump(exclude_none=True) for r in result.responses] == [{"id": "ship", "value": "No"}]
    assert result.summary.endswith("Responses:\n- ship: No")


def test_oversized_png_rejected_on_live_server(uploaded_files):
    questions = validate_questions([{"id": "shot", "type": "image", "question": "Screenshot?"}])

    async def scenario():
        session = new_session(30)
        resolver = OutcomeResolver(session.session_id)
        handle = await start_interview_server(
            InterviewServerOptions(questions=questions, session=session),
            InterviewServerCallbacks(on_submit=resolver.complete, on_cancel=resolver.cancel),
        )
        big = base64.b64encode(b"\x89PNG\r\n\x1a\n" + b"\x00" * (6 * 1024 * 1024)).decode()
        try:
            async with httpx.AsyncClient(base_url=f"http://127.0.0.1:{handle.port}", timeout=10) as client:
                resp = await client.post(
                    "/submit",
                    json={
                        "token": session.session_token,
                        "responses": [],
                        "images": [{"id": "shot", "filename": "big.png", "mimeType": "image/png", "data": big}],
                    },
                )
        finally:
            await handle.wait_closed()
        return resp, resolver.resolved

    resp, resolved = asyncio.run(scenario())
    assert resp.status_code == 400
    assert resp.json()["field"] == "shot"
    assert "Image exceeds 5MB limit" == resp.json()["error"]
    assert uploaded_files() == []
    assert not resolved


def test_timeout_then_late_submit_gets_an_answer():
    async def scenario():
        session = new_session(1)
        resolver = OutcomeResolver(session.session_id)
        fired = []
        handle = await start_interview_server(
            InterviewServerOptions(questions=_yes_no(), session=session),
            InterviewServerCallbacks(on_submit=resolver.complete, on_cancel=resolver.cancel),
        )
        # mark the form finished on teardown but keep serving so the stale tab can be answered
        resolver.on_teardown(lambda: setattr(handle.app.state.form, "finished", True))
        resolver.on_teardown(lambda: fired.append(resolver.outcome.status))
        resolver.arm_timeout(session.remaining_seconds())

        try:
            outcome = await asyncio.wait_for(resolver.wait(), timeout=5)
            async with httpx.AsyncClient(base_url=f"http://127.0.0.1:{handle.port}", timeout=5) as client:
                late = await client.post(
                    "/submit",
                    json={"token": session.session_token, "responses": [{"id": "ship", "value": "Yes"}]},
                )
            await asyncio.sleep(0.05)
        finally:
            await handle.wait_closed()
        return outcome, late, fired, resolver.outcome

    outcome, late, fired, final = asyncio.run(scenario())
    assert outcome.status == "timeout"
    assert fired == ["timeout"]
    assert late.status_code == 409
    assert late.json() == {"ok": False, "error": "Interview session has ended"}
    assert final.status == "timeout"
