import json
import logging

from observability.logger import HumanFormatter, JsonFormatter, build_event


def _record(event):
    record = logging.LogRecord("interview", logging.INFO, "", 0, event["kind"], (), None)
    record.event = event
    return record


def test_event_promotes_known_keys():
    event = build_event("submit_rejected", "s1", field="lang", error="bad", responses=2, skipped=None)
    assert event["kind"] == "submit_rejected"
    assert event["session_id"] == "s1"
    assert event["field"] == "lang"
    assert event["error"] == "bad"
    assert event["data"] == {"responses": 2}
    assert "skipped" not in event


def test_json_line_carries_outcome():
    line = JsonFormatter().format(_record(build_event("outcome", "s1", outcome="timeout")))
    payload = json.loads(line)
    assert payload["level"] == "INFO"
    assert payload["outcome"] == "timeout"
    assert "data" not in payload


def test_human_line():
    line = HumanFormatter().format(_record(build_event("span", "s1", path="/submit", ms=3.5, images=1)))
    assert line.endswith("session=s1 kind=span path=/submit ms=3.5 images=1")
