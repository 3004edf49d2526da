import json

from config.host import HostSettings, load_host_settings, resolve_timeout
from config.settings import settings


def test_missing_file_gives_defaults(tmp_path):
    assert load_host_settings(tmp_path / "absent.json") == HostSettings()


def test_reads_interview_section(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"theme": "ignored", "interview": {"browser": "firefox", "timeout": 90, "theme": "dark"}}))
    host = load_host_settings(path)
    assert host == HostSettings(browser="firefox", timeout=90, theme="dark")


def test_invalid_file_falls_back(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text('{"interview": {"timeout": -5}}')
    assert load_host_settings(path) == HostSettings()
    path.write_text("not json")
    assert load_host_settings(path) == HostSettings()


def test_default_path_comes_from_settings(monkeypatch, tmp_path):
    path = tmp_path / "custom.json"
    path.write_text(json.dumps({"interview": {"timeout": 42}}))
    monkeypatch.setattr(settings, "HOST_SETTINGS_PATH", str(path))
    assert load_host_settings().timeout == 42


def test_timeout_precedence(monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_TIMEOUT_SECONDS", 300)
    assert resolve_timeout(10, HostSettings(timeout=90)) == 10
    assert resolve_timeout(0, HostSettings(timeout=90)) == 0
    assert resolve_timeout(None, HostSettings(timeout=90)) == 90
    assert resolve_timeout(None, HostSettings()) == 300
