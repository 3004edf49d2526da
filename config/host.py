from __future__ import annotations  # Host-level settings read from the agent settings file

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from .settings import settings


logger = logging.getLogger(__name__)


class HostSettings(BaseModel):  # Interview section of the host settings file
    browser: Optional[str] = None
    timeout: Optional[int] = Field(default=None, ge=0)
    theme: Optional[str] = None


class HostSettingsFile(BaseModel):  # Settings file root; unrelated sections are ignored
    interview: HostSettings = Field(default_factory=HostSettings)

    model_config = {"extra": "ignore"}


def default_host_settings_path() -> Path:  # Resolve configured settings path
    return Path(settings.HOST_SETTINGS_PATH).expanduser()


def load_host_settings(path: Optional[Path] = None) -> HostSettings:  # Load settings, falling back to defaults
    target = path or default_host_settings_path()
    try:
        data = target.read_text(encoding="utf-8")
    except FileNotFoundError:
        return HostSettings()
    except OSError as exc:
        logger.warning("Could not read host settings %s: %s", target, exc)
        return HostSettings()
    try:
        return HostSettingsFile.model_validate_json(data).interview
    except ValidationError as exc:
        logger.warning("Ignoring invalid host settings %s: %s", target, exc.errors()[0].get("msg"))
        return HostSettings()


def resolve_timeout(requested: Optional[int], host: HostSettings) -> int:  # Explicit > host file > default
    if requested is not None:
        return max(0, int(requested))
    if host.timeout is not None:
        return host.timeout
    return settings.DEFAULT_TIMEOUT_SECONDS
