"""Open the interview URL in the user's browser."""
from __future__ import annotations

import webbrowser
from typing import Optional

from questionnaire.errors import BrowserLaunchError


def open_browser(url: str, browser: Optional[str] = None) -> None:
    """Open ``url`` with the named browser, or the system default."""

    try:
        controller = webbrowser.get(browser) if browser else webbrowser.get()
        opened = controller.open(url, new=2)
    except webbrowser.Error as exc:
        raise BrowserLaunchError(f"Failed to open browser: {exc}") from exc
    if not opened:
        raise BrowserLaunchError("Failed to open browser: no browser accepted the URL")


__all__ = ["open_browser"]
