"""Exception hierarchy shared by the interview form packages."""
from __future__ import annotations


class InterviewError(RuntimeError):
    """Base class for interview tool failures."""


class QuestionsFileError(InterviewError):
    """Raised when a questions file is missing, unreadable or invalid."""


class ServerStartError(InterviewError):
    """Raised when the loopback server cannot be started."""


class BrowserLaunchError(InterviewError):
    """Raised when the form URL cannot be opened in a browser."""


__all__ = [
    "InterviewError",
    "QuestionsFileError",
    "ServerStartError",
    "BrowserLaunchError",
]
