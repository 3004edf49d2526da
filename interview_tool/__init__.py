"""Browser-based interview form for agent tool calls."""
from .browser import open_browser
from .runner import InterviewResult, format_responses, run_interview, summarize

__all__ = ["InterviewResult", "format_responses", "open_browser", "run_interview", "summarize"]
