"""Observability utilities for interview sessions."""
from .logger import log_event, set_verbose
from .tracing import span

__all__ = ["log_event", "set_verbose", "span"]
