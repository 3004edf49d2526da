from __future__ import annotations  # Questions file loading and schema validation

import json
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from .errors import QuestionsFileError
from .models import QuestionSet


def _format_errors(exc: ValidationError) -> str:  # Flatten pydantic errors into readable lines
    lines = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "(root)"
        message = str(error.get("msg", "invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        lines.append(f"  - {location}: {message}")
    return "\n".join(lines)


def validate_questions(data: Any) -> QuestionSet:  # Validate already-parsed questions data
    if isinstance(data, list):
        data = {"questions": data}
    if not isinstance(data, dict):
        raise QuestionsFileError("Questions file must contain an object with a 'questions' list")
    try:
        return QuestionSet.model_validate(data)
    except ValidationError as exc:
        raise QuestionsFileError(f"Invalid questions file:\n{_format_errors(exc)}") from exc


def resolve_questions_path(path: Union[str, Path], cwd: Optional[Path] = None) -> Path:  # Anchor relative paths at cwd
    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        return candidate
    return (cwd or Path.cwd()) / candidate


def load_questions(path: Union[str, Path], cwd: Optional[Path] = None) -> QuestionSet:  # Read and validate a questions file
    absolute = resolve_questions_path(path, cwd)
    if not absolute.is_file():
        raise QuestionsFileError(f"Questions file not found: {absolute}")
    try:
        data = json.loads(absolute.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise QuestionsFileError(f"Invalid JSON in questions file: {exc}") from exc
    return validate_questions(data)


__all__ = ["load_questions", "resolve_questions_path", "validate_questions"]
