"""Question model, loading and draft keys for the interview form."""
from .drafts import draft_storage_key, question_set_hash
from .errors import (
    BrowserLaunchError,
    InterviewError,
    QuestionsFileError,
    ServerStartError,
)
from .loader import load_questions, resolve_questions_path, validate_questions
from .models import CHOICE_TYPES, Question, QuestionSet, QuestionType, ResponseItem

__all__ = [
    "BrowserLaunchError",
    "CHOICE_TYPES",
    "InterviewError",
    "Question",
    "QuestionSet",
    "QuestionType",
    "QuestionsFileError",
    "ResponseItem",
    "ServerStartError",
    "draft_storage_key",
    "load_questions",
    "question_set_hash",
    "resolve_questions_path",
    "validate_questions",
]
