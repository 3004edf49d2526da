"""Storage keys for browser-side draft persistence.

Drafts live in the browser's localStorage, one entry per question set. The key
is derived from a content hash of the questions so a changed question set
never picks up answers saved for a different one. The server computes the key
and inlines it into the page, which keeps the hashing in one place.
"""
from __future__ import annotations

import hashlib
import json
from typing import Optional

from config.settings import settings

from .models import QuestionSet


def question_set_hash(question_set: QuestionSet, length: int = 8) -> str:
    canonical = json.dumps(
        question_set.client_questions(),
        ensure_ascii=False,
        separators=(",", ":"),
        sort_keys=True,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:length]


def draft_storage_key(question_set: QuestionSet, prefix: Optional[str] = None) -> str:
    return f"{prefix or settings.DRAFT_KEY_PREFIX}-{question_set_hash(question_set)}"


__all__ = ["draft_storage_key", "question_set_hash"]
