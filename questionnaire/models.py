"""Question set and response models shared by the server and the tool."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

QuestionType = Literal["single", "multi", "text", "image"]
CHOICE_TYPES = frozenset({"single", "multi"})


class Question(BaseModel):
    """One prompt on the form.

    The prompt text is read from either ``question`` or ``prompt`` in the
    questions file and is always written back as ``question`` for the browser.
    """

    id: str = Field(min_length=1)
    type: QuestionType
    question: str = Field(min_length=1, validation_alias=AliasChoices("question", "prompt"))
    context: Optional[str] = None
    options: Optional[List[str]] = None
    recommended: Optional[Union[str, List[str]]] = None

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @model_validator(mode="after")
    def _check_options(self) -> "Question":
        if self.type in CHOICE_TYPES:
            if not self.options:
                raise ValueError(f"Question '{self.id}' of type {self.type} requires options")
            if len(set(self.options)) != len(self.options):
                raise ValueError(f"Question '{self.id}' has duplicate options")
        elif self.options is not None:
            raise ValueError(f"Question '{self.id}' of type {self.type} cannot have options")

        if self.recommended is None:
            return self
        if self.type not in CHOICE_TYPES:
            raise ValueError(f"Question '{self.id}' of type {self.type} cannot have recommended")
        picks = self.recommended_options
        if self.type == "single" and len(picks) > 1:
            raise ValueError(f"Question '{self.id}' can recommend at most one option")
        unknown = [pick for pick in picks if pick not in (self.options or [])]
        if unknown:
            raise ValueError(f"Question '{self.id}' recommends unknown option(s): {', '.join(unknown)}")
        return self

    @property
    def recommended_options(self) -> List[str]:
        if self.recommended is None:
            return []
        if isinstance(self.recommended, str):
            return [self.recommended]
        return list(self.recommended)


class QuestionSet(BaseModel):
    """Ordered, immutable questions presented during one session."""

    title: str = "Interview"
    description: str = ""
    questions: List[Question] = Field(min_length=1)

    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "QuestionSet":
        seen: set[str] = set()
        for question in self.questions:
            if question.id in seen:
                raise ValueError(f"Duplicate question id: {question.id}")
            seen.add(question.id)
        return self

    def get(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def client_questions(self) -> List[Dict[str, Any]]:
        return [question.model_dump(exclude_none=True) for question in self.questions]


class ResponseItem(BaseModel):
    """Validated answer for one question plus optional attachment paths."""

    id: str
    value: Union[str, List[str]] = ""
    attachments: Optional[List[str]] = None

    def display_value(self) -> str:
        if isinstance(self.value, list):
            return ", ".join(self.value)
        return self.value


__all__ = [
    "CHOICE_TYPES",
    "Question",
    "QuestionSet",
    "QuestionType",
    "ResponseItem",
]
