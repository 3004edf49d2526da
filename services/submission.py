"""Validation and ingestion of ``/submit`` payloads."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from api.schemas import ImageInput, ResponseInput
from config.settings import settings
from questionnaire.models import QuestionSet, ResponseItem
from services.uploads import DecodedImage, UploadError, UploadStore, decode_image

SESSION_ENDED = "Interview session has ended"


class SubmissionError(ValueError):
    """Rejects the whole submission; ``field`` names the offending question."""

    def __init__(self, message: str, field: Optional[str] = None, status_code: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.status_code = status_code


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _keyed_entries(entries: List[Any]) -> List[Dict[str, Any]]:
    # entries without a string id cannot be attributed to a question
    return [entry for entry in entries if isinstance(entry, dict) and isinstance(entry.get("id"), str)]


def _ensure_question(question_set: QuestionSet, question_id: str):
    question = question_set.get(question_id)
    if question is None:
        raise SubmissionError(f"Unknown question id: {question_id}", field=question_id)
    return question


def validate_responses(raw_responses: List[Any], question_set: QuestionSet) -> List[ResponseItem]:
    """Decode response entries in order and check each against its question type."""

    responses: List[ResponseItem] = []
    seen: set[str] = set()
    for entry in _keyed_entries(raw_responses):
        question_id = entry["id"]
        question = _ensure_question(question_set, question_id)
        if question_id in seen:
            raise SubmissionError(f"Duplicate response for {question_id}", field=question_id)
        seen.add(question_id)

        try:
            item = ResponseInput.model_validate(entry)
        except ValidationError as exc:
            raise SubmissionError(f"Invalid response value for {question_id}", field=question_id) from exc

        wants_list = question.type in ("multi", "image")
        if wants_list != isinstance(item.value, list):
            raise SubmissionError(f"Invalid response value for {question_id}", field=question_id)

        value = list(item.value) if isinstance(item.value, list) else item.value
        attachments = list(item.attachments) if item.attachments is not None else None
        responses.append(ResponseItem(id=question_id, value=value, attachments=attachments))
    return responses


def validate_images(raw_images: List[Any], question_set: QuestionSet) -> List[DecodedImage]:
    """Decode every image before anything is written to disk."""

    decoded: List[DecodedImage] = []
    for entry in _keyed_entries(raw_images):
        question_id = entry["id"]
        _ensure_question(question_set, question_id)
        try:
            image = ImageInput.model_validate(entry)
        except ValidationError as exc:
            raise SubmissionError("Invalid image payload", field=question_id) from exc
        try:
            decoded.append(
                decode_image(
                    question_id,
                    image.filename,
                    image.mime_type,
                    image.data,
                    is_attachment=image.is_attachment,
                )
            )
        except UploadError as exc:
            raise SubmissionError(str(exc), field=question_id) from exc
    return decoded


def merge_upload(responses: List[ResponseItem], question_id: str, path: str, is_attachment: bool) -> None:
    """Fold a stored file into the response list.

    Attachments append to ``attachments``. Primary images upgrade ``value``
    from ``""`` to a single path and then to a list of paths.
    """

    existing = next((item for item in responses if item.id == question_id), None)
    if is_attachment:
        if existing is None:
            responses.append(ResponseItem(id=question_id, value="", attachments=[path]))
        else:
            existing.attachments = list(existing.attachments or [])
            existing.attachments.append(path)
        return

    if existing is None:
        responses.append(ResponseItem(id=question_id, value=path))
    elif isinstance(existing.value, list):
        existing.value.append(path)
    elif existing.value == "":
        existing.value = path
    else:
        existing.value = [existing.value, path]


def discard(paths: List[Path]) -> None:
    for path in paths:
        path.unlink(missing_ok=True)


async def ingest_images(images: List[DecodedImage], responses: List[ResponseItem], store: UploadStore) -> List[Path]:
    written: List[Path] = []
    for image in images:
        try:
            path = await store.save(image)
        except UploadError as exc:
            discard(written)
            raise SubmissionError(str(exc), field=image.question_id) from exc
        written.append(path)
        merge_upload(responses, image.question_id, str(path), image.is_attachment)
    return written


async def process_submission(
    body: Dict[str, Any],
    question_set: QuestionSet,
    store: UploadStore,
    claim: Optional[Callable[[], bool]] = None,
) -> List[ResponseItem]:
    """Run the full pipeline; any failure discards the per-request responses.

    ``claim`` is asked once every file is on disk. When it refuses, the
    session was settled by another request meanwhile: the files written here
    are removed and the submission is rejected with 409.
    """

    raw_responses = _as_list(body.get("responses"))
    raw_images = _as_list(body.get("images"))

    if len(raw_images) > settings.MAX_IMAGES:
        raise SubmissionError(f"Too many images (max {settings.MAX_IMAGES})")

    responses = validate_responses(raw_responses, question_set)
    images = validate_images(raw_images, question_set)
    written = await ingest_images(images, responses, store)
    if claim is not None and not claim():
        discard(written)
        raise SubmissionError(SESSION_ENDED, status_code=409)
    return responses


__all__ = [
    "SESSION_ENDED",
    "SubmissionError",
    "discard",
    "ingest_images",
    "merge_upload",
    "process_submission",
    "validate_images",
    "validate_responses",
]
