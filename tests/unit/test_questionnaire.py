import json

import pytest

from questionnaire.errors import QuestionsFileError
from questionnaire.loader import load_questions, validate_questions
from questionnaire.models import ResponseItem


def test_bare_list_is_wrapped():
    qs = validate_questions([{"id": "q1", "type": "text", "question": "Why?"}])
    assert qs.title == "Interview"
    assert [q.id for q in qs.questions] == ["q1"]


def test_prompt_alias_is_written_back_as_question():
    qs = validate_questions({"questions": [{"id": "q1", "type": "text", "prompt": "Why?"}]})
    assert qs.questions[0].question == "Why?"
    assert qs.client_questions() == [{"id": "q1", "type": "text", "question": "Why?"}]


def test_duplicate_ids_rejected():
    with pytest.raises(QuestionsFileError) as exc:
        validate_questions(
            [
                {"id": "q1", "type": "text", "question": "A"},
                {"id": "q1", "type": "text", "question": "B"},
            ]
        )
    assert "Duplicate question id: q1" in str(exc.value)


@pytest.mark.parametrize(
    "question, message",
    [
        ({"id": "q", "type": "single", "question": "?"}, "requires options"),
        ({"id": "q", "type": "multi", "question": "?", "options": ["a", "a"]}, "duplicate options"),
        ({"id": "q", "type": "text", "question": "?", "options": ["a"]}, "cannot have options"),
        ({"id": "q", "type": "single", "question": "?", "options": ["a", "b"], "recommended": ["a", "b"]}, "at most one"),
        ({"id": "q", "type": "multi", "question": "?", "options": ["a"], "recommended": ["z"]}, "unknown option"),
        ({"id": "q", "type": "image", "question": "?", "recommended": "x"}, "cannot have recommended"),
    ],
)
def test_schema_errors_are_listed(question, message):
    with pytest.raises(QuestionsFileError) as exc:
        validate_questions([question])
    assert str(exc.value).startswith("Invalid questions file:")
    assert message in str(exc.value)


def test_unknown_type_rejected():
    with pytest.raises(QuestionsFileError):
        validate_questions([{"id": "q", "type": "slider", "question": "?"}])


def test_empty_question_list_rejected():
    with pytest.raises(QuestionsFileError):
        validate_questions({"questions": []})


def test_non_object_rejected():
    with pytest.raises(QuestionsFileError):
        validate_questions("questions")


def test_load_relative_to_cwd(tmp_path):
    (tmp_path / "q.json").write_text(json.dumps([{"id": "q1", "type": "text", "question": "Why?"}]))
    qs = load_questions("q.json", cwd=tmp_path)
    assert qs.get("q1") is not None
    assert qs.get("nope") is None


def test_missing_file(tmp_path):
    with pytest.raises(QuestionsFileError) as exc:
        load_questions(tmp_path / "absent.json")
    assert "Questions file not found" in str(exc.value)


def test_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(QuestionsFileError) as exc:
        load_questions(path)
    assert "Invalid JSON in questions file" in str(exc.value)


def test_response_display_value():
    assert ResponseItem(id="a", value=["x", "y"]).display_value() == "x, y"
    assert ResponseItem(id="a", value="x").display_value() == "x"
