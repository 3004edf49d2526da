import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.settings import settings
from questionnaire.models import QuestionSet
from services.sessions import new_session


@pytest.fixture(autouse=True)
def upload_root(monkeypatch, tmp_path):
    root = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_ROOT", str(root))
    monkeypatch.setattr(settings, "HOST_SETTINGS_PATH", str(tmp_path / "missing-settings.json"))
    return root


@pytest.fixture
def question_set():
    return QuestionSet.model_validate(
        {
            "title": "Project setup",
            "description": "A few choices before we start.",
            "questions": [
                {"id": "lang", "type": "single", "question": "Language?", "options": ["Python", "Go"], "recommended": "Python"},
                {"id": "features", "type": "multi", "question": "Features?", "options": ["auth", "db", "cache"]},
                {"id": "notes", "type": "text", "question": "Anything else?"},
                {"id": "mockup", "type": "image", "question": "Upload a mockup"},
            ],
        }
    )


@pytest.fixture
def session():
    return new_session(300)


@pytest.fixture
def uploaded_files(upload_root):
    def _list():
        if not upload_root.exists():
            return []
        return sorted(path for path in upload_root.rglob("*") if path.is_file())

    return _list
