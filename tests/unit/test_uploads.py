import asyncio
import base64

import pytest

from config.settings import settings
from services.uploads import EXTENSIONS, DecodedImage, UploadError, UploadStore, decode_image, sanitize_filename

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.mark.parametrize(
    "filename, mime, expected",
    [
        ("shot.png", "image/png", "shot.png"),
        ("my shot (1).png", "image/png", "my_shot__1_.png"),
        ("../../etc/passwd", "image/png", "passwd.png"),
        ("C:\\Users\\me\\shot.png", "image/png", "shot.png"),
        ("dir/", "image/png", None),
        ("photo", "image/jpeg", "photo.jpg"),
        ("...", "image/gif", None),
    ],
)
def test_sanitize_filename(filename, mime, expected):
    result = sanitize_filename(filename, mime)
    assert "/" not in result and not result.startswith(".")
    if expected is None:
        assert result.startswith("image_") and result.endswith(EXTENSIONS[mime])
    else:
        assert result == expected


def test_decode_accepts_data_url_prefix():
    payload = "data:image/png;base64," + base64.b64encode(PNG).decode()
    image = decode_image("q", "a.png", "image/png", payload)
    assert image.data == PNG


def test_decode_rejects_type():
    with pytest.raises(UploadError, match="Invalid image type: image/bmp"):
        decode_image("q", "a.bmp", "image/bmp", base64.b64encode(PNG).decode())


def test_decode_rejects_oversize(monkeypatch):
    monkeypatch.setattr(settings, "MAX_IMAGE_BYTES", 16)
    with pytest.raises(UploadError, match="Image exceeds"):
        decode_image("q", "a.png", "image/png", base64.b64encode(PNG).decode())


def test_decode_rejects_garbage():
    with pytest.raises(UploadError):
        decode_image("q", "a.png", "image/png", "not base64!!")


def test_store_writes_under_session_dir_and_never_overwrites(upload_root):
    store = UploadStore("abc")
    image = DecodedImage(question_id="q", filename="a.png", mime_type="image/png", data=PNG)

    async def scenario():
        return await store.save(image), await store.save(image)

    first, second = asyncio.run(scenario())
    assert store.directory == upload_root / "interview-abc"
    assert first.name == "a.png"
    assert second.name == "a-1.png"
    assert first.read_bytes() == second.read_bytes() == PNG


def test_store_failure_is_upload_error(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    store = UploadStore("abc", root=blocker)
    image = DecodedImage(question_id="q", filename="a.png", mime_type="image/png", data=PNG)
    with pytest.raises(UploadError, match="Failed to save image"):
        asyncio.run(store.save(image))
