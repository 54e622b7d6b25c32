# tests/test_storage.py
import base64
import io
import re
from pathlib import Path

from catalog.storage import ImageStorage


def test_save_names_file_by_timestamp_and_extension(tmp_path):
    storage = ImageStorage(tmp_path / "uploads")
    stored = storage.save(io.BytesIO(b"abc"), "photo.JPG")

    path = Path(stored)
    assert path.parent == tmp_path / "uploads"
    assert re.fullmatch(r"\d{13}\.JPG", path.name)
    assert path.read_bytes() == b"abc"


def test_save_keeps_relative_paths(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    stored = ImageStorage("uploads").save(io.BytesIO(b"x"), "a.png")
    assert stored.startswith("uploads/")
    assert Path(stored).exists()


def test_save_without_extension(tmp_path):
    stored = ImageStorage(tmp_path).save(io.BytesIO(b"x"), "README")
    assert re.fullmatch(r"\d{13}", Path(stored).name)


def test_same_millisecond_uploads_do_not_clash(tmp_path, monkeypatch):
    monkeypatch.setattr("catalog.storage.time.time", lambda: 1700000000.5)
    storage = ImageStorage(tmp_path)

    first = storage.save(io.BytesIO(b"one"), "a.png")
    second = storage.save(io.BytesIO(b"two"), "b.png")

    assert Path(first).name == "1700000000500.png"
    assert Path(second).name == "1700000000500-1.png"
    assert storage.read(first) == b"one"
    assert storage.read(second) == b"two"


def test_read_base64(tmp_path):
    storage = ImageStorage(tmp_path)
    stored = storage.save(io.BytesIO(b"\x00\xffimage"), "a.bin")
    assert base64.b64decode(storage.read_base64(stored)) == b"\x00\xffimage"


def test_delete_is_idempotent(tmp_path):
    storage = ImageStorage(tmp_path)
    stored = storage.save(io.BytesIO(b"x"), "a.png")

    storage.delete(stored)
    assert not Path(stored).exists()
    storage.delete(stored)
