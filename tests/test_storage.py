from __future__ import annotations

import re

import pytest

from blog_api.core import storage as storage_module
from blog_api.core.storage import LocalFileStorage, PendingUpload


@pytest.fixture()
def storage(tmp_path):
    return LocalFileStorage(tmp_path / "public", "/storage")


def test_upload_returns_relative_path(storage):
    path = storage.upload(PendingUpload("Photo.JPG", b"bytes", "image/jpeg"), "posts/image")

    assert re.fullmatch(r"posts/image/[0-9a-f]{40}\.jpg", path)
    assert (storage.root / path).read_bytes() == b"bytes"
    assert storage.exists(path)


def test_suffix_falls_back_to_content_type():
    assert PendingUpload("blob", b"", "image/webp").suffix() == ".webp"
    assert PendingUpload("evil.php%00", b"", "").suffix() == ""


def test_upload_never_overwrites(storage, monkeypatch):
    names = iter(["a" * 40, "a" * 40, "b" * 40])
    monkeypatch.setattr(storage_module.secrets, "token_hex", lambda _n: next(names))

    first = storage.upload(PendingUpload("one.png", b"1"), "uploads")
    second = storage.upload(PendingUpload("two.png", b"2"), "uploads")

    assert first == "uploads/" + "a" * 40 + ".png"
    assert second == "uploads/" + "b" * 40 + ".png"
    assert (storage.root / first).read_bytes() == b"1"


def test_delete_is_a_noop_for_missing_files(storage):
    storage.delete(None)
    storage.delete("")
    storage.delete("uploads/missing.png")

    path = storage.upload(PendingUpload("x.png", b"x"))
    storage.delete(path)
    assert not storage.exists(path)


def test_paths_cannot_escape_the_root(storage):
    with pytest.raises(ValueError):
        storage.exists("../outside.txt")
    with pytest.raises(ValueError):
        storage.upload(PendingUpload("x.png", b"x"), "../../elsewhere")


def test_public_url(storage, temp_db):
    assert storage.url(None) is None
    assert storage.url("posts/image/a.png") == "http://localhost:8000/storage/posts/image/a.png"
    assert storage.url("https://cdn.example.com/a.png") == "https://cdn.example.com/a.png"


def test_absolute_url(temp_db):
    assert storage_module.absolute_url("/posts") == "http://localhost:8000/posts"
    assert storage_module.absolute_url("posts", base="https://blog.example.com/") == "https://blog.example.com/posts"
    assert storage_module.absolute_url("") == "http://localhost:8000/"
    assert storage_module.absolute_url("http://other.example.com/a") == "http://other.example.com/a"
