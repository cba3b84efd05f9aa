"""Unit tests for local bucketed file storage."""

import pytest

from bizboard.core.errors import BadRequestError, ConflictError
from bizboard.core.storage import (
    DEFAULT_BUCKET,
    LocalFileStorage,
    build_object_path,
    normalize_object_path,
)


@pytest.fixture
def storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(str(tmp_path), "http://localhost/files/")


class TestNormalizeObjectPath:
    def test_clean_path_unchanged(self):
        assert normalize_object_path("invoices/2026/a.pdf") == "invoices/2026/a.pdf"

    def test_backslashes_and_dots_removed(self):
        assert normalize_object_path(" receipts\\./x.png ") == "receipts/x.png"

    @pytest.mark.parametrize("path", ["", "   ", None])
    def test_missing_path(self, path):
        with pytest.raises(BadRequestError, match="חסר נתיב"):
            normalize_object_path(path)

    @pytest.mark.parametrize("path", ["/etc/passwd", "a/../../b", "..", "./"])
    def test_invalid_path(self, path):
        with pytest.raises(BadRequestError, match="נתיב לא חוקי"):
            normalize_object_path(path)


class TestBuildObjectPath:
    def test_keeps_extension(self):
        assert build_object_path("avatars", "Me.PNG", "user-1", now_ms=1700000000000) == (
            "avatars/user-1-1700000000000.png"
        )

    def test_default_extension(self):
        assert build_object_path("/avatars/", "noext", "u", now_ms=5) == "avatars/u-5.bin"


class TestLocalFileStorage:
    def test_save_and_read(self, storage, tmp_path):
        path = storage.save(DEFAULT_BUCKET, "docs/a.txt", b"hello")

        assert path == "docs/a.txt"
        assert (tmp_path / DEFAULT_BUCKET / "docs" / "a.txt").read_bytes() == b"hello"
        assert storage.read(DEFAULT_BUCKET, path) == b"hello"
        assert storage.exists(DEFAULT_BUCKET, path)

    def test_save_existing_object_conflicts(self, storage):
        storage.save(DEFAULT_BUCKET, "a.txt", b"one")

        with pytest.raises(ConflictError):
            storage.save(DEFAULT_BUCKET, "a.txt", b"two")
        assert storage.read(DEFAULT_BUCKET, "a.txt") == b"one"

    def test_upsert_overwrites(self, storage):
        storage.save(DEFAULT_BUCKET, "a.txt", b"one")
        storage.save(DEFAULT_BUCKET, "a.txt", b"two", upsert=True)

        assert storage.read(DEFAULT_BUCKET, "a.txt") == b"two"

    def test_public_url(self, storage):
        assert storage.public_url("assets", "x/y.png") == "http://localhost/files/assets/x/y.png"

    def test_invalid_bucket(self, storage):
        with pytest.raises(BadRequestError):
            storage.save("../other", "a.txt", b"x")

    def test_no_leftover_temp_file(self, storage, tmp_path):
        storage.save(DEFAULT_BUCKET, "a.txt", b"x")

        assert sorted(p.name for p in (tmp_path / DEFAULT_BUCKET).iterdir()) == ["a.txt"]
