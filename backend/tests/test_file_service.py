"""
Storefront Backend - File Service Unit Tests
==============================================

What:  Upload validation and local staging.

Test Strategy:
    ✅ allowed extensions (.jpg .jpeg .png .gif), case-insensitive
    ✅ rejected extensions (.pdf, .exe, none)
    ✅ size limits: empty, at the limit, over the limit, declared size
    ✅ staged names: slugged, unique, inside the staging directory
    ✅ cleanup removes only the given file
"""

import pytest

from app.exceptions import ValidationError
from app.services.file_service import FileService, slugify


class TestFileValidation:
    @pytest.fixture(autouse=True)
    def _service(self, tmp_path):
        self.service = FileService(tmp_path / "uploads", max_size=1024)

    # ── Extension Validation ──────────────────────────────────────────────

    @pytest.mark.parametrize("name", ["a.jpg", "a.jpeg", "a.png", "a.gif", "A.JPG", "b.Gif"])
    def test_allowed_extensions(self, name):
        assert self.service.validate_extension(name) == name[name.rfind("."):].lower()

    @pytest.mark.parametrize("name", ["doc.pdf", "malware.exe", "noextension", "photo.webp"])
    def test_rejected_extensions(self, name):
        with pytest.raises(ValidationError, match="Only image files are allowed"):
            self.service.validate_extension(name)

    # ── Size Validation ───────────────────────────────────────────────────

    def test_size_within_limit(self):
        self.service.validate_size(1024)

    def test_empty_file_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(0)

    def test_oversized_file_rejected(self):
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.service.validate_size(1025)

    def test_declared_size_over_limit_rejected(self):
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.service.validate_size(10, content_length=4096)


class TestStaging:
    @pytest.mark.parametrize(
        "stem,expected",
        [("Summer Hat!", "summer-hat"), ("  __ ", "image"), ("Ünïcode", "n-code")],
    )
    def test_slugify(self, stem, expected):
        assert slugify(stem) == expected

    @pytest.mark.asyncio
    async def test_store_and_cleanup(self, tmp_path, sample_image_bytes):
        service = FileService(tmp_path / "uploads", max_size=1024)

        first = await service.validate_and_store("Summer Hat.PNG", sample_image_bytes)
        second = await service.validate_and_store("Summer Hat.PNG", sample_image_bytes)

        assert first != second
        assert first.parent == service.staging_dir
        assert first.name.startswith("summer-hat-")
        assert first.suffix == ".png"
        assert first.read_bytes() == sample_image_bytes

        await service.cleanup_file(first)

        assert not first.exists()
        assert second.exists()

    @pytest.mark.asyncio
    async def test_cleanup_missing_file_is_quiet(self, tmp_path):
        service = FileService(tmp_path / "uploads", max_size=1024)
        await service.cleanup_file(tmp_path / "uploads" / "gone.png")

    @pytest.mark.asyncio
    async def test_invalid_file_is_not_staged(self, tmp_path):
        service = FileService(tmp_path / "uploads", max_size=1024)
        with pytest.raises(ValidationError):
            await service.validate_and_store("notes.txt", b"hello")
        assert list(service.staging_dir.iterdir()) == []
