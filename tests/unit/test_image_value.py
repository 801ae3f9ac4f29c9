"""Tests for imgbbify/image.py: Image construction and validation."""

from __future__ import annotations

from datetime import timedelta

import pytest

from imgbbify.errors import (
    ErrorKind,
    ImgBBError,
    ImgBBFileEmptyError,
    ImgBBFileTooLargeError,
    ImgBBInvalidImageError,
    ImgBBValidationError,
)
from imgbbify.image import MAX_IMAGE_SIZE, Image, normalize_expiration

# ---------------------------------------------------------------------------
# Size validation
# ---------------------------------------------------------------------------

class TestImageSize:
    def test_size_equals_byte_length(self, png_bytes):
        img = Image(name="name", file=png_bytes)
        assert img.size == len(png_bytes)

    def test_max_size_constant(self):
        assert MAX_IMAGE_SIZE == 33_554_432

    def test_empty_bytes_raise_file_empty(self):
        with pytest.raises(ImgBBFileEmptyError) as exc_info:
            Image(name="name", file=b"")
        assert exc_info.value.kind == ErrorKind.FILE_EMPTY
        assert exc_info.value.status_code == 400
        assert exc_info.value.status_text == "Bad Request"

    def test_no_payload_raises_file_empty(self):
        with pytest.raises(ImgBBFileEmptyError):
            Image(name="name")

    def test_empty_source_raises_file_empty(self):
        with pytest.raises(ImgBBFileEmptyError):
            Image(name="name", source="")

    def test_exactly_max_size_is_accepted(self):
        img = Image(name="big", file=bytes(MAX_IMAGE_SIZE))
        assert img.size == MAX_IMAGE_SIZE

    def test_one_byte_over_max_raises_too_large(self):
        with pytest.raises(ImgBBFileTooLargeError) as exc_info:
            Image(name="big", file=bytes(MAX_IMAGE_SIZE + 1))
        assert exc_info.value.kind == ErrorKind.FILE_TOO_LARGE
        assert exc_info.value.status_code == 400

    def test_oversize_source_raises_too_large(self):
        with pytest.raises(ImgBBFileTooLargeError):
            Image(name="big", source="a" * (MAX_IMAGE_SIZE + 1))

    def test_source_size_counts_utf8_bytes(self):
        img = Image(name="s", source="é")
        assert img.size == 2

    def test_validation_errors_match_bad_request(self):
        with pytest.raises(ImgBBValidationError) as exc_info:
            Image(name="name", file=b"")
        assert exc_info.value == ImgBBError.bad_request()


# ---------------------------------------------------------------------------
# Payload shape
# ---------------------------------------------------------------------------

class TestImagePayload:
    def test_file_and_source_together_rejected(self, png_bytes):
        with pytest.raises(ImgBBInvalidImageError):
            Image(name="name", file=png_bytes, source="https://example.com/a.png")

    def test_non_bytes_file_rejected(self):
        with pytest.raises(ImgBBInvalidImageError):
            Image(name="name", file="not bytes")  # type: ignore[arg-type]

    def test_non_string_source_rejected(self):
        with pytest.raises(ImgBBInvalidImageError, match="source"):
            Image(name="name", source=b"https://example.com/a.png")  # type: ignore[arg-type]

    @pytest.mark.parametrize("name", [None, 42, b"cat.png"])
    def test_non_string_name_rejected(self, png_bytes, name):
        with pytest.raises(ImgBBInvalidImageError, match="name"):
            Image(name=name, file=png_bytes)  # type: ignore[arg-type]

    def test_bytearray_is_frozen_to_bytes(self):
        buf = bytearray(b"\x01\x02\x03")
        img = Image(name="name", file=buf)
        buf[0] = 0xFF
        assert img.file == b"\x01\x02\x03"
        assert isinstance(img.file, bytes)

    def test_source_image(self):
        img = Image(name="remote", source="https://example.com/a.png")
        assert img.is_source
        assert img.file is None

    def test_file_image_is_not_source(self, png_bytes):
        assert not Image(name="name", file=png_bytes).is_source

    def test_image_is_immutable(self, png_bytes):
        img = Image(name="name", file=png_bytes)
        with pytest.raises(AttributeError):
            img.name = "other"  # type: ignore[misc]

    def test_repr_omits_payload(self, png_bytes):
        assert "file=" not in repr(Image(name="name", file=png_bytes))


# ---------------------------------------------------------------------------
# Expiration
# ---------------------------------------------------------------------------

class TestExpiration:
    def test_default_is_zero(self, png_bytes):
        assert Image(name="name", file=png_bytes).expiration == 0

    def test_int(self, png_bytes):
        assert Image(name="name", file=png_bytes, expiration=600).expiration == 600

    def test_numeric_string(self, png_bytes):
        assert Image(name="name", file=png_bytes, expiration="600").expiration == 600

    def test_empty_string_means_none(self, png_bytes):
        assert Image(name="name", file=png_bytes, expiration="").expiration == 0

    def test_timedelta(self, png_bytes):
        img = Image(name="name", file=png_bytes, expiration=timedelta(minutes=5))
        assert img.expiration == 300

    def test_none(self):
        assert normalize_expiration(None) == 0

    @pytest.mark.parametrize("value", [-1, "-5", "abc", "1.5", True, 2.5])
    def test_invalid_values_rejected(self, value):
        with pytest.raises(ImgBBInvalidImageError):
            normalize_expiration(value)


# ---------------------------------------------------------------------------
# from_path
# ---------------------------------------------------------------------------

class TestFromPath:
    def test_reads_bytes_and_defaults_name(self, tmp_path, png_bytes):
        path = tmp_path / "cat.png"
        path.write_bytes(png_bytes)
        img = Image.from_path(path)
        assert img.name == "cat.png"
        assert img.file == png_bytes
        assert img.size == len(png_bytes)

    def test_explicit_name_and_expiration(self, tmp_path, png_bytes):
        path = tmp_path / "cat.png"
        path.write_bytes(png_bytes)
        img = Image.from_path(str(path), name="kitty", expiration="60")
        assert img.name == "kitty"
        assert img.expiration == 60

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.png"
        path.write_bytes(b"")
        with pytest.raises(ImgBBFileEmptyError):
            Image.from_path(path)

    def test_oversize_file_rejected_before_read(self, tmp_path):
        path = tmp_path / "huge.bin"
        with path.open("wb") as fh:
            fh.truncate(MAX_IMAGE_SIZE + 1)
        with pytest.raises(ImgBBFileTooLargeError):
            Image.from_path(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Image.from_path(tmp_path / "nope.png")
