"""Image upload validation tests."""
import pytest

from portfolio_api.utils.file_validation import (
    FileValidationError,
    detect_mime_by_magic,
    sanitize_filename,
    validate_image,
)

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
GIF = b"GIF89a" + b"\x00" * 16
WEBP = b"RIFF\x00\x00\x00\x00WEBPVP8 " + b"\x00" * 8
SVG = b'<svg xmlns="http://www.w3.org/2000/svg"></svg>'


@pytest.mark.parametrize("data,mime", [
    (PNG, "image/png"),
    (GIF, "image/gif"),
    (WEBP, "image/webp"),
    (b"\xff\xd8\xff\xe0" + b"\x00" * 16, "image/jpeg"),
    (b"RIFF\x00\x00\x00\x00WAVEfmt " + b"\x00" * 8, None),
    (b"\x89PNG", None),
])
def test_detect_mime_by_magic(data, mime):
    assert detect_mime_by_magic(data) == mime


def test_validate_image_accepts_png():
    name = validate_image(PNG, "image/png", "My Screenshot.PNG")
    assert name.endswith("-my-screenshot.png")


def test_validate_image_accepts_svg_without_signature():
    assert validate_image(SVG, "image/svg+xml", "icon.svg").endswith("-icon.svg")


def test_validate_image_adds_extension():
    assert validate_image(PNG, "image/png", "noext").endswith("-noext.png")


@pytest.mark.parametrize("data,content_type,match", [
    (PNG, "application/pdf", "Invalid content type"),
    (b"", "image/png", "empty"),
    (GIF, "image/png", "MIME mismatch"),
])
def test_validate_image_rejects(data, content_type, match):
    with pytest.raises(FileValidationError, match=match):
        validate_image(data, content_type, "file.png")


def test_validate_image_size_limit():
    with pytest.raises(FileValidationError, match="too large"):
        validate_image(PNG + b"\x00" * 100, "image/png", "big.png", max_bytes=64)


@pytest.mark.parametrize("filename", ["../etc/passwd", "a/b.png", "a\\b.png", ".."])
def test_sanitize_filename_blocks_traversal(filename):
    with pytest.raises(FileValidationError):
        sanitize_filename(filename)


def test_sanitize_filename_allows_double_dots_inside_a_name():
    assert sanitize_filename("my..photo.png").endswith("-my-photo.png")


def test_sanitize_filename_is_unique():
    assert sanitize_filename("a.png") != sanitize_filename("a.png")
