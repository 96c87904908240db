"""Image upload validation with MIME + magic byte dual verification.

Security measures:
- Content-Type header check against the image allowlist
- Magic byte detection for raster formats (SVG is text and has no signature)
- Size limit (5 MB by default, configurable)
- Filename sanitization (UUID prefix, path traversal block)
"""
import logging
import os
import re
import uuid

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_MIMES: list[str] = [
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
]

DEFAULT_MAX_IMAGE_BYTES = 5 * 1024 * 1024

EXTENSION_MAP: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
}

# Magic byte signatures for raster image detection
MAGIC_SIGNATURES: dict[str, list[tuple[bytes, int]]] = {
    "image/jpeg": [(b"\xff\xd8\xff", 0)],
    "image/png": [(b"\x89PNG\r\n\x1a\n", 0)],
    "image/gif": [(b"GIF87a", 0), (b"GIF89a", 0)],
    "image/webp": [(b"RIFF", 0)],  # RIFF....WEBP
}


class FileValidationError(ValueError):
    """Raised when file validation fails."""
    pass


def detect_mime_by_magic(file_bytes: bytes) -> str | None:
    """Detect MIME type by examining magic bytes."""
    if len(file_bytes) < 12:
        return None

    for mime, signatures in MAGIC_SIGNATURES.items():
        for magic_bytes, offset in signatures:
            end = offset + len(magic_bytes)
            if file_bytes[offset:end] == magic_bytes:
                if mime == "image/webp":
                    if file_bytes[8:12] == b"WEBP":
                        return mime
                    continue
                return mime

    return None


def validate_content_type(content_type: str) -> None:
    """Validate Content-Type header against allowlist."""
    if content_type not in ALLOWED_IMAGE_MIMES:
        raise FileValidationError(
            f"Invalid content type '{content_type}'. "
            f"Allowed: {', '.join(ALLOWED_IMAGE_MIMES)}"
        )


def validate_magic_bytes(file_bytes: bytes, content_type: str) -> None:
    """Verify magic bytes match the declared raster content type."""
    if content_type not in MAGIC_SIGNATURES:
        return
    detected = detect_mime_by_magic(file_bytes)
    if detected != content_type:
        raise FileValidationError(
            f"MIME mismatch: header={content_type}, detected={detected or 'unknown'}"
        )


def validate_file_size(size: int, max_bytes: int = DEFAULT_MAX_IMAGE_BYTES) -> None:
    if size == 0:
        raise FileValidationError("Uploaded file is empty")
    if size > max_bytes:
        max_mb = max_bytes / (1024 * 1024)
        raise FileValidationError(
            f"File too large: {size} bytes (max: {max_mb:.0f} MB)"
        )


def sanitize_filename(original_filename: str) -> str:
    """Generate a safe, unique filename: ``<uuid4 hex>-<cleaned original>``.

    - Blocks path traversal (separators and bare "." or "..")
    - Strips anything outside [a-z0-9._-]
    """
    if "/" in original_filename or "\\" in original_filename or original_filename in (".", ".."):
        raise FileValidationError("Invalid filename: path traversal detected")

    stem, ext = os.path.splitext(original_filename)
    safe_stem = re.sub(r"[^a-z0-9_-]+", "-", stem.lower()).strip("-")[:64] or "file"
    safe_ext = re.sub(r"[^a-z0-9.]", "", ext.lower())

    return f"{uuid.uuid4().hex}-{safe_stem}{safe_ext}"


def validate_image(
    file_bytes: bytes,
    content_type: str,
    filename: str | None = None,
    max_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
) -> str:
    """Full image validation pipeline.

    Returns:
        The safe filename to store the upload under.

    Raises:
        FileValidationError: If any validation fails
    """
    validate_content_type(content_type)
    validate_file_size(len(file_bytes), max_bytes)
    validate_magic_bytes(file_bytes, content_type)

    safe_name = sanitize_filename(filename or "file")
    if not os.path.splitext(safe_name)[1]:
        safe_name += EXTENSION_MAP.get(content_type, "")
    return safe_name
