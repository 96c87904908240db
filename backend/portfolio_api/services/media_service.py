"""Upload / replace / discard lifecycle for image-bearing entities."""
import logging

from fastapi import UploadFile

from portfolio_api.config import settings
from portfolio_api.integrations.media.base import MediaStore, MediaStoreError, StoredAsset
from portfolio_api.utils.file_validation import validate_file_size, validate_image

logger = logging.getLogger(__name__)


async def store_upload(store: MediaStore, upload: UploadFile, folder: str) -> StoredAsset:
    """Validate an uploaded image and hand it to the media store."""
    if upload.size is not None:
        validate_file_size(upload.size, settings.MAX_UPLOAD_BYTES)
    # never buffer more than one byte past the limit
    data = await upload.read(settings.MAX_UPLOAD_BYTES + 1)
    content_type = upload.content_type or "application/octet-stream"
    safe_name = validate_image(
        data, content_type, upload.filename, max_bytes=settings.MAX_UPLOAD_BYTES
    )
    return await store.save(data, safe_name, content_type, folder)


async def discard_asset(store: MediaStore, url: str | None, public_id: str | None) -> bool:
    """Best-effort delete. Failures are logged and reported, never raised."""
    if not url and not public_id:
        return True
    try:
        await store.delete(url or "", public_id)
    except MediaStoreError as e:
        logger.warning("Failed to delete media asset url=%s public_id=%s: %s", url, public_id, e)
        return False
    return True


async def replace_asset(
    store: MediaStore,
    current_url: str | None,
    current_public_id: str | None,
    upload: UploadFile | None,
    requested_url: str | None,
    folder: str,
) -> tuple[str | None, str | None] | None:
    """Work out the asset reference an update should persist.

    Returns ``(url, public_id)`` to write, or ``None`` when the reference
    must stay untouched:

    - a new upload is stored first, then the old asset is deleted best-effort;
    - no upload but ``requested_url`` explicitly sent empty clears the asset;
    - neither leaves the current reference alone.
    """
    if upload is not None and upload.filename:
        stored = await store_upload(store, upload, folder)
        await discard_asset(store, current_url, current_public_id)
        return stored.url, stored.public_id

    if requested_url is not None and requested_url.strip() == "":
        await discard_asset(store, current_url, current_public_id)
        return None, None

    return None
