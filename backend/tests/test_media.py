"""Media store backends and upload lifecycle helpers."""
from urllib.parse import parse_qs

import httpx
import pytest

from portfolio_api.integrations.media import MediaConfig, MediaStoreError, build_media_store
from portfolio_api.integrations.media.cloudinary import CloudinaryMediaStore, sign_params
from portfolio_api.integrations.media.local import LocalMediaStore
from portfolio_api.config import settings
from portfolio_api.services.media_service import discard_asset, replace_asset, store_upload
from portfolio_api.utils.file_validation import FileValidationError
from tests.conftest import PNG_BYTES


# ── Local disk ──

async def test_local_save_and_delete(tmp_path):
    store = LocalMediaStore(MediaConfig(upload_dir=str(tmp_path)))
    asset = await store.save(PNG_BYTES, "abc-logo.png", "image/png", "projects")

    assert asset.url == "Uploads/projects/abc-logo.png"
    assert asset.public_id is None
    assert (tmp_path / "projects" / "abc-logo.png").read_bytes() == PNG_BYTES

    await store.delete(asset.url)
    assert not (tmp_path / "projects" / "abc-logo.png").exists()
    # already gone: still fine
    await store.delete(asset.url)


async def test_local_delete_ignores_foreign_references(tmp_path):
    outside = tmp_path / "secret.txt"
    outside.write_text("keep")
    store = LocalMediaStore(MediaConfig(upload_dir=str(tmp_path / "uploads")))

    await store.delete("https://cdn.example.com/image.png")
    await store.delete("Uploads/../secret.txt")
    assert outside.exists()


def test_build_media_store_selects_backend(tmp_path):
    assert isinstance(build_media_store(MediaConfig(upload_dir=str(tmp_path))), LocalMediaStore)
    with pytest.raises(ValueError):
        build_media_store(MediaConfig(backend="cloudinary"))
    with pytest.raises(ValueError):
        build_media_store(MediaConfig(backend="s3"))


# ── Cloudinary ──

def test_sign_params_sorted_and_skips_empty():
    expected = sign_params({"a": "1", "b": "2"}, "secret")
    assert sign_params({"b": "2", "a": "1", "c": ""}, "secret") == expected
    assert len(expected) == 40


def _cloudinary(handler) -> CloudinaryMediaStore:
    config = MediaConfig(backend="cloudinary", cloud_name="demo", api_key="key", api_secret="secret")
    return CloudinaryMediaStore(config, transport=httpx.MockTransport(handler))


async def test_cloudinary_upload():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = request.read()
        return httpx.Response(200, json={
            "secure_url": "https://res.cloudinary.com/demo/image/upload/v1/portfolio/projects/x.png",
            "public_id": "portfolio/projects/x",
        })

    async with _cloudinary(handler) as store:
        asset = await store.save(PNG_BYTES, "x.png", "image/png", "projects")

    assert seen["path"] == "/v1_1/demo/image/upload"
    assert b"portfolio/projects" in seen["body"]
    assert b'name="signature"' in seen["body"]
    assert asset.public_id == "portfolio/projects/x"
    assert asset.url.startswith("https://res.cloudinary.com/")


async def test_cloudinary_delete_results():
    results = iter(["ok", "not found", "error"])

    def handler(request):
        form = parse_qs(request.read().decode())
        assert form["public_id"] == ["portfolio/projects/x"]
        return httpx.Response(200, json={"result": next(results)})

    async with _cloudinary(handler) as store:
        await store.delete("https://cdn/x.png", "portfolio/projects/x")
        await store.delete("https://cdn/x.png", "portfolio/projects/x")
        with pytest.raises(MediaStoreError):
            await store.delete("https://cdn/x.png", "portfolio/projects/x")


async def test_cloudinary_http_failure_is_media_error():
    async with _cloudinary(lambda request: httpx.Response(500)) as store:
        with pytest.raises(MediaStoreError):
            await store.save(PNG_BYTES, "x.png", "image/png", "skills")


# ── Lifecycle helpers ──

async def test_discard_asset_reports_failure(media_store):
    assert await discard_asset(media_store, None, None) is True
    assert await discard_asset(media_store, "Uploads/a.png", None) is True
    media_store.fail_delete = True
    assert await discard_asset(media_store, "Uploads/b.png", None) is False


async def test_replace_asset_leaves_reference_untouched(media_store):
    assert await replace_asset(media_store, "Uploads/a.png", None, None, None, "projects") is None
    assert media_store.deleted == []


# ── Upload reading ──

class _StreamedUpload:
    filename = "big.png"
    content_type = "image/png"

    def __init__(self, data: bytes, size: int | None):
        self.data = data
        self.size = size
        self.read_sizes = []

    async def read(self, size: int = -1) -> bytes:
        self.read_sizes.append(size)
        return self.data if size < 0 else self.data[:size]


async def test_store_upload_rejects_declared_size_without_reading(media_store, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 64)
    upload = _StreamedUpload(PNG_BYTES + b"\x00" * 1000, size=1072)
    with pytest.raises(FileValidationError, match="too large"):
        await store_upload(media_store, upload, "projects")
    assert upload.read_sizes == []
    assert media_store.saved == []


async def test_store_upload_reads_at_most_one_byte_past_limit(media_store, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 64)
    upload = _StreamedUpload(PNG_BYTES + b"\x00" * 1000, size=None)
    with pytest.raises(FileValidationError, match="too large"):
        await store_upload(media_store, upload, "projects")
    assert upload.read_sizes == [65]
