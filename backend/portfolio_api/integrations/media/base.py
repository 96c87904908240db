"""Media store interface shared by the local-disk and Cloudinary backends."""
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class MediaConfig:
    backend: str = "local"
    upload_dir: str = "Uploads"
    public_prefix: str = "Uploads"
    max_bytes: int = 5 * 1024 * 1024
    cloud_name: str = ""
    api_key: str = ""
    api_secret: str = ""
    timeout: float = 30.0


@dataclass(frozen=True)
class StoredAsset:
    """Where an uploaded binary lives.

    ``url`` is what clients fetch; ``public_id`` is the backend's deletion
    handle (absent for local files, which are deleted by path).
    """

    url: str
    public_id: str | None = None


class MediaStoreError(Exception):
    """Raised when a backend fails to store or delete a binary."""


class MediaStore(Protocol):
    async def save(self, data: bytes, filename: str, content_type: str, folder: str) -> StoredAsset: ...

    async def delete(self, url: str, public_id: str | None = None) -> None: ...

    async def close(self) -> None: ...
