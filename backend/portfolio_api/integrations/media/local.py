"""Local-disk media store, served back by the static mount at /Uploads."""
import logging
import os
from pathlib import Path

from starlette.concurrency import run_in_threadpool

from portfolio_api.integrations.media.base import MediaConfig, MediaStoreError, StoredAsset

logger = logging.getLogger(__name__)


class LocalMediaStore:
    def __init__(self, config: MediaConfig):
        self.root = Path(config.upload_dir)
        self.prefix = config.public_prefix.strip("/")

    async def close(self) -> None:
        return None

    def _path_for(self, url: str) -> Path | None:
        """Map a stored reference back to a file under the upload root."""
        relative = url.lstrip("/")
        if not relative.startswith(self.prefix + "/"):
            return None
        candidate = (self.root / relative[len(self.prefix) + 1:]).resolve()
        if self.root.resolve() not in candidate.parents:
            return None
        return candidate

    async def save(self, data: bytes, filename: str, content_type: str, folder: str) -> StoredAsset:
        target_dir = self.root / folder
        target = target_dir / filename

        def _write() -> None:
            os.makedirs(target_dir, exist_ok=True)
            target.write_bytes(data)

        try:
            await run_in_threadpool(_write)
        except OSError as e:
            raise MediaStoreError(f"Failed to write {target}: {e}") from e
        logger.info("Stored upload %s (%d bytes)", target, len(data))
        return StoredAsset(url=f"{self.prefix}/{folder}/{filename}")

    async def delete(self, url: str, public_id: str | None = None) -> None:
        path = self._path_for(url)
        if path is None:
            logger.debug("Not a local upload reference, skipping delete: %s", url)
            return
        try:
            await run_in_threadpool(path.unlink, True)
        except OSError as e:
            raise MediaStoreError(f"Failed to delete {path}: {e}") from e
        logger.info("Deleted upload %s", path)
