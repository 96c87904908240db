"""Media store backends."""
from portfolio_api.integrations.media.base import MediaConfig, MediaStore, MediaStoreError, StoredAsset


def build_media_store(config: MediaConfig) -> MediaStore:
    """Instantiate the backend named by ``config.backend``."""
    if config.backend == "cloudinary":
        from portfolio_api.integrations.media.cloudinary import CloudinaryMediaStore
        return CloudinaryMediaStore(config)
    if config.backend == "local":
        from portfolio_api.integrations.media.local import LocalMediaStore
        return LocalMediaStore(config)
    raise ValueError(f"Unknown media backend: {config.backend}")


__all__ = ["MediaConfig", "MediaStore", "MediaStoreError", "StoredAsset", "build_media_store"]
