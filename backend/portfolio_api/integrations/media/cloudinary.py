"""Cloudinary upload API client (signed REST calls over httpx)."""
import hashlib
import logging
import time
from typing import Any

import httpx

from portfolio_api.integrations.media.base import MediaConfig, MediaStoreError, StoredAsset

logger = logging.getLogger(__name__)

BASE_URL = "https://api.cloudinary.com/v1_1"


def sign_params(params: dict[str, Any], api_secret: str) -> str:
    """Cloudinary signature: sha1 of sorted ``k=v`` pairs joined by '&' + secret."""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] not in (None, ""))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()


class CloudinaryMediaStore:
    """Async client for the Cloudinary image upload/destroy endpoints.

    Credentials come from the MediaConfig passed in; nothing is global.
    """

    def __init__(self, config: MediaConfig, transport: httpx.AsyncBaseTransport | None = None):
        if not (config.cloud_name and config.api_key and config.api_secret):
            raise ValueError("Cloudinary backend requires cloud name, API key and API secret")
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=f"{BASE_URL}/{config.cloud_name}",
            timeout=config.timeout,
            transport=transport,
        )

    async def close(self):
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    def _signed(self, params: dict[str, Any]) -> dict[str, Any]:
        params = {**params, "timestamp": int(time.time())}
        params["signature"] = sign_params(params, self.config.api_secret)
        params["api_key"] = self.config.api_key
        return params

    async def save(self, data: bytes, filename: str, content_type: str, folder: str) -> StoredAsset:
        params = self._signed({"folder": f"portfolio/{folder}"})
        try:
            resp = await self._client.post(
                "/image/upload",
                data=params,
                files={"file": (filename, data, content_type)},
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise MediaStoreError(f"Cloudinary upload failed: {e}") from e
        body = resp.json()
        logger.info("Uploaded %s to Cloudinary as %s", filename, body.get("public_id"))
        return StoredAsset(url=body["secure_url"], public_id=body["public_id"])

    async def delete(self, url: str, public_id: str | None = None) -> None:
        if not public_id:
            logger.debug("No Cloudinary public_id for %s, nothing to delete", url)
            return
        params = self._signed({"public_id": public_id})
        try:
            resp = await self._client.post("/image/destroy", data=params)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise MediaStoreError(f"Cloudinary destroy failed for {public_id}: {e}") from e
        result = resp.json().get("result")
        if result not in ("ok", "not found"):
            raise MediaStoreError(f"Cloudinary destroy returned {result!r} for {public_id}")
        logger.info("Deleted Cloudinary asset %s (%s)", public_id, result)
