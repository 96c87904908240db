"""GitHub REST API v3 client for public profile statistics."""
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from portfolio_api.middleware.error_handler import UpstreamRejected, UpstreamUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GitHubConfig:
    base_url: str = "https://api.github.com"
    token: str = ""
    timeout: float = 5.0


class GitHubClient:
    """Async client for the handful of GitHub endpoints the stats page needs.

    Every failure is translated into UpstreamUnavailable (network, timeout,
    5xx, rate limit) or UpstreamRejected (credentials, permission, other 4xx).
    """

    def __init__(self, config: GitHubConfig, transport: httpx.AsyncBaseTransport | None = None):
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "portfolio-api",
        }
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
            headers=headers,
            transport=transport,
        )

    async def close(self):
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        try:
            resp = await self._client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise UpstreamUnavailable(f"GitHub request timed out: {path}") from e
        except httpx.TransportError as e:
            raise UpstreamUnavailable(f"GitHub unreachable: {e}") from e

        if resp.status_code >= 500:
            raise UpstreamUnavailable(f"GitHub returned {resp.status_code} for {path}")
        if resp.status_code == 429 or (
            resp.status_code == 403 and resp.headers.get("X-RateLimit-Remaining") == "0"
        ):
            raise UpstreamUnavailable("GitHub API rate limit exceeded")
        if resp.status_code in (401, 403):
            raise UpstreamRejected(f"GitHub refused access ({resp.status_code}) for {path}")
        if resp.status_code >= 400:
            raise UpstreamRejected(f"GitHub returned {resp.status_code} for {path}")
        return resp.json()

    # ── Profile ──

    async def get_user(self, username: str) -> dict[str, Any]:
        return await self._get(f"/users/{username}")

    async def list_repos(self, username: str) -> list[dict[str, Any]]:
        return await self._get(
            f"/users/{username}/repos", params={"sort": "updated", "per_page": 100}
        )

    async def get_repo_languages(self, username: str, repo: str) -> dict[str, int]:
        """Bytes of code per language for one repository."""
        return await self._get(f"/repos/{username}/{repo}/languages")

    async def list_events(self, username: str) -> list[dict[str, Any]]:
        return await self._get(f"/users/{username}/events/public", params={"per_page": 10})
