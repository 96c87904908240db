"""GitHub statistics: cache-aside read-through over the github_stats table.

A stored snapshot younger than the TTL is served as-is (HIT). Otherwise the
profile is rebuilt from the GitHub API and written back (MISS). When the
mandatory calls fail, the last stored snapshot is served whatever its age
(STALE); with nothing stored the caller gets NoDataAvailable.
"""
import asyncio
import logging
from datetime import timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.config import settings
from portfolio_api.database import upsert
from portfolio_api.integrations.github.client import GitHubClient
from portfolio_api.middleware.error_handler import NoDataAvailable, UpstreamError
from portfolio_api.models.github_stats import GitHubStats
from portfolio_api.schemas.stats import StatsResult, StatsSnapshotResponse
from portfolio_api.utils.helpers import as_utc, utc_now

logger = logging.getLogger(__name__)


# --- Pure aggregation helpers ---

def language_percentages(byte_counts: list[dict[str, int]]) -> dict[str, int]:
    """Sum bytes per language across repositories and convert to whole percents."""
    totals: dict[str, int] = {}
    for counts in byte_counts:
        for language, size in counts.items():
            totals[language] = totals.get(language, 0) + size
    grand_total = sum(totals.values())
    if grand_total == 0:
        return {}
    return {language: round(size / grand_total * 100) for language, size in totals.items()}


def top_repositories(repos: list[dict[str, Any]], limit: int) -> list[dict[str, Any]]:
    """Non-fork repositories by stars descending; ties keep upstream order."""
    own = [r for r in repos if not r.get("fork")]
    ranked = sorted(own, key=lambda r: -(r.get("stargazers_count") or 0))
    return [
        {
            "name": r.get("name"),
            "description": r.get("description"),
            "stars": r.get("stargazers_count") or 0,
            "forks": r.get("forks_count") or 0,
            "language": r.get("language"),
            "html_url": r.get("html_url"),
            "updated_at": r.get("updated_at"),
        }
        for r in ranked[:limit]
    ]


def recent_activity(events: list[dict[str, Any]], limit: int) -> list[dict[str, Any]]:
    """Most recent events first, reduced to the fields the page renders."""
    ordered = sorted(events, key=lambda e: e.get("created_at") or "", reverse=True)
    activity = []
    for event in ordered[:limit]:
        payload = event.get("payload") or {}
        commits = payload.get("commits") or []
        activity.append({
            "type": event.get("type"),
            "repo": (event.get("repo") or {}).get("name"),
            "created_at": event.get("created_at"),
            "payload": {
                "action": payload.get("action"),
                "ref": payload.get("ref"),
                "commits": len(commits) if event.get("type") == "PushEvent" else 0,
            },
        })
    return activity


# --- Store access ---

async def get_snapshot(db: AsyncSession, username: str) -> GitHubStats | None:
    result = await db.execute(select(GitHubStats).where(GitHubStats.username == username))
    return result.scalar_one_or_none()


async def _save_snapshot(db: AsyncSession, username: str, fields: dict[str, Any]) -> GitHubStats:
    await db.execute(upsert(db, GitHubStats, ["username"], {"username": username, **fields}, fields))
    result = await db.execute(
        select(GitHubStats)
        .where(GitHubStats.username == username)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


# --- Refresh ---

async def _collect_languages(client: GitHubClient, username: str, repos: list[dict[str, Any]]) -> list[dict[str, int]]:
    names = [r["name"] for r in repos[: settings.STATS_LANGUAGE_REPO_LIMIT] if r.get("name")]
    results = await asyncio.gather(
        *(client.get_repo_languages(username, name) for name in names),
        return_exceptions=True,
    )
    collected = []
    for name, result in zip(names, results):
        if isinstance(result, Exception):
            logger.warning("Language fetch failed for %s/%s: %s", username, name, result)
            continue
        collected.append(result)
    return collected


async def _collect_events(client: GitHubClient, username: str) -> list[dict[str, Any]]:
    try:
        return await client.list_events(username)
    except UpstreamError as e:
        logger.warning("Event fetch failed for %s: %s", username, e.detail)
        return []


async def _build_snapshot(client: GitHubClient, username: str) -> dict[str, Any]:
    """Fetch and aggregate a fresh snapshot. Raises UpstreamError if a mandatory call fails."""
    user, repos = await asyncio.gather(client.get_user(username), client.list_repos(username))

    languages, events = await asyncio.gather(
        _collect_languages(client, username, repos),
        _collect_events(client, username),
    )
    activity = recent_activity(events, settings.STATS_ACTIVITY_LIMIT)

    return {
        "public_repos": user.get("public_repos") or 0,
        "followers": user.get("followers") or 0,
        "following": user.get("following") or 0,
        "total_stars": sum(r.get("stargazers_count") or 0 for r in repos),
        "total_forks": sum(r.get("forks_count") or 0 for r in repos),
        "total_commits": sum(a["payload"]["commits"] for a in activity),
        "languages": language_percentages(languages),
        "top_repos": top_repositories(repos, settings.STATS_TOP_REPOS),
        "recent_activity": activity,
        "last_updated": utc_now(),
    }


async def get_github_stats(
    db: AsyncSession,
    client: GitHubClient,
    username: str | None = None,
    ttl: timedelta | None = None,
) -> StatsResult:
    username = username or settings.GITHUB_USERNAME
    ttl = ttl if ttl is not None else timedelta(minutes=settings.STATS_CACHE_TTL_MINUTES)

    cached = await get_snapshot(db, username)
    now = utc_now()
    if cached is not None and now - as_utc(cached.last_updated) < ttl:
        return StatsResult(
            snapshot=StatsSnapshotResponse.model_validate(cached),
            cache_status="HIT",
        )

    try:
        fields = await _build_snapshot(client, username)
    except UpstreamError as e:
        logger.warning("GitHub refresh failed for %s: %s", username, e.detail)
        if cached is None:
            raise NoDataAvailable(
                f"GitHub statistics for '{username}' are not available yet", reason=e.detail
            )
        age = now - as_utc(cached.last_updated)
        return StatsResult(
            snapshot=StatsSnapshotResponse.model_validate(cached),
            cache_status="STALE",
            stale=True,
            age_seconds=int(age.total_seconds()),
            reason=e.detail,
        )

    row = await _save_snapshot(db, username, fields)
    logger.info("GitHub stats refreshed for %s", username)
    return StatsResult(
        snapshot=StatsSnapshotResponse.model_validate(row),
        cache_status="MISS",
    )