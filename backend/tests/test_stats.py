"""GitHub statistics: aggregation helpers, cache-aside behavior and client error mapping."""
import asyncio
from datetime import timedelta

import httpx
import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from portfolio_api.integrations.github.client import GitHubClient, GitHubConfig
from portfolio_api.middleware.error_handler import (
    NoDataAvailable,
    UpstreamRejected,
    UpstreamUnavailable,
)
from portfolio_api.models.base import Base
from portfolio_api.models.github_stats import GitHubStats
from portfolio_api.services.stats_service import (
    get_github_stats,
    language_percentages,
    recent_activity,
    top_repositories,
)
from portfolio_api.utils.helpers import as_utc, utc_now
from tests.conftest import FakeGitHubClient


def _snapshot_row(age: timedelta, username: str = "octocat", followers: int = 1) -> GitHubStats:
    return GitHubStats(
        username=username,
        public_repos=1,
        followers=followers,
        following=0,
        total_stars=0,
        total_forks=0,
        total_commits=0,
        languages={"Python": 100},
        top_repos=[],
        recent_activity=[],
        last_updated=utc_now() - age,
    )


# --- Aggregation helpers ---

def test_language_percentages_sum_to_about_100():
    result = language_percentages([{"Python": 600, "Shell": 100}, {"Go": 300}, {}])
    assert result == {"Python": 60, "Shell": 10, "Go": 30}

    uneven = language_percentages([{"A": 1}, {"B": 1}, {"C": 1}])
    assert 98 <= sum(uneven.values()) <= 102


def test_language_percentages_empty():
    assert language_percentages([]) == {}
    assert language_percentages([{}, {"Python": 0}]) == {}


def test_top_repositories_skip_forks_and_keep_tie_order():
    repos = [
        {"name": "a", "stargazers_count": 3},
        {"name": "fork", "stargazers_count": 100, "fork": True},
        {"name": "b", "stargazers_count": 7},
        {"name": "c", "stargazers_count": 3},
        {"name": "d", "stargazers_count": 3},
    ]
    assert [r["name"] for r in top_repositories(repos, 3)] == ["b", "a", "c"]
    assert [r["name"] for r in top_repositories(repos, 10)] == ["b", "a", "c", "d"]


def test_recent_activity_newest_first_and_commit_counts():
    events = [
        {"type": "PushEvent", "repo": {"name": "o/a"}, "created_at": "2026-01-01T00:00:00Z",
         "payload": {"commits": [{}, {}, {}]}},
        {"type": "IssuesEvent", "repo": {"name": "o/b"}, "created_at": "2026-01-05T00:00:00Z",
         "payload": {"action": "opened", "commits": [{}]}},
    ]
    activity = recent_activity(events, 5)
    assert [a["repo"] for a in activity] == ["o/b", "o/a"]
    assert activity[0]["payload"] == {"action": "opened", "ref": None, "commits": 0}
    assert activity[1]["payload"]["commits"] == 3
    assert len(recent_activity(events, 1)) == 1


# --- Cache-aside service ---

async def test_miss_fetches_and_stores(db_session, github):
    result = await get_github_stats(db_session, github, "octocat")
    assert result.cache_status == "MISS"
    snap = result.snapshot
    assert snap.followers == 10
    assert snap.total_stars == 64
    assert snap.total_forks == 4
    assert snap.total_commits == 2
    assert snap.languages == {"Python": 60, "Shell": 10, "Go": 30}
    assert [r.name for r in snap.top_repos] == ["beta", "alpha"]
    assert snap.recent_activity[0].type == "WatchEvent"

    stored = (await db_session.execute(select(GitHubStats))).scalars().all()
    assert len(stored) == 1


async def test_fresh_snapshot_makes_no_upstream_calls(db_session, github):
    db_session.add(_snapshot_row(timedelta(minutes=1)))
    await db_session.flush()

    result = await get_github_stats(db_session, github, "octocat", ttl=timedelta(minutes=15))
    assert result.cache_status == "HIT"
    assert result.snapshot.followers == 1
    assert github.calls == 0


async def test_expired_snapshot_is_refreshed(db_session, github):
    db_session.add(_snapshot_row(timedelta(hours=2)))
    await db_session.flush()

    result = await get_github_stats(db_session, github, "octocat", ttl=timedelta(minutes=15))
    assert result.cache_status == "MISS"
    assert result.snapshot.followers == 10
    assert utc_now() - as_utc(result.snapshot.last_updated) < timedelta(minutes=1)


async def test_failure_with_cache_serves_stale_and_does_not_write(db_session, github):
    row = _snapshot_row(timedelta(hours=2))
    db_session.add(row)
    await db_session.flush()
    before = row.last_updated
    github.fail = UpstreamUnavailable("GitHub returned 502 for /users/octocat")

    result = await get_github_stats(db_session, github, "octocat", ttl=timedelta(minutes=15))
    assert result.cache_status == "STALE"
    assert result.stale is True
    assert result.age_seconds >= 7200
    assert "502" in result.reason
    assert result.snapshot.followers == 1
    assert row.last_updated == before


async def test_failure_without_cache_raises_no_data(db_session, github):
    github.fail = UpstreamRejected("GitHub returned 404 for /users/ghost")
    with pytest.raises(NoDataAvailable) as exc_info:
        await get_github_stats(db_session, github, "ghost")
    assert "404" in exc_info.value.reason
    assert (await db_session.execute(select(GitHubStats))).first() is None


async def test_event_failure_is_not_fatal(db_session, github):
    github.fail_events = True
    result = await get_github_stats(db_session, github, "octocat")
    assert result.cache_status == "MISS"
    assert result.snapshot.recent_activity == []
    assert result.snapshot.total_commits == 0


# --- API ---

async def test_stats_endpoint_miss_then_hit(client, github):
    first = await client.get("/api/stats/github")
    assert first.status_code == 200
    assert first.json()["data"]["cache_status"] == "MISS"
    calls = github.calls

    second = await client.get("/api/stats/github")
    assert second.json()["data"]["cache_status"] == "HIT"
    assert second.json()["data"]["snapshot"]["username"] == "octocat"
    assert github.calls == calls


async def test_external_alias(client):
    response = await client.get("/api/stats/external", params={"username": "someone"})
    assert response.status_code == 200
    assert response.json()["data"]["snapshot"]["username"] == "someone"


async def test_stats_endpoint_no_data(client, github):
    github.fail = UpstreamUnavailable("GitHub unreachable")
    response = await client.get("/api/stats/github")
    assert response.status_code == 503
    body = response.json()
    assert body["status"] == "error"
    assert body["error"] == "no_data_available"
    assert body["reason"] == "GitHub unreachable"
    assert "suggestion" in body


async def test_stats_endpoint_stale_message(client, github, db_session):
    db_session.add(_snapshot_row(timedelta(days=1)))
    await db_session.commit()
    github.fail = UpstreamUnavailable("GitHub API rate limit exceeded")

    response = await client.get("/api/stats/github")
    body = response.json()
    assert response.status_code == 200
    assert body["data"]["cache_status"] == "STALE"
    assert "rate limit" in body["message"]


# --- HTTP client error mapping ---

def _client(handler) -> GitHubClient:
    return GitHubClient(GitHubConfig(base_url="https://api.test"), transport=httpx.MockTransport(handler))


@pytest.mark.parametrize("status,headers,expected", [
    (500, {}, UpstreamUnavailable),
    (502, {}, UpstreamUnavailable),
    (429, {}, UpstreamUnavailable),
    (403, {"X-RateLimit-Remaining": "0"}, UpstreamUnavailable),
    (403, {"X-RateLimit-Remaining": "10"}, UpstreamRejected),
    (401, {}, UpstreamRejected),
    (404, {}, UpstreamRejected),
])
async def test_client_maps_status_codes(status, headers, expected):
    async with _client(lambda request: httpx.Response(status, headers=headers, json={})) as gh:
        with pytest.raises(expected):
            await gh.get_user("octocat")


async def test_client_maps_timeouts():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    async with _client(handler) as gh:
        with pytest.raises(UpstreamUnavailable):
            await gh.list_repos("octocat")


async def test_client_sends_token_and_query():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("Authorization")
        seen["url"] = str(request.url)
        return httpx.Response(200, json=[{"name": "alpha"}])

    config = GitHubConfig(base_url="https://api.test", token="ghp_secret")
    async with GitHubClient(config, transport=httpx.MockTransport(handler)) as gh:
        repos = await gh.list_repos("octocat")

    assert repos == [{"name": "alpha"}]
    assert seen["auth"] == "Bearer ghp_secret"
    assert seen["url"].startswith("https://api.test/users/octocat/repos?")
    assert "per_page=100" in seen["url"]


class _GatedGitHubClient(FakeGitHubClient):
    """Holds every profile fetch until ``parties`` refreshes are in flight."""

    def __init__(self, parties: int):
        super().__init__()
        self._pending = parties
        self._all_in = asyncio.Event()

    async def get_user(self, username):
        self._pending -= 1
        if self._pending == 0:
            self._all_in.set()
        await self._all_in.wait()
        return await super().get_user(username)


async def test_concurrent_first_refreshes_both_succeed(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'stats.db'}")
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    client = _GatedGitHubClient(parties=2)
    client.user = {**client.user, "followers": 42}

    async def refresh():
        async with factory() as session:
            result = await get_github_stats(session, client, "octocat")
            await session.commit()
            return result

    results = await asyncio.gather(refresh(), refresh())
    assert [r.cache_status for r in results] == ["MISS", "MISS"]

    async with factory() as session:
        rows = (await session.execute(select(GitHubStats))).scalars().all()
    assert [(r.username, r.followers) for r in rows] == [("octocat", 42)]
    await engine.dispose()
