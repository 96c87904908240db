"""GitHub statistics schemas."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class TopRepo(BaseModel):
    name: str
    description: str | None = None
    stars: int = 0
    forks: int = 0
    language: str | None = None
    html_url: str | None = None
    updated_at: str | None = None


class ActivityPayload(BaseModel):
    action: str | None = None
    ref: str | None = None
    commits: int = 0


class ActivityItem(BaseModel):
    type: str
    repo: str | None = None
    created_at: str | None = None
    payload: ActivityPayload = ActivityPayload()


class StatsSnapshotResponse(BaseModel):
    username: str
    public_repos: int
    followers: int
    following: int
    total_stars: int
    total_forks: int
    total_commits: int
    languages: dict[str, int]
    top_repos: list[TopRepo]
    recent_activity: list[ActivityItem]
    last_updated: datetime

    model_config = {"from_attributes": True}


class StatsResult(BaseModel):
    """A snapshot plus how it was obtained."""

    snapshot: StatsSnapshotResponse
    cache_status: Literal["HIT", "MISS", "STALE"]
    stale: bool = False
    age_seconds: int | None = None
    reason: str | None = None
