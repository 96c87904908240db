"""Cached GitHub statistics snapshot (one row per username)."""
from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from portfolio_api.models.base import Base, CreatedAtMixin, UUIDMixin


class GitHubStats(Base, UUIDMixin, CreatedAtMixin):
    __tablename__ = "github_stats"

    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    public_repos: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    followers: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    following: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_stars: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_forks: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_commits: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    languages: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    top_repos: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    recent_activity: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
