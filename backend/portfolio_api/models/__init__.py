"""SQLAlchemy ORM models - all 10 tables."""
from portfolio_api.models.base import Base, CreatedAtMixin, TimestampMixin, UUIDMixin
from portfolio_api.models.user import User, UserRole
from portfolio_api.models.project import Project
from portfolio_api.models.skill import Skill, SkillLevel
from portfolio_api.models.blog import BlogComment, BlogPost, CommentStatus, PostStatus
from portfolio_api.models.journey import JourneyItem, JourneyType
from portfolio_api.models.contact import ContactMessage
from portfolio_api.models.chat import ChatConversation, ChatDailyStat
from portfolio_api.models.analytics import VisitorEvent
from portfolio_api.models.github_stats import GitHubStats

__all__ = [
    "Base",
    "CreatedAtMixin",
    "TimestampMixin",
    "UUIDMixin",
    "User",
    "UserRole",
    "Project",
    "Skill",
    "SkillLevel",
    "BlogPost",
    "BlogComment",
    "PostStatus",
    "CommentStatus",
    "JourneyItem",
    "JourneyType",
    "ContactMessage",
    "ChatConversation",
    "ChatDailyStat",
    "VisitorEvent",
    "GitHubStats",
]
