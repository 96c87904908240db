"""Skill ORM model."""
import enum

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from portfolio_api.models.base import Base, TimestampMixin, UUIDMixin, pg_enum


class SkillLevel(str, enum.Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    EXPERT = "Expert"


class Skill(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "skills"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    level: Mapped[SkillLevel] = mapped_column(pg_enum(SkillLevel, name="skill_level"), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    icon_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    icon_public_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
