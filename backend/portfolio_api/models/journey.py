"""Journey (experience timeline) ORM model."""
import enum
from datetime import date

from sqlalchemy import Date, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from portfolio_api.models.base import Base, TimestampMixin, UUIDMixin, pg_enum


class JourneyType(str, enum.Enum):
    EDUCATION = "education"
    WORK = "work"
    PROJECT = "project"
    ACHIEVEMENT = "achievement"


class JourneyItem(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "journey_items"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    company: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    type: Mapped[JourneyType] = mapped_column(pg_enum(JourneyType, name="journey_type"), nullable=False)
