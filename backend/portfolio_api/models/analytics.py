"""Visitor analytics ORM model."""
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from portfolio_api.models.base import Base, CreatedAtMixin, UUIDMixin


class VisitorEvent(Base, UUIDMixin, CreatedAtMixin):
    __tablename__ = "visitor_analytics"

    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    page_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    referrer: Mapped[str | None] = mapped_column(String(500), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    device_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    browser: Mapped[str | None] = mapped_column(String(100), nullable=True)
    session_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
