"""Chatbot conversation log and daily aggregate ORM models."""
from datetime import date

from sqlalchemy import Date, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from portfolio_api.models.base import Base, CreatedAtMixin, UUIDMixin


class ChatConversation(Base, UUIDMixin, CreatedAtMixin):
    """One user message and the bot's reply. Append-only."""

    __tablename__ = "chat_conversations"

    session_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    user_message: Mapped[str] = mapped_column(Text, nullable=False)
    bot_response: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)


class ChatDailyStat(Base, UUIDMixin, CreatedAtMixin):
    __tablename__ = "chat_stats"

    date: Mapped[date] = mapped_column(Date, unique=True, nullable=False)
    total_messages: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    unique_sessions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
