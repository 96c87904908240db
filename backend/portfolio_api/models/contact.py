"""Contact message ORM model."""
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from portfolio_api.models.base import Base, CreatedAtMixin, UUIDMixin


class ContactMessage(Base, UUIDMixin, CreatedAtMixin):
    __tablename__ = "contact_messages"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
