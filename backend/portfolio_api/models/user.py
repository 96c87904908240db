"""User ORM model."""
import enum

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from portfolio_api.models.base import Base, TimestampMixin, UUIDMixin, pg_enum


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


class User(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        pg_enum(UserRole, name="user_role"), nullable=False, default=UserRole.USER
    )
