"""FastAPI dependency injection utilities."""
import uuid as _uuid

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.database import get_db
from portfolio_api.integrations.github.client import GitHubClient
from portfolio_api.integrations.media.base import MediaStore
from portfolio_api.middleware.error_handler import Forbidden, Unauthorized
from portfolio_api.models.user import User
from portfolio_api.services.auth_service import decode_access_token, is_admin
from portfolio_api.services.mail_service import Mailer

__all__ = [
    "get_db",
    "get_current_user",
    "require_admin",
    "get_media_store",
    "get_mailer",
    "get_github_client",
]

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Extract current user from JWT access token."""
    if credentials is None:
        raise Unauthorized("Missing bearer token")
    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError as e:
        detail = "Token expired" if "expired" in str(e).lower() else "Invalid token"
        raise Unauthorized(detail)
    user_id = payload.get("sub")
    if user_id is None:
        raise Unauthorized("Invalid token")
    try:
        user = await db.get(User, _uuid.UUID(user_id))
    except ValueError:
        raise Unauthorized("Invalid token")
    if user is None:
        raise Unauthorized("User no longer exists")
    return user


async def _admin_dependency(current_user: User = Depends(get_current_user)) -> User:
    if not is_admin(current_user):
        raise Forbidden("Admin access required")
    return current_user


def require_admin():
    """Admin-only access control dependency."""
    return Depends(_admin_dependency)


# --- Adapters built once in create_app() and kept on app.state ---

def get_media_store(request: Request) -> MediaStore:
    return request.app.state.media_store


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_github_client(request: Request) -> GitHubClient:
    return request.app.state.github_client
