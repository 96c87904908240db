"""Auth API endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.dependencies import get_current_user, get_db, require_admin
from portfolio_api.models.user import User
from portfolio_api.schemas.auth import ChangePasswordRequest, LoginRequest, LoginResponse, VerifyResponse
from portfolio_api.schemas.common import APIResponse
from portfolio_api.services.auth_service import (
    authenticate_user,
    change_password,
    create_access_token,
    is_admin,
)

router = APIRouter()


@router.post("/login", response_model=APIResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, body.email, body.password)
    token = create_access_token(str(user.id), user.email, user.role.value)
    return APIResponse(
        status="success",
        data=LoginResponse(token=token, email=user.email, role=user.role.value).model_dump(),
        message="Login successful",
    )


@router.get("/verify", response_model=APIResponse)
async def verify(current_user: User = Depends(get_current_user)):
    return APIResponse(
        status="success",
        data=VerifyResponse(
            email=current_user.email,
            role=current_user.role.value,
            is_admin=is_admin(current_user),
        ).model_dump(),
    )


@router.post("/change-password", response_model=APIResponse)
async def update_password(
    body: ChangePasswordRequest,
    admin: User = require_admin(),
    db: AsyncSession = Depends(get_db),
):
    await change_password(db, admin, body.current_password, body.new_password)
    return APIResponse(status="success", message="Password updated")
