"""Contact form API."""
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.dependencies import get_db, get_mailer, require_admin
from portfolio_api.models.user import User
from portfolio_api.schemas.common import APIResponse, PaginationMeta
from portfolio_api.schemas.contact import ContactCreate, ContactResponse
from portfolio_api.services import contact_service
from portfolio_api.services.mail_service import Mailer, send_auto_reply, send_owner_notification

router = APIRouter()


@router.post("", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def submit_message(
    body: ContactCreate,
    background_tasks: BackgroundTasks,
    mailer: Mailer = Depends(get_mailer),
    db: AsyncSession = Depends(get_db),
):
    message = await contact_service.save_message(db, body)
    # Two independent tasks: one failing does not stop the other.
    background_tasks.add_task(
        send_owner_notification, mailer, message.name, message.email, message.subject, message.message,
    )
    background_tasks.add_task(send_auto_reply, mailer, message.name, message.email)
    return APIResponse(
        status="success",
        data={"id": str(message.id)},
        message="Message received",
    )


@router.get("", response_model=APIResponse)
async def list_messages(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    admin: User = require_admin(),
    db: AsyncSession = Depends(get_db),
):
    messages, total = await contact_service.list_messages(db, page, per_page)
    return APIResponse(
        status="success",
        data=[ContactResponse.model_validate(m).model_dump() for m in messages],
        pagination=PaginationMeta.build(total, page, per_page),
    )
