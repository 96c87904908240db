"""Journey (timeline) API."""
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.api.websocket import manager
from portfolio_api.dependencies import get_db, require_admin
from portfolio_api.models.journey import JourneyType
from portfolio_api.models.user import User
from portfolio_api.schemas.common import APIResponse, PaginationMeta
from portfolio_api.schemas.journey import JourneyCreate, JourneyResponse, JourneyUpdate
from portfolio_api.services import journey_service

router = APIRouter()


@router.get("", response_model=APIResponse)
async def list_items(
    type_filter: JourneyType | None = Query(None, alias="type"),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    items, total = await journey_service.list_items(db, type_filter, page, per_page)
    return APIResponse(
        status="success",
        data=[JourneyResponse.model_validate(i).model_dump() for i in items],
        pagination=PaginationMeta.build(total, page, per_page),
    )


@router.get("/{item_id}", response_model=APIResponse)
async def get_item(item_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    item = await journey_service.get_item(db, item_id)
    return APIResponse(status="success", data=JourneyResponse.model_validate(item).model_dump())


@router.post("", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    body: JourneyCreate,
    admin: User = require_admin(),
    db: AsyncSession = Depends(get_db),
):
    item = await journey_service.create_item(db, body)
    data = JourneyResponse.model_validate(item).model_dump()
    await manager.publish("journey_added", data)
    return APIResponse(status="success", data=data, message="Journey item created")


@router.put("/{item_id}", response_model=APIResponse)
async def update_item(
    item_id: uuid.UUID,
    body: JourneyUpdate,
    admin: User = require_admin(),
    db: AsyncSession = Depends(get_db),
):
    item = await journey_service.get_item(db, item_id)
    item = await journey_service.update_item(db, item, body)
    data = JourneyResponse.model_validate(item).model_dump()
    await manager.publish("journey_updated", data)
    return APIResponse(status="success", data=data, message="Journey item updated")


@router.delete("/{item_id}", response_model=APIResponse)
async def delete_item(
    item_id: uuid.UUID,
    admin: User = require_admin(),
    db: AsyncSession = Depends(get_db),
):
    item = await journey_service.get_item(db, item_id)
    await journey_service.delete_item(db, item)
    await manager.publish("journey_deleted", {"id": str(item_id)})
    return APIResponse(status="success", message="Journey item deleted")
