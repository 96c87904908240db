"""Visitor analytics API."""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.api.websocket import manager
from portfolio_api.dependencies import get_db
from portfolio_api.schemas.analytics import VisitorCreate
from portfolio_api.schemas.common import APIResponse
from portfolio_api.services import analytics_service
from portfolio_api.utils.helpers import client_ip

router = APIRouter()


# POST /analytics/visitor
@router.post("/visitor", response_model=APIResponse)
async def track_visitor(body: VisitorCreate, request: Request, db: AsyncSession = Depends(get_db)):
    event = await analytics_service.track_visitor(
        db,
        body,
        ip_address=client_ip(request.headers, request.client.host if request.client else None),
        user_agent=request.headers.get("user-agent"),
        referrer_header=request.headers.get("referer"),
    )
    await manager.publish("new_visitor", {
        "page": event.page_url, "country": event.country, "city": event.city,
    })
    return APIResponse(status="success", data={"session_id": event.session_id})


# GET /analytics/dashboard
@router.get("/dashboard", response_model=APIResponse)
async def dashboard(db: AsyncSession = Depends(get_db)):
    return APIResponse(status="success", data=await analytics_service.dashboard(db))


# GET /analytics/realtime
@router.get("/realtime", response_model=APIResponse)
async def realtime(db: AsyncSession = Depends(get_db)):
    data = await analytics_service.realtime(db, manager.listener_count)
    return APIResponse(status="success", data=data)
