"""Chatbot API."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.api.websocket import manager
from portfolio_api.dependencies import get_db
from portfolio_api.schemas.chat import ChatReply, ChatRequest
from portfolio_api.schemas.common import APIResponse
from portfolio_api.services import chat_service

router = APIRouter()


@router.post("/chat", response_model=APIResponse)
async def chat(body: ChatRequest, db: AsyncSession = Depends(get_db)):
    exchange = await chat_service.handle_message(db, body.message, body.session_id)
    await manager.publish("new_chat_message", {
        "session_id": exchange.session_id,
        "message": exchange.user_message,
        "response": exchange.bot_response,
        "category": exchange.category,
    })
    return APIResponse(
        status="success",
        data=ChatReply(
            response=exchange.bot_response,
            category=exchange.category,
            session_id=exchange.session_id,
        ).model_dump(),
    )


@router.get("/stats", response_model=APIResponse)
async def stats(db: AsyncSession = Depends(get_db)):
    return APIResponse(status="success", data=await chat_service.chat_stats(db))
