"""Chatbot schemas."""
from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)
    session_id: str | None = Field(None, max_length=255)


class ChatReply(BaseModel):
    response: str
    category: str
    session_id: str
