"""Visitor analytics schemas."""
from pydantic import BaseModel, Field


class VisitorCreate(BaseModel):
    page_url: str | None = Field(None, max_length=500)
    referrer: str | None = Field(None, max_length=500)
    country: str | None = None
    city: str | None = None
    device_type: str | None = None
    browser: str | None = None
    session_id: str | None = Field(None, max_length=255)
