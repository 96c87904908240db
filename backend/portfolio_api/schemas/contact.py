"""Contact form schemas."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator


class ContactCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    subject: str = Field(..., min_length=3, max_length=255)
    message: str = Field(..., min_length=10)

    model_config = {"str_strip_whitespace": True}

    @field_validator("name", "subject")
    @classmethod
    def _single_line(cls, value: str) -> str:
        # both end up in mail headers
        if "\r" in value or "\n" in value:
            raise ValueError("must not contain line breaks")
        return value


class ContactResponse(BaseModel):
    id: UUID
    name: str
    email: str
    subject: str
    message: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
