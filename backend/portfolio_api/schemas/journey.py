"""Journey item schemas."""
from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from portfolio_api.models.journey import JourneyType


class JourneyCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    company: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    start_date: date
    end_date: date | None = None
    type: JourneyType

    @model_validator(mode="after")
    def _check_dates(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class JourneyUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    company: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    type: JourneyType | None = None


class JourneyResponse(BaseModel):
    id: UUID
    title: str
    company: str
    description: str | None = None
    start_date: date
    end_date: date | None = None
    type: JourneyType
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
