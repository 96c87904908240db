"""Skill schemas."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from portfolio_api.models.skill import SkillLevel


class SkillResponse(BaseModel):
    id: UUID
    name: str
    level: SkillLevel
    category: str
    icon_url: str | None = None
    icon_public_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
