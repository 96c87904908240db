"""Project schemas."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class ProjectResponse(BaseModel):
    id: UUID
    title: str
    description: str
    technologies: list[str]
    repo_link: str | None = None
    live_link: str | None = None
    featured: bool
    image_url: str | None = None
    image_public_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
