"""Skills API - multipart CRUD with icon upload."""
import uuid

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.api.websocket import manager
from portfolio_api.dependencies import get_db, get_media_store, require_admin
from portfolio_api.integrations.media.base import MediaStore
from portfolio_api.models.user import User
from portfolio_api.schemas.common import APIResponse, PaginationMeta
from portfolio_api.schemas.skill import SkillResponse
from portfolio_api.services import skill_service
from portfolio_api.utils.helpers import raw_form_field

router = APIRouter()


# GET /skills
@router.get("", response_model=APIResponse)
async def list_skills(
    category: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    skills, total = await skill_service.list_skills(db, category, page, per_page)
    return APIResponse(
        status="success",
        data=[SkillResponse.model_validate(s).model_dump() for s in skills],
        pagination=PaginationMeta.build(total, page, per_page),
    )


# GET /skills/{id}
@router.get("/{skill_id}", response_model=APIResponse)
async def get_skill(skill_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    skill = await skill_service.get_skill(db, skill_id)
    return APIResponse(status="success", data=SkillResponse.model_validate(skill).model_dump())


# POST /skills — admin
@router.post("", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def create_skill(
    name: str = Form(""),
    level: str = Form(""),
    category: str = Form(""),
    icon_file: UploadFile | None = File(None),
    admin: User = require_admin(),
    store: MediaStore = Depends(get_media_store),
    db: AsyncSession = Depends(get_db),
):
    fields = {"name": name.strip(), "level": level.strip(), "category": category.strip()}
    skill = await skill_service.create_skill(db, store, fields, icon_file)
    data = SkillResponse.model_validate(skill).model_dump()
    await manager.publish("skill_created", {"id": str(skill.id), "name": skill.name})
    return APIResponse(status="success", data=data, message="Skill created")


# PUT /skills/{id} — admin
@router.put("/{skill_id}", response_model=APIResponse)
async def update_skill(
    skill_id: uuid.UUID,
    request: Request,
    icon_file: UploadFile | None = File(None),
    admin: User = require_admin(),
    store: MediaStore = Depends(get_media_store),
    db: AsyncSession = Depends(get_db),
):
    skill = await skill_service.get_skill(db, skill_id)
    fields: dict = {}
    for name in ("name", "level", "category"):
        value = await raw_form_field(request, name)
        if value is not None:
            fields[name] = value.strip()
    icon_url = await raw_form_field(request, "icon_url")
    skill = await skill_service.update_skill(db, store, skill, fields, icon_file, icon_url)
    data = SkillResponse.model_validate(skill).model_dump()
    await manager.publish("skill_updated", {"id": str(skill.id), "name": skill.name})
    return APIResponse(status="success", data=data, message="Skill updated")


# DELETE /skills/{id} — admin
@router.delete("/{skill_id}", response_model=APIResponse)
async def delete_skill(
    skill_id: uuid.UUID,
    admin: User = require_admin(),
    store: MediaStore = Depends(get_media_store),
    db: AsyncSession = Depends(get_db),
):
    skill = await skill_service.get_skill(db, skill_id)
    await skill_service.delete_skill(db, store, skill)
    await manager.publish("skill_deleted", {"id": str(skill_id)})
    return APIResponse(status="success", message="Skill deleted")
