"""Skill business logic."""
import logging
import uuid

from fastapi import UploadFile
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.integrations.media.base import MediaStore
from portfolio_api.middleware.error_handler import NotFound, ValidationFailed
from portfolio_api.models.skill import Skill, SkillLevel
from portfolio_api.services import media_service

logger = logging.getLogger(__name__)

MEDIA_FOLDER = "skills"


def parse_level(value: str) -> SkillLevel:
    try:
        return SkillLevel(value)
    except ValueError:
        allowed = ", ".join(level.value for level in SkillLevel)
        raise ValidationFailed(f"level must be one of: {allowed}")


async def list_skills(
    db: AsyncSession, category: str | None, page: int, per_page: int,
) -> tuple[list[Skill], int]:
    query = select(Skill)
    if category:
        query = query.where(Skill.category == category)

    count_q = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_q)).scalar() or 0

    offset = (page - 1) * per_page
    query = query.order_by(Skill.category, Skill.name).offset(offset).limit(per_page)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def get_skill(db: AsyncSession, skill_id: uuid.UUID) -> Skill:
    skill = await db.get(Skill, skill_id)
    if skill is None:
        raise NotFound("Skill not found")
    return skill


async def create_skill(
    db: AsyncSession, store: MediaStore, fields: dict, upload: UploadFile | None,
) -> Skill:
    for name in ("name", "level", "category"):
        if not str(fields.get(name) or "").strip():
            raise ValidationFailed(f"{name} is required")
    fields["level"] = parse_level(fields["level"])

    if upload is not None and upload.filename:
        asset = await media_service.store_upload(store, upload, MEDIA_FOLDER)
        fields["icon_url"], fields["icon_public_id"] = asset.url, asset.public_id

    skill = Skill(**fields)
    db.add(skill)
    await db.flush()
    await db.refresh(skill)
    logger.info("Skill created: %s", skill.id)
    return skill


async def update_skill(
    db: AsyncSession,
    store: MediaStore,
    skill: Skill,
    fields: dict,
    upload: UploadFile | None,
    icon_url: str | None,
) -> Skill:
    for name in ("name", "category"):
        if name in fields and not str(fields[name] or "").strip():
            raise ValidationFailed(f"{name} cannot be empty")
    if "level" in fields:
        fields["level"] = parse_level(fields["level"])

    replacement = await media_service.replace_asset(
        store, skill.icon_url, skill.icon_public_id, upload, icon_url, MEDIA_FOLDER,
    )
    if replacement is not None:
        fields["icon_url"], fields["icon_public_id"] = replacement

    for key, value in fields.items():
        setattr(skill, key, value)
    await db.flush()
    await db.refresh(skill)
    return skill


async def delete_skill(db: AsyncSession, store: MediaStore, skill: Skill) -> None:
    url, public_id = skill.icon_url, skill.icon_public_id
    await db.delete(skill)
    await db.flush()
    await media_service.discard_asset(store, url, public_id)
    logger.info("Skill deleted: %s", skill.id)
