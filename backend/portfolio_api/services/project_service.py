"""Project business logic."""
import logging
import uuid

from fastapi import UploadFile
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.integrations.media.base import MediaStore
from portfolio_api.middleware.error_handler import NotFound, ValidationFailed
from portfolio_api.models.project import Project
from portfolio_api.services import media_service

logger = logging.getLogger(__name__)

MEDIA_FOLDER = "projects"


def _require_text(fields: dict, *names: str) -> None:
    for name in names:
        value = fields.get(name)
        if value is None or not str(value).strip():
            raise ValidationFailed(f"{name} is required")


async def list_projects(
    db: AsyncSession, featured: bool | None, page: int, per_page: int,
) -> tuple[list[Project], int]:
    query = select(Project)
    if featured is not None:
        query = query.where(Project.featured == featured)

    count_q = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_q)).scalar() or 0

    offset = (page - 1) * per_page
    query = query.order_by(Project.created_at.desc()).offset(offset).limit(per_page)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def get_project(db: AsyncSession, project_id: uuid.UUID) -> Project:
    project = await db.get(Project, project_id)
    if project is None:
        raise NotFound("Project not found")
    return project


async def create_project(
    db: AsyncSession, store: MediaStore, fields: dict, upload: UploadFile | None,
) -> Project:
    _require_text(fields, "title", "description")

    # Binary first; a failed insert afterwards leaves an orphan we accept.
    if upload is not None and upload.filename:
        asset = await media_service.store_upload(store, upload, MEDIA_FOLDER)
        fields["image_url"], fields["image_public_id"] = asset.url, asset.public_id

    project = Project(**fields)
    db.add(project)
    await db.flush()
    await db.refresh(project)
    logger.info("Project created: %s", project.id)
    return project


async def update_project(
    db: AsyncSession,
    store: MediaStore,
    project: Project,
    fields: dict,
    upload: UploadFile | None,
    image_url: str | None,
) -> Project:
    for name in ("title", "description"):
        if name in fields and not str(fields[name] or "").strip():
            raise ValidationFailed(f"{name} cannot be empty")

    replacement = await media_service.replace_asset(
        store, project.image_url, project.image_public_id, upload, image_url, MEDIA_FOLDER,
    )
    if replacement is not None:
        fields["image_url"], fields["image_public_id"] = replacement

    for key, value in fields.items():
        setattr(project, key, value)
    await db.flush()
    await db.refresh(project)
    return project


async def delete_project(db: AsyncSession, store: MediaStore, project: Project) -> None:
    url, public_id = project.image_url, project.image_public_id
    await db.delete(project)
    await db.flush()
    await media_service.discard_asset(store, url, public_id)
    logger.info("Project deleted: %s", project.id)
