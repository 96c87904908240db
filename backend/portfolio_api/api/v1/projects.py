"""Projects API - multipart CRUD with image upload."""
import uuid

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.api.websocket import manager
from portfolio_api.dependencies import get_db, get_media_store, require_admin
from portfolio_api.integrations.media.base import MediaStore
from portfolio_api.models.user import User
from portfolio_api.schemas.common import APIResponse, PaginationMeta
from portfolio_api.schemas.project import ProjectResponse
from portfolio_api.services import project_service
from portfolio_api.utils.helpers import parse_bool, parse_string_list, raw_form_field

router = APIRouter()


UPDATE_FIELDS = ("title", "description", "technologies", "repo_link", "live_link", "featured", "image_url")


# GET /projects
@router.get("", response_model=APIResponse)
async def list_projects(
    featured: bool | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    projects, total = await project_service.list_projects(db, featured, page, per_page)
    return APIResponse(
        status="success",
        data=[ProjectResponse.model_validate(p).model_dump() for p in projects],
        pagination=PaginationMeta.build(total, page, per_page),
    )


# GET /projects/{id}
@router.get("/{project_id}", response_model=APIResponse)
async def get_project(project_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    project = await project_service.get_project(db, project_id)
    return APIResponse(status="success", data=ProjectResponse.model_validate(project).model_dump())


# POST /projects — admin
@router.post("", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    title: str = Form(""),
    description: str = Form(""),
    technologies: str | None = Form(None),
    repo_link: str | None = Form(None),
    live_link: str | None = Form(None),
    featured: str | None = Form(None),
    project_image: UploadFile | None = File(None),
    admin: User = require_admin(),
    store: MediaStore = Depends(get_media_store),
    db: AsyncSession = Depends(get_db),
):
    fields = {
        "title": title.strip(),
        "description": description.strip(),
        "technologies": parse_string_list(technologies),
        "repo_link": repo_link or None,
        "live_link": live_link or None,
        "featured": parse_bool(featured),
    }
    project = await project_service.create_project(db, store, fields, project_image)
    data = ProjectResponse.model_validate(project).model_dump()
    await manager.publish("project_created", {"id": str(project.id), "title": project.title})
    return APIResponse(status="success", data=data, message="Project created")


# PUT /projects/{id} — admin
@router.put("/{project_id}", response_model=APIResponse)
async def update_project(
    project_id: uuid.UUID,
    request: Request,
    project_image: UploadFile | None = File(None),
    admin: User = require_admin(),
    store: MediaStore = Depends(get_media_store),
    db: AsyncSession = Depends(get_db),
):
    project = await project_service.get_project(db, project_id)
    sent = {name: await raw_form_field(request, name) for name in UPDATE_FIELDS}
    fields: dict = {}
    for name in ("title", "description"):
        if sent[name] is not None:
            fields[name] = sent[name].strip()
    for name in ("repo_link", "live_link"):
        if sent[name] is not None:
            fields[name] = sent[name].strip() or None
    if sent["technologies"] is not None:
        fields["technologies"] = parse_string_list(sent["technologies"])
    if sent["featured"] is not None:
        fields["featured"] = parse_bool(sent["featured"])
    image_url = sent["image_url"]

    project = await project_service.update_project(db, store, project, fields, project_image, image_url)
    data = ProjectResponse.model_validate(project).model_dump()
    await manager.publish("project_updated", {"id": str(project.id), "title": project.title})
    return APIResponse(status="success", data=data, message="Project updated")


# DELETE /projects/{id} — admin
@router.delete("/{project_id}", response_model=APIResponse)
async def delete_project(
    project_id: uuid.UUID,
    admin: User = require_admin(),
    store: MediaStore = Depends(get_media_store),
    db: AsyncSession = Depends(get_db),
):
    project = await project_service.get_project(db, project_id)
    await project_service.delete_project(db, store, project)
    await manager.publish("project_deleted", {"id": str(project_id)})
    return APIResponse(status="success", message="Project deleted")
