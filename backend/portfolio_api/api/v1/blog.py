"""Blog API - posts, likes, meta and comments."""
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.api.websocket import manager
from portfolio_api.dependencies import get_db, require_admin
from portfolio_api.models.user import User
from portfolio_api.schemas.blog import (
    BlogPostCreate,
    BlogPostResponse,
    BlogPostUpdate,
    CategoryCount,
    CommentCreate,
    CommentResponse,
    RelatedPost,
)
from portfolio_api.schemas.common import APIResponse, PaginationMeta
from portfolio_api.services import blog_service

router = APIRouter()


# GET /blog
@router.get("", response_model=APIResponse)
async def list_posts(
    category: str | None = None,
    featured: bool | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    posts, total = await blog_service.list_posts(db, category, featured, page, per_page)
    return APIResponse(
        status="success",
        data=[BlogPostResponse.model_validate(p).model_dump() for p in posts],
        pagination=PaginationMeta.build(total, page, per_page),
    )


# GET /blog/meta/categories
@router.get("/meta/categories", response_model=APIResponse)
async def categories(db: AsyncSession = Depends(get_db)):
    rows = await blog_service.category_counts(db)
    return APIResponse(status="success", data=[CategoryCount(**r).model_dump() for r in rows])


# GET /blog/meta/stats
@router.get("/meta/stats", response_model=APIResponse)
async def stats(db: AsyncSession = Depends(get_db)):
    return APIResponse(status="success", data=await blog_service.blog_stats(db))


# GET /blog/{slug} — counts a view
@router.get("/{slug}", response_model=APIResponse)
async def get_post(slug: str, db: AsyncSession = Depends(get_db)):
    post, views, related = await blog_service.view_post_by_slug(db, slug)
    data = BlogPostResponse.model_validate(post).model_copy(update={"views": views})
    return APIResponse(
        status="success",
        data={
            "post": data.model_dump(),
            "related_posts": [RelatedPost.model_validate(r).model_dump() for r in related],
        },
    )


# POST /blog — admin
@router.post("", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    body: BlogPostCreate,
    admin: User = require_admin(),
    db: AsyncSession = Depends(get_db),
):
    post = await blog_service.create_post(db, body)
    await manager.publish("new_blog_post", {
        "id": str(post.id), "title": post.title, "status": post.status.value, "author": admin.email,
    })
    return APIResponse(
        status="success",
        data=BlogPostResponse.model_validate(post).model_dump(),
        message="Blog post created",
    )


# PUT /blog/{id} — admin, partial update
@router.put("/{post_id}", response_model=APIResponse)
async def update_post(
    post_id: uuid.UUID,
    body: BlogPostUpdate,
    admin: User = require_admin(),
    db: AsyncSession = Depends(get_db),
):
    post = await blog_service.get_post(db, post_id)
    post, changes = await blog_service.update_post(db, post, body)
    await manager.publish("blog_post_updated", {
        "id": str(post.id), "fields": sorted(changes), "updated_by": admin.email,
    })
    return APIResponse(
        status="success",
        data=BlogPostResponse.model_validate(post).model_dump(),
        message="Blog post updated",
    )


# DELETE /blog/{id} — admin, comments cascade
@router.delete("/{post_id}", response_model=APIResponse)
async def delete_post(
    post_id: uuid.UUID,
    admin: User = require_admin(),
    db: AsyncSession = Depends(get_db),
):
    post = await blog_service.get_post(db, post_id)
    await blog_service.delete_post(db, post)
    await manager.publish("blog_post_deleted", {"id": str(post_id), "deleted_by": admin.email})
    return APIResponse(status="success", message="Blog post deleted")


# POST /blog/{id}/like
@router.post("/{post_id}/like", response_model=APIResponse)
async def like_post(post_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    likes = await blog_service.like_post(db, post_id)
    await manager.publish("blog_liked", {"id": str(post_id), "likes": likes})
    return APIResponse(status="success", data={"likes": likes})


# GET /blog/{id}/comments — approved only
@router.get("/{post_id}/comments", response_model=APIResponse)
async def list_comments(post_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    await blog_service.get_post(db, post_id)
    comments = await blog_service.list_approved_comments(db, post_id)
    return APIResponse(
        status="success",
        data=[CommentResponse.model_validate(c).model_dump() for c in comments],
    )


# POST /blog/{id}/comments — held for moderation
@router.post("/{post_id}/comments", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(post_id: uuid.UUID, body: CommentCreate, db: AsyncSession = Depends(get_db)):
    post = await blog_service.get_post(db, post_id)
    comment = await blog_service.add_comment(db, post, body.name, body.email, body.comment)
    return APIResponse(
        status="success",
        data=CommentResponse.model_validate(comment).model_dump(),
        message="Comment submitted for moderation",
    )
