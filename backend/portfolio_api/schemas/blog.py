"""Blog post and comment schemas."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from portfolio_api.models.blog import CommentStatus, PostStatus


class BlogPostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    excerpt: str | None = None
    category: str | None = None
    featured_image: str | None = None
    author: str | None = None
    reading_time: int | None = Field(None, ge=0)
    tags: list[str] = []
    featured: bool = False
    status: PostStatus = PostStatus.DRAFT


class BlogPostUpdate(BaseModel):
    """Partial update; only the fields present in the request body are applied."""

    title: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = Field(None, min_length=1)
    excerpt: str | None = None
    category: str | None = None
    featured_image: str | None = None
    author: str | None = None
    reading_time: int | None = Field(None, ge=0)
    tags: list[str] | None = None
    featured: bool | None = None
    status: PostStatus | None = None
    views: int | None = Field(None, ge=0)
    likes: int | None = Field(None, ge=0)

    model_config = {"extra": "forbid"}


class BlogPostResponse(BaseModel):
    id: UUID
    title: str
    slug: str
    content: str
    excerpt: str | None = None
    category: str | None = None
    featured_image: str | None = None
    author: str | None = None
    reading_time: int | None = None
    tags: list[str] | None = None
    featured: bool
    status: PostStatus
    views: int
    likes: int
    published_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class RelatedPost(BaseModel):
    id: UUID
    title: str
    slug: str
    excerpt: str | None = None
    featured_image: str | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class CategoryCount(BaseModel):
    category: str
    count: int


class CommentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    comment: str = Field(..., min_length=1)


class CommentResponse(BaseModel):
    id: UUID
    post_id: UUID
    name: str
    comment: str
    status: CommentStatus
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
