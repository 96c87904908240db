"""Blog post and comment business logic."""
import logging
import uuid

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.middleware.error_handler import NotFound, ValidationFailed
from portfolio_api.models.blog import BlogComment, BlogPost, CommentStatus, PostStatus
from portfolio_api.schemas.blog import BlogPostCreate, BlogPostUpdate
from portfolio_api.utils.helpers import slugify, utc_now

logger = logging.getLogger(__name__)

# Columns a partial update may touch; anything else is rejected.
UPDATABLE_FIELDS = frozenset({
    "title", "content", "excerpt", "category", "featured_image", "author",
    "reading_time", "tags", "featured", "status", "views", "likes",
})
NON_NULLABLE_FIELDS = frozenset({"title", "content", "featured", "status", "views", "likes"})

RELATED_LIMIT = 3


async def unique_slug(db: AsyncSession, title: str, exclude_id: uuid.UUID | None = None) -> str:
    """slugify(title), suffixed -2, -3, ... until no other post uses it."""
    base = slugify(title) or "post"
    candidate, n = base, 2
    while True:
        query = select(BlogPost.id).where(BlogPost.slug == candidate)
        if exclude_id is not None:
            query = query.where(BlogPost.id != exclude_id)
        if (await db.execute(query)).first() is None:
            return candidate
        candidate = f"{base}-{n}"
        n += 1


# --- Posts ---

async def list_posts(
    db: AsyncSession,
    category: str | None,
    featured: bool | None,
    page: int,
    per_page: int,
) -> tuple[list[BlogPost], int]:
    query = select(BlogPost).where(BlogPost.status == PostStatus.PUBLISHED)
    if category:
        query = query.where(BlogPost.category == category)
    if featured is not None:
        query = query.where(BlogPost.featured == featured)

    count_q = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_q)).scalar() or 0

    offset = (page - 1) * per_page
    query = query.order_by(BlogPost.published_at.desc()).offset(offset).limit(per_page)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def get_post(db: AsyncSession, post_id: uuid.UUID) -> BlogPost:
    post = await db.get(BlogPost, post_id)
    if post is None:
        raise NotFound("Blog post not found")
    return post


async def view_post_by_slug(db: AsyncSession, slug: str) -> tuple[BlogPost, int, list[BlogPost]]:
    """Count a view atomically and return (post, views after increment, related posts)."""
    stmt = (
        update(BlogPost)
        .where(BlogPost.slug == slug, BlogPost.status == PostStatus.PUBLISHED)
        .values(views=BlogPost.views + 1)
        .returning(BlogPost.id, BlogPost.views)
        .execution_options(synchronize_session=False)
    )
    row = (await db.execute(stmt)).first()
    if row is None:
        raise NotFound("Blog post not found")
    post_id, views = row

    result = await db.execute(
        select(BlogPost).where(BlogPost.id == post_id).execution_options(populate_existing=True)
    )
    post = result.scalar_one()

    related: list[BlogPost] = []
    if post.category:
        related_q = (
            select(BlogPost)
            .where(
                BlogPost.category == post.category,
                BlogPost.id != post.id,
                BlogPost.status == PostStatus.PUBLISHED,
            )
            .order_by(BlogPost.published_at.desc())
            .limit(RELATED_LIMIT)
        )
        related = list((await db.execute(related_q)).scalars().all())
    return post, views, related


async def create_post(db: AsyncSession, data: BlogPostCreate) -> BlogPost:
    if not data.title.strip() or not data.content.strip():
        raise ValidationFailed("title and content are required")
    post = BlogPost(
        **data.model_dump(),
        slug=await unique_slug(db, data.title),
        published_at=utc_now() if data.status == PostStatus.PUBLISHED else None,
    )
    db.add(post)
    await db.flush()
    await db.refresh(post)
    logger.info("Blog post created: %s (%s)", post.id, post.slug)
    return post


def build_changes(data: BlogPostUpdate) -> dict:
    """Exactly the supplied fields, limited to the allow-list."""
    changes = data.model_dump(exclude_unset=True)
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationFailed(f"Unknown fields: {', '.join(sorted(unknown))}")
    if not changes:
        raise ValidationFailed("No fields to update")
    nulls = [k for k in changes if k in NON_NULLABLE_FIELDS and changes[k] is None]
    if nulls:
        raise ValidationFailed(f"Fields cannot be null: {', '.join(sorted(nulls))}")
    if "title" in changes and not changes["title"].strip():
        raise ValidationFailed("title cannot be empty")
    if "content" in changes and not changes["content"].strip():
        raise ValidationFailed("content cannot be empty")
    return changes


async def update_post(db: AsyncSession, post: BlogPost, data: BlogPostUpdate) -> tuple[BlogPost, dict]:
    changes = build_changes(data)
    if changes.get("status") == PostStatus.PUBLISHED and post.status != PostStatus.PUBLISHED:
        changes["published_at"] = utc_now()
    if "title" in changes and changes["title"] != post.title:
        changes["slug"] = await unique_slug(db, changes["title"], exclude_id=post.id)

    for key, value in changes.items():
        setattr(post, key, value)
    await db.flush()
    await db.refresh(post)
    return post, changes


async def delete_post(db: AsyncSession, post: BlogPost) -> None:
    await db.delete(post)
    await db.flush()
    logger.info("Blog post deleted: %s", post.id)


async def like_post(db: AsyncSession, post_id: uuid.UUID) -> int:
    stmt = (
        update(BlogPost)
        .where(BlogPost.id == post_id)
        .values(likes=BlogPost.likes + 1)
        .returning(BlogPost.likes)
        .execution_options(synchronize_session=False)
    )
    likes = (await db.execute(stmt)).scalar_one_or_none()
    if likes is None:
        raise NotFound("Blog post not found")
    return likes


# --- Meta ---

async def category_counts(db: AsyncSession) -> list[dict]:
    count_col = func.count(BlogPost.id).label("count")
    query = (
        select(BlogPost.category, count_col)
        .where(BlogPost.status == PostStatus.PUBLISHED, BlogPost.category.is_not(None))
        .group_by(BlogPost.category)
        .order_by(count_col.desc())
    )
    rows = (await db.execute(query)).all()
    return [{"category": category, "count": count} for category, count in rows]


async def blog_stats(db: AsyncSession) -> dict:
    published = BlogPost.status == PostStatus.PUBLISHED
    totals = (await db.execute(
        select(
            func.count(BlogPost.id),
            func.coalesce(func.sum(BlogPost.views), 0),
            func.coalesce(func.sum(BlogPost.likes), 0),
        ).where(published)
    )).one()
    featured = (await db.execute(
        select(func.count(BlogPost.id)).where(published, BlogPost.featured.is_(True))
    )).scalar() or 0
    recent = (await db.execute(
        select(BlogPost).where(published).order_by(BlogPost.published_at.desc()).limit(5)
    )).scalars().all()

    return {
        "total_posts": totals[0],
        "total_views": int(totals[1]),
        "total_likes": int(totals[2]),
        "featured_posts": featured,
        "recent_posts": [
            {
                "title": p.title,
                "slug": p.slug,
                "views": p.views,
                "likes": p.likes,
                "published_at": p.published_at,
            }
            for p in recent
        ],
    }


# --- Comments ---

async def add_comment(db: AsyncSession, post: BlogPost, name: str, email: str, comment: str) -> BlogComment:
    entry = BlogComment(
        post_id=post.id,
        name=name.strip(),
        email=email,
        comment=comment.strip(),
        status=CommentStatus.PENDING,
    )
    db.add(entry)
    await db.flush()
    await db.refresh(entry)
    return entry


async def list_approved_comments(db: AsyncSession, post_id: uuid.UUID) -> list[BlogComment]:
    result = await db.execute(
        select(BlogComment)
        .where(BlogComment.post_id == post_id, BlogComment.status == CommentStatus.APPROVED)
        .order_by(BlogComment.created_at.asc())
    )
    return list(result.scalars().all())
