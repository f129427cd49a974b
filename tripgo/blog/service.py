"""Blog service — public reading, comments, and the editor's back office."""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, cast, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tripgo.blog.models import BlogComment, BlogPost
from tripgo.blog.schemas import BlogPostCreate, BlogPostUpdate, CommentCreate, TagCount
from tripgo.common.audit import create_audit_entry
from tripgo.common.exceptions import BadRequestException, ConflictError, NotFoundException
from tripgo.common.filters import apply_filters, apply_search
from tripgo.common.pagination import PaginatedResponse, PaginationParams, paginate
from tripgo.common.slugs import generate_slug, slug_exists
from tripgo.users.models import User

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BlogService:

    # ── Public ──────────────────────────────────────────────────────

    @staticmethod
    async def list_posts(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        published_only: bool = True,
        published: Optional[bool] = None,
        category: Optional[str] = None,
        tag: Optional[str] = None,
        search: Optional[str] = None,
    ) -> PaginatedResponse:
        query = (
            select(BlogPost)
            .where(BlogPost.tenant_id == tenant_id)
            .options(selectinload(BlogPost.author))
        )
        if published_only:
            query = query.where(BlogPost.published.is_(True)).order_by(
                BlogPost.published_at.desc(), BlogPost.created_at.desc(),
            )
        else:
            query = query.order_by(BlogPost.created_at.desc())

        query = apply_filters(query, BlogPost, {"published": published, "category": category})
        if tag:
            # tags are stored as a JSON list of lower-cased strings
            query = query.where(cast(BlogPost.tags, String).like(f'%"{tag.strip().lower()}"%'))
        query = apply_search(query, BlogPost, search, ["title", "excerpt", "content"])
        return await paginate(db, query, pagination, model=BlogPost)

    @staticmethod
    async def get_published_by_slug(db: AsyncSession, tenant_id: uuid.UUID, slug: str) -> BlogPost:
        """Fetch a published post and count the view."""
        result = await db.execute(
            select(BlogPost)
            .where(
                BlogPost.tenant_id == tenant_id,
                BlogPost.slug == slug,
                BlogPost.published.is_(True),
            )
            .options(
                selectinload(BlogPost.author),
                selectinload(BlogPost.comments).selectinload(BlogComment.user),
            ),
        )
        post = result.scalars().first()
        if post is None:
            raise NotFoundException("BlogPost", slug)
        await db.execute(
            update(BlogPost)
            .where(BlogPost.id == post.id)
            # a view is not an edit
            .values(view_count=BlogPost.view_count + 1, updated_at=BlogPost.updated_at),
        )
        await db.refresh(post, attribute_names=["view_count"])
        return post

    @staticmethod
    async def list_categories(db: AsyncSession, tenant_id: uuid.UUID) -> list[str]:
        result = await db.execute(
            select(BlogPost.category)
            .where(
                BlogPost.tenant_id == tenant_id,
                BlogPost.published.is_(True),
                BlogPost.category.is_not(None),
            )
            .distinct()
            .order_by(BlogPost.category),
        )
        return [row[0] for row in result.all()]

    @staticmethod
    async def list_tags(db: AsyncSession, tenant_id: uuid.UUID) -> list[TagCount]:
        """Tags of published posts, most used first (ties alphabetical)."""
        result = await db.execute(
            select(BlogPost.tags).where(
                BlogPost.tenant_id == tenant_id,
                BlogPost.published.is_(True),
            ),
        )
        counts: Counter[str] = Counter()
        for (tags,) in result.all():
            counts.update(tags or [])
        ordered = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
        return [TagCount(tag=tag, count=count) for tag, count in ordered]

    @staticmethod
    async def add_comment(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        slug: str,
        user: User,
        data: CommentCreate,
    ) -> BlogComment:
        result = await db.execute(
            select(BlogPost).where(
                BlogPost.tenant_id == tenant_id,
                BlogPost.slug == slug,
                BlogPost.published.is_(True),
            ),
        )
        post = result.scalars().first()
        if post is None:
            raise NotFoundException("BlogPost", slug)

        content = data.content.strip()
        if not content:
            raise BadRequestException("Comment cannot be empty.")

        comment = BlogComment(
            tenant_id=tenant_id,
            post_id=post.id,
            user_id=user.id,
            content=content,
        )
        db.add(comment)
        await db.flush()
        logger.info("Comment %s awaiting moderation on post %s", comment.id, post.slug)
        return await BlogService.get_comment(db, tenant_id, comment.id)

    # ── Admin ───────────────────────────────────────────────────────

    @staticmethod
    async def get_post(db: AsyncSession, tenant_id: uuid.UUID, post_id: uuid.UUID) -> BlogPost:
        result = await db.execute(
            select(BlogPost)
            .where(BlogPost.tenant_id == tenant_id, BlogPost.id == post_id)
            .options(
                selectinload(BlogPost.author),
                selectinload(BlogPost.comments).selectinload(BlogComment.user),
            )
            .execution_options(populate_existing=True),
        )
        post = result.scalars().first()
        if post is None:
            raise NotFoundException("BlogPost", str(post_id))
        return post

    @staticmethod
    async def _slug_for(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        title: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> str:
        slug = generate_slug(title)
        if not slug:
            raise BadRequestException("Title must contain at least one letter or digit.")
        if await slug_exists(db, BlogPost, slug, tenant_id=tenant_id, exclude_id=exclude_id):
            raise ConflictError("slug", slug)
        return slug

    @staticmethod
    async def create_post(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        author: User,
        data: BlogPostCreate,
    ) -> BlogPost:
        slug = await BlogService._slug_for(db, tenant_id, data.title)
        post = BlogPost(
            tenant_id=tenant_id,
            author_id=author.id,
            slug=slug,
            published_at=_now() if data.published else None,
            **data.model_dump(),
        )
        db.add(post)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="blog_post",
            entity_id=post.id,
            tenant_id=tenant_id,
            actor_id=author.id,
            new_values={"title": post.title, "slug": slug, "published": post.published},
        )
        return await BlogService.get_post(db, tenant_id, post.id)

    @staticmethod
    async def update_post(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        post_id: uuid.UUID,
        data: BlogPostUpdate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> BlogPost:
        post = await BlogService.get_post(db, tenant_id, post_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("title") is not None and changes["title"] != post.title:
            post.slug = await BlogService._slug_for(db, tenant_id, changes["title"], exclude_id=post.id)

        if "published" in changes and changes["published"] is not None:
            if changes["published"] and not post.published:
                post.published_at = post.published_at or _now()
            elif not changes["published"]:
                post.published_at = None

        for field, value in changes.items():
            if value is None and field in ("title", "content", "published", "tags"):
                continue
            setattr(post, field, value)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="blog_post",
            entity_id=post.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json", exclude_unset=True),
        )
        return await BlogService.get_post(db, tenant_id, post.id)

    @staticmethod
    async def delete_post(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        post_id: uuid.UUID,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> None:
        post = await BlogService.get_post(db, tenant_id, post_id)
        await db.delete(post)
        await db.flush()
        await create_audit_entry(
            db,
            action="delete",
            entity_type="blog_post",
            entity_id=post_id,
            tenant_id=tenant_id,
            actor_id=actor_id,
        )

    # ── Comments ────────────────────────────────────────────────────

    @staticmethod
    async def get_comment(db: AsyncSession, tenant_id: uuid.UUID, comment_id: uuid.UUID) -> BlogComment:
        result = await db.execute(
            select(BlogComment)
            .where(BlogComment.tenant_id == tenant_id, BlogComment.id == comment_id)
            .options(selectinload(BlogComment.user))
            .execution_options(populate_existing=True),
        )
        comment = result.scalars().first()
        if comment is None:
            raise NotFoundException("BlogComment", str(comment_id))
        return comment

    @staticmethod
    async def list_comments(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        approved: Optional[bool] = None,
        post_id: Optional[uuid.UUID] = None,
    ) -> PaginatedResponse:
        query = (
            select(BlogComment)
            .where(BlogComment.tenant_id == tenant_id)
            .options(selectinload(BlogComment.user))
            .order_by(BlogComment.created_at.desc())
        )
        query = apply_filters(query, BlogComment, {"approved": approved, "post_id": post_id})
        return await paginate(db, query, pagination, model=BlogComment)

    @staticmethod
    async def moderate_comment(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        comment_id: uuid.UUID,
        approved: bool,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> BlogComment:
        comment = await BlogService.get_comment(db, tenant_id, comment_id)
        comment.approved = approved
        await db.flush()
        await create_audit_entry(
            db,
            action="approve" if approved else "unapprove",
            entity_type="blog_comment",
            entity_id=comment.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
        )
        return await BlogService.get_comment(db, tenant_id, comment.id)

    @staticmethod
    async def delete_comment(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        comment_id: uuid.UUID,
    ) -> None:
        comment = await BlogService.get_comment(db, tenant_id, comment_id)
        await db.delete(comment)
        await db.flush()
