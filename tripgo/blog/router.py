"""Blog router.

Public (``/api/v1/blog``):
    GET  /posts                      — Published posts (category, tag, search)
    GET  /posts/{slug}               — One post with approved comments
    GET  /categories, /tags          — Facets of published posts
    POST /posts/{slug}/comments      — Add a comment (held for moderation)

Admin (``/api/v1/blog/admin``) requires ``blog:manage``.
"""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.auth.dependencies import require_permission
from tripgo.blog.models import BlogComment, BlogPost
from tripgo.blog.schemas import (
    BlogPostCreate,
    BlogPostDetail,
    BlogPostResponse,
    BlogPostUpdate,
    CommentCreate,
    CommentModeration,
    CommentResponse,
)
from tripgo.blog.service import BlogService
from tripgo.common.pagination import PaginationParams
from tripgo.common.responses import paginated_response, success_response
from tripgo.database import get_db
from tripgo.tenants.dependencies import get_current_tenant
from tripgo.tenants.models import Tenant
from tripgo.users.models import User

router = APIRouter(prefix="", tags=["blog"])

_manage = require_permission("blog:manage")


def _post_item(post: BlogPost) -> BlogPostResponse:
    item = BlogPostResponse.model_validate(post)
    item.author_name = post.author.full_name if post.author else None
    return item


def _comment_item(comment: BlogComment) -> CommentResponse:
    item = CommentResponse.model_validate(comment)
    item.user_name = comment.user.full_name if comment.user else None
    return item


def _post_detail(post: BlogPost, *, approved_only: bool) -> BlogPostDetail:
    comments = [c for c in post.comments if c.approved or not approved_only]
    return BlogPostDetail(
        **_post_item(post).model_dump(),
        content=post.content,
        comments=[_comment_item(c) for c in comments],
    )


# ═════════════════════════════════════════════════════════════════════
# Public
# ═════════════════════════════════════════════════════════════════════


@router.get("/posts")
async def list_posts(
    pagination: PaginationParams = Depends(),
    category: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    result = await BlogService.list_posts(
        db, tenant.id, pagination, category=category, tag=tag, search=search,
    )
    return paginated_response([_post_item(p) for p in result.data], result.meta)


@router.get("/categories")
async def list_categories(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    return success_response(await BlogService.list_categories(db, tenant.id))


@router.get("/tags")
async def list_tags(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    return success_response(await BlogService.list_tags(db, tenant.id))


@router.get("/posts/{slug}")
async def get_post(
    slug: str,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    post = await BlogService.get_published_by_slug(db, tenant.id, slug)
    return success_response(_post_detail(post, approved_only=True))


@router.post("/posts/{slug}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    slug: str,
    body: CommentCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("comment:create")),
):
    comment = await BlogService.add_comment(db, tenant.id, slug, current_user, body)
    return success_response(_comment_item(comment), "Comment submitted for moderation")


# ═════════════════════════════════════════════════════════════════════
# Admin
# ═════════════════════════════════════════════════════════════════════


@router.get("/admin/posts")
async def admin_list_posts(
    pagination: PaginationParams = Depends(),
    published: Optional[bool] = Query(None),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    result = await BlogService.list_posts(
        db,
        tenant.id,
        pagination,
        published_only=False,
        published=published,
        category=category,
        search=search,
    )
    return paginated_response([_post_item(p) for p in result.data], result.meta)


@router.post("/admin/posts", status_code=status.HTTP_201_CREATED)
async def admin_create_post(
    body: BlogPostCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    post = await BlogService.create_post(db, tenant.id, current_user, body)
    return success_response(_post_detail(post, approved_only=False), "Post created successfully")


@router.get("/admin/posts/{post_id}")
async def admin_get_post(
    post_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    post = await BlogService.get_post(db, tenant.id, post_id)
    return success_response(_post_detail(post, approved_only=False))


@router.put("/admin/posts/{post_id}")
async def admin_update_post(
    post_id: uuid.UUID,
    body: BlogPostUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    post = await BlogService.update_post(db, tenant.id, post_id, body, actor_id=current_user.id)
    return success_response(_post_detail(post, approved_only=False), "Post updated successfully")


@router.delete("/admin/posts/{post_id}")
async def admin_delete_post(
    post_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    await BlogService.delete_post(db, tenant.id, post_id, actor_id=current_user.id)
    return success_response(message="Post deleted successfully")


@router.get("/admin/comments")
async def admin_list_comments(
    pagination: PaginationParams = Depends(),
    approved: Optional[bool] = Query(None),
    post_id: Optional[uuid.UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    result = await BlogService.list_comments(
        db, tenant.id, pagination, approved=approved, post_id=post_id,
    )
    return paginated_response([_comment_item(c) for c in result.data], result.meta)


@router.put("/admin/comments/{comment_id}")
async def admin_moderate_comment(
    comment_id: uuid.UUID,
    body: CommentModeration,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    comment = await BlogService.moderate_comment(
        db, tenant.id, comment_id, body.approved, actor_id=current_user.id,
    )
    return success_response(_comment_item(comment), "Comment updated")


@router.delete("/admin/comments/{comment_id}")
async def admin_delete_comment(
    comment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    await BlogService.delete_comment(db, tenant.id, comment_id)
    return success_response(message="Comment deleted")
