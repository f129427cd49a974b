"""Blog ORM models: BlogPost, BlogComment."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tripgo.common.audit import TimestampMixin
from tripgo.database import Base

if TYPE_CHECKING:
    from tripgo.users.models import User


class BlogPost(Base, TimestampMixin):
    __tablename__ = "blog_posts"
    __table_args__ = (
        sa.UniqueConstraint("tenant_id", "slug", name="uq_blog_post_slug"),
        sa.Index("ix_blog_posts_tenant_published", "tenant_id", "published"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"),
    )
    title: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    slug: Mapped[str] = mapped_column(sa.String(280), nullable=False)
    content: Mapped[str] = mapped_column(sa.Text, nullable=False)
    excerpt: Mapped[Optional[str]] = mapped_column(sa.String(500))
    featured_image: Mapped[Optional[str]] = mapped_column(sa.String(500))
    category: Mapped[Optional[str]] = mapped_column(sa.String(100), index=True)
    tags: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    published: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    published_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    view_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)

    author: Mapped[Optional[User]] = relationship()
    comments: Mapped[list[BlogComment]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="BlogComment.created_at",
    )

    def __repr__(self) -> str:
        return f"<BlogPost {self.slug!r}>"


class BlogComment(Base, TimestampMixin):
    """Reader comment; hidden from the public until ``approved``."""

    __tablename__ = "blog_comments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    post_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("blog_posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"),
    )
    content: Mapped[str] = mapped_column(sa.Text, nullable=False)
    approved: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)

    post: Mapped[BlogPost] = relationship(back_populates="comments")
    user: Mapped[Optional[User]] = relationship()
