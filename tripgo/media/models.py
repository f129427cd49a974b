"""Media library ORM model."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tripgo.common.audit import TimestampMixin
from tripgo.common.constants import MediaCategory
from tripgo.database import Base

if TYPE_CHECKING:
    from tripgo.users.models import User


class MediaFile(Base, TimestampMixin):
    """An uploaded file.

    ``storage_path`` is relative to ``settings.UPLOAD_DIR`` and always has the
    shape ``<tenant_id>/<category>/<filename>``.
    """

    __tablename__ = "media_files"
    __table_args__ = (
        sa.Index("ix_media_files_tenant_category", "tenant_id", "category"),
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
    uploaded_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"),
    )
    filename: Mapped[str] = mapped_column(sa.String(255), nullable=False, unique=True)
    original_name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    size: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    category: Mapped[MediaCategory] = mapped_column(
        sa.Enum(MediaCategory, name="media_category"), nullable=False,
    )
    folder: Mapped[Optional[str]] = mapped_column(sa.String(100), index=True)
    title: Mapped[Optional[str]] = mapped_column(sa.String(255))
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    alt_text: Mapped[Optional[str]] = mapped_column(sa.String(255))
    tags: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    url: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    storage_path: Mapped[str] = mapped_column(sa.String(500), nullable=False)

    uploader: Mapped[Optional[User]] = relationship()

    def __repr__(self) -> str:
        return f"<MediaFile {self.original_name!r}>"
