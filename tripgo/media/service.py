"""Media library service — validation, disk storage, metadata.

Files are written under ``settings.UPLOAD_DIR/<tenant_id>/<category>/`` with a
random hex name; the client-supplied filename is kept only as metadata.
"""

from __future__ import annotations

import logging
import os
import uuid
from typing import Any, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.common.audit import create_audit_entry
from tripgo.common.constants import MediaCategory
from tripgo.common.exceptions import BadRequestException, NotFoundException
from tripgo.common.filters import apply_filters, apply_search
from tripgo.common.pagination import PaginatedResponse, PaginationParams, paginate
from tripgo.config import settings
from tripgo.media.models import MediaFile
from tripgo.media.schemas import (
    BulkDeleteResult,
    CategoryStats,
    FailedUpload,
    MediaStats,
    MediaUpdate,
)
from tripgo.users.models import User

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES: dict[str, MediaCategory] = {
    "image/jpeg": MediaCategory.image,
    "image/png": MediaCategory.image,
    "image/gif": MediaCategory.image,
    "image/webp": MediaCategory.image,
    "image/svg+xml": MediaCategory.image,
    "video/mp4": MediaCategory.video,
    "video/webm": MediaCategory.video,
    "video/quicktime": MediaCategory.video,
    "audio/mpeg": MediaCategory.audio,
    "audio/wav": MediaCategory.audio,
    "audio/ogg": MediaCategory.audio,
    "application/pdf": MediaCategory.document,
    "application/msword": MediaCategory.document,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": MediaCategory.document,
    "application/vnd.ms-excel": MediaCategory.document,
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": MediaCategory.document,
    "text/plain": MediaCategory.document,
    "text/csv": MediaCategory.document,
    "application/zip": MediaCategory.archive,
    "application/gzip": MediaCategory.archive,
}

MAX_FILES_PER_UPLOAD = 10


def category_for(mime_type: str) -> MediaCategory:
    """Map a MIME type to its library category (``other`` when unknown)."""
    mime_type = (mime_type or "").lower()
    if mime_type in ALLOWED_MIME_TYPES:
        return ALLOWED_MIME_TYPES[mime_type]
    major = mime_type.split("/", 1)[0]
    return {
        "image": MediaCategory.image,
        "video": MediaCategory.video,
        "audio": MediaCategory.audio,
    }.get(major, MediaCategory.other)


def absolute_path(media: MediaFile) -> str:
    return os.path.join(settings.UPLOAD_DIR, media.storage_path)


def _remove_from_disk(path: str) -> None:
    if os.path.exists(path):
        os.remove(path)


class MediaService:

    # ── Upload ──────────────────────────────────────────────────────

    @staticmethod
    async def store_upload(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        uploader: User,
        *,
        original_name: str,
        content_type: Optional[str],
        contents: bytes,
        folder: Optional[str] = None,
        title: Optional[str] = None,
        description: Optional[str] = None,
        alt_text: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> MediaFile:
        mime_type = (content_type or "").lower()
        if mime_type not in ALLOWED_MIME_TYPES:
            raise BadRequestException(f"File type '{content_type}' is not allowed.")
        if not contents:
            raise BadRequestException("Uploaded file is empty.")
        if len(contents) > settings.max_upload_bytes:
            raise BadRequestException(
                f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE_MB} MB.",
            )

        category = category_for(mime_type)
        # Random name only, the client filename never touches the path
        ext = os.path.splitext(original_name or "")[1].lower()
        filename = f"{uuid.uuid4().hex}{ext}"
        relative = os.path.join(str(tenant_id), category.value, filename)
        target = os.path.join(settings.UPLOAD_DIR, relative)

        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, "wb") as f:
            f.write(contents)

        media_id = uuid.uuid4()
        media = MediaFile(
            id=media_id,
            tenant_id=tenant_id,
            uploaded_by=uploader.id,
            filename=filename,
            original_name=original_name or filename,
            mime_type=mime_type,
            size=len(contents),
            category=category,
            folder=(folder or "").strip() or None,
            title=title,
            description=description,
            alt_text=alt_text,
            tags=[t.strip() for t in (tags or []) if t.strip()],
            url=f"{settings.MEDIA_BASE_URL}/{media_id}",
            storage_path=relative,
        )
        db.add(media)
        try:
            await db.flush()
        except Exception:
            _remove_from_disk(target)
            raise

        logger.info(
            "Stored %s (%d bytes) as %s for tenant %s", media.original_name, media.size, relative, tenant_id,
        )
        return media

    @staticmethod
    async def store_many(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        uploader: User,
        files: Iterable[tuple[str, Optional[str], bytes]],
        *,
        folder: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> tuple[list[MediaFile], list[FailedUpload]]:
        """Store each ``(name, content_type, bytes)``; rejected files are reported, not raised."""
        saved: list[MediaFile] = []
        failed: list[FailedUpload] = []
        for name, content_type, contents in files:
            try:
                media = await MediaService.store_upload(
                    db,
                    tenant_id,
                    uploader,
                    original_name=name,
                    content_type=content_type,
                    contents=contents,
                    folder=folder,
                    tags=tags,
                )
            except BadRequestException as exc:
                failed.append(FailedUpload(filename=name, error=exc.detail))
                continue
            saved.append(media)
        return saved, failed

    # ── Read ────────────────────────────────────────────────────────

    @staticmethod
    async def list_files(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        category: Optional[MediaCategory] = None,
        folder: Optional[str] = None,
        search: Optional[str] = None,
    ) -> PaginatedResponse:
        query = (
            select(MediaFile)
            .where(MediaFile.tenant_id == tenant_id)
            .order_by(MediaFile.created_at.desc())
        )
        query = apply_filters(query, MediaFile, {"category": category, "folder": folder})
        query = apply_search(query, MediaFile, search, ["original_name", "title", "description", "tags"])
        return await paginate(db, query, pagination, model=MediaFile)

    @staticmethod
    async def get_file(db: AsyncSession, tenant_id: uuid.UUID, media_id: uuid.UUID) -> MediaFile:
        result = await db.execute(
            select(MediaFile).where(MediaFile.id == media_id, MediaFile.tenant_id == tenant_id),
        )
        media = result.scalars().first()
        if media is None:
            raise NotFoundException("MediaFile", str(media_id))
        return media

    @staticmethod
    async def stats(db: AsyncSession, tenant_id: uuid.UUID) -> MediaStats:
        rows = await db.execute(
            select(MediaFile.category, MediaFile.size).where(MediaFile.tenant_id == tenant_id),
        )
        by_category = {c.value: CategoryStats() for c in MediaCategory}
        total_files = 0
        total_size = 0
        for category, size in rows.all():
            entry = by_category[category.value]
            entry.count += 1
            entry.size += size
            total_files += 1
            total_size += size
        return MediaStats(total_files=total_files, total_size=total_size, by_category=by_category)

    @staticmethod
    async def folders(db: AsyncSession, tenant_id: uuid.UUID) -> list[str]:
        result = await db.execute(
            select(MediaFile.folder)
            .where(MediaFile.tenant_id == tenant_id, MediaFile.folder.is_not(None))
            .distinct()
            .order_by(MediaFile.folder),
        )
        return [row[0] for row in result.all()]

    # ── Write ───────────────────────────────────────────────────────

    @staticmethod
    async def update_file(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        media_id: uuid.UUID,
        data: MediaUpdate,
    ) -> MediaFile:
        media = await MediaService.get_file(db, tenant_id, media_id)
        changes: dict[str, Any] = data.model_dump(exclude_unset=True)
        if "tags" in changes:
            changes["tags"] = [t.strip() for t in (changes["tags"] or []) if t.strip()]
        if "folder" in changes:
            changes["folder"] = (changes["folder"] or "").strip() or None
        for field, value in changes.items():
            setattr(media, field, value)
        await db.flush()
        return media

    @staticmethod
    async def delete_file(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        media_id: uuid.UUID,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> None:
        media = await MediaService.get_file(db, tenant_id, media_id)
        path = absolute_path(media)
        await db.delete(media)
        await create_audit_entry(
            db,
            action="delete",
            entity_type="media_file",
            entity_id=media_id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            old_values={"original_name": media.original_name, "storage_path": media.storage_path},
        )
        # Row and audit entry persist before the file goes
        await db.commit()
        _remove_from_disk(path)

    @staticmethod
    async def bulk_delete(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        media_ids: Iterable[uuid.UUID],
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> BulkDeleteResult:
        ids = list(dict.fromkeys(media_ids))
        result = await db.execute(
            select(MediaFile).where(MediaFile.tenant_id == tenant_id, MediaFile.id.in_(ids)),
        )
        found = {m.id: m for m in result.scalars().all()}

        paths = []
        for media in found.values():
            paths.append(absolute_path(media))
            await db.delete(media)
            await create_audit_entry(
                db,
                action="delete",
                entity_type="media_file",
                entity_id=media.id,
                tenant_id=tenant_id,
                actor_id=actor_id,
                old_values={"original_name": media.original_name, "storage_path": media.storage_path},
            )

        if found:
            await db.commit()
            for path in paths:
                _remove_from_disk(path)
            logger.info("Bulk-deleted %d media files for tenant %s (actor %s)", len(found), tenant_id, actor_id)
        return BulkDeleteResult(
            deleted=len(found),
            not_found=[i for i in ids if i not in found],
        )
