"""Media library router.

Routes (``/api/v1/media``):
    POST   /upload            — Upload one file (multipart ``file``)
    POST   /upload-multiple   — Upload up to 10 files (multipart ``files``)
    GET    ""                 — List (category, folder, search)
    GET    /stats, /folders   — Library statistics and folder names
    GET    /file/{id}         — Serve the stored bytes (public)
    GET    /{id}              — Metadata
    PUT    /{id}              — Update metadata
    DELETE /{id}              — Delete row and file
    POST   /bulk-delete       — Delete many
"""


import os
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.auth.dependencies import require_permission
from tripgo.common.constants import MediaCategory
from tripgo.common.exceptions import BadRequestException, NotFoundException
from tripgo.common.pagination import PaginationParams
from tripgo.common.responses import paginated_response, success_response
from tripgo.database import get_db
from tripgo.media.schemas import (
    BulkDeleteRequest,
    MediaResponse,
    MediaUpdate,
    MultiUploadResult,
)
from tripgo.media.service import MAX_FILES_PER_UPLOAD, MediaService, absolute_path
from tripgo.tenants.dependencies import get_current_tenant
from tripgo.tenants.models import Tenant
from tripgo.users.models import User

router = APIRouter(prefix="", tags=["media"])

_manage = require_permission("media:manage")


def _split_tags(raw: Optional[str]) -> list[str]:
    return [t.strip() for t in (raw or "").split(",") if t.strip()]


# ── Upload ──────────────────────────────────────────────────────────

@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile = File(...),
    folder: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    alt_text: Optional[str] = Form(None),
    tags: Optional[str] = Form(None, description="Comma-separated"),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    contents = await file.read()
    media = await MediaService.store_upload(
        db,
        tenant.id,
        current_user,
        original_name=file.filename or "upload",
        content_type=file.content_type,
        contents=contents,
        folder=folder,
        title=title,
        description=description,
        alt_text=alt_text,
        tags=_split_tags(tags),
    )
    return success_response(MediaResponse.model_validate(media), "File uploaded successfully")


@router.post("/upload-multiple", status_code=status.HTTP_201_CREATED)
async def upload_files(
    files: list[UploadFile] = File(...),
    folder: Optional[str] = Form(None),
    tags: Optional[str] = Form(None, description="Comma-separated"),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    if len(files) > MAX_FILES_PER_UPLOAD:
        raise BadRequestException(f"At most {MAX_FILES_PER_UPLOAD} files can be uploaded at once.")

    payload = [(f.filename or "upload", f.content_type, await f.read()) for f in files]
    saved, failed = await MediaService.store_many(
        db, tenant.id, current_user, payload, folder=folder, tags=_split_tags(tags),
    )
    result = MultiUploadResult(
        uploaded=[MediaResponse.model_validate(m) for m in saved],
        failed=failed,
    )
    return success_response(result, f"{len(saved)} file(s) uploaded, {len(failed)} failed")


# ── Read ────────────────────────────────────────────────────────────

@router.get("")
async def list_files(
    pagination: PaginationParams = Depends(),
    category: Optional[MediaCategory] = Query(None),
    folder: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    result = await MediaService.list_files(
        db, tenant.id, pagination, category=category, folder=folder, search=search,
    )
    return paginated_response([MediaResponse.model_validate(m) for m in result.data], result.meta)


@router.get("/stats")
async def media_stats(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    return success_response(await MediaService.stats(db, tenant.id))


@router.get("/folders")
async def media_folders(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    return success_response(await MediaService.folders(db, tenant.id))


@router.get("/file/{media_id}")
async def serve_file(
    media_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    media = await MediaService.get_file(db, tenant.id, media_id)
    path = absolute_path(media)
    if not os.path.isfile(path):
        raise NotFoundException("File", str(media_id))
    return FileResponse(path, media_type=media.mime_type, filename=media.original_name)


@router.get("/{media_id}")
async def get_file(
    media_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    media = await MediaService.get_file(db, tenant.id, media_id)
    return success_response(MediaResponse.model_validate(media))


# ── Write ───────────────────────────────────────────────────────────

@router.put("/{media_id}")
async def update_file(
    media_id: uuid.UUID,
    body: MediaUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    media = await MediaService.update_file(db, tenant.id, media_id, body)
    return success_response(MediaResponse.model_validate(media), "File updated successfully")


@router.delete("/{media_id}")
async def delete_file(
    media_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    await MediaService.delete_file(db, tenant.id, media_id, actor_id=current_user.id)
    return success_response(message="File deleted successfully")


@router.post("/bulk-delete")
async def bulk_delete(
    body: BulkDeleteRequest,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    result = await MediaService.bulk_delete(db, tenant.id, body.ids, actor_id=current_user.id)
    return success_response(result, f"{result.deleted} file(s) deleted")
