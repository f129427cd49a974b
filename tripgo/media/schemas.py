"""Media library Pydantic schemas."""


import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from tripgo.common.constants import MediaCategory


class MediaUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    alt_text: Optional[str] = Field(None, max_length=255)
    folder: Optional[str] = Field(None, max_length=100)
    tags: Optional[list[str]] = None


class MediaResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    filename: str
    original_name: str
    mime_type: str
    size: int
    category: MediaCategory
    folder: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    alt_text: Optional[str] = None
    tags: list[str] = []
    url: str
    uploaded_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime


class FailedUpload(BaseModel):
    filename: str
    error: str


class MultiUploadResult(BaseModel):
    uploaded: list[MediaResponse]
    failed: list[FailedUpload]


class BulkDeleteRequest(BaseModel):
    ids: list[uuid.UUID] = Field(..., min_length=1, max_length=100)


class BulkDeleteResult(BaseModel):
    deleted: int
    not_found: list[uuid.UUID] = []


class CategoryStats(BaseModel):
    count: int = 0
    size: int = 0


class MediaStats(BaseModel):
    total_files: int
    total_size: int
    by_category: dict[str, CategoryStats]
