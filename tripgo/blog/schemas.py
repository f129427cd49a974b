"""Blog Pydantic schemas."""


import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator


def _clean_tags(value: Optional[list[str]]) -> Optional[list[str]]:
    if value is None:
        return None
    tags: list[str] = []
    for tag in value:
        tag = tag.strip().lower()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


class BlogPostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    excerpt: Optional[str] = Field(None, max_length=500)
    featured_image: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=100)
    tags: list[str] = Field(default_factory=list)
    published: bool = False

    @field_validator("title", "content")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("tags")
    @classmethod
    def _normalise_tags(cls, v: list[str]) -> list[str]:
        return _clean_tags(v)


class BlogPostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    excerpt: Optional[str] = Field(None, max_length=500)
    featured_image: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=100)
    tags: Optional[list[str]] = None
    published: Optional[bool] = None

    @field_validator("tags")
    @classmethod
    def _normalise_tags(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return _clean_tags(v)


class BlogPostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    slug: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    category: Optional[str] = None
    tags: list[str] = []
    published: bool
    published_at: Optional[datetime] = None
    view_count: int
    author_id: Optional[uuid.UUID] = None
    author_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    post_id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    user_name: Optional[str] = None
    content: str
    approved: bool
    created_at: datetime


class BlogPostDetail(BlogPostResponse):
    content: str
    comments: list[CommentResponse] = []


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class CommentModeration(BaseModel):
    approved: StrictBool


class TagCount(BaseModel):
    tag: str
    count: int
