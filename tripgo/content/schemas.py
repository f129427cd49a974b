"""Site content Pydantic schemas."""


import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from tripgo.common.constants import BookingType, SettingType

_KEY_PATTERN = r"^[a-z0-9][a-z0-9_.-]*$"
_PAGE_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
_COLOR_PATTERN = r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$"

_STRING_TYPES = {SettingType.text, SettingType.textarea, SettingType.image, SettingType.video}


def check_setting_value(value_type: SettingType, value: Any) -> Any:
    """Return *value* if it fits *value_type*, else raise ``ValueError``.

    ``None`` clears a setting of any type; ``json`` accepts any JSON value.
    """
    if value is None or value_type == SettingType.json:
        return value
    if value_type in _STRING_TYPES and not isinstance(value, str):
        raise ValueError(f"must be a string for a {value_type.value} setting")
    if value_type == SettingType.boolean and not isinstance(value, bool):
        raise ValueError("must be true or false for a boolean setting")
    if value_type == SettingType.number and (
        isinstance(value, bool) or not isinstance(value, (int, float))
    ):
        raise ValueError("must be a number for a number setting")
    return value


# ═════════════════════════════════════════════════════════════════════
# Settings
# ═════════════════════════════════════════════════════════════════════


class SettingCreate(BaseModel):
    key: str = Field(..., min_length=1, max_length=100, pattern=_KEY_PATTERN)
    value_type: SettingType = SettingType.text
    value: Any = None
    category: str = Field("general", min_length=1, max_length=50)
    label: Optional[str] = Field(None, max_length=150)
    description: Optional[str] = None
    is_public: bool = False

    @field_validator("value")
    @classmethod
    def _value_matches_type(cls, v: Any, info: ValidationInfo) -> Any:
        return check_setting_value(info.data.get("value_type", SettingType.text), v)


class SettingUpdate(BaseModel):
    value: Any = None
    value_type: Optional[SettingType] = None
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    label: Optional[str] = Field(None, max_length=150)
    description: Optional[str] = None
    is_public: Optional[bool] = None


class SettingUpsert(SettingUpdate):
    """One entry of a bulk save; creates the key when it does not exist yet."""

    key: str = Field(..., min_length=1, max_length=100, pattern=_KEY_PATTERN)


class SettingBulkUpdate(BaseModel):
    settings: list[SettingUpsert] = Field(..., min_length=1, max_length=200)

    @field_validator("settings")
    @classmethod
    def _unique_keys(cls, v: list[SettingUpsert]) -> list[SettingUpsert]:
        keys = [s.key for s in v]
        if len(keys) != len(set(keys)):
            raise ValueError("each key may appear only once")
        return v


class SettingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    key: str
    value: Any = None
    value_type: SettingType
    category: str
    label: Optional[str] = None
    description: Optional[str] = None
    is_public: bool
    updated_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime


class PublicSetting(BaseModel):
    value: Any = None
    value_type: SettingType
    label: Optional[str] = None


class SettingsListing(BaseModel):
    settings: list[SettingResponse]
    grouped: dict[str, list[SettingResponse]]


class DefaultsResult(BaseModel):
    created: int
    settings: list[SettingResponse]


# ═════════════════════════════════════════════════════════════════════
# Hero
# ═════════════════════════════════════════════════════════════════════


class HeroUpsert(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    subtitle: Optional[str] = None
    cta_text: Optional[str] = Field(None, max_length=100)
    cta_link: Optional[str] = Field(None, max_length=500)
    video_url: Optional[str] = Field(None, max_length=500)
    video_poster: Optional[str] = Field(None, max_length=500)
    video_loop: Optional[bool] = None
    video_autoplay: Optional[bool] = None
    video_muted: Optional[bool] = None
    fallback_image: Optional[str] = Field(None, max_length=500)
    overlay_color: Optional[str] = Field(None, pattern=_COLOR_PATTERN)
    overlay_opacity: Optional[Decimal] = Field(None, ge=0, le=1)
    display_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class HeroResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    page: str
    title: Optional[str] = None
    subtitle: Optional[str] = None
    cta_text: Optional[str] = None
    cta_link: Optional[str] = None
    video_url: Optional[str] = None
    video_poster: Optional[str] = None
    video_loop: bool
    video_autoplay: bool
    video_muted: bool
    fallback_image: Optional[str] = None
    overlay_color: str
    overlay_opacity: Decimal
    display_order: int
    is_active: bool
    updated_at: datetime


# ═════════════════════════════════════════════════════════════════════
# Footer
# ═════════════════════════════════════════════════════════════════════


class FooterUpdate(BaseModel):
    company_name: Optional[str] = Field(None, max_length=200)
    company_tagline: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    logo: Optional[str] = Field(None, max_length=500)
    copyright_text: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    social_links: Optional[dict[str, str]] = None
    show_newsletter: Optional[bool] = None
    newsletter_title: Optional[str] = Field(None, max_length=200)
    newsletter_text: Optional[str] = None
    background_color: Optional[str] = Field(None, pattern=_COLOR_PATTERN)
    text_color: Optional[str] = Field(None, pattern=_COLOR_PATTERN)
    accent_color: Optional[str] = Field(None, pattern=_COLOR_PATTERN)
    is_active: Optional[bool] = None


class FooterSectionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    display_order: int = Field(0, ge=0)
    is_active: bool = True


class FooterSectionUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    display_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class FooterLinkCreate(BaseModel):
    label: str = Field(..., min_length=1, max_length=100)
    url: str = Field(..., min_length=1, max_length=500)
    icon: Optional[str] = Field(None, max_length=50)
    open_in_new_tab: bool = False
    display_order: int = Field(0, ge=0)
    is_active: bool = True


class FooterLinkUpdate(BaseModel):
    label: Optional[str] = Field(None, min_length=1, max_length=100)
    url: Optional[str] = Field(None, min_length=1, max_length=500)
    icon: Optional[str] = Field(None, max_length=50)
    open_in_new_tab: Optional[bool] = None
    display_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class FooterLinkResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    section_id: uuid.UUID
    label: str
    url: str
    icon: Optional[str] = None
    open_in_new_tab: bool
    display_order: int
    is_active: bool


class FooterSectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    display_order: int
    is_active: bool
    links: list[FooterLinkResponse] = []


class FooterResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    company_name: Optional[str] = None
    company_tagline: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    copyright_text: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    social_links: dict[str, str] = {}
    show_newsletter: bool
    newsletter_title: Optional[str] = None
    newsletter_text: Optional[str] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    accent_color: Optional[str] = None
    is_active: bool
    sections: list[FooterSectionResponse] = []
    updated_at: datetime


# ═════════════════════════════════════════════════════════════════════
# Pages
# ═════════════════════════════════════════════════════════════════════


class PageCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=220, pattern=_PAGE_PATTERN)
    body: str = Field(..., min_length=1)
    seo_title: Optional[str] = Field(None, max_length=200)
    seo_description: Optional[str] = Field(None, max_length=500)
    published: bool = False

    @field_validator("title", "body")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class PageUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=220, pattern=_PAGE_PATTERN)
    body: Optional[str] = Field(None, min_length=1)
    seo_title: Optional[str] = Field(None, max_length=200)
    seo_description: Optional[str] = Field(None, max_length=500)
    published: Optional[bool] = None


class PageBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    slug: str
    published: bool
    published_at: Optional[datetime] = None
    updated_at: datetime


class PageResponse(PageBrief):
    body: str
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    updated_by: Optional[uuid.UUID] = None
    created_at: datetime


# ═════════════════════════════════════════════════════════════════════
# Catalogue visibility
# ═════════════════════════════════════════════════════════════════════


class BulkVisibility(BaseModel):
    content_type: BookingType
    content_ids: list[uuid.UUID] = Field(..., min_length=1, max_length=200)


class BulkVisibilityResult(BaseModel):
    updated: int
