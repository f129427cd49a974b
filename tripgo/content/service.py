"""Site content service — settings, hero banners, footer, static pages, catalogue visibility."""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tripgo.catalog.models import Cruise, Hotel, Package
from tripgo.common.audit import create_audit_entry
from tripgo.common.constants import BookingType, SettingType
from tripgo.common.exceptions import (
    BadRequestException,
    ConflictError,
    NotFoundException,
    ValidationException,
)
from tripgo.common.filters import apply_filters, apply_search
from tripgo.common.pagination import PaginatedResponse, PaginationParams, paginate
from tripgo.common.slugs import generate_slug, slug_exists
from tripgo.content.models import (
    ContentPage,
    FooterConfig,
    FooterLink,
    FooterSection,
    HeroSetting,
    SiteSetting,
)
from tripgo.content.schemas import (
    FooterLinkCreate,
    FooterLinkUpdate,
    FooterSectionCreate,
    FooterSectionUpdate,
    FooterUpdate,
    HeroUpsert,
    PageCreate,
    PageUpdate,
    PublicSetting,
    SettingCreate,
    SettingUpdate,
    SettingUpsert,
    check_setting_value,
)
from tripgo.tenants.models import Tenant

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


# (key, value, type, category, label, public)
DEFAULT_SETTINGS: list[tuple[str, Any, SettingType, str, str, bool]] = [
    ("site_name", "TripGo", SettingType.text, "general", "Site Name", True),
    ("site_description", "Your premier travel booking platform", SettingType.textarea, "general", "Site Description", True),
    ("site_logo", "", SettingType.image, "general", "Site Logo", True),
    ("contact_email", "", SettingType.text, "contact", "Contact Email", True),
    ("contact_phone", "", SettingType.text, "contact", "Contact Phone", True),
    ("facebook_url", "", SettingType.text, "social", "Facebook URL", True),
    ("instagram_url", "", SettingType.text, "social", "Instagram URL", True),
    ("seo_title", "TripGo - Book Your Dream Vacation", SettingType.text, "seo", "SEO Title", True),
    ("seo_description", "Cruises, hotels and travel packages.", SettingType.textarea, "seo", "SEO Description", True),
    ("currency", "USD", SettingType.text, "business", "Default Currency", True),
    ("timezone", "UTC", SettingType.text, "business", "Default Timezone", False),
    ("booking_cancellation_hours", 24, SettingType.number, "business", "Cancellation Hours", False),
    ("maintenance_mode", False, SettingType.boolean, "maintenance", "Maintenance Mode", False),
    ("maintenance_message", "We are performing maintenance. Please check back soon!", SettingType.textarea, "maintenance", "Maintenance Message", True),
]

# Hero columns that keep their value when a client sends null
_HERO_KEEP_ON_NULL = frozenset({
    "video_loop", "video_autoplay", "video_muted", "overlay_color",
    "overlay_opacity", "display_order", "is_active",
})

DEFAULT_FOOTER_SECTIONS: list[tuple[str, list[tuple[str, str]]]] = [
    ("Quick Links", [("Home", "/"), ("Cruises", "/cruises"), ("Hotels", "/hotels"), ("Packages", "/packages")]),
    ("Company", [("About Us", "/about"), ("Contact", "/contact"), ("Blog", "/blog")]),
    ("Support", [("FAQs", "/faq"), ("Terms & Conditions", "/terms"), ("Privacy Policy", "/privacy")]),
]


class SettingsService:
    """Tenant key/value settings."""

    @staticmethod
    async def list_settings(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        *,
        category: Optional[str] = None,
        is_public: Optional[bool] = None,
    ) -> list[SiteSetting]:
        query = (
            select(SiteSetting)
            .where(SiteSetting.tenant_id == tenant_id)
            .order_by(SiteSetting.category, SiteSetting.key)
        )
        query = apply_filters(query, SiteSetting, {"category": category, "is_public": is_public})
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    def group_by_category(settings: list[SiteSetting]) -> dict[str, list[SiteSetting]]:
        grouped: dict[str, list[SiteSetting]] = defaultdict(list)
        for setting in settings:
            grouped[setting.category].append(setting)
        return dict(grouped)

    @staticmethod
    async def public_settings(
        db: AsyncSession, tenant_id: uuid.UUID,
    ) -> dict[str, dict[str, PublicSetting]]:
        """Public settings as ``{category: {key: {value, value_type, label}}}``."""
        settings = await SettingsService.list_settings(db, tenant_id, is_public=True)
        grouped: dict[str, dict[str, PublicSetting]] = defaultdict(dict)
        for setting in settings:
            grouped[setting.category][setting.key] = PublicSetting(
                value=setting.value, value_type=setting.value_type, label=setting.label,
            )
        return dict(grouped)

    @staticmethod
    async def _find(db: AsyncSession, tenant_id: uuid.UUID, key: str) -> Optional[SiteSetting]:
        result = await db.execute(
            select(SiteSetting).where(SiteSetting.tenant_id == tenant_id, SiteSetting.key == key),
        )
        return result.scalars().first()

    @staticmethod
    async def get_setting(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        key: str,
        *,
        include_private: bool = False,
    ) -> SiteSetting:
        """Private settings are reported as missing unless *include_private*."""
        setting = await SettingsService._find(db, tenant_id, key)
        if setting is None or not (setting.is_public or include_private):
            raise NotFoundException("Setting", key)
        return setting

    @staticmethod
    async def create_setting(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: SettingCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> SiteSetting:
        if await SettingsService._find(db, tenant_id, data.key) is not None:
            raise ConflictError("key", data.key)
        setting = SiteSetting(tenant_id=tenant_id, updated_by=actor_id, **data.model_dump())
        db.add(setting)
        await db.flush()
        await create_audit_entry(
            db,
            action="create",
            entity_type="site_setting",
            entity_id=setting.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        return setting

    @staticmethod
    def _apply(setting: SiteSetting, changes: dict[str, Any], actor_id: Optional[uuid.UUID]) -> None:
        value_type = changes.get("value_type") or setting.value_type
        value = changes["value"] if "value" in changes else setting.value
        try:
            check_setting_value(value_type, value)
        except ValueError as exc:
            raise ValidationException({"value": [str(exc)]}) from exc

        for field, new in changes.items():
            if new is None and field in ("value_type", "category", "is_public"):
                continue
            setattr(setting, field, new)
        setting.updated_by = actor_id

    @staticmethod
    async def update_setting(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        key: str,
        data: SettingUpdate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> SiteSetting:
        setting = await SettingsService.get_setting(db, tenant_id, key, include_private=True)
        changes = data.model_dump(exclude_unset=True)
        old_value = setting.value
        SettingsService._apply(setting, changes, actor_id)
        await db.flush()
        await create_audit_entry(
            db,
            action="update",
            entity_type="site_setting",
            entity_id=setting.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            old_values={"value": old_value},
            new_values=data.model_dump(mode="json", exclude_unset=True),
        )
        return setting

    @staticmethod
    async def delete_setting(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        key: str,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> None:
        setting = await SettingsService.get_setting(db, tenant_id, key, include_private=True)
        await db.delete(setting)
        await db.flush()
        await create_audit_entry(
            db,
            action="delete",
            entity_type="site_setting",
            entity_id=setting.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            old_values={"key": key, "value": setting.value},
        )

    @staticmethod
    async def bulk_upsert(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        items: list[SettingUpsert],
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> list[SiteSetting]:
        """Update existing keys and create missing ones; all or nothing."""
        saved: list[SiteSetting] = []
        errors: dict[str, list[str]] = {}
        for item in items:
            changes = item.model_dump(exclude_unset=True, exclude={"key"})
            setting = await SettingsService._find(db, tenant_id, item.key)
            if setting is None:
                setting = SiteSetting(
                    tenant_id=tenant_id,
                    key=item.key,
                    value_type=SettingType.text,
                    category="general",
                    label=item.key,
                    is_public=False,
                )
                db.add(setting)
            try:
                SettingsService._apply(setting, changes, actor_id)
            except ValidationException as exc:
                errors[item.key] = exc.errors["value"]
                continue
            saved.append(setting)
        if errors:
            raise ValidationException(errors)

        await db.flush()
        logger.info("Saved %d settings for tenant %s", len(saved), tenant_id)
        return saved

    @staticmethod
    async def initialize_defaults(
        db: AsyncSession,
        tenant: Tenant,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> list[SiteSetting]:
        """Create any missing default settings; existing keys are left alone."""
        existing = {s.key for s in await SettingsService.list_settings(db, tenant.id)}
        overrides = {"site_name": tenant.name, "contact_email": tenant.contact_email or ""}

        created: list[SiteSetting] = []
        for key, value, value_type, category, label, is_public in DEFAULT_SETTINGS:
            if key in existing:
                continue
            setting = SiteSetting(
                tenant_id=tenant.id,
                key=key,
                value=overrides.get(key, value),
                value_type=value_type,
                category=category,
                label=label,
                is_public=is_public,
                updated_by=actor_id,
            )
            db.add(setting)
            created.append(setting)
        await db.flush()
        logger.info("Initialised %d default settings for tenant %s", len(created), tenant.slug)
        return created


class HeroService:
    """Per-page hero banners."""

    @staticmethod
    async def _find(db: AsyncSession, tenant_id: uuid.UUID, page: str) -> Optional[HeroSetting]:
        result = await db.execute(
            select(HeroSetting).where(HeroSetting.tenant_id == tenant_id, HeroSetting.page == page),
        )
        return result.scalars().first()

    @staticmethod
    async def get_public(db: AsyncSession, tenant_id: uuid.UUID, page: str) -> HeroSetting:
        hero = await HeroService._find(db, tenant_id, page)
        if hero is None or not hero.is_active:
            raise NotFoundException("HeroSetting", page)
        return hero

    @staticmethod
    async def list_all(db: AsyncSession, tenant_id: uuid.UUID) -> list[HeroSetting]:
        result = await db.execute(
            select(HeroSetting)
            .where(HeroSetting.tenant_id == tenant_id)
            .order_by(HeroSetting.display_order, HeroSetting.page),
        )
        return list(result.scalars().all())

    @staticmethod
    async def upsert(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        page: str,
        data: HeroUpsert,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> tuple[HeroSetting, bool]:
        """Create or update the hero of *page*; returns ``(hero, created)``."""
        hero = await HeroService._find(db, tenant_id, page)
        created = hero is None
        if created:
            hero = HeroSetting(tenant_id=tenant_id, page=page)
            db.add(hero)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(hero, field, value)
            elif field not in _HERO_KEEP_ON_NULL:
                setattr(hero, field, None)
        await db.flush()

        await create_audit_entry(
            db,
            action="create" if created else "update",
            entity_type="hero_setting",
            entity_id=hero.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json", exclude_unset=True),
        )
        return hero, created

    @staticmethod
    async def delete(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        page: str,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> None:
        hero = await HeroService._find(db, tenant_id, page)
        if hero is None:
            raise NotFoundException("HeroSetting", page)
        await db.delete(hero)
        await db.flush()
        await create_audit_entry(
            db,
            action="delete",
            entity_type="hero_setting",
            entity_id=hero.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            old_values={"page": page},
        )


class FooterService:
    """Footer configuration with its sections and links."""

    @staticmethod
    async def _load(db: AsyncSession, tenant_id: uuid.UUID) -> Optional[FooterConfig]:
        result = await db.execute(
            select(FooterConfig)
            .where(FooterConfig.tenant_id == tenant_id)
            .options(selectinload(FooterConfig.sections).selectinload(FooterSection.links))
            .execution_options(populate_existing=True),
        )
        return result.scalars().first()

    @staticmethod
    async def get_public(db: AsyncSession, tenant_id: uuid.UUID) -> Optional[FooterConfig]:
        """The active footer, or ``None`` when the tenant has none."""
        footer = await FooterService._load(db, tenant_id)
        if footer is None or not footer.is_active:
            return None
        return footer

    @staticmethod
    async def get_or_create(db: AsyncSession, tenant: Tenant) -> FooterConfig:
        footer = await FooterService._load(db, tenant.id)
        if footer is not None:
            return footer

        footer = FooterConfig(
            tenant_id=tenant.id,
            company_name=tenant.name,
            company_tagline="Your Journey, Our Passion",
            copyright_text=f"© {_now().year} {tenant.name}. All rights reserved.",
            email=tenant.contact_email,
            show_newsletter=True,
            newsletter_title="Subscribe to Our Newsletter",
            social_links={},
        )
        db.add(footer)
        await db.flush()
        for order, (title, links) in enumerate(DEFAULT_FOOTER_SECTIONS):
            section = FooterSection(
                tenant_id=tenant.id, footer_id=footer.id, title=title, display_order=order,
            )
            db.add(section)
            await db.flush()
            for link_order, (label, url) in enumerate(links):
                db.add(FooterLink(
                    tenant_id=tenant.id,
                    section_id=section.id,
                    label=label,
                    url=url,
                    display_order=link_order,
                ))
        await db.flush()
        logger.info("Created default footer for tenant %s", tenant.slug)
        return await FooterService._load(db, tenant.id)

    @staticmethod
    async def update(
        db: AsyncSession,
        tenant: Tenant,
        data: FooterUpdate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> FooterConfig:
        footer = await FooterService.get_or_create(db, tenant)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field in ("show_newsletter", "is_active", "social_links"):
                continue
            setattr(footer, field, value)
        await db.flush()
        await create_audit_entry(
            db,
            action="update",
            entity_type="footer_config",
            entity_id=footer.id,
            tenant_id=tenant.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json", exclude_unset=True),
        )
        return await FooterService._load(db, tenant.id)

    # ── Sections ────────────────────────────────────────────────────

    @staticmethod
    async def _section(db: AsyncSession, tenant_id: uuid.UUID, section_id: uuid.UUID) -> FooterSection:
        result = await db.execute(
            select(FooterSection)
            .where(FooterSection.tenant_id == tenant_id, FooterSection.id == section_id)
            .options(selectinload(FooterSection.links))
            .execution_options(populate_existing=True),
        )
        section = result.scalars().first()
        if section is None:
            raise NotFoundException("FooterSection", str(section_id))
        return section

    @staticmethod
    async def create_section(
        db: AsyncSession, tenant: Tenant, data: FooterSectionCreate,
    ) -> FooterSection:
        footer = await FooterService.get_or_create(db, tenant)
        section = FooterSection(tenant_id=tenant.id, footer_id=footer.id, **data.model_dump())
        db.add(section)
        await db.flush()
        return await FooterService._section(db, tenant.id, section.id)

    @staticmethod
    async def update_section(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        section_id: uuid.UUID,
        data: FooterSectionUpdate,
    ) -> FooterSection:
        section = await FooterService._section(db, tenant_id, section_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(section, field, value)
        await db.flush()
        return await FooterService._section(db, tenant_id, section.id)

    @staticmethod
    async def delete_section(db: AsyncSession, tenant_id: uuid.UUID, section_id: uuid.UUID) -> None:
        section = await FooterService._section(db, tenant_id, section_id)
        await db.delete(section)
        await db.flush()

    # ── Links ───────────────────────────────────────────────────────

    @staticmethod
    async def _link(db: AsyncSession, tenant_id: uuid.UUID, link_id: uuid.UUID) -> FooterLink:
        result = await db.execute(
            select(FooterLink).where(FooterLink.tenant_id == tenant_id, FooterLink.id == link_id),
        )
        link = result.scalars().first()
        if link is None:
            raise NotFoundException("FooterLink", str(link_id))
        return link

    @staticmethod
    async def create_link(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        section_id: uuid.UUID,
        data: FooterLinkCreate,
    ) -> FooterLink:
        section = await FooterService._section(db, tenant_id, section_id)
        link = FooterLink(tenant_id=tenant_id, section_id=section.id, **data.model_dump())
        db.add(link)
        await db.flush()
        return link

    @staticmethod
    async def update_link(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        link_id: uuid.UUID,
        data: FooterLinkUpdate,
    ) -> FooterLink:
        link = await FooterService._link(db, tenant_id, link_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(link, field, value)
            elif field == "icon":
                link.icon = None
        await db.flush()
        return link

    @staticmethod
    async def delete_link(db: AsyncSession, tenant_id: uuid.UUID, link_id: uuid.UUID) -> None:
        link = await FooterService._link(db, tenant_id, link_id)
        await db.delete(link)
        await db.flush()


class PageService:
    """Static storefront pages."""

    @staticmethod
    async def list_pages(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        published_only: bool = True,
        published: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> PaginatedResponse:
        query = select(ContentPage).where(ContentPage.tenant_id == tenant_id)
        if published_only:
            query = query.where(ContentPage.published.is_(True))
        else:
            query = apply_filters(query, ContentPage, {"published": published})
        query = apply_search(query, ContentPage, search, ["title", "body"])
        query = query.order_by(ContentPage.title)
        return await paginate(db, query, pagination, model=ContentPage)

    @staticmethod
    async def get_published_by_slug(db: AsyncSession, tenant_id: uuid.UUID, slug: str) -> ContentPage:
        result = await db.execute(
            select(ContentPage).where(
                ContentPage.tenant_id == tenant_id,
                ContentPage.slug == slug,
                ContentPage.published.is_(True),
            ),
        )
        page = result.scalars().first()
        if page is None:
            raise NotFoundException("ContentPage", slug)
        return page

    @staticmethod
    async def get_page(db: AsyncSession, tenant_id: uuid.UUID, page_id: uuid.UUID) -> ContentPage:
        result = await db.execute(
            select(ContentPage).where(ContentPage.tenant_id == tenant_id, ContentPage.id == page_id),
        )
        page = result.scalars().first()
        if page is None:
            raise NotFoundException("ContentPage", str(page_id))
        return page

    @staticmethod
    async def _slug_for(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        text: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> str:
        slug = generate_slug(text)
        if not slug:
            raise BadRequestException("Title must contain at least one letter or digit.")
        if await slug_exists(db, ContentPage, slug, tenant_id=tenant_id, exclude_id=exclude_id):
            raise ConflictError("slug", slug)
        return slug

    @staticmethod
    async def create_page(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: PageCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> ContentPage:
        slug = await PageService._slug_for(db, tenant_id, data.slug or data.title)
        page = ContentPage(
            tenant_id=tenant_id,
            updated_by=actor_id,
            published_at=_now() if data.published else None,
            **{**data.model_dump(), "slug": slug},
        )
        db.add(page)
        await db.flush()
        await create_audit_entry(
            db,
            action="create",
            entity_type="content_page",
            entity_id=page.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            new_values={"title": page.title, "slug": slug, "published": page.published},
        )
        return page

    @staticmethod
    async def update_page(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        page_id: uuid.UUID,
        data: PageUpdate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> ContentPage:
        page = await PageService.get_page(db, tenant_id, page_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("slug") and changes["slug"] != page.slug:
            changes["slug"] = await PageService._slug_for(db, tenant_id, changes["slug"], exclude_id=page.id)

        if changes.get("published") is not None:
            if changes["published"] and not page.published:
                page.published_at = page.published_at or _now()
            elif not changes["published"]:
                page.published_at = None

        for field, value in changes.items():
            if value is None and field in ("title", "slug", "body", "published"):
                continue
            setattr(page, field, value)
        page.updated_by = actor_id
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="content_page",
            entity_id=page.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json", exclude_unset=True),
        )
        return page

    @staticmethod
    async def delete_page(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        page_id: uuid.UUID,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> None:
        page = await PageService.get_page(db, tenant_id, page_id)
        await db.delete(page)
        await db.flush()
        await create_audit_entry(
            db,
            action="delete",
            entity_type="content_page",
            entity_id=page_id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            old_values={"slug": page.slug},
        )


_CATALOG_MODELS = {
    BookingType.cruise: Cruise,
    BookingType.hotel: Hotel,
    BookingType.package: Package,
}


class CatalogVisibilityService:
    """Publish or hide catalogue items in bulk."""

    @staticmethod
    async def set_active(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        content_type: BookingType,
        ids: list[uuid.UUID],
        active: bool,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> int:
        """Set ``is_active`` on the tenant's items among *ids*; returns how many matched."""
        model = _CATALOG_MODELS[content_type]
        result = await db.execute(
            select(model.id).where(model.tenant_id == tenant_id, model.id.in_(ids)),
        )
        matched = list(result.scalars().all())
        if not matched:
            return 0

        await db.execute(
            update(model)
            .where(model.tenant_id == tenant_id, model.id.in_(matched))
            .values(is_active=active),
        )
        for item_id in matched:
            await create_audit_entry(
                db,
                action="publish" if active else "unpublish",
                entity_type=content_type.value,
                entity_id=item_id,
                tenant_id=tenant_id,
                actor_id=actor_id,
                new_values={"is_active": active},
            )
        logger.info(
            "%s %d %s items for tenant %s",
            "Published" if active else "Unpublished", len(matched), content_type.value, tenant_id,
        )
        return len(matched)
