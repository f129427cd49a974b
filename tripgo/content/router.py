"""Site content routers.

Settings (``/api/v1/settings``):
    GET    /public                   — Public settings grouped by category
    GET    /{key}                    — One setting (private ones need ``settings:manage``)
    GET    /, POST /, PUT /bulk, POST /defaults, PUT|DELETE /{key}  — Admin

Hero (``/api/v1/hero``):
    GET    /{page}                   — Active hero banner of a page
    GET    /, PUT|DELETE /{page}     — Admin (``content:manage``)

Footer (``/api/v1/footer``):
    GET    /                         — Active footer with active sections and links
    /admin/...                       — Footer, section and link editing (``content:manage``)

Pages (``/api/v1/pages``):
    GET    /, /{slug}                — Published pages
    /admin/pages/...                 — Page CRUD (``content:manage``)

Catalogue visibility (``/api/v1/admin/content``):
    POST   /bulk-publish, /bulk-unpublish  — Show or hide cruises, hotels or packages
"""


import uuid
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.auth.dependencies import get_optional_user, has_permission, require_permission
from tripgo.common.pagination import PaginationParams
from tripgo.common.responses import paginated_response, success_response
from tripgo.content.models import FooterConfig
from tripgo.content.schemas import (
    BulkVisibility,
    BulkVisibilityResult,
    DefaultsResult,
    FooterLinkCreate,
    FooterLinkResponse,
    FooterLinkUpdate,
    FooterResponse,
    FooterSectionCreate,
    FooterSectionResponse,
    FooterSectionUpdate,
    FooterUpdate,
    HeroResponse,
    HeroUpsert,
    PageBrief,
    PageCreate,
    PageResponse,
    PageUpdate,
    SettingBulkUpdate,
    SettingCreate,
    SettingResponse,
    SettingsListing,
    SettingUpdate,
)
from tripgo.content.service import (
    CatalogVisibilityService,
    FooterService,
    HeroService,
    PageService,
    SettingsService,
)
from tripgo.database import get_db
from tripgo.tenants.dependencies import get_current_tenant
from tripgo.tenants.models import Tenant
from tripgo.users.models import User

settings_router = APIRouter(prefix="", tags=["settings"])
hero_router = APIRouter(prefix="", tags=["hero"])
footer_router = APIRouter(prefix="", tags=["footer"])
pages_router = APIRouter(prefix="", tags=["pages"])
admin_content_router = APIRouter(prefix="", tags=["admin-content"])

_manage_settings = require_permission("settings:manage")
_manage_content = require_permission("content:manage")

PageName = Annotated[str, Path(min_length=1, max_length=50, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")]


# ═════════════════════════════════════════════════════════════════════
# Settings
# ═════════════════════════════════════════════════════════════════════


@settings_router.get("/public")
async def public_settings(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    return success_response(await SettingsService.public_settings(db, tenant.id))


@settings_router.get("")
async def list_settings(
    category: Optional[str] = Query(None),
    is_public: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_settings),
):
    settings = await SettingsService.list_settings(
        db, tenant.id, category=category, is_public=is_public,
    )
    grouped = SettingsService.group_by_category(settings)
    return success_response(SettingsListing(
        settings=[SettingResponse.model_validate(s) for s in settings],
        grouped={
            category: [SettingResponse.model_validate(s) for s in items]
            for category, items in grouped.items()
        },
    ))


@settings_router.post("", status_code=status.HTTP_201_CREATED)
async def create_setting(
    body: SettingCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_settings),
):
    setting = await SettingsService.create_setting(db, tenant.id, body, actor_id=current_user.id)
    return success_response(SettingResponse.model_validate(setting), "Setting created successfully")


@settings_router.put("/bulk")
async def bulk_update_settings(
    body: SettingBulkUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_settings),
):
    saved = await SettingsService.bulk_upsert(db, tenant.id, body.settings, actor_id=current_user.id)
    return success_response(
        [SettingResponse.model_validate(s) for s in saved], "Settings updated successfully",
    )


@settings_router.post("/defaults")
async def initialize_default_settings(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_settings),
):
    created = await SettingsService.initialize_defaults(db, tenant, actor_id=current_user.id)
    return success_response(
        DefaultsResult(
            created=len(created),
            settings=[SettingResponse.model_validate(s) for s in created],
        ),
        "Default settings initialized successfully",
    )


@settings_router.get("/{key}")
async def get_setting(
    key: str,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: Optional[User] = Depends(get_optional_user),
):
    include_private = current_user is not None and has_permission(current_user, "settings:manage")
    setting = await SettingsService.get_setting(db, tenant.id, key, include_private=include_private)
    return success_response(SettingResponse.model_validate(setting))


@settings_router.put("/{key}")
async def update_setting(
    key: str,
    body: SettingUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_settings),
):
    setting = await SettingsService.update_setting(db, tenant.id, key, body, actor_id=current_user.id)
    return success_response(SettingResponse.model_validate(setting), "Setting updated successfully")


@settings_router.delete("/{key}")
async def delete_setting(
    key: str,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_settings),
):
    await SettingsService.delete_setting(db, tenant.id, key, actor_id=current_user.id)
    return success_response(message="Setting deleted successfully")


# ═════════════════════════════════════════════════════════════════════
# Hero
# ═════════════════════════════════════════════════════════════════════


@hero_router.get("")
async def list_heroes(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    heroes = await HeroService.list_all(db, tenant.id)
    return success_response([HeroResponse.model_validate(h) for h in heroes])


@hero_router.get("/{page}")
async def get_hero(
    page: PageName,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    hero = await HeroService.get_public(db, tenant.id, page)
    return success_response(HeroResponse.model_validate(hero))


@hero_router.put("/{page}")
async def save_hero(
    body: HeroUpsert,
    page: PageName,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    hero, created = await HeroService.upsert(db, tenant.id, page, body, actor_id=current_user.id)
    message = "Hero settings created" if created else "Hero settings saved successfully"
    return success_response(HeroResponse.model_validate(hero), message)


@hero_router.delete("/{page}")
async def delete_hero(
    page: PageName,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    await HeroService.delete(db, tenant.id, page, actor_id=current_user.id)
    return success_response(message="Hero settings deleted successfully")


# ═════════════════════════════════════════════════════════════════════
# Footer
# ═════════════════════════════════════════════════════════════════════


def _public_footer(footer: FooterConfig) -> FooterResponse:
    item = FooterResponse.model_validate(footer)
    item.sections = [
        FooterSectionResponse(
            **section.model_dump(exclude={"links"}),
            links=[link for link in section.links if link.is_active],
        )
        for section in item.sections
        if section.is_active
    ]
    return item


@footer_router.get("")
async def get_footer(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    footer = await FooterService.get_public(db, tenant.id)
    if footer is None:
        return success_response(None, "No footer configuration found")
    return success_response(_public_footer(footer))


@footer_router.get("/admin")
async def admin_get_footer(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    footer = await FooterService.get_or_create(db, tenant)
    return success_response(FooterResponse.model_validate(footer))


@footer_router.put("/admin")
async def admin_update_footer(
    body: FooterUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    footer = await FooterService.update(db, tenant, body, actor_id=current_user.id)
    return success_response(
        FooterResponse.model_validate(footer), "Footer configuration updated successfully",
    )


@footer_router.post("/admin/sections", status_code=status.HTTP_201_CREATED)
async def admin_create_section(
    body: FooterSectionCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    section = await FooterService.create_section(db, tenant, body)
    return success_response(
        FooterSectionResponse.model_validate(section), "Footer section created successfully",
    )


@footer_router.put("/admin/sections/{section_id}")
async def admin_update_section(
    section_id: uuid.UUID,
    body: FooterSectionUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    section = await FooterService.update_section(db, tenant.id, section_id, body)
    return success_response(
        FooterSectionResponse.model_validate(section), "Footer section updated successfully",
    )


@footer_router.delete("/admin/sections/{section_id}")
async def admin_delete_section(
    section_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    await FooterService.delete_section(db, tenant.id, section_id)
    return success_response(message="Footer section deleted successfully")


@footer_router.post("/admin/sections/{section_id}/links", status_code=status.HTTP_201_CREATED)
async def admin_create_link(
    section_id: uuid.UUID,
    body: FooterLinkCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    link = await FooterService.create_link(db, tenant.id, section_id, body)
    return success_response(
        FooterLinkResponse.model_validate(link), "Footer link created successfully",
    )


@footer_router.put("/admin/links/{link_id}")
async def admin_update_link(
    link_id: uuid.UUID,
    body: FooterLinkUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    link = await FooterService.update_link(db, tenant.id, link_id, body)
    return success_response(
        FooterLinkResponse.model_validate(link), "Footer link updated successfully",
    )


@footer_router.delete("/admin/links/{link_id}")
async def admin_delete_link(
    link_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    await FooterService.delete_link(db, tenant.id, link_id)
    return success_response(message="Footer link deleted successfully")


# ═════════════════════════════════════════════════════════════════════
# Pages
# ═════════════════════════════════════════════════════════════════════


@pages_router.get("")
async def list_pages(
    pagination: PaginationParams = Depends(),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    result = await PageService.list_pages(db, tenant.id, pagination, search=search)
    return paginated_response([PageBrief.model_validate(p) for p in result.data], result.meta)


@pages_router.get("/admin/pages")
async def admin_list_pages(
    pagination: PaginationParams = Depends(),
    published: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    result = await PageService.list_pages(
        db, tenant.id, pagination, published_only=False, published=published, search=search,
    )
    return paginated_response([PageBrief.model_validate(p) for p in result.data], result.meta)


@pages_router.post("/admin/pages", status_code=status.HTTP_201_CREATED)
async def admin_create_page(
    body: PageCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    page = await PageService.create_page(db, tenant.id, body, actor_id=current_user.id)
    return success_response(PageResponse.model_validate(page), "Page created successfully")


@pages_router.get("/admin/pages/{page_id}")
async def admin_get_page(
    page_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    page = await PageService.get_page(db, tenant.id, page_id)
    return success_response(PageResponse.model_validate(page))


@pages_router.put("/admin/pages/{page_id}")
async def admin_update_page(
    page_id: uuid.UUID,
    body: PageUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    page = await PageService.update_page(db, tenant.id, page_id, body, actor_id=current_user.id)
    return success_response(PageResponse.model_validate(page), "Page updated successfully")


@pages_router.delete("/admin/pages/{page_id}")
async def admin_delete_page(
    page_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    await PageService.delete_page(db, tenant.id, page_id, actor_id=current_user.id)
    return success_response(message="Page deleted successfully")


@pages_router.get("/{slug}")
async def get_page(
    slug: str,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    page = await PageService.get_published_by_slug(db, tenant.id, slug)
    return success_response(PageResponse.model_validate(page))


# ═════════════════════════════════════════════════════════════════════
# Catalogue visibility
# ═════════════════════════════════════════════════════════════════════


@admin_content_router.post("/bulk-publish")
async def bulk_publish(
    body: BulkVisibility,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    updated = await CatalogVisibilityService.set_active(
        db, tenant.id, body.content_type, body.content_ids, True, actor_id=current_user.id,
    )
    return success_response(BulkVisibilityResult(updated=updated), "Content published successfully")


@admin_content_router.post("/bulk-unpublish")
async def bulk_unpublish(
    body: BulkVisibility,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage_content),
):
    updated = await CatalogVisibilityService.set_active(
        db, tenant.id, body.content_type, body.content_ids, False, actor_id=current_user.id,
    )
    return success_response(BulkVisibilityResult(updated=updated), "Content unpublished successfully")
