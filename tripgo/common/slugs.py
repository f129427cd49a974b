"""URL slug helpers."""

from __future__ import annotations

import re
import uuid
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def generate_slug(text: str) -> str:
    """Lowercase *text*, collapse every run outside ``[a-z0-9]`` to ``-``, trim dashes.

    >>> generate_slug("  Caribbean Dream: 7 Nights! ")
    'caribbean-dream-7-nights'
    """
    return _NON_SLUG_CHARS.sub("-", (text or "").lower()).strip("-")


async def unique_slug(
    db: AsyncSession,
    model: Any,
    text: str,
    *,
    tenant_id: Optional[uuid.UUID] = None,
    exclude_id: Optional[uuid.UUID] = None,
) -> str:
    """Return ``generate_slug(text)``, suffixed ``-2``, ``-3``… until free in the tenant."""
    base = generate_slug(text) or "item"
    candidate = base
    counter = 1
    while await slug_exists(db, model, candidate, tenant_id=tenant_id, exclude_id=exclude_id):
        counter += 1
        candidate = f"{base}-{counter}"
    return candidate


async def slug_exists(
    db: AsyncSession,
    model: Any,
    slug: str,
    *,
    tenant_id: Optional[uuid.UUID] = None,
    exclude_id: Optional[uuid.UUID] = None,
) -> bool:
    query = select(model.id).where(model.slug == slug)
    if tenant_id is not None and hasattr(model, "tenant_id"):
        query = query.where(model.tenant_id == tenant_id)
    if exclude_id is not None:
        query = query.where(model.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.first() is not None
