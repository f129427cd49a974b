"""Standard JSON envelope helpers: ``{"success": true, "data": ..., "message": ...}``."""

from __future__ import annotations

from typing import Any, Optional

from fastapi.encoders import jsonable_encoder

from tripgo.common.pagination import PaginationMeta


def success_response(data: Any = None, message: Optional[str] = None) -> dict[str, Any]:
    """Wrap *data* in the success envelope (pydantic models are encoded)."""
    body: dict[str, Any] = {"success": True, "data": jsonable_encoder(data)}
    if message:
        body["message"] = message
    return body


def paginated_response(
    items: list[Any],
    meta: PaginationMeta,
    message: Optional[str] = None,
) -> dict[str, Any]:
    """Envelope for list endpoints: ``data = {"items": [...], "pagination": {...}}``."""
    return success_response(
        {"items": items, "pagination": meta.model_dump()},
        message,
    )
