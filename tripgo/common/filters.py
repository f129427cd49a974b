"""Generic filtering, sorting, and search utilities."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from sqlalchemy import Select, String, and_, cast, or_
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import InstrumentedAttribute

# Never usable as a client-chosen sort key
UNSORTABLE_COLUMNS = frozenset({"password_hash", "token_hash", "storage_path"})


# ── Sorting ─────────────────────────────────────────────────────────

def apply_sorting(
    query: Select,
    model: Any,
    sort: Optional[str],
) -> Select:
    """
    Parse a sort string like ``"-price"`` and apply ORDER BY.

    * Leading ``-`` → DESC; otherwise ASC.
    * Unknown or hidden columns are ignored.
    """
    if not sort:
        return query

    descending = sort.startswith("-")
    col = sortable_column(model, sort.lstrip("-"))
    if col is None:
        return query
    return query.order_by(col.desc() if descending else col.asc())


# ── Generic filtering ──────────────────────────────────────────────

def apply_filters(
    query: Select,
    model: Any,
    filters: dict[str, Any],
) -> Select:
    """
    Apply a dict of filter parameters to a SQLAlchemy ``Select``.

    Key suffixes determine the operator:

    ============  ==================
    Suffix        Operator
    ============  ==================
    (none)        ``==``
    ``__ilike``   case-insensitive LIKE (wraps ``%…%``)
    ``__from``    ``>=``
    ``__to``      ``<=``
    ``__gte``     ``>=``
    ``__lte``     ``<=``
    ``__in``      ``IN (…)``
    ============  ==================

    ``None`` values are silently skipped.
    """
    conditions: list = []

    for key, value in filters.items():
        if value is None:
            continue

        if key.endswith("__ilike"):
            col = _get_column(model, key.removesuffix("__ilike"))
            if col is not None:
                conditions.append(col.ilike(f"%{value}%"))

        elif key.endswith(("__from", "__gte")):
            col = _get_column(model, key.rsplit("__", 1)[0])
            if col is not None:
                conditions.append(col >= value)

        elif key.endswith(("__to", "__lte")):
            col = _get_column(model, key.rsplit("__", 1)[0])
            if col is not None:
                conditions.append(col <= value)

        elif key.endswith("__in"):
            col = _get_column(model, key.removesuffix("__in"))
            if col is not None:
                conditions.append(col.in_(value))

        else:
            col = _get_column(model, key)
            if col is not None:
                conditions.append(col == value)

    if conditions:
        query = query.where(and_(*conditions))

    return query


# ── Search ──────────────────────────────────────────────────────────

def apply_search(
    query: Select,
    model: Any,
    search: Optional[str],
    columns: Sequence[str],
) -> Select:
    """Case-insensitive substring match: any of *columns* ILIKE ``%search%``."""
    if not search or not search.strip():
        return query

    term = f"%{search.strip()}%"
    like_conds = [
        cast(col, String).ilike(term)
        for col in (_get_column(model, name) for name in columns)
        if col is not None
    ]
    if not like_conds:
        return query
    return query.where(or_(*like_conds))


# ── Column lookup ───────────────────────────────────────────────────

def sortable_column(model: Any, name: Optional[str]) -> Optional[InstrumentedAttribute]:
    """Column *name* of *model* if clients may order by it, else ``None``."""
    if not name or name in UNSORTABLE_COLUMNS:
        return None
    return _get_column(model, name)


def _get_column(model: Any, name: str) -> Optional[InstrumentedAttribute]:
    """Mapped column attribute *name*; relationships and plain attributes give ``None``."""
    mapper = sa_inspect(model, raiseerr=False)
    if mapper is None or name not in mapper.columns:
        return None
    return getattr(model, name)
