"""Search service — executes compiled search plans and assembles result envelopes.

Two variants share one plan:
- ``assemble`` runs it over an in-memory collection
- ``execute_plan`` runs it as COUNT + page queries against the database

``search`` and ``search_database`` are the entry points: validate raw filters,
compile them, then assemble.
"""
import math
import time
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional

from sqlalchemy import asc, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.models.property_amenity_model import PropertyAmenity
from app.models.property_model import Property, PropertyStatus
from app.schemas.property_schema import PropertyRead
from app.schemas.search_schema import LocationsRead, SearchResult, parse_search_filters
from app.services.filter_service import SearchPlan, compile_filters

logger = get_logger(__name__)

MIN_SUGGESTION_QUERY = 2


def total_pages(total: int, limit: int) -> int:
    """Number of pages for ``total`` matches; zero matches means zero pages."""
    return math.ceil(total / limit) if total > 0 else 0


def _envelope(records: Iterable[Any], total: int, plan: SearchPlan) -> SearchResult:
    return SearchResult(
        data=[PropertyRead.model_validate(r) for r in records],
        total=total,
        page=plan.page,
        limit=plan.limit,
        total_pages=total_pages(total, plan.limit),
    )


def _sort_key(field: str):
    def key(record: Any) -> Any:
        value = getattr(record, field)
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    return key


def assemble(records: Iterable[Any], plan: SearchPlan) -> SearchResult:
    """Filter, stably sort and paginate an in-memory collection.

    Records with equal sort keys keep their collection order in both
    directions, so repeated calls page identically.
    """
    matched = [record for record in records if plan.matches(record)]
    ordered = sorted(
        matched,
        key=_sort_key(plan.sort.field),
        reverse=plan.sort.descending,
    )
    window = ordered[plan.offset:plan.offset + plan.limit]
    return _envelope(window, len(matched), plan)


def search(raw: Optional[Mapping[str, Any]], records: Iterable[Any]) -> SearchResult:
    """Validate ``raw`` filters and run them over ``records``.

    Raises:
        ValidationError: ``raw`` contains an invalid value.
    """
    return assemble(records, compile_filters(parse_search_filters(raw)))


async def execute_plan(db: AsyncSession, plan: SearchPlan) -> SearchResult:
    """Run a plan against the database: one COUNT query and one page query."""
    started = time.perf_counter()
    where = plan.where_clauses()

    count_stmt = select(func.count(Property.id))
    page_stmt = select(Property)
    if where:
        count_stmt = count_stmt.where(*where)
        page_stmt = page_stmt.where(*where)

    total = (await db.execute(count_stmt)).scalar_one()

    column = getattr(Property, plan.sort.field)
    page_stmt = (
        page_stmt
        .order_by(desc(column) if plan.sort.descending else asc(column), asc(Property.id))
        .offset(plan.offset)
        .limit(plan.limit)
    )
    rows = (await db.execute(page_stmt)).scalars().all()

    logger.info(
        "Property search completed",
        extra={
            "total": total,
            "predicates": [type(p).__name__ for p in plan.predicates],
            "sort_by": plan.sort.field,
            "duration": round(time.perf_counter() - started, 4),
        },
    )
    return _envelope(rows, total, plan)


async def search_database(db: AsyncSession, raw: Optional[Mapping[str, Any]]) -> SearchResult:
    """Validate ``raw`` filters and run them against the database."""
    return await execute_plan(db, compile_filters(parse_search_filters(raw)))


async def get_suggestions(db: AsyncSession, query: Optional[str], limit: int = 10) -> List[str]:
    """Active cities then districts containing ``query``, de-duplicated."""
    if not query or len(query.strip()) < MIN_SUGGESTION_QUERY:
        return []
    pattern = query.strip()
    active = Property.status == PropertyStatus.ACTIVE.value

    suggestions: List[str] = []
    for column in (Property.city, Property.district):
        stmt = (
            select(column)
            .where(active, column.icontains(pattern, autoescape=True))
            .distinct()
            .order_by(column)
            .limit(limit)
        )
        suggestions.extend((await db.execute(stmt)).scalars().all())

    return list(dict.fromkeys(s for s in suggestions if s))[:limit]


async def get_locations(db: AsyncSession) -> LocationsRead:
    """Sorted distinct cities and districts among active listings."""
    active = Property.status == PropertyStatus.ACTIVE.value
    cities = (await db.execute(
        select(Property.city).where(active).distinct().order_by(Property.city)
    )).scalars().all()
    districts = (await db.execute(
        select(Property.district).where(active).distinct().order_by(Property.district)
    )).scalars().all()
    return LocationsRead(
        cities=[c for c in cities if c],
        districts=[d for d in districts if d],
    )


async def get_amenities(db: AsyncSession) -> List[str]:
    """Amenity tags of active listings, most common first."""
    usage = func.count(PropertyAmenity.id)
    stmt = (
        select(PropertyAmenity.name)
        .join(Property, Property.id == PropertyAmenity.property_id)
        .where(Property.status == PropertyStatus.ACTIVE.value)
        .group_by(PropertyAmenity.name)
        .order_by(usage.desc(), PropertyAmenity.name)
    )
    return [name for name in (await db.execute(stmt)).scalars().all() if name]
