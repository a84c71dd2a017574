"""Search API router — public property search and discovery helpers.
/api/v1/search"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, query_params_to_raw
from app.api.responses import ok
from app.schemas.base_schema import ApiResponse, Meta
from app.schemas.search_schema import LocationsRead, SearchResult
from app.services.search_service import (
    get_amenities,
    get_locations,
    get_suggestions,
    search_database,
)

router = APIRouter()


def _meta(result: SearchResult) -> Meta:
    return Meta(page=result.page, page_size=result.limit, total=result.total)


@router.post("", response_model=ApiResponse[SearchResult])
async def search_properties_body(
    request: Request,
    db: AsyncSession = Depends(get_db),
    filters: Optional[Dict[str, Any]] = Body(None),
):
    """Advanced search with filters in a JSON body.

    Keys follow the camelCase filter names (``propertyType``, ``minPrice``…);
    invalid values are rejected with 400 naming the field.
    """
    result = await search_database(db, filters or {})
    return ok(result, "Search completed", request, meta=_meta(result))


@router.get("", response_model=ApiResponse[SearchResult])
async def search_properties_query(request: Request, db: AsyncSession = Depends(get_db)):
    """Same search with filters in the query string.

    Set filters accept repeated keys or comma-separated values
    (``?propertyType=apartment&propertyType=villa`` or ``?bedrooms=2,3``).
    """
    result = await search_database(db, query_params_to_raw(request))
    return ok(result, "Search completed", request, meta=_meta(result))


@router.get("/suggestions", response_model=ApiResponse[List[str]])
async def search_suggestions(
    request: Request,
    db: AsyncSession = Depends(get_db),
    q: Optional[str] = Query(None, description="At least 2 characters"),
    limit: int = Query(10, ge=1, le=50),
):
    """City and district names matching ``q``."""
    return ok(await get_suggestions(db, q, limit), "Suggestions retrieved successfully", request)


@router.get("/locations", response_model=ApiResponse[LocationsRead])
async def search_locations(request: Request, db: AsyncSession = Depends(get_db)):
    """All cities and districts that have active listings."""
    return ok(await get_locations(db), "Locations retrieved successfully", request)


@router.get("/amenities", response_model=ApiResponse[List[str]])
async def search_amenities(request: Request, db: AsyncSession = Depends(get_db)):
    """Amenity tags in use, most common first."""
    return ok(await get_amenities(db), "Amenities retrieved successfully", request)
