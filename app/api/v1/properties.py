"""Properties API router — listing browse, detail, similar/nearby and CRUD.
/api/v1/properties"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import RequireApiKey, get_db, query_params_to_raw
from app.api.responses import ok
from app.config import settings
from app.models.property_model import Property, PropertyStatus
from app.schemas.base_schema import ApiResponse, Meta
from app.schemas.property_schema import (
    NearbyPropertyRead,
    PropertyCreate,
    PropertyRead,
    PropertyUpdate,
    ViewCountRead,
)
from app.schemas.search_schema import SearchResult, parse_property_filter
from app.services.analytics_service import get_property_or_404, similar_properties
from app.services.filter_service import compile_property_filter
from app.services.property_service import (
    create_property,
    delete_property,
    nearby_properties,
    record_view,
    update_property,
)
from app.services.search_service import execute_plan

router = APIRouter()

SIMILAR_PRICE_TOLERANCE = 0.3


async def _newest_active(db: AsyncSession, limit: int, featured_only: bool = False) -> List[Property]:
    stmt = select(Property).where(Property.status == PropertyStatus.ACTIVE.value)
    if featured_only:
        stmt = stmt.where(Property.is_featured.is_(True))
    stmt = stmt.order_by(Property.created_at.desc(), Property.id).limit(limit)
    return list((await db.execute(stmt)).scalars().all())


@router.get("", response_model=ApiResponse[SearchResult])
async def list_properties(request: Request, db: AsyncSession = Depends(get_db)):
    """List properties with filtering, sorting, and pagination.

    Accepts ``propertyType``, ``listingType``, ``minPrice``/``maxPrice``,
    ``minArea``/``maxArea``, minimum ``bedrooms``/``bathrooms``, ``city``,
    ``district``, ``isFeatured``, ``status`` (default active), ``page``,
    ``limit``, ``sortBy`` and ``sortOrder``.
    """
    plan = compile_property_filter(parse_property_filter(query_params_to_raw(request)))
    result = await execute_plan(db, plan)
    return ok(
        result,
        "Properties listed successfully",
        request,
        meta=Meta(page=result.page, page_size=result.limit, total=result.total),
    )


@router.get("/featured", response_model=ApiResponse[List[PropertyRead]])
async def featured_properties(
    request: Request,
    db: AsyncSession = Depends(get_db),
    limit: int = Query(6, ge=1, le=50),
):
    props = await _newest_active(db, limit, featured_only=True)
    return ok([PropertyRead.model_validate(p) for p in props], "Featured properties retrieved successfully", request)


@router.get("/recent", response_model=ApiResponse[List[PropertyRead]])
async def recent_properties(
    request: Request,
    db: AsyncSession = Depends(get_db),
    limit: int = Query(10, ge=1, le=50),
):
    props = await _newest_active(db, limit)
    return ok([PropertyRead.model_validate(p) for p in props], "Recent properties retrieved successfully", request)


@router.get("/nearby", response_model=ApiResponse[List[NearbyPropertyRead]])
async def properties_nearby(
    request: Request,
    db: AsyncSession = Depends(get_db),
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius: float = Query(settings.nearby_default_radius_km, gt=0, le=500, description="Kilometres"),
    limit: int = Query(10, ge=1, le=50),
):
    """Active properties within ``radius`` km of a point, nearest first."""
    pairs = await nearby_properties(db, lat, lng, radius, limit)
    items = [
        NearbyPropertyRead(**PropertyRead.model_validate(prop).model_dump(), distance_km=round(distance, 3))
        for prop, distance in pairs
    ]
    return ok(items, "Nearby properties retrieved successfully", request)


@router.get("/{property_id}", response_model=ApiResponse[PropertyRead])
async def get_property(property_id: UUID, request: Request, db: AsyncSession = Depends(get_db)):
    """Get a single property by ID."""
    prop = await get_property_or_404(db, property_id)
    return ok(PropertyRead.model_validate(prop), "Property retrieved successfully", request)


@router.get("/{property_id}/similar", response_model=ApiResponse[List[PropertyRead]])
async def get_similar_properties(
    property_id: UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    limit: int = Query(6, ge=1, le=50),
):
    """Active properties of the same type and city priced within 30%."""
    prop = await get_property_or_404(db, property_id)
    similar = await similar_properties(db, prop, SIMILAR_PRICE_TOLERANCE, limit, active_only=True)
    return ok([PropertyRead.model_validate(p) for p in similar], "Similar properties retrieved successfully", request)


@router.post("/{property_id}/views", response_model=ApiResponse[ViewCountRead])
async def add_property_view(property_id: UUID, request: Request, db: AsyncSession = Depends(get_db)):
    """Record one view of a property."""
    prop = await record_view(
        db,
        property_id,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return ok(ViewCountRead(id=prop.id, views=prop.views), "View recorded", request)


@router.post("", response_model=ApiResponse[PropertyRead], status_code=201, dependencies=[RequireApiKey])
async def create_property_endpoint(payload: PropertyCreate, request: Request, db: AsyncSession = Depends(get_db)):
    """Create a new property."""
    prop = await create_property(db, payload)
    return ok(PropertyRead.model_validate(prop), "Property created successfully", request)


@router.patch("/{property_id}", response_model=ApiResponse[PropertyRead], dependencies=[RequireApiKey])
async def update_property_endpoint(
    property_id: UUID,
    payload: PropertyUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Partially update a property. Sold and rented properties keep their status."""
    prop = await update_property(db, property_id, payload)
    return ok(PropertyRead.model_validate(prop), "Property updated successfully", request)


@router.delete("/{property_id}", response_model=ApiResponse[None], dependencies=[RequireApiKey])
async def delete_property_endpoint(property_id: UUID, request: Request, db: AsyncSession = Depends(get_db)):
    """Delete a property (hard delete, cascades to images, amenities and views)."""
    await delete_property(db, property_id)
    return ok(None, "Property deleted successfully", request)
