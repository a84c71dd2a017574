"""Listing writes, view tracking and proximity search.

Reads that go through the filter compiler live in ``search_service``; this
module holds what the listing endpoints need beyond that.
"""
import math
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateError, ValidationError
from app.core.logging import get_logger
from app.models.property_image_model import PropertyImage
from app.models.property_model import TERMINAL_STATUSES, Property, PropertyStatus
from app.models.property_view_model import PropertyView
from app.schemas.property_schema import PropertyCreate, PropertyUpdate
from app.services.analytics_service import get_property_or_404

logger = get_logger(__name__)

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE = 111.32

# Columns that accept an explicit null on update.
NULLABLE_FIELDS = frozenset({
    "latitude", "longitude", "year_built", "floor_number", "total_floors", "video",
})


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two coordinates in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def bounding_box(lat: float, lng: float, radius_km: float) -> Tuple[float, float, float, float]:
    """(min_lat, max_lat, min_lng, max_lng) enclosing the radius; used as a coarse prefilter."""
    d_lat = radius_km / KM_PER_DEGREE
    cos_lat = math.cos(math.radians(lat))
    d_lng = 180.0 if cos_lat < 1e-6 else min(180.0, radius_km / (KM_PER_DEGREE * cos_lat))
    return lat - d_lat, lat + d_lat, lng - d_lng, lng + d_lng


async def nearby_properties(
    db: AsyncSession,
    lat: float,
    lng: float,
    radius_km: float,
    limit: int,
) -> List[Tuple[Property, float]]:
    """Active listings within ``radius_km`` of the point, nearest first."""
    min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, radius_km)
    stmt = select(Property).where(
        Property.status == PropertyStatus.ACTIVE.value,
        Property.latitude.is_not(None),
        Property.longitude.is_not(None),
        Property.latitude.between(min_lat, max_lat),
        Property.longitude.between(min_lng, max_lng),
    )
    candidates = (await db.execute(stmt)).scalars().all()

    within = []
    for prop in candidates:
        distance = haversine_km(lat, lng, prop.latitude, prop.longitude)
        if distance <= radius_km:
            within.append((prop, distance))
    within.sort(key=lambda pair: pair[1])
    return within[:limit]


async def _reload(db: AsyncSession, property_id: uuid.UUID) -> Property:
    return (await db.execute(select(Property).where(Property.id == property_id))).scalar_one()


async def create_property(db: AsyncSession, payload: PropertyCreate) -> Property:
    """Insert a listing with its amenity tags and images; the first image is primary.

    Raises:
        DuplicateError: the same image URL appears more than once.
    """
    if len(set(payload.images)) != len(payload.images):
        raise DuplicateError("Duplicate image URL in property images")

    data = payload.model_dump(mode="json", exclude={"images", "amenities"})
    prop = Property(**data)
    prop.amenities = payload.amenities
    prop.images = [
        PropertyImage(url=url, position=position, is_primary=position == 0)
        for position, url in enumerate(payload.images)
    ]
    db.add(prop)
    await db.flush()

    logger.info("Property created", extra={"property_id": str(prop.id)})
    return await _reload(db, prop.id)


def check_status_transition(current: str, new: Optional[str]) -> None:
    """Reject moving a sold or rented listing to any other status.

    Raises:
        ValidationError: field ``status``.
    """
    if new is None or new == current:
        return
    if PropertyStatus(current) in TERMINAL_STATUSES:
        raise ValidationError("status", f"a {current} property cannot become {new}")


async def update_property(db: AsyncSession, property_id: uuid.UUID, payload: PropertyUpdate) -> Property:
    prop = await get_property_or_404(db, property_id)
    update_data = payload.model_dump(mode="json", exclude_unset=True)

    check_status_transition(prop.status, update_data.get("status"))

    if "amenities" in update_data:
        prop.amenities = update_data.pop("amenities") or []

    for field, value in update_data.items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(prop, field, value)

    await db.flush()
    logger.info("Property updated", extra={"property_id": str(prop.id)})
    return await _reload(db, prop.id)


async def delete_property(db: AsyncSession, property_id: uuid.UUID) -> None:
    prop = await get_property_or_404(db, property_id)
    await db.delete(prop)
    logger.info("Property deleted", extra={"property_id": str(property_id)})


async def record_view(
    db: AsyncSession,
    property_id: uuid.UUID,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Property:
    """Increment the view counter and store one ``PropertyView`` row."""
    prop = await get_property_or_404(db, property_id)
    await db.execute(
        update(Property)
        .where(Property.id == prop.id)
        .values(views=Property.views + 1)
        .execution_options(synchronize_session=False)
    )
    db.add(PropertyView(
        property_id=prop.id,
        ip_address=ip_address,
        user_agent=user_agent[:500] if user_agent else None,
    ))
    await db.flush()
    await db.refresh(prop, ["views"])
    return prop
