"""Pydantic schemas for Property API requests and responses."""
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator

from app.models.property_model import ListingType, PropertyStatus, PropertyType
from app.schemas.base_schema import CamelModel


class PropertyImageRead(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    url: str
    position: int = 0
    is_primary: bool = False


class PropertyBase(CamelModel):
    """Shared fields for create and read."""
    title: str = Field(..., min_length=1, max_length=500)
    description: str = ""
    address: str = ""

    property_type: PropertyType
    listing_type: ListingType

    price: int = Field(..., ge=0)
    area: int = Field(..., gt=0)
    bedrooms: int = Field(0, ge=0)
    bathrooms: int = Field(0, ge=0)
    parking_spaces: int = Field(0, ge=0)

    has_elevator: bool = False
    has_balcony: bool = False
    has_storage: bool = False

    city: str
    district: str
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    amenities: List[str] = []
    year_built: Optional[int] = Field(None, ge=1800, le=2100)
    floor_number: Optional[int] = None
    total_floors: Optional[int] = Field(None, ge=0)

    is_featured: bool = False
    video: Optional[str] = None


class PropertyCreate(PropertyBase):
    """Schema for creating a property. ``images`` are URLs; the first is primary."""
    status: PropertyStatus = PropertyStatus.ACTIVE
    images: List[str] = []


class PropertyUpdate(CamelModel):
    """Schema for partial property updates (all fields optional)."""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    address: Optional[str] = None
    property_type: Optional[PropertyType] = None
    listing_type: Optional[ListingType] = None
    status: Optional[PropertyStatus] = None
    price: Optional[int] = Field(None, ge=0)
    area: Optional[int] = Field(None, gt=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    parking_spaces: Optional[int] = Field(None, ge=0)
    has_elevator: Optional[bool] = None
    has_balcony: Optional[bool] = None
    has_storage: Optional[bool] = None
    city: Optional[str] = None
    district: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    amenities: Optional[List[str]] = None
    year_built: Optional[int] = Field(None, ge=1800, le=2100)
    floor_number: Optional[int] = None
    total_floors: Optional[int] = Field(None, ge=0)
    is_featured: Optional[bool] = None
    video: Optional[str] = None


class PropertyRead(PropertyBase):
    """Read model for API responses and in-memory search collections."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    status: PropertyStatus = PropertyStatus.ACTIVE
    views: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None
    images: List[PropertyImageRead] = []

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        # SQLite hands back naive timestamps; stored values are UTC.
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class NearbyPropertyRead(PropertyRead):
    distance_km: float


class ViewCountRead(CamelModel):
    id: uuid.UUID
    views: int
