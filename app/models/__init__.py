"""SQLAlchemy models for the property marketplace."""
from app.models.property_model import (
    ListingType,
    Property,
    PropertyStatus,
    PropertyType,
    TERMINAL_STATUSES,
)
from app.models.property_amenity_model import PropertyAmenity
from app.models.property_image_model import PropertyImage
from app.models.property_view_model import PropertyView

__all__ = [
    "Property",
    "PropertyAmenity",
    "PropertyImage",
    "PropertyView",
    "PropertyType",
    "ListingType",
    "PropertyStatus",
    "TERMINAL_STATUSES",
]
