"""Property SQLAlchemy model — a real estate listing and its classification enums."""
import enum
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.property_amenity_model import PropertyAmenity
    from app.models.property_image_model import PropertyImage
    from app.models.property_view_model import PropertyView


class PropertyType(str, enum.Enum):
    APARTMENT = "apartment"
    VILLA = "villa"
    COMMERCIAL = "commercial"
    LAND = "land"
    OFFICE = "office"


class ListingType(str, enum.Enum):
    SALE = "sale"
    RENT = "rent"


class PropertyStatus(str, enum.Enum):
    ACTIVE = "active"
    PENDING = "pending"
    SOLD = "sold"
    RENTED = "rented"
    INACTIVE = "inactive"


# Once reached, these never transition back.
TERMINAL_STATUSES = frozenset({PropertyStatus.SOLD, PropertyStatus.RENTED})


class Property(Base):
    __tablename__ = "properties"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(500))
    description: Mapped[str] = mapped_column(Text, default="")
    address: Mapped[str] = mapped_column(String(500), default="")

    property_type: Mapped[str] = mapped_column(String(20), comment="apartment, villa, commercial, land, office")
    listing_type: Mapped[str] = mapped_column(String(20), comment="sale, rent")
    status: Mapped[str] = mapped_column(
        String(20),
        default=PropertyStatus.ACTIVE.value,
        comment="active, pending, sold, rented, inactive",
    )

    price: Mapped[int] = mapped_column(BigInteger, comment="Integral currency units")
    area: Mapped[int] = mapped_column(Integer, comment="Square meters")
    bedrooms: Mapped[int] = mapped_column(Integer, default=0)
    bathrooms: Mapped[int] = mapped_column(Integer, default=0)
    parking_spaces: Mapped[int] = mapped_column(Integer, default=0)

    has_elevator: Mapped[bool] = mapped_column(Boolean, default=False)
    has_balcony: Mapped[bool] = mapped_column(Boolean, default=False)
    has_storage: Mapped[bool] = mapped_column(Boolean, default=False)

    city: Mapped[str] = mapped_column(String(100), index=True)
    district: Mapped[str] = mapped_column(String(100), index=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)

    year_built: Mapped[Optional[int]] = mapped_column(Integer)
    floor_number: Mapped[Optional[int]] = mapped_column(Integer)
    total_floors: Mapped[Optional[int]] = mapped_column(Integer)

    views: Mapped[int] = mapped_column(Integer, default=0)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)
    video: Mapped[Optional[str]] = mapped_column(String(2048))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    images: Mapped[List["PropertyImage"]] = relationship(
        back_populates="property",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PropertyImage.position",
    )
    amenity_links: Mapped[List["PropertyAmenity"]] = relationship(
        back_populates="property",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    property_views: Mapped[List["PropertyView"]] = relationship(
        back_populates="property",
        cascade="all, delete-orphan",
        lazy="noload",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_properties_status", "status"),
        Index("ix_properties_property_type", "property_type"),
        Index("ix_properties_price", "price"),
        Index("ix_properties_area", "area"),
        Index("ix_properties_created_at", "created_at"),
    )

    @property
    def amenities(self) -> List[str]:
        return [link.name for link in self.amenity_links]

    @amenities.setter
    def amenities(self, names: List[str]) -> None:
        from app.models.property_amenity_model import PropertyAmenity

        # Reuse existing rows so re-saving a tag never trips the unique constraint.
        existing = {link.name: link for link in self.amenity_links}
        self.amenity_links = [
            existing.get(name) or PropertyAmenity(name=name)
            for name in dict.fromkeys(names or [])
        ]

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title='{self.title}', status={self.status})>"
