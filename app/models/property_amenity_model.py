"""PropertyAmenity SQLAlchemy model — one amenity tag attached to a property."""
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.property_model import Property


class PropertyAmenity(Base):
    __tablename__ = "property_amenities"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    property_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), index=True)

    property: Mapped["Property"] = relationship(back_populates="amenity_links")

    __table_args__ = (
        UniqueConstraint("property_id", "name", name="uq_property_amenities_property_name"),
    )

    def __repr__(self) -> str:
        return f"<PropertyAmenity(property={self.property_id}, name='{self.name}')>"
