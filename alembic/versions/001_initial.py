"""Initial migration — properties, amenities, images and views.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── properties ──
    op.create_table(
        "properties",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("address", sa.String(500), nullable=False, server_default=""),
        sa.Column("property_type", sa.String(20), nullable=False),
        sa.Column("listing_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("price", sa.BigInteger, nullable=False),
        sa.Column("area", sa.Integer, nullable=False),
        sa.Column("bedrooms", sa.Integer, nullable=False, server_default="0"),
        sa.Column("bathrooms", sa.Integer, nullable=False, server_default="0"),
        sa.Column("parking_spaces", sa.Integer, nullable=False, server_default="0"),
        sa.Column("has_elevator", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("has_balcony", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("has_storage", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("district", sa.String(100), nullable=False),
        sa.Column("latitude", sa.Float, nullable=True),
        sa.Column("longitude", sa.Float, nullable=True),
        sa.Column("year_built", sa.Integer, nullable=True),
        sa.Column("floor_number", sa.Integer, nullable=True),
        sa.Column("total_floors", sa.Integer, nullable=True),
        sa.Column("views", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_featured", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("video", sa.String(2048), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("price >= 0", name="ck_properties_price_non_negative"),
        sa.CheckConstraint("area > 0", name="ck_properties_area_positive"),
    )
    op.create_index("ix_properties_city", "properties", ["city"])
    op.create_index("ix_properties_district", "properties", ["district"])
    op.create_index("ix_properties_status", "properties", ["status"])
    op.create_index("ix_properties_property_type", "properties", ["property_type"])
    op.create_index("ix_properties_price", "properties", ["price"])
    op.create_index("ix_properties_area", "properties", ["area"])
    op.create_index("ix_properties_created_at", "properties", ["created_at"])

    # ── property_amenities ──
    op.create_table(
        "property_amenities",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("property_id", UUID(as_uuid=True), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.UniqueConstraint("property_id", "name", name="uq_property_amenities_property_name"),
    )
    op.create_index("ix_property_amenities_property_id", "property_amenities", ["property_id"])
    op.create_index("ix_property_amenities_name", "property_amenities", ["name"])

    # ── property_images ──
    op.create_table(
        "property_images",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("property_id", UUID(as_uuid=True), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("url", sa.String(2048), nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_primary", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_property_images_property_id", "property_images", ["property_id"])

    # ── property_views ──
    op.create_table(
        "property_views",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("property_id", UUID(as_uuid=True), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_property_views_property_id", "property_views", ["property_id"])
    op.create_index("ix_property_views_created_at", "property_views", ["created_at"])


def downgrade() -> None:
    op.drop_table("property_views")
    op.drop_table("property_images")
    op.drop_table("property_amenities")
    op.drop_table("properties")
