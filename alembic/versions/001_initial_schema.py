"""initial schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-01-01 00:00:00.000000
"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("sku", sa.String(128), nullable=False, unique=True),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("condition", sa.String(64), nullable=False, server_default="NEW"),
        sa.Column("brand", sa.String(256), nullable=True),
        sa.Column("category", sa.String(256), nullable=True),
        # JSON array of image URLs
        sa.Column("images", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "marketplace_connections",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("marketplace", sa.String(32), nullable=False),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("status", sa.String(32), nullable=False, server_default="disconnected"),
        # JSON objects: {"accessToken", "sandbox"} and free-form settings
        sa.Column("credentials", sa.Text(), nullable=True),
        sa.Column("settings", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "ix_marketplace_connections_marketplace", "marketplace_connections", ["marketplace"]
    )

    op.create_table(
        "listings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "product_id",
            sa.String(36),
            sa.ForeignKey("products.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "marketplace_connection_id",
            sa.String(36),
            sa.ForeignKey("marketplace_connections.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("external_id", sa.String(128), nullable=True),
        sa.Column("offer_id", sa.String(128), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="draft"),
        sa.Column("listing_url", sa.String(2048), nullable=True),
        # JSON snapshot of the publish result
        sa.Column("listing_data", sa.Text(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_listings_product", "listings", ["product_id"])
    op.create_index("idx_listings_marketplace", "listings", ["marketplace_connection_id"])


def downgrade() -> None:
    op.drop_table("listings")
    op.drop_table("marketplace_connections")
    op.drop_table("products")
