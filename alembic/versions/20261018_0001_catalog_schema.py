"""Catalog schema for the indexing source.

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18
"""
from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def _product_fk(nullable: bool = False, primary_key: bool = False) -> sa.Column:
    return sa.Column(
        "product_id",
        sa.Integer(),
        sa.ForeignKey("catalog_products.id", ondelete="CASCADE"),
        nullable=nullable,
        primary_key=primary_key,
    )


def upgrade() -> None:
    op.create_table(
        "catalog_products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sku", sa.String(length=64), nullable=False, unique=True),
        sa.Column("type_id", sa.String(length=32), nullable=False),
        sa.Column("status", sa.Integer(), nullable=False),
        sa.Column("visibility", sa.Integer(), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), nullable=False),
        sa.Column("image", sa.String(length=255), nullable=True),
        sa.Column("small_image", sa.String(length=255), nullable=True),
        sa.Column("thumbnail", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_catalog_products_type_id", "catalog_products", ["type_id"])

    op.create_table(
        "catalog_product_stores",
        _product_fk(primary_key=True),
        sa.Column("store_id", sa.Integer(), primary_key=True),
    )

    op.create_table(
        "catalog_product_values",
        sa.Column("id", sa.Integer(), primary_key=True),
        _product_fk(),
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.Column("attribute", sa.String(length=255), nullable=False),
        sa.Column("value", sa.JSON(), nullable=True),
        sa.Column("label", sa.JSON(), nullable=True),
        sa.UniqueConstraint(
            "product_id", "store_id", "attribute", name="uq_catalog_product_values"
        ),
    )
    op.create_index(
        "ix_catalog_product_values_product_id", "catalog_product_values", ["product_id"]
    )

    op.create_table(
        "catalog_stock_items",
        _product_fk(primary_key=True),
        sa.Column("is_in_stock", sa.Boolean(), nullable=False),
        sa.Column("qty", sa.Numeric(12, 4), nullable=False),
    )

    op.create_table(
        "catalog_categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("path", sa.String(length=255), nullable=False),
        sa.Column("include_in_menu", sa.Boolean(), nullable=False),
    )

    op.create_table(
        "catalog_category_names",
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("catalog_categories.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("store_id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
    )

    op.create_table(
        "catalog_product_categories",
        _product_fk(primary_key=True),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("catalog_categories.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "catalog_product_relations",
        sa.Column(
            "parent_id",
            sa.Integer(),
            sa.ForeignKey("catalog_products.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "child_id",
            sa.Integer(),
            sa.ForeignKey("catalog_products.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("relation_type", sa.String(length=32), primary_key=True),
    )
    op.create_index(
        "ix_catalog_product_relations_child_id",
        "catalog_product_relations",
        ["child_id"],
    )

    op.create_table(
        "catalog_media_gallery",
        sa.Column("id", sa.Integer(), primary_key=True),
        _product_fk(),
        sa.Column("file", sa.String(length=255), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("disabled", sa.Boolean(), nullable=False),
    )

    op.create_table(
        "catalog_attributes",
        sa.Column("code", sa.String(length=255), primary_key=True),
        sa.Column("frontend_label", sa.String(length=255), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("catalog_attributes")
    op.drop_table("catalog_media_gallery")
    op.drop_index(
        "ix_catalog_product_relations_child_id", table_name="catalog_product_relations"
    )
    op.drop_table("catalog_product_relations")
    op.drop_table("catalog_product_categories")
    op.drop_table("catalog_category_names")
    op.drop_table("catalog_categories")
    op.drop_table("catalog_stock_items")
    op.drop_index(
        "ix_catalog_product_values_product_id", table_name="catalog_product_values"
    )
    op.drop_table("catalog_product_values")
    op.drop_table("catalog_product_stores")
    op.drop_index("ix_catalog_products_type_id", table_name="catalog_products")
    op.drop_table("catalog_products")
