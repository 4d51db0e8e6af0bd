"""SQLAlchemy models for the reference catalog source."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utc_now() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    pass


class Product(Base):
    __tablename__ = "catalog_products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sku: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    type_id: Mapped[str] = mapped_column(String(32), nullable=False, default="simple")
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    visibility: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    image: Mapped[str | None] = mapped_column(String(255))
    small_image: Mapped[str | None] = mapped_column(String(255))
    thumbnail: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    stores: Mapped[list["ProductStore"]] = relationship(
        back_populates="product", cascade="all, delete-orphan"
    )
    values: Mapped[list["ProductValue"]] = relationship(
        back_populates="product", cascade="all, delete-orphan"
    )
    stock_item: Mapped["StockItemRow"] = relationship(
        back_populates="product", uselist=False, cascade="all, delete-orphan"
    )
    category_links: Mapped[list["ProductCategory"]] = relationship(
        back_populates="product", cascade="all, delete-orphan"
    )
    gallery: Mapped[list["MediaGalleryEntry"]] = relationship(
        back_populates="product", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("ix_catalog_products_type_id", "type_id"),)


class ProductStore(Base):
    """Store views a product is published to."""

    __tablename__ = "catalog_product_stores"

    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("catalog_products.id", ondelete="CASCADE"), primary_key=True
    )
    store_id: Mapped[int] = mapped_column(Integer, primary_key=True)

    product: Mapped["Product"] = relationship(back_populates="stores")


class ProductValue(Base):
    """Attribute value of a product; store 0 holds the default."""

    __tablename__ = "catalog_product_values"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("catalog_products.id", ondelete="CASCADE"), nullable=False
    )
    store_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    attribute: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[Any | None] = mapped_column(JSON)
    # Option label(s) for attributes with a source model
    label: Mapped[Any | None] = mapped_column(JSON)

    product: Mapped["Product"] = relationship(back_populates="values")

    __table_args__ = (
        UniqueConstraint(
            "product_id", "store_id", "attribute", name="uq_catalog_product_values"
        ),
        Index("ix_catalog_product_values_product_id", "product_id"),
    )


class StockItemRow(Base):
    __tablename__ = "catalog_stock_items"

    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("catalog_products.id", ondelete="CASCADE"), primary_key=True
    )
    is_in_stock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    qty: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=0)

    product: Mapped["Product"] = relationship(back_populates="stock_item")


class CategoryRow(Base):
    __tablename__ = "catalog_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # Slash-separated ids from the store root category down to this one
    path: Mapped[str] = mapped_column(String(255), nullable=False)
    include_in_menu: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    names: Mapped[list["CategoryName"]] = relationship(
        back_populates="category", cascade="all, delete-orphan"
    )


class CategoryName(Base):
    __tablename__ = "catalog_category_names"

    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("catalog_categories.id", ondelete="CASCADE"), primary_key=True
    )
    store_id: Mapped[int] = mapped_column(Integer, primary_key=True, default=0)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    category: Mapped["CategoryRow"] = relationship(back_populates="names")


class ProductCategory(Base):
    __tablename__ = "catalog_product_categories"

    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("catalog_products.id", ondelete="CASCADE"), primary_key=True
    )
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("catalog_categories.id", ondelete="CASCADE"), primary_key=True
    )

    product: Mapped["Product"] = relationship(back_populates="category_links")


class ProductRelation(Base):
    """Parent/child link of a composite product."""

    __tablename__ = "catalog_product_relations"

    parent_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("catalog_products.id", ondelete="CASCADE"), primary_key=True
    )
    child_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("catalog_products.id", ondelete="CASCADE"), primary_key=True
    )
    # configurable | bundle | grouped
    relation_type: Mapped[str] = mapped_column(String(32), primary_key=True)

    __table_args__ = (Index("ix_catalog_product_relations_child_id", "child_id"),)


class MediaGalleryEntry(Base):
    __tablename__ = "catalog_media_gallery"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("catalog_products.id", ondelete="CASCADE"), nullable=False
    )
    file: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    disabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    product: Mapped["Product"] = relationship(back_populates="gallery")


class AttributeRow(Base):
    """Product attribute catalogue."""

    __tablename__ = "catalog_attributes"

    code: Mapped[str] = mapped_column(String(255), primary_key=True)
    frontend_label: Mapped[str | None] = mapped_column(String(255))
