"""Catalog access for the indexing pipeline.

The mapper and the indexer only depend on :class:`CatalogSource`.
:class:`SqlCatalogSource` implements it on top of the SQLAlchemy models.
"""

from collections.abc import Iterable, Iterator
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from catalog_index.catalog.models import (
    AttributeRow,
    CategoryRow,
    Product,
    ProductRelation,
    ProductStore,
    StockItemRow,
)
from catalog_index.catalog.schemas import (
    VISIBLE_IN_SITE,
    CatalogEntity,
    Category,
    ProductStatus,
    ProductType,
    StockItem,
    Visibility,
)
from catalog_index.store_config import StoreConfig

BATCH_SIZE = 1000


class CatalogSource(Protocol):
    def iter_products(
        self,
        store: StoreConfig,
        product_ids: Iterable[int] | None = None,
        only_visible: bool = True,
        include_not_visible_individually: bool = False,
    ) -> Iterator[CatalogEntity]: ...

    def get_categories(self, store_id: int) -> dict[int, Category]: ...

    def get_used_products(self, entity: CatalogEntity) -> list[CatalogEntity]: ...

    def get_bundle_products(self, entity: CatalogEntity) -> list[CatalogEntity]: ...

    def get_associated_products(self, entity: CatalogEntity) -> list[CatalogEntity]: ...

    def get_parent_ids_by_child(
        self, type_id: ProductType, child_ids: Iterable[int]
    ) -> list[int]: ...


def _product_options():
    return (
        selectinload(Product.values),
        selectinload(Product.stock_item),
        selectinload(Product.category_links),
        selectinload(Product.gallery),
    )


def product_to_entity(product: Product, store_id: int) -> CatalogEntity:
    """Convert a Product row to the store-scoped entity value."""
    values: dict = {}
    labels: dict = {}
    # Default values first so store-level values override them
    for row in sorted(product.values, key=lambda v: v.store_id):
        if row.store_id not in (0, store_id):
            continue
        values[row.attribute] = row.value
        if row.label is not None:
            labels[row.attribute] = row.label
        else:
            labels.pop(row.attribute, None)

    stock = None
    if product.stock_item is not None:
        stock = StockItem(
            is_in_stock=product.stock_item.is_in_stock,
            qty=float(product.stock_item.qty or 0),
        )

    gallery = sorted(
        (entry for entry in product.gallery if not entry.disabled),
        key=lambda entry: entry.position,
    )

    return CatalogEntity(
        id=product.id,
        store_id=store_id,
        sku=product.sku,
        name=values.pop("name", None),
        url_key=values.pop("url_key", None),
        type_id=ProductType(product.type_id),
        status=ProductStatus(product.status),
        is_deleted=product.is_deleted,
        visibility=Visibility(product.visibility),
        attributes=values,
        attribute_labels=labels,
        stock=stock,
        category_ids=[link.category_id for link in product.category_links],
        image=product.image,
        small_image=product.small_image,
        thumbnail=product.thumbnail,
        media_gallery=[entry.file for entry in gallery],
    )


class SqlCatalogSource:
    """Catalog source reading the relational catalog tables."""

    def __init__(self, session: Session, batch_size: int = BATCH_SIZE):
        self.session = session
        self.batch_size = batch_size

    def iter_products(
        self,
        store: StoreConfig,
        product_ids: Iterable[int] | None = None,
        only_visible: bool = True,
        include_not_visible_individually: bool = False,
    ) -> Iterator[CatalogEntity]:
        """Yield the store's products, optionally restricted to indexable ones.

        Args:
            store: Store whose product assignment and stock policy apply.
            product_ids: Restrict to these ids.
            only_visible: Only enabled, non-deleted products (and in-stock
                ones when the store hides out-of-stock products).
            include_not_visible_individually: With ``only_visible``, also
                return products that are not visible in catalog or search.
        """
        stmt = (
            select(Product)
            .join(ProductStore, ProductStore.product_id == Product.id)
            .where(ProductStore.store_id == store.store_id)
            .options(*_product_options())
        )

        if only_visible:
            stmt = stmt.where(
                Product.status == ProductStatus.ENABLED,
                Product.is_deleted.is_(False),
            )
            if not include_not_visible_individually:
                stmt = stmt.where(
                    Product.visibility.in_([int(v) for v in VISIBLE_IN_SITE])
                )
            if not store.show_out_of_stock:
                stmt = stmt.join(
                    StockItemRow, StockItemRow.product_id == Product.id
                ).where(StockItemRow.is_in_stock.is_(True))

        if product_ids is not None:
            ids = list(product_ids)
            if not ids:
                return
            stmt = stmt.where(Product.id.in_(ids))

        last_id = 0
        while True:
            batch = self.session.scalars(
                stmt.where(Product.id > last_id)
                .order_by(Product.id)
                .limit(self.batch_size)
            ).all()
            if not batch:
                break
            last_id = batch[-1].id
            for product in batch:
                yield product_to_entity(product, store.store_id)

    def get_categories(self, store_id: int) -> dict[int, Category]:
        rows = self.session.scalars(
            select(CategoryRow).options(selectinload(CategoryRow.names))
        ).all()

        categories = {}
        for row in rows:
            names = {n.store_id: n.name for n in row.names}
            categories[row.id] = Category(
                id=row.id,
                name=names.get(store_id) or names.get(0),
                path_ids=[int(part) for part in row.path.split("/") if part],
                include_in_menu=row.include_in_menu,
            )
        return categories

    def _children(self, entity: CatalogEntity, relation_type: ProductType) -> list[CatalogEntity]:
        stmt = (
            select(Product)
            .join(ProductRelation, ProductRelation.child_id == Product.id)
            .where(
                ProductRelation.parent_id == entity.id,
                ProductRelation.relation_type == relation_type.value,
            )
            .options(*_product_options())
            .order_by(Product.id)
        )
        return [product_to_entity(p, entity.store_id) for p in self.session.scalars(stmt)]

    def get_used_products(self, entity: CatalogEntity) -> list[CatalogEntity]:
        return self._children(entity, ProductType.CONFIGURABLE)

    def get_bundle_products(self, entity: CatalogEntity) -> list[CatalogEntity]:
        return self._children(entity, ProductType.BUNDLE)

    def get_associated_products(self, entity: CatalogEntity) -> list[CatalogEntity]:
        return self._children(entity, ProductType.GROUPED)

    def get_parent_ids_by_child(
        self, type_id: ProductType, child_ids: Iterable[int]
    ) -> list[int]:
        ids = list(child_ids)
        if not ids:
            return []
        stmt = (
            select(ProductRelation.parent_id)
            .where(
                ProductRelation.relation_type == type_id.value,
                ProductRelation.child_id.in_(ids),
            )
            .distinct()
            .order_by(ProductRelation.parent_id)
        )
        return list(self.session.scalars(stmt))

    def get_attribute_labels(self) -> dict[str, str]:
        """Frontend labels of every catalog attribute keyed by code."""
        rows = self.session.scalars(select(AttributeRow)).all()
        return {row.code: row.frontend_label or row.code for row in rows}
