"""Convert catalog entities into search documents."""

import copy
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from catalog_index.catalog.schemas import (
    VISIBLE_IN_CATALOG,
    VISIBLE_IN_SEARCH,
    CatalogEntity,
    Category,
)
from catalog_index.catalog.source import CatalogSource
from catalog_index.search.categories import encode_categories
from catalog_index.search.client import cast_product_object
from catalog_index.search.composite import (
    CompositeTypes,
    aggregate_attribute,
    display_value,
)
from catalog_index.search.constants import CREATED_ATTRIBUTES, IDENTITY_ATTRIBUTE
from catalog_index.search.images import (
    ImageResolver,
    MediaImageResolver,
    remove_double_slashes,
    remove_protocol,
)
from catalog_index.search.prices import PriceAnnotator, StorePriceAnnotator
from catalog_index.store_config import StoreConfig

logger = logging.getLogger(__name__)

# Copied from the catalog only when enabled in the store's attribute list
OPTIONAL_ATTRIBUTES = ("description", "ordered_qty", "total_ordered", "rating_summary")


class ProductDocumentBuilder:
    """Build search documents for the products of one store.

    One builder serves one indexing run: the category tree and the composite
    type table are loaded once and reused for every product.
    """

    def __init__(
        self,
        store: StoreConfig,
        catalog: CatalogSource,
        image_resolver: ImageResolver | None = None,
        price_annotator: PriceAnnotator | None = None,
        caster: Callable[[dict[str, Any]], dict[str, Any]] = cast_product_object,
    ):
        self.store = store
        self.catalog = catalog
        self.image_resolver = image_resolver or MediaImageResolver(store.media_base_url)
        self.price_annotator = price_annotator or StorePriceAnnotator(store)
        self.caster = caster
        self.composite_types = CompositeTypes(catalog)
        self._categories: dict[int, Category] | None = None

    @property
    def categories(self) -> dict[int, Category]:
        if self._categories is None:
            self._categories = self.catalog.get_categories(self.store.store_id)
        return self._categories

    def get_product_url(self, entity: CatalogEntity) -> str:
        """Canonical storefront URL of a product (never carries a session id)."""
        base = self.store.base_url
        if self.store.use_secure_urls and self.store.secure_base_url:
            base = self.store.secure_base_url
        base = base.rstrip("/") + "/"

        if entity.url_key:
            return f"{base}{entity.url_key}{self.store.product_url_suffix}"
        return f"{base}catalog/product/view/id/{entity.id}/"

    def build_document(
        self, entity: CatalogEntity, overrides: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Build the search document of an eligible product.

        Args:
            entity: The product; eligibility must already be checked.
            overrides: Fields pinned by the caller. They suppress the
                matching optional computations and win over every computed
                value.

        Returns:
            A new document holding no reference to ``entity`` or ``overrides``.
        """
        started = time.perf_counter()
        defaults = copy.deepcopy(dict(overrides or {}))

        document: dict[str, Any] = {
            "objectID": entity.id,
            "name": entity.name,
            "url": self.get_product_url(entity),
            "visibility_search": int(entity.visibility in VISIBLE_IN_SEARCH),
            "visibility_catalog": int(entity.visibility in VISIBLE_IN_CATALOG),
            "type_id": entity.type_id.value,
        }

        for attribute in OPTIONAL_ATTRIBUTES:
            if attribute not in defaults and self.store.is_attribute_enabled(attribute):
                document[attribute] = entity.get_data(attribute)

        document.update(
            encode_categories(entity.category_ids, self.categories, self.store).to_document()
        )
        self._add_image_data(document, entity)
        self._add_stock_data(document, entity, defaults)

        children = []
        if entity.is_composite:
            children = self.composite_types.get_children(entity, self.store)

        self._add_additional_attributes(document, entity, children)

        document.update(self.price_annotator.annotate(document, entity, children))
        document.update(defaults)
        document = self.caster(document)

        logger.debug(
            "Built product document",
            extra={
                "product_id": entity.id,
                "store_id": self.store.store_id,
                "children": len(children),
                "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return copy.deepcopy(document)

    def _add_image_data(self, document: dict[str, Any], entity: CatalogEntity) -> None:
        store = self.store
        document["thumbnail_url"] = self.image_resolver.get_url(entity, "thumbnail")
        document["image_url"] = self.image_resolver.get_url(
            entity, store.image_type, store.image_width, store.image_height
        )

        if store.is_attribute_enabled("media_gallery"):
            document["media_gallery"] = [
                remove_double_slashes(remove_protocol(url))
                for url in self.image_resolver.get_gallery_urls(entity)
            ]

    def _add_stock_data(
        self, document: dict[str, Any], entity: CatalogEntity, defaults: dict[str, Any]
    ) -> None:
        stock = entity.stock
        if "in_stock" not in defaults:
            document["in_stock"] = bool(stock and stock.is_in_stock)

        if "stock_qty" not in defaults and self.store.is_attribute_enabled("stock_qty"):
            document["stock_qty"] = int(stock.qty) if stock else 0

    def _add_additional_attributes(
        self,
        document: dict[str, Any],
        entity: CatalogEntity,
        children: list[CatalogEntity],
    ) -> None:
        for descriptor in self.store.attributes:
            code = descriptor.attribute
            if code in document and code != IDENTITY_ATTRIBUTE:
                continue
            if code in CREATED_ATTRIBUTES:
                continue

            if entity.get_data(code) is not None:
                value = display_value(entity, code)
                if value:
                    document[code] = value
                if not descriptor.always_array:
                    continue

            if not entity.is_composite:
                continue

            aggregate_attribute(document, code, children, self.image_resolver, self.store)
