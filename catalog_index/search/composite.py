"""Child resolution and attribute aggregation for composite products."""

import logging
from collections.abc import Callable, Iterable
from typing import Any

from catalog_index.catalog.schemas import CatalogEntity, ProductType
from catalog_index.catalog.source import CatalogSource
from catalog_index.search.constants import SWATCH_ATTRIBUTE
from catalog_index.search.eligibility import is_eligible
from catalog_index.search.images import ImageResolver
from catalog_index.store_config import StoreConfig

logger = logging.getLogger(__name__)

VariationResolver = Callable[[CatalogSource, CatalogEntity], list[CatalogEntity]]


def _used_products(catalog: CatalogSource, entity: CatalogEntity) -> list[CatalogEntity]:
    return catalog.get_used_products(entity)


def _bundle_products(catalog: CatalogSource, entity: CatalogEntity) -> list[CatalogEntity]:
    return catalog.get_bundle_products(entity)


def _associated_products(
    catalog: CatalogSource, entity: CatalogEntity
) -> list[CatalogEntity]:
    return catalog.get_associated_products(entity)


class CompositeTypes:
    """Composite type handlers for one indexing run.

    The handler table is built on first use and lives as long as the
    instance; create one instance per run.
    """

    def __init__(self, catalog: CatalogSource):
        self.catalog = catalog
        self._resolvers: dict[ProductType, VariationResolver] | None = None

    @property
    def resolvers(self) -> dict[ProductType, VariationResolver]:
        if self._resolvers is None:
            self._resolvers = {
                ProductType.CONFIGURABLE: _used_products,
                ProductType.BUNDLE: _bundle_products,
                ProductType.GROUPED: _associated_products,
            }
        return self._resolvers

    def get_children(self, entity: CatalogEntity, store: StoreConfig) -> list[CatalogEntity]:
        """Return the eligible children of a composite product.

        Children failing :func:`check_eligible` (as children) are dropped.
        """
        resolver = self.resolvers.get(entity.type_id)
        if resolver is None:
            return []
        return [
            child
            for child in resolver(self.catalog, entity)
            if is_eligible(child, store, is_child=True)
        ]

    def get_parent_product_ids(self, child_ids: Iterable[int]) -> list[int]:
        """Return ids of every composite product containing one of the children."""
        ids = list(child_ids)
        parent_ids: list[int] = []
        for type_id in self.resolvers:
            parent_ids.extend(self.catalog.get_parent_ids_by_child(type_id, ids))
        return list(dict.fromkeys(parent_ids))


def format_value(value: Any) -> Any:
    """Human-readable form of a raw value without an option label."""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return value


def display_value(entity: CatalogEntity, attribute: str) -> Any:
    """Label of the attribute's value when it has one, else the formatted value."""
    value = entity.get_data(attribute)
    if value is None:
        return None
    if not isinstance(value, list):
        text = entity.get_attribute_text(attribute)
        if text:
            return text
    return format_value(value)


def _child_values(child: CatalogEntity, attribute: str) -> list:
    text = child.get_attribute_text(attribute)
    if text:
        return list(text) if isinstance(text, list) else [text]
    value = format_value(child.get_data(attribute))
    return list(value) if isinstance(value, list) else [value]


def _add_child_image(
    images: dict[str, str],
    child: CatalogEntity,
    values: list,
    image_resolver: ImageResolver,
    store: StoreConfig,
) -> None:
    keys = [str(value).lower() for value in values if str(value).lower() not in images]
    if not keys:
        return
    try:
        url = image_resolver.get_url(
            child, store.image_type, store.image_width, store.image_height
        )
    except Exception:
        logger.warning(
            "Could not resolve variant image",
            extra={"product_id": child.id, "store_id": store.store_id},
            exc_info=True,
        )
        return
    for key in keys:
        images[key] = url


def aggregate_attribute(
    document: dict[str, Any],
    attribute: str,
    children: Iterable[CatalogEntity],
    image_resolver: ImageResolver,
    store: StoreConfig,
) -> None:
    """Merge an attribute's values from the children into the document.

    Values keep first-seen order and start from the value already on the
    document. For the swatch attribute one image per distinct value is
    collected into ``images_data``, keyed by the lower-cased value.
    """
    values: list = []
    current = document.get(attribute)
    if current is not None:
        values.extend(current if isinstance(current, list) else [current])

    is_swatch = attribute.lower() == SWATCH_ATTRIBUTE
    images: dict[str, str] = {}

    for child in children:
        if not child.get_data(attribute):
            continue
        child_values = _child_values(child, attribute)
        values.extend(child_values)
        if is_swatch:
            _add_child_image(images, child, child_values, image_resolver, store)

    if values:
        document[attribute] = list(dict.fromkeys(values))

    if images:
        document.setdefault("images_data", {}).update(images)
