"""Read-only catalog value types consumed by the indexing pipeline."""

from enum import IntEnum, StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProductType(StrEnum):
    SIMPLE = "simple"
    VIRTUAL = "virtual"
    CONFIGURABLE = "configurable"
    BUNDLE = "bundle"
    GROUPED = "grouped"

    @property
    def is_composite(self) -> bool:
        return self in COMPOSITE_TYPES


COMPOSITE_TYPES = frozenset(
    {ProductType.CONFIGURABLE, ProductType.BUNDLE, ProductType.GROUPED}
)


class ProductStatus(IntEnum):
    ENABLED = 1
    DISABLED = 2


class Visibility(IntEnum):
    NOT_VISIBLE = 1
    IN_CATALOG = 2
    IN_SEARCH = 3
    BOTH = 4


VISIBLE_IN_CATALOG = frozenset({Visibility.IN_CATALOG, Visibility.BOTH})
VISIBLE_IN_SEARCH = frozenset({Visibility.IN_SEARCH, Visibility.BOTH})
VISIBLE_IN_SITE = frozenset(
    {Visibility.IN_CATALOG, Visibility.IN_SEARCH, Visibility.BOTH}
)


class StockItem(BaseModel):
    """Inventory state of one product."""

    model_config = ConfigDict(frozen=True)

    is_in_stock: bool = False
    qty: float = 0


class Category(BaseModel):
    """A category node as seen from one store.

    ``path_ids`` runs from the store's top-level root category down to the
    category itself. ``name`` is ``None`` when no label exists for the store.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str | None = None
    path_ids: list[int] = Field(default_factory=list)
    include_in_menu: bool = True


class CatalogEntity(BaseModel):
    """One product in one store context."""

    model_config = ConfigDict(frozen=True)

    id: int
    store_id: int
    sku: str
    name: str | None = None
    url_key: str | None = None
    type_id: ProductType = ProductType.SIMPLE
    status: ProductStatus = ProductStatus.ENABLED
    is_deleted: bool = False
    visibility: Visibility = Visibility.BOTH
    attributes: dict[str, Any] = Field(default_factory=dict)
    attribute_labels: dict[str, str | list[str]] = Field(default_factory=dict)
    stock: StockItem | None = None
    category_ids: list[int] = Field(default_factory=list)
    image: str | None = None
    small_image: str | None = None
    thumbnail: str | None = None
    media_gallery: list[str] = Field(default_factory=list)

    @property
    def is_composite(self) -> bool:
        return self.type_id.is_composite

    def get_data(self, attribute: str) -> Any:
        """Return the raw value of an attribute, ``None`` when unset."""
        if attribute == "sku":
            return self.sku
        if attribute == "name":
            return self.name
        return self.attributes.get(attribute)

    def get_attribute_text(self, attribute: str) -> str | list[str] | None:
        """Return the option label(s) for attributes backed by an option source."""
        return self.attribute_labels.get(attribute)
