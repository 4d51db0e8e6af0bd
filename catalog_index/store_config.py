"""Per-store merchant configuration.

The configuration is read from a JSON file (``settings.store_config_path``)
shaped as ``{"stores": [{...}, ...]}``. Each entry is validated into a
:class:`StoreConfig` and is immutable for the duration of a run.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catalog_index.config import settings
from catalog_index.search.constants import (
    ATTRIBUTES_TO_INDEX_AS_ARRAY,
    CREATED_ATTRIBUTES,
    EXCLUDED_ATTRIBUTES,
    RESERVED_DOCUMENT_FIELDS,
)

logger = logging.getLogger(__name__)

SortDirection = Literal["asc", "desc"]


class AttributeDescriptor(BaseModel):
    """An attribute copied into search documents."""

    model_config = ConfigDict(frozen=True)

    attribute: str
    label: str = ""
    searchable: bool = True
    retrievable: bool = True
    order: Literal["ordered", "unordered"] = "unordered"
    index_as_array: bool = False

    @property
    def always_array(self) -> bool:
        return self.index_as_array or self.attribute in ATTRIBUTES_TO_INDEX_AS_ARRAY


class FacetConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    attribute: str
    label: str = ""
    type: Literal["conjunctive", "disjunctive", "slider", "priceRanges"] = (
        "conjunctive"
    )
    searchable: bool = False
    create_rule: bool = False


class RankingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    attribute: str
    order: SortDirection = "desc"


class SortingIndexConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    attribute: str
    sort: SortDirection = "asc"
    label: str = ""


class SynonymGroup(BaseModel):
    model_config = ConfigDict(frozen=True)

    synonyms: str


class OneWaySynonym(BaseModel):
    model_config = ConfigDict(frozen=True)

    input: str
    synonyms: str


class StoreConfig(BaseModel):
    """Indexing configuration of one store view."""

    model_config = ConfigDict(frozen=True)

    store_id: int
    code: str
    root_category_id: int

    # URLs
    base_url: str = "http://localhost/"
    secure_base_url: str | None = None
    use_secure_urls: bool = False
    product_url_suffix: str = ".html"
    media_base_url: str = "http://localhost/media/catalog/product"

    # Images
    image_type: str = "image"
    image_width: int = 265
    image_height: int = 265

    # Currencies and customer groups
    base_currency: str = "USD"
    currencies: list[str] = Field(default_factory=lambda: ["USD"])
    currency_rates: dict[str, float] = Field(default_factory=dict)
    customer_group_ids: list[int] = Field(default_factory=lambda: [0, 1, 2, 3])

    # Feature flags
    show_out_of_stock: bool = False
    show_cats_not_included_in_navigation: bool = False
    instant_enabled: bool = False
    synonyms_enabled: bool = False
    customer_groups_enabled: bool = False
    replace_categories: bool = True

    # Index settings
    max_values_per_facet: int = 10
    remove_words_if_no_results: Literal[
        "none", "lastWords", "firstWords", "allOptional"
    ] = "none"
    synonyms_file: str | None = None

    attributes: list[AttributeDescriptor] = Field(default_factory=list)
    facets: list[FacetConfig] = Field(default_factory=list)
    custom_ranking: list[RankingConfig] = Field(default_factory=list)
    sorting_indices: list[SortingIndexConfig] = Field(default_factory=list)
    synonyms: dict[str, SynonymGroup] = Field(default_factory=dict)
    one_way_synonyms: dict[str, OneWaySynonym] = Field(default_factory=dict)

    @field_validator("attributes")
    @classmethod
    def drop_reserved_attributes(
        cls, attributes: list[AttributeDescriptor]
    ) -> list[AttributeDescriptor]:
        """Remove attributes whose code collides with a mapper-owned field."""
        kept = []
        for attribute in attributes:
            code = attribute.attribute
            if code in RESERVED_DOCUMENT_FIELDS or code in EXCLUDED_ATTRIBUTES:
                logger.warning(
                    "Ignoring reserved attribute in store configuration",
                    extra={"attribute": code},
                )
                continue
            kept.append(attribute)
        return kept

    def is_attribute_enabled(self, attribute: str) -> bool:
        return any(a.attribute == attribute for a in self.attributes)

    def get_attribute(self, attribute: str) -> AttributeDescriptor | None:
        return next((a for a in self.attributes if a.attribute == attribute), None)

    def currency_rate(self, currency: str) -> float:
        if currency == self.base_currency:
            return 1.0
        return self.currency_rates.get(currency, 1.0)


def get_all_attributes(
    catalog_attributes: Mapping[str, str], add_empty_row: bool = False
) -> dict[str, str]:
    """List attribute codes that can be configured for indexing.

    Args:
        catalog_attributes: ``{code: frontend label}`` for every product
            attribute known to the catalog.
        add_empty_row: Include an empty ``""`` entry (for select widgets).

    Returns:
        Attribute labels keyed by code, sorted by code.
    """
    attributes = {code: code.replace("_", " ").capitalize() for code in CREATED_ATTRIBUTES}
    attributes["name"] = "Name"
    attributes["description"] = "Description"
    attributes.update(catalog_attributes)

    for code in EXCLUDED_ATTRIBUTES:
        attributes.pop(code, None)

    if add_empty_row:
        attributes[""] = ""

    return dict(sorted(attributes.items()))


@lru_cache(maxsize=1)
def load_store_configs(path: str | None = None) -> dict[int, StoreConfig]:
    """Load store configurations from a JSON file.

    Args:
        path: Path to a JSON file with a ``stores`` list.

    Returns:
        Store configurations keyed by store id; empty when the file is absent.
    """
    if not path:
        return {}

    file_path = Path(path)
    if not file_path.exists():
        return {}

    data = json.loads(file_path.read_text(encoding="utf-8"))
    stores = [StoreConfig.model_validate(entry) for entry in data.get("stores", [])]
    return {store.store_id: store for store in stores}


def get_store_config(store_id: int) -> StoreConfig:
    """Resolve the configuration of one store."""
    stores = load_store_configs(settings.store_config_path)
    try:
        return stores[store_id]
    except KeyError:
        raise LookupError(f"No configuration for store {store_id}") from None
