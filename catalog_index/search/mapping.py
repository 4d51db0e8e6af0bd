"""Index settings derived from a store's configuration."""

from typing import Any

from pydantic import BaseModel

from catalog_index.config import settings
from catalog_index.search.constants import (
    CATEGORIES_ATTRIBUTE,
    INDEX_NAME_SUFFIX,
    PRICE_ATTRIBUTE,
    REPLICA_BASE_RANKING,
    TMP_INDEX_SUFFIX,
)
from catalog_index.store_config import StoreConfig


class SortingIndex(BaseModel):
    """A replica index presenting the primary index in another sort order."""

    name: str
    ranking: list[str]
    label: str = ""


def get_index_name(store: StoreConfig, tmp: bool = False) -> str:
    name = f"{settings.index_prefix}{store.code}{INDEX_NAME_SUFFIX}"
    return name + TMP_INDEX_SUFFIX if tmp else name


def get_searchable_attributes(store: StoreConfig) -> list[str]:
    searchable: list[str] = []
    for attribute in store.attributes:
        ordered = attribute.order == "ordered"
        if attribute.searchable:
            code = attribute.attribute
            searchable.append(code if ordered else f"unordered({code})")

        if attribute.attribute == CATEGORIES_ATTRIBUTE:
            searchable.append(
                "categories_without_path"
                if ordered
                else "unordered(categories_without_path)"
            )
    return list(dict.fromkeys(searchable))


def get_custom_ranking(store: StoreConfig) -> list[str]:
    return [f"{r.order}({r.attribute})" for r in store.custom_ranking]


def get_unretrievable_attributes(store: StoreConfig) -> list[str]:
    return [a.attribute for a in store.attributes if not a.retrievable]


def get_attributes_for_faceting(store: StoreConfig) -> list[str]:
    """Facet expressions; the price facet expands to one field per currency
    (and per customer group when group pricing is enabled)."""
    facets: list[str] = []
    for facet in store.facets:
        if facet.attribute == PRICE_ATTRIBUTE:
            for currency in store.currencies:
                if store.customer_groups_enabled:
                    for group_id in store.customer_group_ids:
                        facets.append(f"price.{currency}.group_{group_id}")
                facets.append(f"price.{currency}.default")
            continue

        attribute = facet.attribute
        facets.append(f"searchable({attribute})" if facet.searchable else attribute)

    if store.replace_categories and CATEGORIES_ATTRIBUTE not in facets:
        facets.append(CATEGORIES_ATTRIBUTE)

    # Used for merchandising
    facets.append("categoryIds")
    return facets


def build_index_settings(store: StoreConfig) -> dict[str, Any]:
    """Compute the primary index settings of a store."""
    return {
        "searchableAttributes": get_searchable_attributes(store),
        "customRanking": get_custom_ranking(store),
        "unretrievableAttributes": get_unretrievable_attributes(store),
        "attributesForFaceting": get_attributes_for_faceting(store),
        "maxValuesPerFacet": int(store.max_values_per_facet),
        "removeWordsIfNoResults": store.remove_words_if_no_results,
    }


def get_sorting_indices(index_name: str, store: StoreConfig) -> list[SortingIndex]:
    """Replica indices for the store's configured sort orders."""
    indices = []
    for sorting in store.sorting_indices:
        if sorting.attribute == PRICE_ATTRIBUTE:
            name = f"{index_name}_{PRICE_ATTRIBUTE}_default_{sorting.sort}"
            sort_attribute = f"{PRICE_ATTRIBUTE}.{store.base_currency}.default"
        else:
            name = f"{index_name}_{sorting.attribute}_{sorting.sort}"
            sort_attribute = sorting.attribute

        indices.append(
            SortingIndex(
                name=name,
                ranking=[f"{sorting.sort}({sort_attribute})", *REPLICA_BASE_RANKING],
                label=sorting.label,
            )
        )
    return indices
