"""Category hierarchy flattening for hierarchical facets.

A product assigned to ``Men > Tops > Shirts`` is indexed as::

    {"level0": ["Men"], "level1": ["Men /// Tops"],
     "level2": ["Men /// Tops /// Shirts"]}

Every ancestor level is emitted so each depth can be faceted on its own.
Categories hidden from navigation keep their depth: they emit nothing at
their own level and contribute an empty segment to deeper levels
(``"Men ///  /// Shirts"``), so later levels stay aligned with their true
depth.
"""

from collections.abc import Iterable, Mapping, Sequence

from pydantic import BaseModel, Field

from catalog_index.catalog.schemas import Category
from catalog_index.search.constants import (
    CATEGORY_LEVEL_PREFIX,
    CATEGORY_PATH_DELIMITER,
)
from catalog_index.store_config import StoreConfig

# Placeholder for a category hidden from navigation
HIDDEN = None

NamePath = Sequence[str | None]


class CategoryData(BaseModel):
    """Category fields of one search document."""

    levels: dict[str, list[str]] = Field(default_factory=dict)
    names: list[str] = Field(default_factory=list)
    category_ids: list[int] = Field(default_factory=list)

    def to_document(self) -> dict:
        return {
            "categories": self.levels,
            "categories_without_path": self.names,
            "categoryIds": self.category_ids,
        }


def _unique(values: Iterable) -> list:
    return list(dict.fromkeys(values))


def expand_prefixes(paths: Iterable[NamePath]) -> list[tuple[str | None, ...]]:
    """Add every proper prefix of every path, then drop duplicate paths."""
    expanded = [tuple(path) for path in paths]
    for path in list(expanded):
        for length in range(len(path) - 1, 0, -1):
            expanded.append(path[:length])
    return _unique(expanded)


def encode_hierarchy(paths: Iterable[NamePath]) -> dict[str, list[str]]:
    """Group name paths into ``level<N>`` facet values."""
    levels: dict[str, list[str]] = {}
    for path in expand_prefixes(paths):
        for depth, name in enumerate(path):
            if name is HIDDEN:
                continue
            levels.setdefault(f"{CATEGORY_LEVEL_PREFIX}{depth}", []).append(
                CATEGORY_PATH_DELIMITER.join(part or "" for part in path[: depth + 1])
            )
    return {key: _unique(values) for key, values in levels.items()}


def encode_categories(
    category_ids: Iterable[int],
    categories: Mapping[int, Category],
    store: StoreConfig,
) -> CategoryData:
    """Build the category fields for a product.

    Args:
        category_ids: Categories the product is assigned to.
        categories: Every category of the store keyed by id.
        store: Store whose root category and navigation flags apply.
    """
    names: list[str] = []
    tree_ids: list[int] = []
    paths: list[list[str | None]] = []

    for category_id in _unique(category_ids):
        category = categories.get(category_id)
        if category is None or category.id == store.root_category_id:
            continue
        # Assignments from another store's tree
        if category.path_ids and category.path_ids[0] != store.root_category_id:
            continue

        if category.name:
            names.append(category.name)

        path: list[str | None] = []
        for tree_id in category.path_ids[1:]:
            node = categories.get(tree_id)
            if node is None:
                continue
            if not store.show_cats_not_included_in_navigation and not node.include_in_menu:
                path.append(HIDDEN)
                continue
            if node.name:
                tree_ids.append(tree_id)
                path.append(node.name)

        paths.append(path)

    return CategoryData(
        levels=encode_hierarchy(paths),
        names=_unique(names),
        category_ids=_unique(tree_ids),
    )
