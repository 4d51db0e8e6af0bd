"""Unit tests for category hierarchy flattening."""

import pytest

from catalog_index.catalog.schemas import Category
from catalog_index.search.categories import (
    HIDDEN,
    encode_categories,
    encode_hierarchy,
    expand_prefixes,
)


@pytest.mark.unit
class TestEncodeHierarchy:
    """Tests for the pure level encoding."""

    def test_single_path(self):
        """Test that every ancestor level is emitted."""
        levels = encode_hierarchy([["A", "B", "C"]])
        assert levels == {
            "level0": ["A"],
            "level1": ["A /// B"],
            "level2": ["A /// B /// C"],
        }

    def test_prefix_path_is_deduplicated(self):
        """Test that a path already covered by a deeper one adds nothing."""
        assert encode_hierarchy([["A", "B", "C"], ["A", "B"]]) == encode_hierarchy(
            [["A", "B", "C"]]
        )

    def test_siblings(self):
        """Test that shared ancestors appear once."""
        levels = encode_hierarchy([["A", "B"], ["A", "C"]])
        assert levels["level0"] == ["A"]
        assert levels["level1"] == ["A /// B", "A /// C"]

    def test_hidden_ancestor_keeps_position(self):
        """Test that a hidden category emits nothing but keeps its slot."""
        levels = encode_hierarchy([["A", HIDDEN, "C"]])
        assert levels == {"level0": ["A"], "level2": ["A ///  /// C"]}

    def test_empty(self):
        """Test that no paths produce no levels."""
        assert encode_hierarchy([]) == {}

    def test_expand_prefixes(self):
        """Test prefix expansion order and uniqueness."""
        assert expand_prefixes([["A", "B", "C"], ["A", "B"]]) == [
            ("A", "B", "C"),
            ("A", "B"),
            ("A",),
        ]


@pytest.mark.unit
class TestEncodeCategories:
    """Tests for category fields built from the category tree."""

    def _categories(self, category_tree):
        return {c.id: c for c in category_tree}

    def test_levels_and_names(self, category_tree, store_config):
        """Test a product in a leaf category and one of its ancestors."""
        data = encode_categories([5, 4], self._categories(category_tree), store_config)
        assert data.levels == {
            "level0": ["Men"],
            "level1": ["Men /// Tops"],
            "level2": ["Men /// Tops /// Shirts"],
        }
        assert data.names == ["Shirts", "Tops"]
        assert data.category_ids == [3, 4, 5]

    def test_root_category_is_not_named(self, category_tree, store_config):
        """Test that the store root never becomes a facet value."""
        data = encode_categories([2, 3], self._categories(category_tree), store_config)
        assert data.levels == {"level0": ["Men"]}
        assert "Default Category" not in data.names

    def test_hidden_ancestor(self, category_tree, store_config):
        """Test that a category under a hidden one keeps its true depth."""
        data = encode_categories([7], self._categories(category_tree), store_config)
        assert data.levels == {"level0": ["Men"], "level2": ["Men ///  /// Polos"]}
        assert data.category_ids == [3, 7]

    def test_hidden_ancestor_shown_by_store(self, category_tree, store_config):
        """Test that the store flag includes categories hidden from the menu."""
        store = store_config.model_copy(
            update={"show_cats_not_included_in_navigation": True}
        )
        data = encode_categories([7], self._categories(category_tree), store)
        assert data.levels["level1"] == ["Men /// Hidden"]
        assert data.levels["level2"] == ["Men /// Hidden /// Polos"]

    def test_unnamed_category_skipped(self, category_tree, store_config):
        """Test that categories without a name take no slot."""
        categories = self._categories(category_tree)
        categories[4] = Category(id=4, name=None, path_ids=[2, 3, 4])
        data = encode_categories([5], categories, store_config)
        assert data.levels == {"level0": ["Men"], "level1": ["Men /// Shirts"]}

    def test_other_store_tree_ignored(self, category_tree, store_config):
        """Test that categories below another root are ignored."""
        categories = self._categories(category_tree)
        categories[50] = Category(id=50, name="Elsewhere", path_ids=[40, 50])
        data = encode_categories([50], categories, store_config)
        assert data.levels == {}
        assert data.names == []

    def test_unknown_category_ignored(self, category_tree, store_config):
        """Test that ids missing from the tree are ignored."""
        data = encode_categories([999], self._categories(category_tree), store_config)
        assert data.to_document() == {
            "categories": {},
            "categories_without_path": [],
            "categoryIds": [],
        }
