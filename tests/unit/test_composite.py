"""Unit tests for composite product resolution and aggregation."""

import pytest

from catalog_index.catalog.schemas import ProductType, StockItem
from catalog_index.search.composite import (
    CompositeTypes,
    aggregate_attribute,
    display_value,
    format_value,
)


@pytest.fixture
def configurable(make_entity, fake_catalog):
    """A configurable product with three children, one out of stock."""
    parent = make_entity(10, type_id=ProductType.CONFIGURABLE, attributes={})
    children = [
        make_entity(11, attributes={"color": "Red", "size": "S"}),
        make_entity(12, attributes={"color": "Blue", "size": "M"}),
        make_entity(
            13,
            attributes={"color": "Green", "size": "L"},
            stock=StockItem(is_in_stock=False, qty=0),
        ),
    ]
    fake_catalog.add(parent, *children)
    fake_catalog.children[10] = [11, 12, 13]
    return parent


@pytest.mark.unit
class TestCompositeTypes:
    """Tests for child resolution."""

    def test_children_filtered_by_eligibility(
        self, configurable, fake_catalog, store_config
    ):
        """Test that out-of-stock children are dropped."""
        children = CompositeTypes(fake_catalog).get_children(configurable, store_config)
        assert [c.id for c in children] == [11, 12]

    def test_simple_has_no_children(self, make_entity, fake_catalog, store_config):
        """Test that non-composite products resolve to nothing."""
        assert CompositeTypes(fake_catalog).get_children(make_entity(1), store_config) == []

    def test_resolvers_built_once(self, fake_catalog):
        """Test that the handler table is reused within one instance."""
        types = CompositeTypes(fake_catalog)
        assert types.resolvers is types.resolvers
        assert set(types.resolvers) == {
            ProductType.CONFIGURABLE,
            ProductType.BUNDLE,
            ProductType.GROUPED,
        }

    def test_parent_ids(self, configurable, fake_catalog):
        """Test parent lookup from child ids."""
        assert CompositeTypes(fake_catalog).get_parent_product_ids([12, 13]) == [10]
        assert CompositeTypes(fake_catalog).get_parent_product_ids([99]) == []


@pytest.mark.unit
class TestAggregateAttribute:
    """Tests for merging child values into the parent document."""

    def test_merges_eligible_children(
        self, configurable, fake_catalog, store_config, image_resolver
    ):
        """Test that only eligible children contribute values."""
        children = CompositeTypes(fake_catalog).get_children(configurable, store_config)
        document = {}
        aggregate_attribute(document, "size", children, image_resolver, store_config)
        assert document == {"size": ["S", "M"]}

    def test_keeps_parent_value_first(self, make_entity, store_config, image_resolver):
        """Test that the parent's own value leads and duplicates collapse."""
        children = [
            make_entity(2, attributes={"material": "Cotton"}),
            make_entity(3, attributes={"material": "Wool"}),
        ]
        document = {"material": "Wool"}
        aggregate_attribute(document, "material", children, image_resolver, store_config)
        assert document["material"] == ["Wool", "Cotton"]

    def test_uses_option_labels(self, make_entity, store_config, image_resolver):
        """Test that labels replace raw option ids."""
        child = make_entity(
            2, attributes={"size": 167}, attribute_labels={"size": "XL"}
        )
        document = {}
        aggregate_attribute(document, "size", [child], image_resolver, store_config)
        assert document["size"] == ["XL"]

    def test_swatch_images(self, make_entity, store_config, image_resolver):
        """Test that each distinct color gets one image, keyed lower-case."""
        children = [
            make_entity(2, attributes={"color": "Red"}),
            make_entity(3, attributes={"color": "red"}),
            make_entity(4, attributes={"color": "Blue"}),
        ]
        document = {}
        aggregate_attribute(document, "color", children, image_resolver, store_config)
        assert document["color"] == ["Red", "red", "Blue"]
        assert document["images_data"] == {
            "red": "https://media.example.com/image/2.jpg",
            "blue": "https://media.example.com/image/4.jpg",
        }
        assert image_resolver.calls == [2, 4]

    def test_failed_image_skipped(self, make_entity, store_config, image_resolver):
        """Test that one failing child image does not abort aggregation."""
        image_resolver.failing = {2}
        children = [
            make_entity(2, attributes={"color": "Red"}),
            make_entity(3, attributes={"color": "Blue"}),
        ]
        document = {}
        aggregate_attribute(document, "color", children, image_resolver, store_config)
        assert document["color"] == ["Red", "Blue"]
        assert document["images_data"] == {
            "blue": "https://media.example.com/image/3.jpg"
        }

    def test_no_values(self, make_entity, store_config, image_resolver):
        """Test that children without the attribute leave the document alone."""
        document = {}
        aggregate_attribute(
            document, "size", [make_entity(2)], image_resolver, store_config
        )
        assert document == {}


@pytest.mark.unit
class TestDisplayValue:
    """Tests for value formatting."""

    def test_label_wins(self, make_entity):
        """Test that the option label is used when present."""
        entity = make_entity(1, attributes={"color": 5}, attribute_labels={"color": "Red"})
        assert display_value(entity, "color") == "Red"

    def test_boolean(self, make_entity):
        """Test that booleans become Yes/No."""
        assert display_value(make_entity(1, attributes={"new": True}), "new") == "Yes"
        assert format_value(False) == "No"

    def test_missing(self, make_entity):
        """Test that unset attributes give None."""
        assert display_value(make_entity(1), "size") is None
