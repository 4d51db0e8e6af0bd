"""Unit tests for facet query rules."""

import pytest

from catalog_index.search.rules import FacetQueryRuleManager, build_facet_rules


@pytest.mark.unit
class TestBuildFacetRules:
    """Tests for rule construction."""

    def test_rule_shape(self, store_config):
        """Test that only facets with create_rule produce a rule."""
        assert build_facet_rules(store_config) == [
            {
                "objectID": "filter_color",
                "description": 'Filter facet "color"',
                "condition": {
                    "anchoring": "contains",
                    "pattern": "{facet:color}",
                    "context": "catalog_filters",
                },
                "consequence": {
                    "params": {
                        "automaticFacetFilters": ["color"],
                        "query": {"remove": ["{facet:color}"]},
                    }
                },
            }
        ]


@pytest.mark.unit
class TestFacetQueryRuleManager:
    """Tests for clearing and applying rules."""

    def _rule(self, object_id, context="catalog_filters"):
        return {"objectID": object_id, "condition": {"context": context}}

    def test_apply(self, index_client, store_config):
        """Test that apply writes the facet rules."""
        FacetQueryRuleManager(index_client, store_config).apply("products")
        assert list(index_client.indices["products"]["rules"]) == ["filter_color"]

    def test_clear_pages_through_namespace(self, index_client, store_config):
        """Test that every rule in the namespace is deleted across pages."""
        index_client.save_rules(
            "products", [self._rule(f"filter_{i}") for i in range(250)]
        )
        deleted = FacetQueryRuleManager(index_client, store_config).clear("products")
        assert deleted == 250
        assert index_client.indices["products"]["rules"] == {}

    def test_clear_keeps_other_rules(self, index_client, store_config):
        """Test that merchandising rules outside the namespace survive."""
        index_client.save_rules(
            "products",
            [self._rule("filter_size"), self._rule("promo", context="landing")],
        )
        manager = FacetQueryRuleManager(index_client, store_config)
        manager.apply("products")
        assert set(index_client.indices["products"]["rules"]) == {"promo", "filter_color"}

    def test_clear_unsupported(self, index_client, store_config):
        """Test that an application without query rules counts as clear."""
        index_client.rules_enabled = False
        assert FacetQueryRuleManager(index_client, store_config).clear("products") == 0

    def test_apply_without_rules(self, index_client, store_config):
        """Test that no rule-enabled facets write nothing."""
        store = store_config.model_copy(update={"facets": []})
        assert FacetQueryRuleManager(index_client, store).apply("products") == []
        assert ("save_rules", "products") not in index_client.calls
