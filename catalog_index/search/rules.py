"""Query rules turning facet values found in a query into filters."""

import logging
from typing import Any

from catalog_index.search.client import FeatureUnsupportedError, IndexClient
from catalog_index.search.constants import FACET_RULE_CONTEXT, RULES_PAGE_SIZE
from catalog_index.store_config import StoreConfig

logger = logging.getLogger(__name__)


def build_facet_rules(store: StoreConfig) -> list[dict[str, Any]]:
    """One rule per facet with ``create_rule`` enabled.

    The rule fires when the query contains a value of the facet, applies
    that value as a facet filter and removes it from the query text.
    """
    rules = []
    for facet in store.facets:
        if not facet.create_rule:
            continue

        attribute = facet.attribute
        pattern = f"{{facet:{attribute}}}"
        rules.append(
            {
                "objectID": f"filter_{attribute}",
                "description": f'Filter facet "{attribute}"',
                "condition": {
                    "anchoring": "contains",
                    "pattern": pattern,
                    "context": FACET_RULE_CONTEXT,
                },
                "consequence": {
                    "params": {
                        "automaticFacetFilters": [attribute],
                        "query": {"remove": [pattern]},
                    }
                },
            }
        )
    return rules


class FacetQueryRuleManager:
    """Keeps the facet rules of an index in line with the store's facets."""

    def __init__(self, client: IndexClient, store: StoreConfig):
        self.client = client
        self.store = store

    def clear(self, index_name: str) -> int:
        """Delete every rule in the facet rule context.

        Returns the number of deleted rules; 0 when the application does not
        support query rules.
        """
        object_ids: list[str] = []
        try:
            page = 0
            while True:
                result = self.client.search_rules(
                    index_name, FACET_RULE_CONTEXT, page, RULES_PAGE_SIZE
                )
                if not result or "hits" not in result:
                    break

                object_ids.extend(hit["objectID"] for hit in result["hits"])
                page += 1
                if page * RULES_PAGE_SIZE >= result.get("nbHits", 0):
                    break

            for object_id in object_ids:
                self.client.delete_rule(index_name, object_id)
        except FeatureUnsupportedError:
            logger.info(
                "Query rules not enabled; nothing to clear", extra={"index": index_name}
            )
            return 0

        return len(object_ids)

    def apply(self, index_name: str) -> list[dict[str, Any]]:
        """Replace the facet rules of an index; returns the rules written."""
        self.clear(index_name)

        rules = build_facet_rules(self.store)
        if rules:
            self.client.save_rules(index_name, rules)
            logger.info(
                "Set facet query rules",
                extra={"index": index_name, "rules": [r["objectID"] for r in rules]},
            )
        return rules
