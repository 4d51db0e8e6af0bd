"""Price fields of search documents.

Prices are indexed as ``price.<CURRENCY>.default`` with an optional
``default_max`` for composite products whose children differ in price, and
``group_<id>`` entries when per-customer-group pricing is enabled.
"""

from collections.abc import Iterable
from typing import Any, Protocol

from catalog_index.catalog.schemas import CatalogEntity
from catalog_index.store_config import StoreConfig


class PriceAnnotator(Protocol):
    def annotate(
        self,
        document: dict[str, Any],
        entity: CatalogEntity,
        children: list[CatalogEntity],
    ) -> dict[str, Any]: ...


def final_price(entity: CatalogEntity, group_id: int | None = None) -> float | None:
    """Lowest applicable price of a product, ``None`` when it has none."""
    candidates = []
    for attribute in ("price", "special_price"):
        value = entity.get_data(attribute)
        if value not in (None, ""):
            candidates.append(float(value))

    if group_id is not None:
        group_prices = entity.get_data("group_prices") or {}
        value = group_prices.get(str(group_id))
        if value is not None:
            candidates.append(float(value))

    return min(candidates) if candidates else None


def price_range(
    entities: Iterable[CatalogEntity], group_id: int | None = None
) -> tuple[float, float]:
    prices = [p for p in (final_price(e, group_id) for e in entities) if p is not None]
    if not prices:
        return 0.0, 0.0
    return min(prices), max(prices)


def format_price(amount: float, currency: str) -> str:
    return f"{amount:,.2f} {currency}"


class StorePriceAnnotator:
    """Price annotator using the store's currencies and customer groups."""

    def __init__(self, store: StoreConfig):
        self.store = store

    def annotate(
        self,
        document: dict[str, Any],
        entity: CatalogEntity,
        children: list[CatalogEntity],
    ) -> dict[str, Any]:
        sources = children if entity.is_composite and children else [entity]
        low, high = price_range(sources)

        prices: dict[str, dict[str, Any]] = {}
        for currency in self.store.currencies:
            rate = self.store.currency_rate(currency)
            entry: dict[str, Any] = {
                "default": round(low * rate, 2),
                "default_formated": format_price(low * rate, currency),
            }
            if high > low:
                entry["default_max"] = round(high * rate, 2)

            if self.store.customer_groups_enabled:
                for group_id in self.store.customer_group_ids:
                    group_low, _ = price_range(sources, group_id)
                    entry[f"group_{group_id}"] = round(group_low * rate, 2)

            prices[currency] = entry

        return {"price": prices}
