"""Shared test fixtures."""

import copy
from collections.abc import Iterable

import pytest

from catalog_index.catalog.schemas import (
    VISIBLE_IN_SITE,
    CatalogEntity,
    Category,
    ProductStatus,
    ProductType,
    StockItem,
)
from catalog_index.search.client import FeatureUnsupportedError, IndexNotFoundError
from catalog_index.store_config import StoreConfig


class FakeCatalog:
    """In-memory catalog source."""

    def __init__(self, products=(), categories=(), children=None):
        self.products = {p.id: p for p in products}
        self.categories = {c.id: c for c in categories}
        # parent id -> child ids
        self.children = children or {}
        self.category_loads = 0

    def add(self, *entities: CatalogEntity) -> None:
        for entity in entities:
            self.products[entity.id] = entity

    def iter_products(
        self,
        store,
        product_ids=None,
        only_visible=True,
        include_not_visible_individually=False,
    ):
        ids = sorted(self.products) if product_ids is None else list(product_ids)
        for product_id in ids:
            entity = self.products.get(product_id)
            if entity is None:
                continue
            if only_visible:
                if entity.is_deleted or entity.status != ProductStatus.ENABLED:
                    continue
                if (
                    not include_not_visible_individually
                    and entity.visibility not in VISIBLE_IN_SITE
                ):
                    continue
                if not store.show_out_of_stock and not (
                    entity.stock and entity.stock.is_in_stock
                ):
                    continue
            yield entity

    def get_categories(self, store_id):
        self.category_loads += 1
        return dict(self.categories)

    def _children(self, entity):
        return [self.products[i] for i in self.children.get(entity.id, [])]

    def get_used_products(self, entity):
        return self._children(entity)

    def get_bundle_products(self, entity):
        return self._children(entity)

    def get_associated_products(self, entity):
        return self._children(entity)

    def get_parent_ids_by_child(self, type_id, child_ids: Iterable[int]):
        wanted = set(child_ids)
        return [
            parent_id
            for parent_id, ids in self.children.items()
            if self.products[parent_id].type_id == type_id and wanted & set(ids)
        ]


class FakeIndexClient:
    """In-memory search service with the semantics the synchronizer relies on.

    Settings updates are partial, copy/move need an existing source index and
    every rule operation fails when ``rules_enabled`` is False.
    """

    def __init__(self, rules_enabled: bool = True):
        self.rules_enabled = rules_enabled
        self.indices: dict[str, dict] = {}
        self.calls: list[tuple] = []

    def _index(self, index_name: str, create: bool = False) -> dict:
        if index_name not in self.indices:
            if not create:
                raise IndexNotFoundError("Index does not exist", 404)
            self.indices[index_name] = {
                "settings": {},
                "synonyms": [],
                "rules": {},
                "objects": {},
            }
        return self.indices[index_name]

    def _check_rules(self) -> None:
        if not self.rules_enabled:
            raise FeatureUnsupportedError(
                "Query Rules are not enabled on this application", 400
            )

    def settings_of(self, index_name: str) -> dict:
        return self.indices[index_name]["settings"]

    def get_settings(self, index_name):
        self.calls.append(("get_settings", index_name))
        return copy.deepcopy(self._index(index_name)["settings"])

    def set_settings(self, index_name, index_settings, forward_to_replicas=False):
        self.calls.append(("set_settings", index_name))
        self._index(index_name, create=True)["settings"].update(
            copy.deepcopy(index_settings)
        )

    def save_synonyms(self, index_name, synonyms):
        self.calls.append(("save_synonyms", index_name))
        self._index(index_name, create=True)["synonyms"] = copy.deepcopy(synonyms)

    def copy_synonyms(self, source, destination):
        self.calls.append(("copy_synonyms", source, destination))
        synonyms = self._index(source)["synonyms"]
        self._index(destination, create=True)["synonyms"] = copy.deepcopy(synonyms)

    def copy_rules(self, source, destination):
        self.calls.append(("copy_rules", source, destination))
        self._check_rules()
        rules = self._index(source)["rules"]
        self._index(destination, create=True)["rules"] = copy.deepcopy(rules)

    def search_rules(self, index_name, context, page, hits_per_page):
        self.calls.append(("search_rules", index_name, page))
        self._check_rules()
        rules = [
            rule
            for rule in self._index(index_name, create=True)["rules"].values()
            if rule.get("condition", {}).get("context") == context
        ]
        start = page * hits_per_page
        return {"hits": rules[start : start + hits_per_page], "nbHits": len(rules)}

    def delete_rule(self, index_name, object_id):
        self.calls.append(("delete_rule", index_name, object_id))
        self._check_rules()
        self._index(index_name)["rules"].pop(object_id, None)

    def save_rules(self, index_name, rules):
        self.calls.append(("save_rules", index_name))
        self._check_rules()
        stored = self._index(index_name, create=True)["rules"]
        for rule in rules:
            stored[rule["objectID"]] = copy.deepcopy(rule)

    def list_indices(self):
        return [{"name": name} for name in self.indices]

    def delete_index(self, index_name):
        self.indices.pop(index_name, None)

    def move_index(self, source, destination):
        self.calls.append(("move_index", source, destination))
        moved = self.indices.pop(source)
        replicas = self.indices.get(destination, {}).get("settings", {}).get("replicas")
        if replicas is not None:
            moved["settings"]["replicas"] = replicas
        self.indices[destination] = moved

    def save_objects(self, index_name, objects):
        self.calls.append(("save_objects", index_name, len(objects)))
        stored = self._index(index_name, create=True)["objects"]
        for obj in objects:
            stored[str(obj["objectID"])] = copy.deepcopy(obj)

    def delete_objects(self, index_name, object_ids):
        ids = [str(i) for i in object_ids]
        self.calls.append(("delete_objects", index_name, ids))
        stored = self._index(index_name, create=True)["objects"]
        for object_id in ids:
            stored.pop(object_id, None)


class FakeImageResolver:
    """Deterministic image URLs; ``failing`` product ids raise."""

    def __init__(self, failing: Iterable[int] = ()):
        self.failing = set(failing)
        self.calls: list[int] = []

    def get_url(self, entity, image_type, width=None, height=None):
        self.calls.append(entity.id)
        if entity.id in self.failing:
            raise RuntimeError("image cache unavailable")
        return f"https://media.example.com/{image_type}/{entity.id}.jpg"

    def get_gallery_urls(self, entity):
        return [f"https://media.example.com//gallery//{p}" for p in entity.media_gallery]


@pytest.fixture
def store_config() -> StoreConfig:
    """A store with a typical attribute, facet and sorting configuration."""
    return StoreConfig(
        store_id=1,
        code="default",
        root_category_id=2,
        base_url="https://shop.example.com/",
        media_base_url="https://shop.example.com/media/catalog/product",
        base_currency="USD",
        currencies=["USD", "EUR"],
        currency_rates={"EUR": 0.5},
        customer_group_ids=[0, 1],
        attributes=[
            {"attribute": "name", "order": "ordered"},
            {"attribute": "sku"},
            {"attribute": "color"},
            {"attribute": "size"},
            {"attribute": "categories", "searchable": False},
            {"attribute": "description", "retrievable": False},
        ],
        facets=[
            {"attribute": "price", "type": "slider"},
            {"attribute": "color", "create_rule": True},
            {"attribute": "size", "searchable": True},
        ],
        custom_ranking=[{"attribute": "in_stock", "order": "desc"}],
        sorting_indices=[
            {"attribute": "price", "sort": "asc", "label": "Lowest price"},
            {"attribute": "created_at", "sort": "desc", "label": "Newest first"},
        ],
        synonyms={"colors": {"synonyms": "red, crimson"}},
        one_way_synonyms={"tee": {"input": "tee", "synonyms": "t-shirt, shirt"}},
    )


@pytest.fixture
def make_entity():
    """Factory for in-stock, enabled, visible simple products."""

    def _make(product_id: int, **overrides) -> CatalogEntity:
        data = {
            "id": product_id,
            "store_id": 1,
            "sku": f"SKU-{product_id}",
            "name": f"Product {product_id}",
            "url_key": f"product-{product_id}",
            "type_id": ProductType.SIMPLE,
            "stock": StockItem(is_in_stock=True, qty=10),
            "attributes": {"price": 20.0},
        }
        data.update(overrides)
        return CatalogEntity(**data)

    return _make


@pytest.fixture
def category_tree() -> list[Category]:
    """Root (2) > Men (3) > Tops (4) > Shirts (5); Hidden (6) is not in the menu."""
    return [
        Category(id=2, name="Default Category", path_ids=[2]),
        Category(id=3, name="Men", path_ids=[2, 3]),
        Category(id=4, name="Tops", path_ids=[2, 3, 4]),
        Category(id=5, name="Shirts", path_ids=[2, 3, 4, 5]),
        Category(id=6, name="Hidden", path_ids=[2, 3, 6], include_in_menu=False),
        Category(id=7, name="Polos", path_ids=[2, 3, 6, 7]),
    ]


@pytest.fixture
def fake_catalog(category_tree) -> FakeCatalog:
    return FakeCatalog(categories=category_tree)


@pytest.fixture
def index_client() -> FakeIndexClient:
    return FakeIndexClient()


@pytest.fixture
def image_resolver() -> FakeImageResolver:
    return FakeImageResolver()
