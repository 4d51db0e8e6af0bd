"""Index a store's products into the search service."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from catalog_index.catalog.source import CatalogSource
from catalog_index.config import settings
from catalog_index.search.client import IndexClient
from catalog_index.search.composite import CompositeTypes
from catalog_index.search.document import ProductDocumentBuilder
from catalog_index.search.eligibility import EligibilityError, check_eligible
from catalog_index.search.mapping import get_index_name
from catalog_index.search.synchronizer import IndexSettingsSynchronizer
from catalog_index.store_config import StoreConfig

logger = logging.getLogger(__name__)


def _flush(
    client: IndexClient,
    index_name: str,
    documents: list[dict[str, Any]],
    to_delete: list[int],
) -> None:
    if documents:
        client.save_objects(index_name, documents)
    if to_delete:
        client.delete_objects(index_name, [str(i) for i in to_delete])


def push_products(
    store: StoreConfig,
    catalog: CatalogSource,
    client: IndexClient,
    index_name: str,
    builder: ProductDocumentBuilder | None = None,
    product_ids: Iterable[int] | None = None,
    batch_size: int | None = None,
) -> int:
    """Build and push documents of a store's products.

    Without ``product_ids`` every indexable product of the store is pushed.
    With ``product_ids`` each product is re-checked: eligible ones are
    pushed, the others (and ids missing from the catalog) are deleted from
    the index.

    Returns the number of documents pushed.
    """
    builder = builder or ProductDocumentBuilder(store, catalog)
    batch_size = batch_size or settings.batch_size
    requested = list(dict.fromkeys(product_ids)) if product_ids is not None else None

    entities = catalog.iter_products(
        store, product_ids=requested, only_visible=requested is None
    )

    count = 0
    seen: set[int] = set()
    documents: list[dict[str, Any]] = []
    to_delete: list[int] = []
    for entity in entities:
        seen.add(entity.id)
        try:
            check_eligible(entity, store)
        except EligibilityError as e:
            logger.debug(
                "Removing product from index",
                extra={"product_id": e.product_id, "store_id": e.store_id, "reason": e.reason},
            )
            to_delete.append(entity.id)
        else:
            documents.append(builder.build_document(entity))

        if len(documents) + len(to_delete) >= batch_size:
            _flush(client, index_name, documents, to_delete)
            count += len(documents)
            logger.info("Indexed documents", extra={"index": index_name, "count": count})
            documents, to_delete = [], []

    if requested is not None:
        to_delete.extend(i for i in requested if i not in seen)

    _flush(client, index_name, documents, to_delete)
    count += len(documents)
    logger.info("Indexing finished", extra={"index": index_name, "count": count})
    return count


def rebuild_store_index(
    store: StoreConfig,
    catalog: CatalogSource,
    client: IndexClient,
    builder: ProductDocumentBuilder | None = None,
    use_tmp_index: bool = True,
    batch_size: int | None = None,
    settings_overrides: Mapping[str, Any] | None = None,
) -> int:
    """Full reindex of a store.

    With ``use_tmp_index`` the documents go to the temp index, which is
    prepared with the primary's settings, synonyms and rules and then moved
    over the primary, so searches never see a half-built index.
    """
    index_name = get_index_name(store)
    tmp_index_name = get_index_name(store, tmp=True)

    IndexSettingsSynchronizer(client, store).sync(
        index_name,
        tmp_index_name,
        save_to_tmp=use_tmp_index,
        settings_overrides=settings_overrides,
    )

    target = tmp_index_name if use_tmp_index else index_name
    count = push_products(
        store, catalog, client, target, builder=builder, batch_size=batch_size
    )

    if use_tmp_index:
        client.move_index(tmp_index_name, index_name)
        logger.info(
            "Moved temp index", extra={"tmp_index": tmp_index_name, "index": index_name}
        )
    return count


def reindex_products(
    store: StoreConfig,
    catalog: CatalogSource,
    client: IndexClient,
    product_ids: Iterable[int],
    builder: ProductDocumentBuilder | None = None,
    batch_size: int | None = None,
) -> int:
    """Reindex changed products together with the composites containing them."""
    builder = builder or ProductDocumentBuilder(store, catalog)
    ids = list(product_ids)
    parent_ids = builder.composite_types.get_parent_product_ids(ids)

    return push_products(
        store,
        catalog,
        client,
        get_index_name(store),
        builder=builder,
        product_ids=[*ids, *parent_ids],
        batch_size=batch_size,
    )
