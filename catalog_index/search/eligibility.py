"""Reindex eligibility checks for catalog entities."""

import logging

from catalog_index.catalog.schemas import (
    VISIBLE_IN_SITE,
    CatalogEntity,
    ProductStatus,
)
from catalog_index.store_config import StoreConfig

logger = logging.getLogger(__name__)


class EligibilityError(Exception):
    """The entity must not be present in the index for this store."""

    reason = "not_eligible"

    def __init__(self, entity: CatalogEntity, store_id: int):
        super().__init__(f"Product {entity.id} is not indexable in store {store_id}")
        self.product_id = entity.id
        self.store_id = store_id


class EntityDeletedError(EligibilityError):
    reason = "deleted"


class EntityDisabledError(EligibilityError):
    reason = "disabled"


class NotVisibleError(EligibilityError):
    reason = "not_visible"


class OutOfStockError(EligibilityError):
    reason = "out_of_stock"


def check_eligible(
    entity: CatalogEntity, store: StoreConfig, is_child: bool = False
) -> bool:
    """Check whether an entity may be indexed in a store.

    Rules are evaluated in order and the first failing one raises. Children
    of composite products skip the visibility rule: once a parent includes
    them their own visibility is irrelevant.

    Returns:
        True when the entity is eligible.

    Raises:
        EligibilityError: One of its subclasses naming the failed rule.
    """
    if entity.is_deleted:
        raise EntityDeletedError(entity, store.store_id)

    if entity.status == ProductStatus.DISABLED:
        raise EntityDisabledError(entity, store.store_id)

    if not is_child and entity.visibility not in VISIBLE_IN_SITE:
        raise NotVisibleError(entity, store.store_id)

    if not store.show_out_of_stock:
        if entity.stock is None or not entity.stock.is_in_stock:
            raise OutOfStockError(entity, store.store_id)

    return True


def is_eligible(
    entity: CatalogEntity, store: StoreConfig, is_child: bool = False
) -> bool:
    """Boolean form of :func:`check_eligible`."""
    try:
        return check_eligible(entity, store, is_child=is_child)
    except EligibilityError as e:
        logger.debug(
            "Skipping product",
            extra={"product_id": e.product_id, "store_id": e.store_id, "reason": e.reason},
        )
        return False
