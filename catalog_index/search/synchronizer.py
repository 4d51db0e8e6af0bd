"""Push a store's index configuration to the search service.

A sync run updates, in order: the primary (and optionally temp) index
settings, the facet query rules, the sorting replicas and their settings,
then synonyms. Re-running it with unchanged configuration leaves the remote
state unchanged.
"""

import copy
import logging
from collections.abc import Mapping
from typing import Any

from catalog_index.search.client import (
    FeatureUnsupportedError,
    IndexClient,
    IndexNotFoundError,
)
from catalog_index.search.mapping import (
    SortingIndex,
    build_index_settings,
    get_index_name,
    get_sorting_indices,
)
from catalog_index.search.rules import FacetQueryRuleManager
from catalog_index.search.synonyms import build_synonyms
from catalog_index.store_config import StoreConfig

logger = logging.getLogger(__name__)

# Keys the service manages on the primary index; never sent back with settings
_ONLINE_ONLY_KEYS = ("replicas", "slaves", "primary")


class IndexSettingsSynchronizer:
    def __init__(self, client: IndexClient, store: StoreConfig):
        self.client = client
        self.store = store
        self.rules = FacetQueryRuleManager(client, store)

    def get_online_settings(self, index_name: str) -> dict[str, Any]:
        """Current settings of an index, empty when the index does not exist yet."""
        try:
            return self.client.get_settings(index_name)
        except IndexNotFoundError:
            return {}

    def merge_settings(
        self,
        index_name: str,
        index_settings: dict[str, Any],
        merge_from: str | None = None,
    ) -> dict[str, Any]:
        """Overlay computed settings on the online settings of an index.

        Settings managed outside this tool survive the push. ``merge_from``
        reads the online settings of another index (the primary, when
        preparing the temp index).
        """
        merged = dict(self.get_online_settings(merge_from or index_name))
        for key in _ONLINE_ONLY_KEYS:
            merged.pop(key, None)
        merged.update(index_settings)
        return merged

    def sync(
        self,
        index_name: str,
        tmp_index_name: str,
        save_to_tmp: bool = False,
        settings_overrides: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Synchronize the primary index (and the temp index when requested).

        ``settings_overrides`` is merged over the computed settings before any
        push, so its keys win on the primary, temp and replica indices.

        Returns the settings pushed to the primary index.
        """
        index_settings = build_index_settings(self.store)
        if settings_overrides:
            index_settings.update(copy.deepcopy(dict(settings_overrides)))
        log_extra = {"store": self.store.code, "index": index_name}

        self.client.set_settings(index_name, self.merge_settings(index_name, index_settings))
        logger.info("Pushed index settings", extra={**log_extra, "settings": index_settings})

        if save_to_tmp:
            self.client.set_settings(
                tmp_index_name,
                self.merge_settings(tmp_index_name, index_settings, merge_from=index_name),
            )
            logger.info("Pushed temp index settings", extra={**log_extra, "tmp_index": tmp_index_name})

        self.rules.apply(index_name)
        if save_to_tmp:
            self.rules.apply(tmp_index_name)

        self.sync_replicas(index_name, index_settings)
        self.sync_synonyms(index_name, tmp_index_name, save_to_tmp)

        if save_to_tmp:
            self.copy_rules(index_name, tmp_index_name)

        return index_settings

    def sync_replicas(
        self, index_name: str, index_settings: dict[str, Any]
    ) -> list[str]:
        """Attach the sorting replicas and push their settings.

        Replicas created by other tools (A/B testing, merchandising) are kept
        by taking the union with the replicas currently attached to the
        index. Returns the replica list written to the index.
        """
        sorting_indices: list[SortingIndex] = get_sorting_indices(index_name, self.store)
        wanted = [s.name for s in sorting_indices] if self.store.instant_enabled else []

        current = self.get_online_settings(index_name).get("replicas") or []
        replicas = list(dict.fromkeys([*wanted, *current]))

        if not replicas:
            self.client.set_settings(index_name, {"replicas": []})
            logger.info("Cleared replicas", extra={"index": index_name})
            return replicas

        self.client.set_settings(index_name, {"replicas": replicas})
        logger.info("Set replicas", extra={"index": index_name, "replicas": replicas})

        for sorting_index in sorting_indices:
            if sorting_index.name not in replicas:
                continue
            replica_settings = {**index_settings, "ranking": sorting_index.ranking}
            self.client.set_settings(
                sorting_index.name,
                self.merge_settings(sorting_index.name, replica_settings),
            )
            logger.info(
                "Pushed replica settings",
                extra={"index": sorting_index.name, "ranking": sorting_index.ranking},
            )
        return replicas

    def sync_synonyms(
        self, index_name: str, tmp_index_name: str, save_to_tmp: bool = False
    ) -> None:
        if self.store.synonyms_enabled:
            synonyms = build_synonyms(self.store)
            self.client.save_synonyms(index_name, synonyms)
            logger.info(
                "Set synonyms", extra={"index": index_name, "count": len(synonyms)}
            )
            if save_to_tmp:
                self.client.save_synonyms(tmp_index_name, synonyms)
            return

        if save_to_tmp:
            self.client.copy_synonyms(index_name, tmp_index_name)
            logger.info(
                "Copied synonyms to temp index",
                extra={"index": index_name, "tmp_index": tmp_index_name},
            )

    def copy_rules(self, index_name: str, tmp_index_name: str) -> None:
        """Copy query rules to the temp index so a swap does not lose them."""
        try:
            self.client.copy_rules(index_name, tmp_index_name)
        except FeatureUnsupportedError:
            logger.info("Query rules not enabled; skipped rule copy", extra={"index": index_name})
            return
        logger.info(
            "Copied query rules to temp index",
            extra={"index": index_name, "tmp_index": tmp_index_name},
        )


def sync_store_settings(
    client: IndexClient,
    store: StoreConfig,
    save_to_tmp: bool = False,
    settings_overrides: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Synchronize the product index of a store under its canonical names."""
    return IndexSettingsSynchronizer(client, store).sync(
        get_index_name(store),
        get_index_name(store, tmp=True),
        save_to_tmp=save_to_tmp,
        settings_overrides=settings_overrides,
    )
