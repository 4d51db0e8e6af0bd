"""Synonym rules pushed to the search service."""

import json
from pathlib import Path
from typing import Any

from catalog_index.store_config import StoreConfig


def explode_synonyms(synonyms: str) -> list[str]:
    """Split a comma-separated synonym group into unique, trimmed terms."""
    terms = (term.strip() for term in synonyms.split(","))
    return list(dict.fromkeys(term for term in terms if term))


def load_synonyms_file(path: str) -> list[dict[str, Any]]:
    """Read a JSON synonyms export; its content is pushed verbatim."""
    return json.loads(Path(path).read_text(encoding="utf-8"))


def build_synonyms(store: StoreConfig) -> list[dict[str, Any]]:
    """Synonym rules of a store, from its synonyms file when one is configured."""
    if store.synonyms_file:
        return load_synonyms_file(store.synonyms_file)

    synonyms: list[dict[str, Any]] = []
    for object_id, group in store.synonyms.items():
        synonyms.append(
            {
                "objectID": object_id,
                "type": "synonym",
                "synonyms": explode_synonyms(group.synonyms),
            }
        )

    for object_id, one_way in store.one_way_synonyms.items():
        synonyms.append(
            {
                "objectID": object_id,
                "type": "oneWaySynonym",
                "input": one_way.input,
                "synonyms": explode_synonyms(one_way.synonyms),
            }
        )

    return synonyms
