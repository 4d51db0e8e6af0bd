"""Hosted search service client.

The synchronizer and the indexer only depend on the :class:`IndexClient`
protocol. :class:`HttpIndexClient` implements it against the service's REST
API with httpx.
"""

import logging
import re
from collections.abc import Iterable
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from catalog_index.config import settings
from catalog_index.search.constants import NON_CASTABLE_ATTRIBUTES

logger = logging.getLogger(__name__)

INDEX_DOES_NOT_EXIST = "Index does not exist"
RULES_NOT_ENABLED = "Query Rules are not enabled on this application"


class SearchServiceError(Exception):
    """Failure reported by the search service."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class IndexNotFoundError(SearchServiceError):
    """The addressed index does not exist."""


class FeatureUnsupportedError(SearchServiceError):
    """The feature is not available on the application's plan."""


class IndexClient(Protocol):
    """Operations the synchronizer and indexer need from the search service."""

    def get_settings(self, index_name: str) -> dict[str, Any]: ...

    def set_settings(
        self,
        index_name: str,
        index_settings: dict[str, Any],
        forward_to_replicas: bool = False,
    ) -> None: ...

    def save_synonyms(
        self, index_name: str, synonyms: list[dict[str, Any]]
    ) -> None: ...

    def copy_synonyms(self, source: str, destination: str) -> None: ...

    def copy_rules(self, source: str, destination: str) -> None: ...

    def search_rules(
        self, index_name: str, context: str, page: int, hits_per_page: int
    ) -> dict[str, Any]: ...

    def delete_rule(self, index_name: str, object_id: str) -> None: ...

    def save_rules(self, index_name: str, rules: list[dict[str, Any]]) -> None: ...

    def list_indices(self) -> list[dict[str, Any]]: ...

    def delete_index(self, index_name: str) -> None: ...

    def move_index(self, source: str, destination: str) -> None: ...

    def save_objects(
        self, index_name: str, objects: list[dict[str, Any]]
    ) -> None: ...

    def delete_objects(self, index_name: str, object_ids: Iterable[str]) -> None: ...


def translate_error(response: httpx.Response) -> SearchServiceError:
    """Map an error response to the client's exception taxonomy."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    message = response.text
    if isinstance(payload, dict):
        message = payload.get("message") or message

    if response.status_code == 404 or message == INDEX_DOES_NOT_EXIST:
        return IndexNotFoundError(message, response.status_code)
    if message == RULES_NOT_ENABLED or "not enabled" in message.lower():
        return FeatureUnsupportedError(message, response.status_code)
    return SearchServiceError(message, response.status_code)


class HttpIndexClient:
    """Synchronous REST client for the hosted search service."""

    def __init__(
        self,
        base_url: str,
        app_id: str,
        api_key: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Service base URL (e.g., https://myapp.algolia.net)
            app_id: Application identifier
            api_key: Admin API key
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "X-Algolia-Application-Id": app_id,
                "X-Algolia-API-Key": api_key,
            },
        )

    def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: Any = None,
    ) -> dict:
        response = self._client.request(method, path, params=params, json=json)
        if response.is_error:
            raise translate_error(response)
        if not response.content:
            return {}
        return response.json()

    @staticmethod
    def _index_path(index_name: str) -> str:
        return f"/1/indexes/{quote(index_name, safe='')}"

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def get_settings(self, index_name: str) -> dict[str, Any]:
        return self._request("GET", f"{self._index_path(index_name)}/settings")

    def set_settings(
        self,
        index_name: str,
        index_settings: dict[str, Any],
        forward_to_replicas: bool = False,
    ) -> None:
        self._request(
            "PUT",
            f"{self._index_path(index_name)}/settings",
            params={"forwardToReplicas": str(forward_to_replicas).lower()},
            json=index_settings,
        )

    def save_synonyms(self, index_name: str, synonyms: list[dict[str, Any]]) -> None:
        """Replace every synonym of the index (an empty list clears them)."""
        path = self._index_path(index_name)
        if not synonyms:
            self._request(
                "POST",
                f"{path}/synonyms/clear",
                params={"forwardToReplicas": "true"},
            )
            return
        self._request(
            "POST",
            f"{path}/synonyms/batch",
            params={"forwardToReplicas": "true", "replaceExistingSynonyms": "true"},
            json=synonyms,
        )

    def _copy(self, source: str, destination: str, scope: list[str]) -> None:
        self._request(
            "POST",
            f"{self._index_path(source)}/operation",
            json={"operation": "copy", "destination": destination, "scope": scope},
        )

    def move_index(self, source: str, destination: str) -> None:
        """Replace ``destination`` with ``source``; replicas of the destination stay attached."""
        self._request(
            "POST",
            f"{self._index_path(source)}/operation",
            json={"operation": "move", "destination": destination},
        )

    def copy_synonyms(self, source: str, destination: str) -> None:
        self._copy(source, destination, ["synonyms"])

    def copy_rules(self, source: str, destination: str) -> None:
        self._copy(source, destination, ["rules"])

    def search_rules(
        self, index_name: str, context: str, page: int, hits_per_page: int
    ) -> dict[str, Any]:
        return self._request(
            "POST",
            f"{self._index_path(index_name)}/rules/search",
            json={
                "query": "",
                "context": context,
                "page": page,
                "hitsPerPage": hits_per_page,
            },
        )

    def delete_rule(self, index_name: str, object_id: str) -> None:
        self._request(
            "DELETE",
            f"{self._index_path(index_name)}/rules/{quote(object_id, safe='')}",
            params={"forwardToReplicas": "true"},
        )

    def save_rules(self, index_name: str, rules: list[dict[str, Any]]) -> None:
        """Upsert rules by objectID; rules outside the batch are left alone."""
        self._request(
            "POST",
            f"{self._index_path(index_name)}/rules/batch",
            params={"forwardToReplicas": "true", "clearExistingRules": "false"},
            json=rules,
        )

    def list_indices(self) -> list[dict[str, Any]]:
        return self._request("GET", "/1/indexes").get("items", [])

    def delete_index(self, index_name: str) -> None:
        self._request("DELETE", self._index_path(index_name))

    def save_objects(self, index_name: str, objects: list[dict[str, Any]]) -> None:
        if not objects:
            return
        requests = [{"action": "updateObject", "body": obj} for obj in objects]
        self._request(
            "POST",
            f"{self._index_path(index_name)}/batch",
            json={"requests": requests},
        )

    def delete_objects(self, index_name: str, object_ids: Iterable[str]) -> None:
        requests = [
            {"action": "deleteObject", "body": {"objectID": str(object_id)}}
            for object_id in object_ids
        ]
        if not requests:
            return
        self._request(
            "POST",
            f"{self._index_path(index_name)}/batch",
            json={"requests": requests},
        )


# Module-level cached client instance
_client: HttpIndexClient | None = None


def get_client() -> HttpIndexClient:
    """Get the search client with configured credentials.

    Raises:
        ValueError: If SEARCH_API_KEY is not set.
    """
    global _client
    if _client is not None:
        return _client
    if not settings.search_api_key:
        raise ValueError(
            "SEARCH_API_KEY environment variable is required for index operations. "
            "Set it in .env or as an environment variable."
        )
    _client = HttpIndexClient(
        base_url=settings.search_url,
        app_id=settings.search_app_id,
        api_key=settings.search_api_key,
        timeout=settings.search_timeout,
    )
    return _client


_NUMERIC = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_INTEGER = re.compile(r"^[+-]?\d+$")


def _cast_attribute(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    text = value.strip()
    # Integers are parsed exactly; long barcodes exceed float precision
    if _INTEGER.match(text):
        return int(text)
    if not _NUMERIC.match(text):
        return value
    number = float(text)
    if number.is_integer():
        return int(number)
    return number


def cast_product_object(document: dict[str, Any]) -> dict[str, Any]:
    """Normalize field types the way the service expects them.

    Numeric strings become int/float and ``|``-separated strings become lists
    of cast elements. ``sku``, ``name`` and ``description`` are left as-is.
    """
    for key, value in document.items():
        if key in NON_CASTABLE_ATTRIBUTES:
            continue
        value = _cast_attribute(value)
        if isinstance(value, str) and value:
            parts = value.split("|")
            if len(parts) == 1:
                value = _cast_attribute(parts[0])
            else:
                value = [_cast_attribute(part) for part in parts]
        document[key] = value
    return document
