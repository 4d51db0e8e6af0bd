"""Image URL resolution for search documents."""

import re
from typing import Protocol

from catalog_index.catalog.schemas import CatalogEntity

NO_SELECTION = "no_selection"

IMAGE_SLOTS: dict[str, str] = {
    "image": "image",
    "small_image": "small_image",
    "thumbnail": "thumbnail",
    "product_base_image": "image",
    "product_small_image": "small_image",
    "product_thumbnail_image": "thumbnail",
}


class ImageResolver(Protocol):
    def get_url(
        self,
        entity: CatalogEntity,
        image_type: str,
        width: int | None = None,
        height: int | None = None,
    ) -> str: ...

    def get_gallery_urls(self, entity: CatalogEntity) -> list[str]: ...


def remove_protocol(url: str) -> str:
    """Make a URL protocol-relative (``https://host/a`` -> ``//host/a``)."""
    return url.replace("https://", "//").replace("http://", "//")


def remove_double_slashes(url: str) -> str:
    """Collapse repeated slashes in a protocol-relative URL."""
    return "/" + re.sub(r"/{2,}", "/", url)


class MediaImageResolver:
    """Resolve product images against a media base URL.

    Resized variants live under ``cache/<width>x<height>/``; products without
    an image in the requested slot fall back to the placeholder.
    """

    def __init__(self, media_base_url: str, placeholder: str = "placeholder/default.jpg"):
        self.media_base_url = media_base_url.rstrip("/")
        self.placeholder = placeholder

    def get_url(
        self,
        entity: CatalogEntity,
        image_type: str,
        width: int | None = None,
        height: int | None = None,
    ) -> str:
        slot = IMAGE_SLOTS.get(image_type)
        if slot is None:
            raise ValueError(f"Unknown image type: {image_type}")

        path = getattr(entity, slot)
        if not path or path == NO_SELECTION:
            path = self.placeholder

        size = f"cache/{width}x{height}/" if width and height else ""
        return f"{self.media_base_url}/{size}{path.lstrip('/')}"

    def get_gallery_urls(self, entity: CatalogEntity) -> list[str]:
        return [f"{self.media_base_url}/{path.lstrip('/')}" for path in entity.media_gallery]
