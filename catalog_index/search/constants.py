"""Shared constants for document mapping and index synchronization."""

INDEX_NAME_SUFFIX = "_products"
TMP_INDEX_SUFFIX = "_tmp"

# Hierarchical category facets
CATEGORY_LEVEL_PREFIX = "level"
CATEGORY_PATH_DELIMITER = " /// "

# Query rules generated for facets live in their own namespace
FACET_RULE_CONTEXT = "catalog_filters"
RULES_PAGE_SIZE = 100

IDENTITY_ATTRIBUTE = "sku"
SWATCH_ATTRIBUTE = "color"
PRICE_ATTRIBUTE = "price"
CATEGORIES_ATTRIBUTE = "categories"

# Attributes merged across composite children even when the parent has a value
ATTRIBUTES_TO_INDEX_AS_ARRAY: frozenset[str] = frozenset({"sku", "color"})

# Fields computed by the mapper rather than read from the catalog
CREATED_ATTRIBUTES: frozenset[str] = frozenset(
    {
        "path",
        "categories",
        "categories_without_path",
        "ordered_qty",
        "total_ordered",
        "stock_qty",
        "rating_summary",
        "media_gallery",
        "in_stock",
    }
)

# System attributes that never make sense as search fields
EXCLUDED_ATTRIBUTES: frozenset[str] = frozenset(
    {
        "all_children",
        "available_sort_by",
        "children",
        "children_count",
        "custom_apply_to_products",
        "custom_design",
        "custom_design_from",
        "custom_design_to",
        "custom_layout_update",
        "custom_use_parent_settings",
        "default_sort_by",
        "display_mode",
        "filter_price_range",
        "global_position",
        "image",
        "include_in_menu",
        "is_active",
        "is_always_include_in_menu",
        "is_anchor",
        "landing_page",
        "level",
        "lower_cms_block",
        "page_layout",
        "path_in_store",
        "position",
        "small_image",
        "thumbnail",
        "url_key",
        "url_path",
        "visible_in_menu",
        "quantity_and_stock_status",
    }
)

# Document fields owned by the mapper; configuration may not claim them
RESERVED_DOCUMENT_FIELDS: frozenset[str] = frozenset(
    {
        "objectID",
        "url",
        "type_id",
        "visibility_search",
        "visibility_catalog",
        "thumbnail_url",
        "image_url",
        "images_data",
        "categoryIds",
    }
)

# Left untouched by the numeric coercion pass
NON_CASTABLE_ATTRIBUTES: frozenset[str] = frozenset({"sku", "name", "description"})

REPLICA_BASE_RANKING: tuple[str, ...] = (
    "typo",
    "geo",
    "words",
    "filters",
    "proximity",
    "attribute",
    "exact",
    "custom",
)
