"""
Translate ProductFilters into PostgREST constraints.

Every helper here works on a supabase/postgrest request builder and returns
it, so the constraints can be chained:

    query = client.table("product_data").select("*", count="exact")
    query = apply_product_filters(query, filters, catalog_config)
    query = apply_ordering_and_page(query, page=2, page_size=24)
    result = query.execute()

Facets combine with AND. Values within one facet combine with OR.
"""

import math
import re
from typing import Iterable, Optional

from config.settings import CatalogConfig
from src.models.product import ProductFilters, ProductsPage, ProductVariant

# Exact-membership facets: filter attribute -> catalog column
MEMBERSHIP_COLUMNS = {
    "product_types": "product_type",
    "sizes": "size_name",
    "colors": "primary_colour",
    "color_shades": "colour_shade",
    "brands": "brand",
    "genders": "gender",
    "age_groups": "age_group",
    "sustainable_organic": "sustainable_organic",
}

# Substring facets matched against free-text columns
SUBSTRING_COLUMNS = {
    "materials": "fabric",
    "categories": "categorisation",
    "accreditations": "accreditations",
}

PRICE_COLUMN = "single_price"

# Characters PostgREST treats as syntax inside an or=(...) list
_RESERVED = set(',.:()"\\')


def tokenize_search_query(
    query: Optional[str],
    stop_words: Iterable[str] = (),
    min_length: int = 3,
) -> list[str]:
    """
    Split a free-text query into search tokens.

    Punctuation is stripped, text is lower-cased and split on whitespace.
    Tokens shorter than ``min_length`` and stop words are dropped.
    """
    if not query:
        return []

    stop = {w.lower() for w in stop_words}
    cleaned = re.sub(r"[^\w\s]", " ", query.lower())
    return [
        token
        for token in cleaned.split()
        if len(token) >= min_length and token not in stop
    ]


def normalize_product_types(values: list[str], aliases: dict) -> list[str]:
    """Map common spellings ("polo shirts", "hoodie") onto catalog values."""
    result = []
    for value in values:
        normalized = aliases.get(value.lower().strip(), value)
        if normalized not in result:
            result.append(normalized)
    return result


def _or_pattern(column: str, value: str) -> str:
    """Case-insensitive substring condition for use inside an or_() list."""
    pattern = f"*{value}*"
    if any(c in _RESERVED for c in value):
        escaped = pattern.replace("\\", "\\\\").replace('"', '\\"')
        pattern = f'"{escaped}"'
    return f"{column}.ilike.{pattern}"


def search_conditions(tokens: list[str], columns: list[str]) -> list[str]:
    """One OR-group per token: the token must appear in at least one column."""
    return [",".join(_or_pattern(col, token) for col in columns) for token in tokens]


def apply_product_filters(query, filters: ProductFilters, catalog: CatalogConfig):
    """Add a constraint for every facet that is set on ``filters``."""
    tokens = tokenize_search_query(
        filters.search_query, catalog.stop_words, catalog.min_token_length
    )
    for condition in search_conditions(tokens, catalog.search_columns):
        query = query.or_(condition)

    for attr, column in MEMBERSHIP_COLUMNS.items():
        values = getattr(filters, attr)
        if not values:
            continue
        if attr == "product_types":
            values = normalize_product_types(values, catalog.product_type_aliases)
        query = query.in_(column, values)

    if filters.price_min is not None:
        query = query.gte(PRICE_COLUMN, filters.price_min)
    if filters.price_max is not None:
        query = query.lte(PRICE_COLUMN, filters.price_max)

    for attr, column in SUBSTRING_COLUMNS.items():
        values = getattr(filters, attr)
        if not values:
            continue
        query = query.or_(",".join(_or_pattern(column, v) for v in values))

    return query


def page_offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size


def apply_ordering_and_page(query, page: int, page_size: int):
    """Stable order (style, then row id) and an inclusive row range."""
    offset = page_offset(page, page_size)
    return (
        query.order("style_code")
        .order("id")
        .range(offset, offset + page_size - 1)
    )


def build_products_page(
    rows: list[dict], total_count: int, page: int, page_size: int
) -> ProductsPage:
    """Wrap fetched rows with pagination metadata."""
    total_pages = math.ceil(total_count / page_size) if page_size > 0 else 0
    return ProductsPage(
        products=[ProductVariant.model_validate(row) for row in rows],
        total_count=total_count,
        total_pages=total_pages,
        current_page=page,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )
