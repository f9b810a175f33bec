"""
Keyword fallback for smart search.

Used when the remote AI search is disabled or every endpoint fails. Each rule
is a plain substring test on the lower-cased query. Rules run in order and a
later rule replaces an earlier value for the same field, so
"budget hoodie under £25" ends up with Hoodies and a £25 ceiling.
"""

from src.models.product import ProductFilters


def _has_any(text: str, needles: tuple) -> bool:
    return any(needle in text for needle in needles)


def generate_fallback_filters(query: str) -> ProductFilters:
    """Filters inferred from keywords in ``query``; empty when nothing matches."""
    lower = (query or "").lower()
    filters: dict = {}

    # Product type: later matches replace earlier ones
    if "polo" in lower:
        filters["product_types"] = ["Polos"]
    elif _has_any(lower, ("shirt", "tee", "t-shirt")):
        filters["product_types"] = ["T-Shirts"]
    if _has_any(lower, ("hoodie", "sweatshirt")):
        filters["product_types"] = ["Hoodies"]
    if _has_any(lower, ("jacket", "coat")):
        filters["product_types"] = ["Jackets"]
    if _has_any(lower, ("bag", "tote")):
        filters["product_types"] = ["Bags"]

    # Price
    if _has_any(lower, ("budget", "cheap", "under £10")):
        filters["price_max"] = 10
    if "under £25" in lower:
        filters["price_max"] = 25
    if _has_any(lower, ("premium", "high quality")):
        filters["price_min"] = 50

    if _has_any(lower, ("sustainable", "eco", "organic")):
        filters["materials"] = ["Organic Cotton", "Recycled"]

    if _has_any(lower, ("office", "corporate")):
        filters["genders"] = ["Unisex"]

    return ProductFilters(**filters)
