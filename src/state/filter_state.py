"""
Filter state updates.

The sidebar, the advanced filter modal, the active-filter badges and smart
search all change the same ProductFilters. These functions are the only
way they do it: each takes the current filters and returns a new object,
leaving the input untouched.
"""

from typing import Optional

from src.models.product import MULTI_SELECT_FIELDS, ProductFilters
from src.transformers.size_taxonomy import SizeEntry


def _replace(filters: ProductFilters, **changes) -> ProductFilters:
    data = filters.model_dump()
    data.update(changes)
    return ProductFilters(**data)


def toggle_filter_value(filters: ProductFilters, facet: str, value: str) -> ProductFilters:
    """Add ``value`` to a multi-select facet, or remove it if already selected."""
    if facet not in MULTI_SELECT_FIELDS:
        raise ValueError(f"Unknown facet: {facet}")

    current = list(getattr(filters, facet) or [])
    if value in current:
        current.remove(value)
    else:
        current.append(value)
    return _replace(filters, **{facet: current})


def toggle_size_group(filters: ProductFilters, entry: SizeEntry) -> ProductFilters:
    """
    Select or deselect every raw size behind a base size at once.

    If all of the entry's variants are selected they are all removed;
    otherwise the missing ones are added.
    """
    current = list(filters.sizes or [])
    if entry.variants and all(v in current for v in entry.variants):
        current = [s for s in current if s not in entry.variants]
    else:
        current.extend(v for v in entry.variants if v not in current)
    return _replace(filters, sizes=current)


def is_size_group_selected(filters: ProductFilters, entry: SizeEntry) -> bool:
    selected = filters.sizes or []
    return bool(entry.variants) and all(v in selected for v in entry.variants)


def set_price_range(
    filters: ProductFilters,
    price_min: Optional[float] = None,
    price_max: Optional[float] = None,
) -> ProductFilters:
    return _replace(filters, price_min=price_min, price_max=price_max)


def set_search_query(filters: ProductFilters, query: Optional[str]) -> ProductFilters:
    return _replace(filters, search_query=query)


def merge_filters(filters: ProductFilters, incoming: ProductFilters) -> ProductFilters:
    """Overlay every field set on ``incoming`` onto ``filters``."""
    data = filters.model_dump()
    data.update(incoming.model_dump(exclude_none=True))
    return ProductFilters(**data)


def clear_filters() -> ProductFilters:
    return ProductFilters()


def count_active_filters(filters: ProductFilters) -> int:
    """Number of selected values, counting a price bound or search text as one each."""
    count = sum(len(getattr(filters, facet) or []) for facet in MULTI_SELECT_FIELDS)
    count += sum(
        1 for value in (filters.search_query, filters.price_min, filters.price_max)
        if value is not None
    )
    return count
