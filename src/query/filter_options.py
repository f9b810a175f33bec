"""
Filter option aggregation.

Builds the facet menus shown beside the product grid. Structured columns are
read in full; facets that must be parsed out of free text (materials,
categories, accreditations...) are derived from a bounded sample of rows, so
on large catalogs they may miss rare values.
"""

import math
from typing import Callable, Optional

from rich.console import Console

from config.settings import FacetConfig, config
from src.models.product import BrandOption, FilterOptions, PriceRange

console = Console()

# FilterOptions field -> catalog column, read across the whole catalog
STRUCTURED_FACETS = {
    "product_types": "product_type",
    "sizes": "size_name",
    "colors": "primary_colour",
    "brands": "brand",
    "genders": "gender",
}

SAMPLE_COLUMNS = ["fabric", "categorisation", "colour_shade", "age_group", "accreditations"]


def parse_price(value) -> Optional[float]:
    """Price text as a float, or None when it is not a finite number."""
    if value is None:
        return None
    try:
        price = float(str(value).strip())
    except ValueError:
        return None
    if math.isnan(price) or math.isinf(price):
        return None
    return price


def price_range_from_values(values: list, default: dict) -> PriceRange:
    """Whole-number bounds around every parseable price."""
    prices = [p for p in (parse_price(v) for v in values) if p is not None]
    if not prices:
        return PriceRange(**default)
    return PriceRange(min=math.floor(min(prices)), max=math.ceil(max(prices)))


def distinct_sorted(values) -> list[str]:
    return sorted({v for v in values if v})


def extract_materials(fabrics: list[str], vocabulary: list[str]) -> list[str]:
    """Vocabulary terms that occur (case-insensitively) in any fabric text."""
    found = set()
    lowered = [f.lower() for f in fabrics if f]
    for material in vocabulary:
        needle = material.lower()
        if any(needle in fabric for fabric in lowered):
            found.add(material)
    return sorted(found)


def split_pipe_list(text: Optional[str]) -> list[str]:
    """'A | B|C ' -> ['A', 'B', 'C']"""
    if not text:
        return []
    return [part.strip() for part in text.split("|") if part.strip()]


def extract_categories(categorisations: list[str], denylist: list[str]) -> list[str]:
    """Categorisation segments, minus marketing tags."""
    found = set()
    for text in categorisations:
        for segment in split_pipe_list(text):
            if not any(tag in segment for tag in denylist):
                found.add(segment)
    return sorted(found)


def extract_accreditations(values: list[str]) -> list[str]:
    found = set()
    for text in values:
        found.update(split_pipe_list(text))
    return sorted(found)


def build_brand_options(names: list[str], brand_rows: list[dict]) -> list[BrandOption]:
    """
    Pair each brand facet value with its brands-table row.

    Brands missing from the table get a positional id (``brand-<index>``)
    and no logo.
    """
    by_name = {}
    for row in brand_rows:
        if row.get("name"):
            by_name.setdefault(row["name"], row)

    options = []
    for index, name in enumerate(names):
        row = by_name.get(name, {})
        brand_id = row.get("id")
        options.append(
            BrandOption(
                id=str(brand_id) if brand_id is not None else f"brand-{index}",
                name=name,
                logo_url=row.get("logo_url"),
            )
        )
    return options


class FilterOptionAggregator:
    """
    Computes a FilterOptions snapshot from a CatalogStore.

    Each facet is loaded on its own; one failing facet comes back empty
    without affecting the others.
    """

    def __init__(self, store, facet_config: Optional[FacetConfig] = None):
        self.store = store
        self.facets = facet_config or config.facets

    def _guarded(self, label: str, loader: Callable, default):
        try:
            return loader()
        except Exception as e:
            console.print(f"[yellow]Warning: could not load {label} options: {e}[/yellow]")
            return default

    def aggregate(self) -> FilterOptions:
        """Build the full set of filter options."""
        cap = self.facets.distinct_value_cap
        options = {}

        for field_name, column in STRUCTURED_FACETS.items():
            options[field_name] = self._guarded(
                field_name,
                lambda column=column: distinct_sorted(
                    self.store.fetch_column_values(column, cap)
                ),
                [],
            )

        brand_rows = self._guarded("brand logo", lambda: self.store.fetch_brands(cap), [])
        options["brand_options"] = build_brand_options(options["brands"], brand_rows)

        options["price_range"] = self._guarded(
            "price",
            lambda: price_range_from_values(
                self.store.fetch_column_values("single_price", cap),
                self.facets.default_price_range,
            ),
            PriceRange(**self.facets.default_price_range),
        )

        sample = self._guarded(
            "sampled",
            lambda: self.store.fetch_sample(SAMPLE_COLUMNS, self.facets.sample_size),
            [],
        )
        options.update(self.options_from_sample(sample))

        result = FilterOptions(**options)
        console.print(
            f"[dim]Filter options loaded: {len(result.product_types)} types, "
            f"{len(result.sizes)} sizes, {len(result.colors)} colours, "
            f"{len(result.brands)} brands[/dim]"
        )
        return result

    def options_from_sample(self, rows: list[dict]) -> dict:
        """Facets parsed out of free-text columns of the sampled rows."""

        def column(name):
            return [row.get(name) for row in rows if row.get(name)]

        return {
            "materials": extract_materials(column("fabric"), self.facets.material_vocabulary),
            "categories": extract_categories(
                column("categorisation"), self.facets.category_denylist
            ),
            "color_shades": distinct_sorted(column("colour_shade")),
            "age_groups": distinct_sorted(column("age_group")),
            "accreditations": extract_accreditations(column("accreditations")),
        }
