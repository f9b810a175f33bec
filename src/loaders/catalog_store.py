"""
Supabase-backed access to the product catalog table.

Rows are variants (one per style + colour + size). Reads only; the catalog
is maintained elsewhere.
"""

from typing import Optional

from rich.console import Console
from supabase import Client, create_client

from config.settings import CatalogConfig, config
from src.models.product import ProductFilters, ProductsPage, ProductVariant
from src.query.filter_query import (
    apply_ordering_and_page,
    apply_product_filters,
    build_products_page,
    normalize_product_types,
)

console = Console()


class CatalogStore:
    """
    Queries the catalog table in Supabase.

    - Filtered, paginated variant rows for the product browser
    - Raw column values for facet menus
    - Sizes available for a set of product types
    """

    def __init__(
        self,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        client: Optional[Client] = None,
        catalog_config: Optional[CatalogConfig] = None,
    ):
        """
        Initialize the catalog store.

        Args:
            supabase_url: Supabase project URL (or set SUPABASE_URL env var)
            supabase_key: Supabase anon key (or set SUPABASE_KEY env var)
            client: Pre-built Supabase client (skips credential lookup)
            catalog_config: Table name, search columns and aliases
        """
        self.catalog = catalog_config or config.catalog

        if client is None:
            supabase_url = supabase_url or config.supabase.url
            supabase_key = supabase_key or config.supabase.key
            if not supabase_url or not supabase_key:
                raise ValueError(
                    "Supabase credentials required. Set SUPABASE_URL and SUPABASE_KEY "
                    "environment variables or pass them to the constructor."
                )
            client = create_client(supabase_url, supabase_key)

        self.client = client

    @property
    def table(self) -> str:
        return self.catalog.table

    def query_products(
        self,
        filters: Optional[ProductFilters] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> ProductsPage:
        """
        Fetch one page of variant rows matching ``filters``.

        A failed query is reported and treated as "no results".
        """
        filters = filters or ProductFilters()
        page_size = page_size or self.catalog.default_page_size
        page = max(page, 1)

        try:
            query = self.client.table(self.table).select("*", count="exact")
            query = apply_product_filters(query, filters, self.catalog)
            query = apply_ordering_and_page(query, page, page_size)
            result = query.execute()
        except Exception as e:
            console.print(f"[red]Catalog query failed: {e}[/red]")
            return ProductsPage.empty(page)

        total = result.count or 0
        console.print(
            f"[dim]Catalog query: {len(result.data or [])} rows "
            f"(page {page}, {total} total)[/dim]"
        )
        return build_products_page(result.data or [], total, page, page_size)

    def fetch_column_values(self, column: str, limit: int) -> list:
        """Non-null values of ``column`` (with repeats), up to ``limit`` rows."""
        result = (
            self.client.table(self.table)
            .select(column)
            .not_.is_(column, "null")
            .limit(limit)
            .execute()
        )
        return [row[column] for row in result.data or [] if row.get(column) is not None]

    def fetch_brands(self, limit: int) -> list[dict]:
        """Rows of the brands table (id, name, logo_url)."""
        result = (
            self.client.table(self.catalog.brands_table)
            .select("id,name,logo_url")
            .limit(limit)
            .execute()
        )
        return result.data or []

    def fetch_sample(self, columns: list[str], limit: int) -> list[dict]:
        """The first ``limit`` rows, restricted to ``columns``."""
        result = (
            self.client.table(self.table)
            .select(",".join(columns))
            .limit(limit)
            .execute()
        )
        return result.data or []

    def get_sizes_for_product_types(self, product_types: list[str]) -> list[str]:
        """Distinct size names sold under any of ``product_types``."""
        if not product_types:
            return []

        types = normalize_product_types(product_types, self.catalog.product_type_aliases)
        try:
            result = (
                self.client.table(self.table)
                .select("size_name")
                .in_("product_type", types)
                .not_.is_("size_name", "null")
                .limit(self.catalog.max_page_size * 10)
                .execute()
            )
        except Exception as e:
            console.print(f"[red]Error loading sizes for {', '.join(types)}: {e}[/red]")
            return []

        return sorted({row["size_name"] for row in result.data or [] if row.get("size_name")})

    def get_style_variants(self, style_code: str) -> list[ProductVariant]:
        """Every variant of one style, ordered by colour then size."""
        try:
            result = (
                self.client.table(self.table)
                .select("*")
                .eq("style_code", style_code)
                .order("colour_code")
                .order("id")
                .execute()
            )
        except Exception as e:
            console.print(f"[red]Error loading variants for {style_code}: {e}[/red]")
            return []

        return [ProductVariant.model_validate(row) for row in result.data or []]
