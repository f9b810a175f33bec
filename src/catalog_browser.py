"""
Product browser orchestration.

Wires the catalog store, facet aggregation, size taxonomy, style grouping and
smart search together the way the storefront's browse page uses them.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Optional

from rich.console import Console

from src.ai.smart_search_client import SmartSearchClient, SmartSearchResult
from src.loaders.catalog_store import CatalogStore
from src.models.product import FilterOptions, ProductFilters, ProductsPage
from src.query.filter_options import FilterOptionAggregator
from src.state.filter_state import clear_filters, merge_filters, set_search_query
from src.state.request_gate import Debouncer, LatestRequestGate
from src.transformers.product_grouper import ProductGroup, group_products_by_style
from src.transformers.size_taxonomy import SizeGroup, build_size_groups

console = Console()


@dataclass
class BrowsePage:
    """Style cards for one page of catalog rows."""

    groups: list[ProductGroup] = field(default_factory=list)
    page: ProductsPage = field(default_factory=ProductsPage)

    @property
    def is_empty(self) -> bool:
        return not self.groups


class CatalogBrowser:
    """
    Product browser backend.

    - Filter options are loaded once and reused for the session
    - Pages are fetched at row level, then grouped into style cards
    - Size groups are built for the currently selected product types
    - Smart search turns a sentence into filters (remote AI or keywords)
    """

    def __init__(
        self,
        store: CatalogStore,
        aggregator: Optional[FilterOptionAggregator] = None,
        smart_search: Optional[SmartSearchClient] = None,
        page_size: Optional[int] = None,
    ):
        self.store = store
        self.aggregator = aggregator or FilterOptionAggregator(store)
        self.smart_search_client = smart_search or SmartSearchClient()
        self.page_size = page_size or store.catalog.default_page_size
        self.gate = LatestRequestGate()
        self.debouncer = Debouncer()
        self._filter_options: Optional[FilterOptions] = None

    def load_filter_options(self, refresh: bool = False) -> FilterOptions:
        """Facet menus; computed on first use, then cached."""
        if self._filter_options is None or refresh:
            self._filter_options = self.aggregator.aggregate()
        return self._filter_options

    def browse(
        self,
        filters: Optional[ProductFilters] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> BrowsePage:
        """
        One page of style cards.

        Pagination counts variant rows, so a style whose rows straddle a page
        boundary shows only part of its colours and sizes on each page.
        """
        result = self.store.query_products(
            filters or ProductFilters(), page, page_size or self.page_size
        )
        return BrowsePage(groups=group_products_by_style(result.products), page=result)

    async def browse_latest(
        self, filters: Optional[ProductFilters] = None, page: int = 1
    ) -> BrowsePage:
        """browse() for interactive use: a newer call supersedes this one."""
        return await self.gate.run(asyncio.to_thread(self.browse, filters, page))

    async def search_as_you_type(
        self, filters: ProductFilters, text: str
    ) -> Optional[BrowsePage]:
        """
        Search box input: only the last keystroke of a burst reaches the store.

        Returns None for keystrokes superseded while debouncing.
        """
        query = await self.debouncer.trigger(text)
        if query is None:
            return None
        return await self.browse_latest(set_search_query(filters, query))

    def size_groups_for(self, filters: ProductFilters) -> list[SizeGroup]:
        """Size facet buckets for the selected product types (none selected: none)."""
        if not filters.product_types:
            return []
        sizes = self.store.get_sizes_for_product_types(filters.product_types)
        return build_size_groups(sizes)

    async def smart_search(
        self,
        query: str,
        selected_questions: Optional[list[str]] = None,
        messages: Optional[list[dict]] = None,
    ) -> tuple[ProductFilters, SmartSearchResult]:
        """
        Filters for a free-text request, applied over a cleared state.

        The query and any selected question texts, joined with ". ", become
        the search string so the catalog text match narrows results alongside
        the generated facets.
        """
        full_query = ". ".join(q for q in [query, *(selected_questions or [])] if q)

        result = await self.smart_search_client.generate_filters(
            full_query,
            selected_questions=selected_questions,
            messages=messages,
            options=self._filter_options,
        )

        filters = set_search_query(merge_filters(clear_filters(), result.filters), full_query)
        console.print(f"[cyan]Smart search ({result.source}): {filters.to_wire()}[/cyan]")
        return filters, result

    async def smart_browse(
        self,
        query: str,
        selected_questions: Optional[list[str]] = None,
        messages: Optional[list[dict]] = None,
    ) -> tuple[ProductFilters, BrowsePage]:
        """
        Run a smart search and load its first page.

        If the generated filters match nothing, retry with the search text
        alone.
        """
        filters, _ = await self.smart_search(query, selected_questions, messages)
        page = self.browse(filters)

        if page.is_empty and not filters.is_empty():
            text_only = set_search_query(clear_filters(), filters.search_query)
            if text_only != filters:
                console.print("[yellow]No results for smart filters, retrying with text only[/yellow]")
                filters, page = text_only, self.browse(text_only)

        return filters, page
