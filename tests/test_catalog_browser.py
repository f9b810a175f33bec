"""
Tests for the catalog browser orchestration.

Run with: pytest tests/test_catalog_browser.py -v
"""

import asyncio

import pytest

from src.ai import SmartSearchClient
from src.catalog_browser import CatalogBrowser
from src.loaders.catalog_store import CatalogStore
from src.models.product import ProductFilters
from src.state.request_gate import Debouncer
from src.transformers.size_taxonomy import KIDS


@pytest.fixture
def browser(store, local_search_config):
    return CatalogBrowser(store, smart_search=SmartSearchClient(search_config=local_search_config))


class TestFilterOptions:
    """Facet menus are loaded once per session."""

    def test_options_cached(self, browser, fake_client):
        first = browser.load_filter_options()
        queries = len(fake_client.executed)
        second = browser.load_filter_options()
        assert second is first
        assert len(fake_client.executed) == queries

    def test_refresh(self, browser, fake_client):
        browser.load_filter_options()
        queries = len(fake_client.executed)
        browser.load_filter_options(refresh=True)
        assert len(fake_client.executed) > queries


class TestBrowse:
    """Pages of style cards."""

    def test_first_page(self, browser):
        result = browser.browse(ProductFilters())
        assert [g.style_code for g in result.groups] == ["BC100", "GD001", "PR300", "RX200"]
        assert result.page.total_count == 7
        assert not result.is_empty

    def test_style_can_straddle_pages(self, browser):
        """Rows are paged before grouping, so GD001 shows up on both pages."""
        first = browser.browse(ProductFilters(), page=1, page_size=3)
        second = browser.browse(ProductFilters(), page=2, page_size=3)
        first_gd = [g for g in first.groups if g.style_code == "GD001"][0]
        second_gd = [g for g in second.groups if g.style_code == "GD001"][0]
        assert len(first_gd.variants) == 2
        assert len(second_gd.variants) == 1
        assert first.page.has_next_page
        assert second.page.has_prev_page

    def test_no_matches(self, browser):
        result = browser.browse(ProductFilters(brands=["Nobody"]))
        assert result.is_empty
        assert result.page.total_pages == 0

    def test_browse_latest(self, browser):
        result = asyncio.run(browser.browse_latest(ProductFilters(brands=["Gildan"])))
        assert [g.style_code for g in result.groups] == ["GD001"]

    def test_search_as_you_type_queries_once_per_burst(self, browser, fake_client):
        browser.debouncer = Debouncer(delay=0.05)
        filters = ProductFilters(brands=["Gildan", "B&C"])

        async def typing():
            return await asyncio.gather(
                browser.search_as_you_type(filters, "or"),
                browser.search_as_you_type(filters, "org"),
                browser.search_as_you_type(filters, "organic"),
            )

        first, second, last = asyncio.run(typing())
        assert first is None and second is None
        assert [g.style_code for g in last.groups] == ["BC100"]
        assert len(fake_client.executed) == 1


class TestSizeGroups:
    """Size facet for the selected product types."""

    def test_no_types_selected(self, browser, fake_client):
        assert browser.size_groups_for(ProductFilters()) == []
        assert fake_client.executed == []

    def test_kids_sizes(self, browser):
        groups = browser.size_groups_for(ProductFilters(product_types=["Hoodies"]))
        assert [g.category for g in groups] == [KIDS]
        assert [e.base_size for e in groups[0].sizes] == ["3 Years", "5 Years"]


class TestSmartSearch:
    """Smart search over a cleared filter state."""

    def test_filters_replace_current_state(self, browser):
        filters, result = asyncio.run(browser.smart_search("cheap polo"))
        assert result.source == "fallback"
        assert filters.product_types == ["Polos"]
        assert filters.price_max == 10
        assert filters.search_query == "cheap polo"
        assert filters.brands is None

    def test_selected_questions_feed_the_classifier(self, browser):
        filters, _ = asyncio.run(browser.smart_search("polo", ["For office staff"]))
        assert filters.genders == ["Unisex"]
        assert filters.search_query == "polo. For office staff"

    def test_smart_browse_matches(self, browser):
        filters, result = asyncio.run(browser.smart_browse("organic tee"))
        assert filters.product_types == ["T-Shirts"]
        assert [g.style_code for g in result.groups] == ["BC100"]

    def test_smart_browse_retries_with_text_only(
        self, make_client, make_catalog_row, catalog_config, local_search_config
    ):
        rows = [
            make_catalog_row(
                1, "BP1", "M", "NAV", "Navy", "12.00", style_name="Budget Polo", product_type="Polos"
            )
        ]
        store = CatalogStore(client=make_client(rows), catalog_config=catalog_config)
        browser = CatalogBrowser(store, smart_search=SmartSearchClient(search_config=local_search_config))

        filters, result = asyncio.run(browser.smart_browse("budget polo"))
        assert filters == ProductFilters(search_query="budget polo")
        assert [g.style_code for g in result.groups] == ["BP1"]
