#!/usr/bin/env python3
"""
Storefront Catalog - Command Line Browser

Browse the product catalog from the terminal: filter, page through style
cards, list facet options and size groups, or turn a sentence into filters
with smart search.

Usage:
    python main.py                               # First page of the catalog
    python main.py --search "navy polo"          # Free-text search
    python main.py --smart "cheap hoodies"       # Smart search
    python main.py --options                     # Facet options
"""
import argparse
import asyncio
import sys
from dataclasses import replace
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from rich.console import Console
from rich.table import Table

from config.settings import config
from src.ai import SmartSearchClient
from src.catalog_browser import BrowsePage, CatalogBrowser
from src.loaders.catalog_store import CatalogStore
from src.models.product import ProductFilters
from src.state.filter_state import count_active_filters
from src.transformers.product_grouper import format_price_range, format_size_range

console = Console()


class CustomHelpFormatter(argparse.RawDescriptionHelpFormatter):
    """Custom formatter that preserves formatting and adds width."""

    def __init__(self, prog):
        super().__init__(prog, max_help_position=40, width=100)


def parse_args(argv=None):
    """Parse command line arguments."""

    epilog = """
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
EXAMPLES
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
  Browsing:
    python main.py                               First page, all products
    python main.py --page 3 --page-size 24       Page 3, 24 rows per page
    python main.py --search "heavyweight polo"   Free-text search

  Facets (repeatable):
    python main.py --type Polos --type T-Shirts  Polos and t-shirts
    python main.py --brand Gildan --color Navy   Navy Gildan products
    python main.py --price-min 5 --price-max 20  Price between £5 and £20

  Menus:
    python main.py --options                     All facet options
    python main.py --sizes --type Polos          Size groups for polos

  Smart Search:
    python main.py --smart "cheap eco t-shirts"  Sentence to filters
    python main.py --smart "hoodies" --local-only  Keyword matching only

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
NOTES
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
  • Requires .env file with SUPABASE_URL and SUPABASE_KEY
  • Remote smart search needs SMART_SEARCH_REMOTE=true and a backend URL
  • The viewer (python viewer.py) serves the same data as JSON on port 5001
"""

    parser = argparse.ArgumentParser(
        prog="python main.py",
        description="""
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
                          STOREFRONT CATALOG BROWSER
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
Filters the hosted product catalog and shows one card per style, with its
colours, size range and price range.
""",
        epilog=epilog,
        formatter_class=CustomHelpFormatter,
    )

    filter_group = parser.add_argument_group(
        "Filter Options", "Narrow the products shown"
    )
    filter_group.add_argument(
        "--search", "-s", metavar="TEXT", help="Free-text search across name, brand and description"
    )
    filter_group.add_argument(
        "--type", "-t", dest="product_types", action="append", metavar="TYPE",
        help="Product type (repeatable, e.g. --type Polos)",
    )
    filter_group.add_argument(
        "--brand", "-b", dest="brands", action="append", metavar="BRAND",
        help="Brand (repeatable)",
    )
    filter_group.add_argument(
        "--size", dest="sizes", action="append", metavar="SIZE",
        help="Exact size name (repeatable)",
    )
    filter_group.add_argument(
        "--color", dest="colors", action="append", metavar="COLOR",
        help="Primary colour (repeatable)",
    )
    filter_group.add_argument(
        "--price-min", type=float, metavar="GBP", help="Minimum single price"
    )
    filter_group.add_argument(
        "--price-max", type=float, metavar="GBP", help="Maximum single price"
    )

    page_group = parser.add_argument_group("Paging Options")
    page_group.add_argument(
        "--page", "-p", type=int, default=1, metavar="NUM", help="Page number (default: 1)"
    )
    page_group.add_argument(
        "--page-size",
        type=int,
        default=config.catalog.default_page_size,
        metavar="NUM",
        help=f"Rows per page (default: {config.catalog.default_page_size})",
    )

    menu_group = parser.add_argument_group(
        "Menus", "Show filter menus instead of products"
    )
    menu_group.add_argument(
        "--options", action="store_true", help="List facet options and the price range"
    )
    menu_group.add_argument(
        "--sizes",
        dest="show_sizes",
        action="store_true",
        help="List size groups for the selected --type values",
    )

    smart_group = parser.add_argument_group("Smart Search")
    smart_group.add_argument(
        "--smart", metavar="QUERY", help="Turn a sentence into filters, then browse"
    )
    smart_group.add_argument(
        "--local-only",
        action="store_true",
        help="Skip the remote AI backend and use keyword matching",
    )

    return parser.parse_args(argv)


def filters_from_args(args) -> ProductFilters:
    """Build ProductFilters from parsed CLI arguments."""
    return ProductFilters(
        search_query=args.search,
        product_types=args.product_types,
        brands=args.brands,
        sizes=args.sizes,
        colors=args.colors,
        price_min=args.price_min,
        price_max=args.price_max,
    )


def print_browse_page(result: BrowsePage):
    """Print style cards and page metadata."""
    page = result.page
    if result.is_empty:
        console.print("[yellow]No products match these filters[/yellow]")
        return

    table = Table(title=f"Page {page.current_page} of {page.total_pages}")
    table.add_column("Style", style="cyan")
    table.add_column("Name")
    table.add_column("Brand", style="dim")
    table.add_column("Colours", justify="right")
    table.add_column("Sizes")
    table.add_column("Price", style="green")

    for group in result.groups:
        table.add_row(
            group.style_code,
            group.style_name or "",
            group.brand or "",
            str(len(group.colors)),
            format_size_range(group.size_range or ""),
            format_price_range(group.price_range),
        )

    console.print(table)
    console.print(
        f"[dim]{page.total_count} matching rows · "
        f"previous: {'yes' if page.has_prev_page else 'no'} · "
        f"next: {'yes' if page.has_next_page else 'no'}[/dim]"
    )


def print_filter_options(browser: CatalogBrowser):
    """Print every facet menu."""
    options = browser.load_filter_options()

    table = Table(title="Filter Options")
    table.add_column("Facet", style="cyan")
    table.add_column("Values", justify="right")
    table.add_column("Examples", style="dim")

    for facet, values in options.model_dump(exclude={"price_range", "brand_options"}).items():
        sample = ", ".join(values[:5]) + (" ..." if len(values) > 5 else "")
        table.add_row(facet, str(len(values)), sample)

    console.print(table)
    console.print(
        f"[dim]Price range: £{options.price_range.min:g} - £{options.price_range.max:g}[/dim]"
    )


def print_size_groups(browser: CatalogBrowser, filters: ProductFilters):
    """Print size buckets for the selected product types."""
    groups = browser.size_groups_for(filters)
    if not groups:
        console.print("[yellow]No sizes found (select product types with --type)[/yellow]")
        return

    for group in groups:
        console.print(f"\n[bold cyan]{group.category}[/bold cyan]")
        for entry in group.sizes:
            if entry.variants == [entry.base_size]:
                console.print(f"  • {entry.base_size}")
            else:
                console.print(
                    f"  • {entry.base_size} [dim]({', '.join(entry.variants)})[/dim]"
                )


async def run_smart_search(browser: CatalogBrowser, query: str):
    """Smart search, then print its first page."""
    async with browser.smart_search_client:
        browser.load_filter_options()
        filters, result = await browser.smart_browse(query)

    console.print(f"[dim]Filters:[/dim] {filters.to_wire()}")
    print_browse_page(result)


def create_browser(args) -> CatalogBrowser:
    """Build the browser from parsed arguments."""
    store = CatalogStore()

    search_config = config.smart_search
    if args.local_only:
        search_config = replace(search_config, remote_enabled=False)

    page_size = min(max(args.page_size, 1), config.catalog.max_page_size)
    return CatalogBrowser(
        store,
        smart_search=SmartSearchClient(search_config=search_config),
        page_size=page_size,
    )


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    try:
        browser = create_browser(args)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        return 1

    try:
        filters = filters_from_args(args)

        if args.options:
            print_filter_options(browser)
            return 0

        if args.show_sizes:
            print_size_groups(browser, filters)
            return 0

        if args.smart:
            asyncio.run(run_smart_search(browser, args.smart))
            return 0

        console.print("\n[bold cyan]═══════════════════════════════════════════[/bold cyan]")
        console.print("[bold cyan]        STOREFRONT CATALOG BROWSER         [/bold cyan]")
        console.print("[bold cyan]═══════════════════════════════════════════[/bold cyan]\n")
        console.print(f"[dim]Active filters:[/dim] {count_active_filters(filters)}")

        print_browse_page(browser.browse(filters, page=max(args.page, 1)))
        return 0

    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        return 130
    except Exception as e:
        console.print(f"\n[bold red]Unexpected error: {e}[/bold red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
