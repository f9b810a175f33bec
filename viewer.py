#!/usr/bin/env python3
"""
JSON API for the storefront product browser.

Serves the same operations as main.py over HTTP so the storefront front end
(or curl) can browse the catalog:

    GET  /api/products          One page of style cards
    GET  /api/filter-options    Facet menus and the price range
    GET  /api/size-groups       Size buckets for ?productTypes=...
    POST /api/smart-search      {query, selectedQuestions?, messages?}
    GET  /health

Filters are passed as camelCase query parameters; multi-select facets repeat
the parameter (?productTypes=Polos&productTypes=Hoodies).

Usage:
    python viewer.py              # http://localhost:5001
    python viewer.py --port 8080
"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).parent))

from flask import Flask, jsonify, request
from pydantic import ValidationError
from pydantic.alias_generators import to_camel
from rich.console import Console

from src.catalog_browser import BrowsePage, CatalogBrowser
from src.loaders.catalog_store import CatalogStore
from src.models.product import MULTI_SELECT_FIELDS, ProductFilters
from src.transformers.product_grouper import format_price_range, format_size_range

console = Console()

MULTI_SELECT_PARAMS = {to_camel(name): name for name in MULTI_SELECT_FIELDS}


class BadRequest(Exception):
    """Malformed request parameters."""


def _error(message: str, status: int = 400):
    return jsonify({"success": False, "error": message}), status


def _int_param(name: str, default: int) -> int:
    value = request.args.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise BadRequest(f"{name} must be an integer, got '{value}'")


def _float_param(name: str) -> Optional[float]:
    value = request.args.get(name)
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        raise BadRequest(f"{name} must be a number, got '{value}'")


def filters_from_request() -> ProductFilters:
    """ProductFilters from the query string."""
    data = {
        param: request.args.getlist(param)
        for param in MULTI_SELECT_PARAMS
        if request.args.getlist(param)
    }
    data["searchQuery"] = request.args.get("searchQuery") or request.args.get("search")
    data["priceMin"] = _float_param("priceMin")
    data["priceMax"] = _float_param("priceMax")

    try:
        return ProductFilters.model_validate(data)
    except ValidationError as e:
        raise BadRequest(str(e))


def serialize_browse_page(result: BrowsePage) -> dict:
    """Style cards plus page metadata, ready for jsonify."""
    groups = []
    for group in result.groups:
        card = group.model_dump(mode="json")
        card["sizeRangeLabel"] = format_size_range(group.size_range)
        card["priceLabel"] = format_price_range(group.price_range)
        groups.append(card)

    page = result.page.model_dump(by_alias=True, exclude={"products"})
    return {"success": True, "groups": groups, **page}


async def _smart_browse(browser: CatalogBrowser, query: str, questions, messages):
    async with browser.smart_search_client:
        return await browser.smart_browse(query, questions, messages)


def create_app(browser: Optional[CatalogBrowser] = None) -> Flask:
    """
    Build the Flask app.

    Args:
        browser: CatalogBrowser to serve (default: one over the configured store)
    """
    app = Flask(__name__)
    app.json.sort_keys = False

    def get_browser() -> CatalogBrowser:
        if "catalog_browser" not in app.extensions:
            app.extensions["catalog_browser"] = browser or CatalogBrowser(CatalogStore())
        return app.extensions["catalog_browser"]

    @app.errorhandler(BadRequest)
    def handle_bad_request(e):
        return _error(str(e), 400)

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.route("/api/products")
    def products():
        page = _int_param("page", 1)
        if page < 1:
            raise BadRequest("page must be 1 or greater")

        catalog_browser = get_browser()
        page_size = _int_param("pageSize", catalog_browser.page_size)
        max_page_size = catalog_browser.store.catalog.max_page_size
        if not 1 <= page_size <= max_page_size:
            raise BadRequest(f"pageSize must be between 1 and {max_page_size}")

        browse_page = catalog_browser.browse(filters_from_request(), page, page_size)

        return jsonify(serialize_browse_page(browse_page))

    @app.route("/api/filter-options")
    def filter_options():
        refresh = request.args.get("refresh", "").lower() in ("1", "true", "yes")
        options = get_browser().load_filter_options(refresh=refresh)
        return jsonify({"success": True, "options": options.model_dump(by_alias=True)})

    @app.route("/api/size-groups")
    def size_groups():
        filters = filters_from_request()
        groups = get_browser().size_groups_for(filters)
        return jsonify(
            {
                "success": True,
                "groups": [group.model_dump(by_alias=True) for group in groups],
            }
        )

    @app.route("/api/smart-search", methods=["POST"])
    def smart_search():
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            return _error("Request body must be a JSON object")

        query = body.get("query")
        if not isinstance(query, str) or not query.strip():
            return _error("query is required")

        questions = body.get("selectedQuestions") or None
        messages = body.get("messages") or None
        if questions is not None and (
            not isinstance(questions, list) or not all(isinstance(q, str) for q in questions)
        ):
            return _error("selectedQuestions must be a list of strings")
        if messages is not None and (
            not isinstance(messages, list) or not all(isinstance(m, dict) for m in messages)
        ):
            return _error("messages must be a list of objects")

        catalog_browser = get_browser()
        catalog_browser.load_filter_options()
        filters, result = asyncio.run(
            _smart_browse(catalog_browser, query.strip(), questions, messages)
        )

        return jsonify({"filters": filters.to_wire(), **serialize_browse_page(result)})

    return app


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Storefront catalog JSON API")
    parser.add_argument(
        "--port", type=int, default=5001, help="Port to run the server on (default: 5001)"
    )
    parser.add_argument("--debug", action="store_true", help="Run Flask in debug mode")
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()

    try:
        app = create_app(CatalogBrowser(CatalogStore()))
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    console.print("\n[bold cyan]═══════════════════════════════════════════[/bold cyan]")
    console.print("[bold cyan]        STOREFRONT CATALOG API             [/bold cyan]")
    console.print("[bold cyan]═══════════════════════════════════════════[/bold cyan]\n")
    console.print(f"[dim]Listening on[/dim] http://localhost:{args.port}")
    console.print("[dim]Press CTRL+C to stop the server[/dim]\n")

    app.run(debug=args.debug, port=args.port)
