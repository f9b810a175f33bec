"""
Smart Search API Client

Turns a free-text shopping request into ProductFilters using the remote AI
search backend, falling back to local keyword matching.

Usage:
    from src.ai import SmartSearchClient

    async with SmartSearchClient() as client:
        result = await client.generate_filters("navy polos for office staff")
        result.filters      # ProductFilters
        result.source       # "remote" or "fallback"

The backend accepts POST {query, selectedQuestions?, messages?, systemPrompt?}
and answers with {success?, filters?, explanation?, fallback?, error?}.
Several deployments may host it, so each configured URL is tried in turn.
"""

import json
from dataclasses import dataclass
from typing import Optional

import httpx
from pydantic import ValidationError
from rich.console import Console

from config.settings import SmartSearchConfig, config
from src.models.product import FilterOptions, ProductFilters
from src.query.filter_query import normalize_product_types

from .fallback_filters import generate_fallback_filters

console = Console()


@dataclass
class SmartSearchResult:
    """Filters produced for a query, and where they came from."""

    filters: ProductFilters
    source: str  # "remote" | "fallback"
    explanation: Optional[str] = None
    url: Optional[str] = None


def extract_filters(payload) -> Optional[dict]:
    """
    Pull a filters object out of a backend response.

    Accepts ``{"filters": ...}`` (with or without ``success``),
    ``{"data": {"filters": ...}}``, and a non-empty ``{"fallback": ...}``.
    """
    if not isinstance(payload, dict):
        return None

    if isinstance(payload.get("filters"), dict):
        return payload["filters"]

    data = payload.get("data")
    if isinstance(data, dict) and isinstance(data.get("filters"), dict):
        return data["filters"]

    if isinstance(payload.get("fallback"), dict) and payload["fallback"]:
        return payload["fallback"]

    return None


def _clamp(value: Optional[float], low: float, high: float) -> Optional[float]:
    if value is None:
        return None
    return min(max(value, low), high)


def validate_filters(
    filters: ProductFilters, options: FilterOptions, aliases: Optional[dict] = None
) -> ProductFilters:
    """
    Keep AI-suggested filters within what the catalog actually offers.

    Product types go through the alias table first, so "Polo Shirts" becomes
    "Polos". Unknown product types and brands are dropped, prices are clamped
    into the catalog price range and an inverted min/max pair is swapped.
    """
    data = filters.model_dump()

    if aliases is None:
        aliases = config.catalog.product_type_aliases

    if data.get("product_types") and options.product_types:
        types = normalize_product_types(data["product_types"], aliases)
        data["product_types"] = [t for t in types if t in options.product_types]
    if data.get("brands") and options.brands:
        data["brands"] = [b for b in data["brands"] if b in options.brands]

    low, high = options.price_range.min, options.price_range.max
    data["price_min"] = _clamp(data.get("price_min"), low, high)
    data["price_max"] = _clamp(data.get("price_max"), low, high)

    if (
        data["price_min"] is not None
        and data["price_max"] is not None
        and data["price_min"] > data["price_max"]
    ):
        data["price_min"], data["price_max"] = data["price_max"], data["price_min"]

    return ProductFilters(**data)


class SmartSearchClient:
    """
    Async client for the AI smart search backend.

    Never raises for backend problems: unreachable hosts, error statuses,
    non-JSON bodies and responses without filters all fall through to the
    next URL and finally to local keyword matching.
    """

    def __init__(
        self,
        search_config: Optional[SmartSearchConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = search_config or config.smart_search
        self._client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def connect(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout_seconds)

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def generate_filters(
        self,
        query: str,
        selected_questions: Optional[list[str]] = None,
        messages: Optional[list[dict]] = None,
        system_prompt: Optional[str] = None,
        options: Optional[FilterOptions] = None,
    ) -> SmartSearchResult:
        """
        Filters for a free-text query.

        Args:
            query: What the shopper typed
            selected_questions: Quick-question chips the shopper ticked
            messages: Prior chat turns ({"role", "content"})
            system_prompt: Override for the backend's prompt
            options: Catalog facets used to sanity-check remote filters

        Returns:
            SmartSearchResult (never raises for backend failures)
        """
        if not self.config.remote_enabled:
            return self._fallback(query, "remote search disabled")

        urls = self.config.candidate_urls()
        if not urls:
            return self._fallback(query, "no smart search URL configured")

        payload = {"query": query}
        if selected_questions:
            payload["selectedQuestions"] = selected_questions
        if messages:
            payload["messages"] = messages
        if system_prompt:
            payload["systemPrompt"] = system_prompt

        await self.connect()

        for url in urls:
            body = await self._post(url, payload)
            raw_filters = extract_filters(body)
            if raw_filters is None:
                if body is not None:
                    error = body.get("error") if isinstance(body, dict) else None
                    console.print(
                        f"[yellow]Smart search at {url} returned no filters "
                        f"({error or 'empty payload'})[/yellow]"
                    )
                continue

            try:
                filters = ProductFilters.model_validate(raw_filters)
            except ValidationError as e:
                console.print(f"[yellow]Smart search at {url} sent invalid filters: {e}[/yellow]")
                continue

            if options is not None:
                filters = validate_filters(filters, options)

            explanation = body.get("explanation") if isinstance(body, dict) else None
            console.print(f"[dim]Smart search filters from {url}: {filters.to_wire()}[/dim]")
            return SmartSearchResult(
                filters=filters, source="remote", explanation=explanation, url=url
            )

        return self._fallback(query, "all smart search endpoints failed")

    async def _post(self, url: str, payload: dict):
        """POST and decode a JSON (or JSON-looking text) body; None on failure."""
        try:
            response = await self._client.post(url, json=payload)
        except httpx.HTTPError as e:
            console.print(f"[yellow]Smart search request to {url} failed: {e}[/yellow]")
            return None

        content_type = response.headers.get("content-type", "")
        try:
            if "application/json" in content_type:
                return response.json()
            return json.loads(response.text)
        except ValueError:
            console.print(
                f"[yellow]Non-JSON response from {url} ({response.status_code}): "
                f"{response.text[:200]}[/yellow]"
            )
            return None

    def _fallback(self, query: str, reason: str) -> SmartSearchResult:
        console.print(f"[dim]Using local keyword matching ({reason})[/dim]")
        return SmartSearchResult(filters=generate_fallback_filters(query), source="fallback")
