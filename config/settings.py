"""
Configuration settings for the storefront catalog.
"""

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file from project root
load_dotenv(Path(__file__).parent.parent / ".env")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass
class SupabaseConfig:
    """Credentials for the hosted catalog database and storage."""

    url: Optional[str] = field(default_factory=lambda: os.getenv("SUPABASE_URL"))
    key: Optional[str] = field(default_factory=lambda: os.getenv("SUPABASE_KEY"))


@dataclass
class CatalogConfig:
    """Configuration for catalog queries."""

    table: str = field(default_factory=lambda: os.getenv("CATALOG_TABLE", "product_data"))
    brands_table: str = field(default_factory=lambda: os.getenv("BRANDS_TABLE", "brands"))

    # Pagination
    default_page_size: int = 100
    max_page_size: int = 1000

    # Free-text search
    min_token_length: int = 3  # tokens of length <= 2 are dropped
    stop_words: list = field(
        default_factory=lambda: [
            "the",
            "and",
            "for",
            "with",
            "need",
            "want",
            "looking",
        ]
    )
    search_columns: list = field(
        default_factory=lambda: [
            "style_name",
            "brand",
            "retail_description",
            "specification",
            "product_type",
        ]
    )

    # Common product-type spellings mapped onto catalog values
    product_type_aliases: dict = field(
        default_factory=lambda: {
            "polo shirts": "Polos",
            "polo shirt": "Polos",
            "polos": "Polos",
            "t-shirts": "T-Shirts",
            "t-shirt": "T-Shirts",
            "tshirts": "T-Shirts",
            "tshirt": "T-Shirts",
            "tees": "T-Shirts",
            "fleeces": "Fleece",
            "fleece": "Fleece",
            "hoodies": "Hoodies",
            "hoodie": "Hoodies",
            "sweatshirts": "Sweatshirts",
            "sweatshirt": "Sweatshirts",
            "jackets": "Jackets",
            "jacket": "Jackets",
            "coats": "Jackets",
            "coat": "Jackets",
            "caps": "Caps",
            "cap": "Caps",
            "hats": "Hats",
            "hat": "Hats",
            "beanies": "Beanies",
            "beanie": "Beanies",
            "bags": "Bags",
            "bag": "Bags",
            "shorts": "Shorts",
            "trousers": "Trousers",
            "pants": "Trousers",
            "aprons": "Aprons",
            "apron": "Aprons",
            "hi-vis": "Safety Vests",
            "hi vis": "Safety Vests",
            "high vis": "Safety Vests",
            "high visibility": "Safety Vests",
            "safety vest": "Safety Vests",
            "safety vests": "Safety Vests",
            "shirts": "Shirts",
            "shirt": "Shirts",
            "softshells": "Softshells",
            "softshell": "Softshells",
            "gilets": "Gilets & Body Warmers",
            "gilet": "Gilets & Body Warmers",
            "body warmers": "Gilets & Body Warmers",
            "bodywarmers": "Gilets & Body Warmers",
        }
    )


@dataclass
class FacetConfig:
    """Configuration for filter option aggregation."""

    # Upper bound when collecting "all" distinct values of a column
    distinct_value_cap: int = 10000

    # Rows scanned for facets derived from free text (materials, categories...)
    sample_size: int = field(
        default_factory=lambda: _env_int("CATALOG_FACET_SAMPLE_SIZE", 500)
    )

    default_price_range: dict = field(default_factory=lambda: {"min": 0, "max": 1000})

    material_vocabulary: list = field(
        default_factory=lambda: [
            "Cotton",
            "Polyester",
            "Wool",
            "Denim",
            "Fleece",
            "Canvas",
            "Merino",
            "Terry Cloth",
            "Jersey",
            "Teddy",
            "Corduroy",
            "Leather",
            "Twill",
            "French Terry",
            "Silk",
            "Linen",
            "Nylon",
            "Viscose",
            "Acrylic",
            "Spandex",
            "Elastane",
            "Polyamide",
            "Modal",
            "Bamboo",
        ]
    )

    # Marketing tags in categorisation text that are not real categories
    category_denylist: list = field(
        default_factory=lambda: [
            "Top 1000",
            "DM",
            "Raladeal",
            "Edge -",
            "New in",
            "Must Haves",
        ]
    )

    @classmethod
    def from_file(cls, path: Path) -> "FacetConfig":
        """Load overrides from a JSON file; unknown keys are ignored."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class SmartSearchConfig:
    """Configuration for the AI smart search backend."""

    # Remote AI search is opt-in; local keyword matching otherwise
    remote_enabled: bool = field(
        default_factory=lambda: _env_bool("SMART_SEARCH_REMOTE", False)
    )

    explicit_url: Optional[str] = field(
        default_factory=lambda: os.getenv("SMART_SEARCH_URL")
    )
    render_base_url: Optional[str] = field(
        default_factory=lambda: os.getenv("RENDER_API_BASE_URL")
    )
    api_base_url: Optional[str] = field(default_factory=lambda: os.getenv("API_BASE_URL"))
    site_url: Optional[str] = field(default_factory=lambda: os.getenv("SITE_URL"))

    timeout_seconds: float = 20.0
    debounce_seconds: float = 0.4

    def candidate_urls(self) -> list[str]:
        """Smart search endpoints to try, in order, without duplicates."""
        urls = []
        if self.explicit_url:
            urls.append(self.explicit_url)
        if self.render_base_url:
            base = self.render_base_url.rstrip("/")
            urls.append(f"{base}/api/smart-search")
            urls.append(f"{base}/smart-search")
        if self.api_base_url:
            urls.append(f"{self.api_base_url.rstrip('/')}/smart-search")
        if self.site_url:
            base = self.site_url.rstrip("/")
            urls.append(f"{base}/api/smart-search")
            urls.append(f"{base}/.netlify/functions/smart-search")

        seen = set()
        result = []
        for url in urls:
            if url not in seen:
                seen.add(url)
                result.append(url)
        return result


@dataclass
class StorageConfig:
    """Configuration for uploaded images."""

    bucket_name: str = field(
        default_factory=lambda: os.getenv("STORAGE_BUCKET", "product-images")
    )


@dataclass
class AppConfig:
    """Main configuration combining all settings."""

    supabase: SupabaseConfig = field(default_factory=SupabaseConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    facets: FacetConfig = field(default_factory=FacetConfig)
    smart_search: SmartSearchConfig = field(default_factory=SmartSearchConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    def __post_init__(self):
        """Apply facet overrides from CATALOG_FACETS_FILE if set."""
        facets_file = os.getenv("CATALOG_FACETS_FILE")
        if facets_file and Path(facets_file).exists():
            self.facets = FacetConfig.from_file(Path(facets_file))


# Default configuration instance
config = AppConfig()
