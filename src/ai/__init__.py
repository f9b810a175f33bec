"""
Smart Search Module

Turns free-text shopping requests into product filters:
- Remote AI search backend (opt-in via SMART_SEARCH_REMOTE=true)
- Local keyword fallback when the backend is disabled or unreachable

Configuration (.env):
- SMART_SEARCH_REMOTE=true
- SMART_SEARCH_URL=https://host/api/smart-search   (explicit endpoint)
- RENDER_API_BASE_URL / API_BASE_URL / SITE_URL    (base URLs to derive endpoints)
"""

from .fallback_filters import generate_fallback_filters
from .smart_search_client import (
    SmartSearchClient,
    SmartSearchResult,
    extract_filters,
    validate_filters,
)

__all__ = [
    "SmartSearchClient",
    "SmartSearchResult",
    "extract_filters",
    "generate_fallback_filters",
    "validate_filters",
]
