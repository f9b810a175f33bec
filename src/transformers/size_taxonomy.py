"""
Size taxonomy for the size filter.

Catalog size strings are inconsistent ("L Long", "6/7 Years", "Wom 12/14",
"UK 8", "Chest 40\"", ...). This module sorts them into named buckets and,
inside a bucket, collapses variants of the same size under a base size so
the filter shows "L" once instead of "L", "L Long" and "L Reg".

Bucket rules are applied in a fixed priority order because the naive tests
overlap (e.g. "UK 10 Waist" starts with "uk " but is a measurement).
"""

import re
from typing import Optional

from pydantic import BaseModel, Field

# =============================================================================
# BUCKETS
# =============================================================================

BABY = "Baby & Toddler (0-24 months)"
KIDS = "Kids (2-5 years)"
YOUTH = "Youth (6-15 years)"
WOMENS = "Women's Numeric"
FOOTWEAR = "Footwear"
MEASUREMENTS = "Measurements (Chest/Waist/Collar)"
ADULT = "Adult Sizes (XXS-8XL)"
NUMERIC = "Numeric Sizes"
ONE_SIZE = "One Size / Special"
OTHER = "Other"

# Order the buckets are presented in
DISPLAY_ORDER = [
    BABY,
    KIDS,
    YOUTH,
    ADULT,
    WOMENS,
    NUMERIC,
    MEASUREMENTS,
    FOOTWEAR,
    ONE_SIZE,
    OTHER,
]

# Buckets whose sizes are listed individually rather than grouped
UNGROUPED = {ONE_SIZE, OTHER}

SPECIAL_SIZES = {"one size", "child", "infant", "junior", "youth"}

# =============================================================================
# PATTERNS
# =============================================================================

LETTER_SIZE = re.compile(r"^(xxs|xs|s|m|l|xl|\dxl)\b", re.IGNORECASE)
SLASH_YEARS = re.compile(r"^(\d+)/\d+\s*years?\b", re.IGNORECASE)
WOMENS_PREFIX = re.compile(r"^wom (\d+)", re.IGNORECASE)
LENGTH_SUFFIX = re.compile(r"^(\d+)\s*(long|reg|short|tall|mod)", re.IGNORECASE)

KIDS_YEARS = re.compile(r"^[1-5]/?\d?\s*years?$", re.IGNORECASE)
KIDS_PLUS_YEARS = re.compile(r"^[2-5]\+\s*years?$", re.IGNORECASE)
YOUTH_YEARS = re.compile(r"^([6-9]|1[0-5])/?\d*\s*years?$", re.IGNORECASE)
ADULT_SUFFIX = re.compile(r"(youth|boys|ly/xly)$", re.IGNORECASE)
BARE_NUMBER = re.compile(r"^\d+(\.\d+)?$")


class SizeEntry(BaseModel):
    """A base size and the raw catalog sizes it stands for."""

    base_size: str
    variants: list[str] = Field(default_factory=list)


class SizeGroup(BaseModel):
    """One bucket of the size filter."""

    category: str
    sizes: list[SizeEntry] = Field(default_factory=list)


def natural_key(text: str) -> tuple:
    """Sort key that orders embedded numbers numerically ("2XL" < "10XL")."""
    key = []
    for part in re.split(r"(\d+)", text):
        if not part:
            continue
        if part.isdigit():
            key.append((0, int(part), ""))
        else:
            key.append((1, 0, part.lower()))
    return tuple(key)


def extract_base_size(size: str) -> str:
    """
    Normalized size label used to group variants.

    >>> extract_base_size("L Long")
    'L'
    >>> extract_base_size("6/7 Years")
    '6 Years'
    >>> extract_base_size("Wom 12/14")
    'Wom 12'
    >>> extract_base_size("32 Long")
    '32'
    """
    size = size.strip()

    match = LETTER_SIZE.match(size)
    if match:
        return match.group(1).upper()

    match = SLASH_YEARS.match(size)
    if match:
        return f"{match.group(1)} Years"

    match = WOMENS_PREFIX.match(size)
    if match:
        return f"Wom {match.group(1)}"

    match = LENGTH_SUFFIX.match(size)
    if match:
        return match.group(1)

    return size


def _is_measurement(lower: str) -> bool:
    if "waist" in lower or "chest" in lower:
        return True
    if BARE_NUMBER.match(lower):
        return 13 <= float(lower) <= 23
    return False


def classify_size(size: str) -> str:
    """Bucket name for one raw size string (first matching rule wins)."""
    lower = size.strip().lower()

    if "months" in lower or lower == "new born":
        return BABY

    if KIDS_YEARS.match(lower) or KIDS_PLUS_YEARS.match(lower):
        return KIDS

    if YOUTH_YEARS.match(lower):
        return YOUTH

    if lower.startswith("wom "):
        return WOMENS

    if lower.startswith("socks ") or (
        lower.startswith("uk ") and "chest" not in lower and "waist" not in lower
    ):
        return FOOTWEAR

    if _is_measurement(lower):
        return MEASUREMENTS

    if LETTER_SIZE.match(lower) or ADULT_SUFFIX.search(lower):
        return ADULT

    if lower[:1].isdigit() and not any(unit in lower for unit in ("litre", "mm", "cm")):
        return NUMERIC

    if lower in SPECIAL_SIZES:
        return ONE_SIZE

    return OTHER


def build_size_groups(sizes: list[str]) -> list[SizeGroup]:
    """
    Sort raw size strings into taxonomy buckets.

    Every distinct input string lands in exactly one bucket, under exactly
    one base size. Surrounding whitespace is ignored when classifying but the
    raw string is kept as the variant. Blank strings land in Other. Empty
    buckets are omitted.
    """
    buckets: dict[str, dict[str, list[str]]] = {}

    for size in dict.fromkeys(s for s in sizes if s is not None):
        normalized = size.strip()
        category = classify_size(normalized)
        base = normalized if category in UNGROUPED else extract_base_size(normalized)
        buckets.setdefault(category, {}).setdefault(base, []).append(size)

    groups = []
    for category in DISPLAY_ORDER:
        entries = buckets.get(category)
        if not entries:
            continue
        groups.append(
            SizeGroup(
                category=category,
                sizes=[
                    SizeEntry(base_size=base, variants=sorted(variants, key=natural_key))
                    for base, variants in sorted(
                        entries.items(), key=lambda item: natural_key(item[0])
                    )
                ],
            )
        )
    return groups


def find_size_entry(groups: list[SizeGroup], base_size: str) -> Optional[SizeEntry]:
    """Look up a base size across all buckets."""
    for group in groups:
        for entry in group.sizes:
            if entry.base_size == base_size:
                return entry
    return None
