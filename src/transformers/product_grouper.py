"""
Groups catalog variant rows into style-level product cards.

The catalog returns one row per style + colour + size. The browser shows one
card per style with its colour swatches, size range and price range.
"""

import re
from typing import Optional

from pydantic import BaseModel, Field

from src.models.product import PriceRange, ProductVariant
from src.query.filter_options import parse_price

DEFAULT_SWATCH = "#cccccc"

# Checked in order; the first word found in the colour name wins
BASIC_COLOR_HEX = [
    (("black",), "#000000"),
    (("white",), "#ffffff"),
    (("red",), "#dc3545"),
    (("blue",), "#007bff"),
    (("green",), "#28a745"),
    (("yellow",), "#ffc107"),
    (("grey", "gray"), "#6c757d"),
    (("navy",), "#001f3f"),
    (("orange",), "#ff6b35"),
    (("purple",), "#6f42c1"),
    (("pink",), "#e83e8c"),
    (("brown",), "#8b4513"),
]

UNKNOWN_STYLE = "unknown"


class ColorSwatch(BaseModel):
    """One selectable colour of a style."""

    code: str
    name: str
    rgb: str
    image: Optional[str] = None


class ProductGroup(BaseModel):
    """All variants of one style, summarised for a product card."""

    style_code: str
    style_name: Optional[str] = None
    brand: Optional[str] = None
    variants: list[ProductVariant] = Field(default_factory=list)
    colors: list[ColorSwatch] = Field(default_factory=list)
    size_range: str = ""
    price_range: PriceRange = Field(default_factory=PriceRange)


def parse_rgb(raw: Optional[str]) -> Optional[str]:
    """'12, 34, 56|...' -> 'rgb(12, 34, 56)'; None if not a valid triple."""
    if not raw or raw == "Not available":
        return None

    numbers = re.findall(r"\d+", raw.split("|")[0].strip())
    if len(numbers) < 3:
        return None

    r, g, b = (int(n) for n in numbers[:3])
    if all(0 <= c <= 255 for c in (r, g, b)):
        return f"rgb({r}, {g}, {b})"
    return None


def resolve_swatch_color(colour_name: Optional[str], raw_rgb: Optional[str]) -> str:
    """Display colour for a swatch: name keyword, then stored RGB, then grey."""
    name = (colour_name or "").lower()
    for words, hex_value in BASIC_COLOR_HEX:
        if any(word in name for word in words):
            return hex_value

    return parse_rgb(raw_rgb) or DEFAULT_SWATCH


def unique_colors(variants: list[ProductVariant]) -> list[ColorSwatch]:
    """One swatch per colour code; the first variant seen for a code wins."""
    swatches: dict[str, ColorSwatch] = {}
    for variant in variants:
        code = variant.colour_code
        if not code or code in swatches:
            continue
        swatches[code] = ColorSwatch(
            code=code,
            name=variant.colour_name or code,
            rgb=resolve_swatch_color(variant.colour_name, variant.rgb),
            image=variant.colour_image or variant.primary_product_image_url,
        )
    return list(swatches.values())


def price_range_for(variants: list[ProductVariant]) -> PriceRange:
    """Min/max over positive, parseable prices; {0, 0} if there are none."""
    prices = [p for p in (parse_price(v.single_price) for v in variants) if p and p > 0]
    if not prices:
        return PriceRange(min=0, max=0)
    return PriceRange(min=min(prices), max=max(prices))


def group_products_by_style(variants: list[ProductVariant]) -> list[ProductGroup]:
    """Group variant rows by style code, ordered by style code."""
    grouped: dict[str, list[ProductVariant]] = {}
    for variant in variants:
        grouped.setdefault(variant.style_code or UNKNOWN_STYLE, []).append(variant)

    groups = []
    for style_code in sorted(grouped):
        members = grouped[style_code]
        first = members[0]
        groups.append(
            ProductGroup(
                style_code=style_code,
                style_name=first.style_name,
                brand=first.brand,
                variants=members,
                colors=unique_colors(members),
                size_range=first.size_range or "",
                price_range=price_range_for(members),
            )
        )
    return groups


def format_size_range(size_range: str) -> str:
    """'Sto3XL' -> 'S to 3XL'"""
    if not size_range:
        return ""
    text = re.sub(r"to", " to ", size_range, flags=re.IGNORECASE)
    text = re.sub(r"([a-zA-Z])(\d)", r"\1 \2", text)
    return re.sub(r"\s+", " ", text).strip()


def format_price_range(price_range: Optional[PriceRange], currency: str = "£") -> str:
    if price_range is None:
        return ""
    if price_range.min == price_range.max:
        return f"{currency}{price_range.min:.2f}"
    return f"{currency}{price_range.min:.2f} - {currency}{price_range.max:.2f}"
