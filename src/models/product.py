"""
Catalog data models.

Rows come from the catalog table (one per style + colour + size). Filters and
options travel to and from the browser as camelCase JSON.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ProductVariant(BaseModel):
    """One catalog row: a concrete style + colour + size combination."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = None
    sku_code: Optional[str] = None
    style_code: Optional[str] = None
    style_name: Optional[str] = None
    brand: Optional[str] = None
    product_type: Optional[str] = None
    size_name: Optional[str] = None
    size_range: Optional[str] = None
    primary_colour: Optional[str] = None
    colour_code: Optional[str] = None
    colour_name: Optional[str] = None
    colour_shade: Optional[str] = None
    rgb: Optional[str] = None
    single_price: Optional[str] = None
    primary_product_image_url: Optional[str] = None
    colour_image: Optional[str] = None
    fabric: Optional[str] = None
    categorisation: Optional[str] = None
    accreditations: Optional[str] = None
    gender: Optional[str] = None
    age_group: Optional[str] = None
    sustainable_organic: Optional[str] = None
    retail_description: Optional[str] = None
    specification: Optional[str] = None

    @field_validator("id", "single_price", mode="before")
    @classmethod
    def coerce_to_str(cls, v: Any) -> Optional[str]:
        """Numeric ids and prices are stored as text."""
        if v is None:
            return None
        return str(v)


# Multi-select facets; an empty selection means "no constraint"
MULTI_SELECT_FIELDS = (
    "product_types",
    "sizes",
    "colors",
    "color_shades",
    "categories",
    "materials",
    "brands",
    "genders",
    "age_groups",
    "sustainable_organic",
    "accreditations",
)


class ProductFilters(BaseModel):
    """User-selected filters. Unset fields place no constraint."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    search_query: Optional[str] = None
    product_types: Optional[list[str]] = None
    sizes: Optional[list[str]] = None
    colors: Optional[list[str]] = None
    color_shades: Optional[list[str]] = None
    categories: Optional[list[str]] = None
    materials: Optional[list[str]] = None
    brands: Optional[list[str]] = None
    genders: Optional[list[str]] = None
    age_groups: Optional[list[str]] = None
    sustainable_organic: Optional[list[str]] = None
    accreditations: Optional[list[str]] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None

    @field_validator(*MULTI_SELECT_FIELDS, mode="after")
    @classmethod
    def empty_list_is_unset(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        """Never keep an empty selection."""
        if not v:
            return None
        return v

    @field_validator("search_query", mode="after")
    @classmethod
    def blank_search_is_unset(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)

    def to_wire(self) -> dict:
        """camelCase dict of the fields that are set."""
        return self.model_dump(by_alias=True, exclude_none=True)


class PriceRange(BaseModel):
    min: float = 0
    max: float = 0


class BrandOption(BaseModel):
    """A brand facet value with its logo, when the brands table has one."""

    id: str
    name: str
    logo_url: Optional[str] = None


class FilterOptions(BaseModel):
    """Distinct facet values available across the catalog."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    materials: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    price_range: PriceRange = Field(default_factory=lambda: PriceRange(min=0, max=1000))
    product_types: list[str] = Field(default_factory=list)
    sizes: list[str] = Field(default_factory=list)
    colors: list[str] = Field(default_factory=list)
    color_shades: list[str] = Field(default_factory=list)
    brands: list[str] = Field(default_factory=list)
    brand_options: list[BrandOption] = Field(default_factory=list)
    genders: list[str] = Field(default_factory=list)
    age_groups: list[str] = Field(default_factory=list)
    accreditations: list[str] = Field(default_factory=list)


class ProductsPage(BaseModel):
    """One page of matching catalog rows."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    products: list[ProductVariant] = Field(default_factory=list)
    total_count: int = 0
    total_pages: int = 0
    current_page: int = 1
    has_next_page: bool = False
    has_prev_page: bool = False

    @classmethod
    def empty(cls, page: int) -> "ProductsPage":
        return cls(current_page=page)
