"""
pytest configuration and shared fixtures for storefront catalog tests.

FakeSupabaseClient stands in for supabase.Client: it records every query
builder call and evaluates the PostgREST-style filters (in, gte/lte, ilike
OR-groups, eq, not-is-null, order, range, limit) over in-memory rows.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config.settings import CatalogConfig, FacetConfig, SmartSearchConfig


# =============================================================================
# FAKE SUPABASE CLIENT
# =============================================================================


class FakeResult:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


def _split_or(expression: str) -> list[str]:
    """Split an or_() list on commas outside double quotes."""
    parts, current, quoted, escaped = [], "", False, False
    for char in expression:
        if escaped:
            current += char
            escaped = False
        elif char == "\\":
            current += char
            escaped = True
        elif char == '"':
            current += char
            quoted = not quoted
        elif char == "," and not quoted:
            parts.append(current)
            current = ""
        else:
            current += char
    parts.append(current)
    return parts


def _ilike_matcher(condition: str):
    column, op, pattern = condition.split(".", 2)
    assert op == "ilike", f"unsupported operator {op}"
    if pattern.startswith('"') and pattern.endswith('"'):
        pattern = pattern[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    needle = pattern.strip("*").lower()
    return lambda row: needle in str(row.get(column) or "").lower()


def _as_number(value):
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class FakeQuery:
    """Chainable query builder over a list of row dicts."""

    def __init__(self, client, table: str):
        self.client = client
        self.table_name = table
        self.calls = []
        self.columns = "*"
        self.count_mode = None
        self.predicates = []
        self.orders = []
        self.row_range = None
        self.row_limit = None
        self._negate = False

    def _record(self, name, *args):
        self.calls.append((name, args))

    def select(self, columns="*", count=None):
        self._record("select", columns, count)
        self.columns = columns
        self.count_mode = count
        return self

    @property
    def not_(self):
        self._negate = True
        return self

    def is_(self, column, value):
        self._record("not_is" if self._negate else "is", column, value)
        negate, self._negate = self._negate, False
        assert value == "null"
        if negate:
            self.predicates.append(lambda row: row.get(column) is not None)
        else:
            self.predicates.append(lambda row: row.get(column) is None)
        return self

    def eq(self, column, value):
        self._record("eq", column, value)
        self.predicates.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        self._record("in_", column, list(values))
        allowed = set(values)
        self.predicates.append(lambda row: row.get(column) in allowed)
        return self

    def gte(self, column, value):
        self._record("gte", column, value)

        def check(row):
            number = _as_number(row.get(column))
            return number is not None and number >= value

        self.predicates.append(check)
        return self

    def lte(self, column, value):
        self._record("lte", column, value)

        def check(row):
            number = _as_number(row.get(column))
            return number is not None and number <= value

        self.predicates.append(check)
        return self

    def or_(self, expression):
        self._record("or_", expression)
        matchers = [_ilike_matcher(c) for c in _split_or(expression)]
        self.predicates.append(lambda row: any(m(row) for m in matchers))
        return self

    def order(self, column, desc=False):
        self._record("order", column)
        self.orders.append((column, desc))
        return self

    def range(self, start, end):
        self._record("range", start, end)
        self.row_range = (start, end)
        return self

    def limit(self, n):
        self._record("limit", n)
        self.row_limit = n
        return self

    def execute(self):
        self.client.executed.append(self)
        failure = self.client.failure_for(self)
        if failure is not None:
            raise failure

        source = self.client.rows_for(self.table_name)
        rows = [r for r in source if all(p(r) for p in self.predicates)]
        count = len(rows) if self.count_mode == "exact" else None

        for column, desc in reversed(self.orders):
            rows = sorted(
                rows,
                key=lambda r: (r.get(column) is None, r.get(column) or 0),
                reverse=desc,
            )

        if self.row_range is not None:
            start, end = self.row_range
            rows = rows[start : end + 1]
        if self.row_limit is not None:
            rows = rows[: self.row_limit]

        if self.columns != "*":
            wanted = [c.strip() for c in self.columns.split(",")]
            rows = [{c: r.get(c) for c in wanted} for r in rows]

        return FakeResult([dict(r) for r in rows], count)


class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def upload(self, path, data, file_options=None):
        self.storage.uploads.append((self.name, path, data, file_options))
        return {"path": path}

    def get_public_url(self, path):
        return f"https://demo.supabase.co/storage/v1/object/public/{self.name}/{path}"

    def remove(self, paths):
        if self.storage.fail_remove:
            raise RuntimeError("storage unavailable")
        self.storage.removed.extend(paths)
        return [{"name": p} for p in paths]


class FakeStorage:
    def __init__(self):
        self.uploads = []
        self.removed = []
        self.fail_remove = False

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeSupabaseClient:
    """
    In-memory replacement for supabase.Client.

    Args:
        rows: Catalog rows every table() query runs against
        fail: Raise on every execute()
        fail_columns: Raise when a query selects one of these columns
        other_tables: Rows for tables other than the catalog, keyed by name
    """

    def __init__(self, rows=None, fail=False, fail_columns=(), other_tables=None):
        self.rows = list(rows or [])
        self.other_tables = dict(other_tables or {})
        self.fail = fail
        self.fail_columns = set(fail_columns)
        self.tables = []
        self.executed = []
        self.storage = FakeStorage()

    def table(self, name):
        self.tables.append(name)
        return FakeQuery(self, name)

    def rows_for(self, table):
        return self.other_tables.get(table, self.rows)

    def failure_for(self, query):
        if self.fail:
            return RuntimeError("connection refused")
        selected = {c.strip() for c in query.columns.split(",")}
        if selected & self.fail_columns:
            return RuntimeError(f"column failure: {sorted(selected & self.fail_columns)}")
        return None

    @property
    def last_query(self):
        return self.executed[-1]


# =============================================================================
# SAMPLE CATALOG
# =============================================================================


def make_row(id, style_code, size_name, colour_code, colour_name, single_price, **extra):
    row = {
        "id": id,
        "sku_code": f"{style_code}-{colour_code}-{size_name}",
        "style_code": style_code,
        "size_name": size_name,
        "colour_code": colour_code,
        "colour_name": colour_name,
        "primary_colour": colour_name,
        "single_price": single_price,
    }
    row.update(extra)
    return row


POLO = dict(
    style_name="Heavy Cotton Polo",
    brand="Gildan",
    product_type="Polos",
    size_range="Sto3XL",
    fabric="100% Cotton pique",
    categorisation="Polos|Workwear|Top 1000",
    accreditations="OEKO-TEX|WRAP",
    gender="Men",
    age_group="Adult",
    sustainable_organic="No",
    colour_shade="Blues",
    retail_description="Classic pique polo shirt with ribbed collar",
)

TEE = dict(
    style_name="Organic Tee",
    brand="B&C",
    product_type="T-Shirts",
    size_range="XS to 2XL",
    fabric="Organic Cotton, Polyester blend",
    categorisation="T-Shirts|Eco",
    accreditations="GOTS",
    gender="Unisex",
    age_group="Adult",
    sustainable_organic="Yes",
    colour_shade="Whites",
    retail_description="Soft organic cotton t-shirt",
)

HOODIE = dict(
    style_name="Kids Hoodie",
    brand="Result",
    product_type="Hoodies",
    size_range="3/4 to 11/12",
    fabric="Fleece",
    categorisation="Hoodies",
    gender="Unisex",
    age_group="Kids",
    sustainable_organic="No",
    colour_shade="Blacks",
    retail_description="Warm brushed fleece hoodie",
)

TOTE = dict(
    style_name="Canvas Tote",
    brand="Premier",
    product_type="Bags",
    size_range="One Size",
    fabric="Canvas",
    categorisation="Bags",
    gender="Unisex",
    age_group="Adult",
    retail_description="Heavy canvas tote bag",
)


@pytest.fixture
def catalog_rows():
    """Seven variant rows across four styles."""
    return [
        make_row(1, "GD001", "S", "NAV", "Navy", "8.50", rgb="0, 0, 128", **POLO),
        make_row(2, "GD001", "M", "NAV", "Navy", "8.50", rgb="0, 0, 128", **POLO),
        make_row(3, "GD001", "S", "RED", "Red", "9.00", rgb="Not available", **POLO),
        make_row(4, "BC100", "XL", "WHT", "White", "4.25", rgb="255, 255, 255", **TEE),
        make_row(5, "RX200", "3/4 Years", "BLK", "Black", "15.00", **HOODIE),
        make_row(6, "RX200", "5/6 Years", "BLK", "Black", "15.00", **HOODIE),
        make_row(7, "PR300", "One Size", "NAT", "Natural", "not a price", **TOTE),
    ]


@pytest.fixture
def brand_rows():
    """Brands table: two of the four catalog brands have logos."""
    return [
        {"id": 11, "name": "Gildan", "logo_url": "https://cdn.example.com/gildan.png"},
        {"id": 12, "name": "Result", "logo_url": None},
        {"id": 13, "name": "Fruit of the Loom", "logo_url": "https://cdn.example.com/fotl.png"},
    ]


@pytest.fixture
def fake_client(catalog_rows, brand_rows):
    return FakeSupabaseClient(catalog_rows, other_tables={"brands": brand_rows})


@pytest.fixture
def catalog_config():
    return CatalogConfig(table="product_data")


@pytest.fixture
def facet_config():
    return FacetConfig(sample_size=500)


@pytest.fixture
def store(fake_client, catalog_config):
    from src.loaders.catalog_store import CatalogStore

    return CatalogStore(client=fake_client, catalog_config=catalog_config)


@pytest.fixture
def local_search_config():
    """Smart search with the remote backend switched off."""
    return SmartSearchConfig(
        remote_enabled=False,
        explicit_url=None,
        render_base_url=None,
        api_base_url=None,
        site_url=None,
    )


@pytest.fixture
def make_client():
    """Factory for FakeSupabaseClient with custom rows or failures."""
    return FakeSupabaseClient


@pytest.fixture
def make_catalog_row():
    """Factory for one catalog row dict."""
    return make_row
