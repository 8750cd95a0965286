"""
Storefront Backend - Catalog Query Builder
============================================

What:  Turns the raw query string of GET /products into a filtered, sorted,
       paginated product query plus a matching count query.
How:   CatalogQuery.from_params() parses every parameter leniently, then
       page_statement() / count_statement() compose SQLAlchemy selects and
       apply_search() filters the fetched page in Python.
Who:   ProductService.list_products().

Query plan:
    Page:   SELECT * FROM products WHERE <filters> ORDER BY name
            LIMIT :limit OFFSET :offset
    Count:  SELECT count(*) FROM products WHERE <filters>
    Search: substring match on name / description / tags, applied to the
            fetched page only.

Known inconsistency (kept on purpose, covered by tests):
    totalCount comes from the count query, which does not know about
    `search`. With a search term the page can hold fewer rows than
    totalCount suggests.

Parsing rules (never raise):
    limit / offset   JS parseInt semantics ("12abc" -> 12). Missing,
                     unparseable or non-positive limit -> 10; capped at 100.
                     Missing, unparseable or negative offset -> 0.
    minPrice/maxPrice  JS parseFloat semantics. Unparseable -> no filter.
    inStock          absent -> no filter; "true" -> stock > 0;
                     any other value -> stock == 0.
    category/search  empty string -> no filter.
"""

import math
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sqlalchemy import Select, func, select

from app.models.product import Product

DEFAULT_LIMIT = 10
MAX_LIMIT = 100
DEFAULT_OFFSET = 0

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_int(value: Optional[str]) -> Optional[int]:
    """Leading-integer parse; None when there is no numeric prefix."""
    if value is None:
        return None
    match = _INT_PREFIX.match(value)
    return int(match.group(1)) if match else None


def parse_float(value: Optional[str]) -> Optional[float]:
    """Leading-float parse; None when there is no finite numeric prefix."""
    if value is None:
        return None
    match = _FLOAT_PREFIX.match(value)
    if not match:
        return None
    number = float(match.group(1))
    return number if math.isfinite(number) else None


def parse_in_stock(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    return value == "true"


@dataclass(frozen=True)
class CatalogQuery:
    """Parsed, immutable listing request."""

    category: Optional[str] = None
    search: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    in_stock: Optional[bool] = None
    limit: int = DEFAULT_LIMIT
    offset: int = DEFAULT_OFFSET

    @classmethod
    def from_params(
        cls,
        category: Optional[str] = None,
        search: Optional[str] = None,
        min_price: Optional[str] = None,
        max_price: Optional[str] = None,
        in_stock: Optional[str] = None,
        limit: Optional[str] = None,
        offset: Optional[str] = None,
    ) -> "CatalogQuery":
        parsed_limit = parse_int(limit)
        if parsed_limit is None or parsed_limit <= 0:
            parsed_limit = DEFAULT_LIMIT
        parsed_offset = parse_int(offset)
        if parsed_offset is None or parsed_offset < 0:
            parsed_offset = DEFAULT_OFFSET

        return cls(
            category=category or None,
            search=search or None,
            min_price=parse_float(min_price),
            max_price=parse_float(max_price),
            in_stock=parse_in_stock(in_stock),
            limit=min(parsed_limit, MAX_LIMIT),
            offset=parsed_offset,
        )

    # ── Datastore passes ──────────────────────────────────────────────────

    def _apply_filters(self, stmt: Select) -> Select:
        if self.category is not None:
            stmt = stmt.where(Product.category == self.category)
        if self.min_price is not None:
            stmt = stmt.where(Product.price >= self.min_price)
        if self.max_price is not None:
            stmt = stmt.where(Product.price <= self.max_price)
        if self.in_stock is not None:
            stmt = stmt.where(Product.stock > 0 if self.in_stock else Product.stock == 0)
        return stmt

    def page_statement(self) -> Select:
        """Filtered page ordered by name. `search` is not part of it."""
        stmt = self._apply_filters(select(Product))
        return stmt.order_by(Product.name.asc()).offset(self.offset).limit(self.limit)

    def count_statement(self) -> Select:
        """Row count for the same filters, without ordering, slicing or search."""
        return self._apply_filters(select(func.count()).select_from(Product))

    # ── In-memory search ──────────────────────────────────────────────────

    def matches_search(self, product: Product) -> bool:
        if not self.search:
            return True
        needle = self.search.lower()
        if needle in (product.name or "").lower():
            return True
        if product.description and needle in product.description.lower():
            return True
        return any(needle in str(tag).lower() for tag in (product.tags or []))

    def apply_search(self, products: Iterable[Product]) -> List[Product]:
        return [p for p in products if self.matches_search(p)]

    def next_offset(self, returned: int, total_count: int) -> Optional[int]:
        """
        Offset of the next page, or None on the last page.

        Uses the number of rows actually returned (after search), not the
        requested limit, to decide whether rows remain.
        """
        if self.offset + returned < total_count:
            return self.offset + self.limit
        return None
