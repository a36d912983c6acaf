"""
Store interface used by every service.

Services never talk to a database directly. They open a unit of work with
``store.transaction()`` and issue table-level calls against it:

    with store.transaction() as tx:
        product = tx.select_one("products", {"id": product_id})
        tx.update("products", {"id": product_id}, {"stock": product["stock"] + 5})

Everything done inside the ``with`` block is committed together, or
discarded together if an exception escapes.

Filters are plain dicts. A bare column name means equality; a suffix selects
another comparison: ``__in``, ``__gte``, ``__gt``, ``__lte``, ``__lt`` and
``__icontains``. Order is a column name or a list of them, ``-`` prefix for
descending.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from retail_pos.common.exceptions import StoreError
from retail_pos.models.catalog import generate_custom_id

Row = Dict[str, Any]
Filters = Mapping[str, Any]
Order = Union[str, Sequence[str], None]

ID_PREFIXES = {
    "products": "PRD",
    "variants": "VAR",
    "customers": "CUS",
    "suppliers": "SUP",
    "sales_orders": "SO",
    "sales_items": "SOI",
    "purchase_orders": "PO",
    "purchase_items": "POI",
    "expenses": "EXP",
}

TABLES = tuple(ID_PREFIXES)

# Tables that carry an updated_at column
TOUCHED_TABLES = ("products",)

FILTER_OPERATORS = ("eq", "in", "gte", "gt", "lte", "lt", "icontains")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def check_table(table: str) -> None:
    if table not in ID_PREFIXES:
        raise StoreError(f"Unknown table: {table}")


def split_filter_key(key: str) -> Tuple[str, str]:
    """'created_at__gte' -> ('created_at', 'gte'); 'id' -> ('id', 'eq')."""
    column, sep, op = key.partition("__")
    if not sep:
        return key, "eq"
    if op not in FILTER_OPERATORS:
        raise StoreError(f"Unsupported filter operator: {op}")
    return column, op


def parse_order(order: Order) -> List[Tuple[str, bool]]:
    """Return [(column, descending), ...]."""
    if not order:
        return []
    keys = [order] if isinstance(order, str) else list(order)
    return [(key[1:], True) if key.startswith("-") else (key, False) for key in keys]


def prepare_row(table: str, row: Mapping[str, Any]) -> Row:
    """Fill the id and timestamps a new row needs."""
    prepared = dict(row)
    if not prepared.get("id"):
        prepared["id"] = generate_custom_id(ID_PREFIXES[table])
    now = utcnow()
    prepared.setdefault("created_at", now)
    if table in TOUCHED_TABLES:
        prepared.setdefault("updated_at", now)
    return prepared


def prepare_patch(table: str, patch: Mapping[str, Any]) -> Row:
    prepared = dict(patch)
    prepared.pop("id", None)
    if table in TOUCHED_TABLES:
        prepared.setdefault("updated_at", utcnow())
    return prepared


class UnitOfWork(ABC):
    """Table operations bound to one transaction."""

    @abstractmethod
    def select(self, table: str, filters: Optional[Filters] = None, order: Order = None) -> List[Row]:
        ...

    @abstractmethod
    def insert(self, table: str, rows: Iterable[Mapping[str, Any]]) -> List[Row]:
        """Insert rows and return them as stored, ids included, in input order."""

    @abstractmethod
    def update(self, table: str, filters: Filters, patch: Mapping[str, Any]) -> int:
        """Apply patch to matching rows; returns the number of rows touched."""

    @abstractmethod
    def delete(self, table: str, filters: Filters) -> int:
        ...

    def select_one(self, table: str, filters: Filters) -> Optional[Row]:
        rows = self.select(table, filters)
        return rows[0] if rows else None


class DataStore(ABC):
    """Factory of units of work."""

    backend = "abstract"

    @abstractmethod
    def transaction(self) -> AbstractContextManager[UnitOfWork]:
        ...

    def init_schema(self) -> None:
        """Create whatever the backend needs before first use."""

    def dispose(self) -> None:
        """Release connections or other resources."""
