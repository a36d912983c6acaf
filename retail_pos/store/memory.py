import copy
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from retail_pos import models  # noqa: F401  (registers tables on Base.metadata)
from retail_pos.common.exceptions import StoreError
from retail_pos.core.database import Base
from retail_pos.logger_config import logger
from retail_pos.store.base import (
    TABLES,
    DataStore,
    Filters,
    Order,
    Row,
    UnitOfWork,
    check_table,
    parse_order,
    prepare_patch,
    prepare_row,
    split_filter_key,
)


def _matches(row: Mapping[str, Any], filters: Optional[Filters]) -> bool:
    if not filters:
        return True
    for key, expected in filters.items():
        column, op = split_filter_key(key)
        value = row.get(column)
        if op == "eq":
            if value != expected:
                return False
        elif op == "in":
            if value not in expected:
                return False
        elif op == "icontains":
            if value is None or str(expected).lower() not in str(value).lower():
                return False
        else:
            # Range comparisons never match a missing value
            if value is None:
                return False
            if op == "gte" and not value >= expected:
                return False
            if op == "gt" and not value > expected:
                return False
            if op == "lte" and not value <= expected:
                return False
            if op == "lt" and not value < expected:
                return False
    return True


def _check_columns(table: str, names: Iterable[str]) -> None:
    columns = Base.metadata.tables[table].c
    for name in names:
        if name not in columns:
            raise StoreError(f"Unknown column {table}.{name}")


def _filter_columns(filters: Optional[Filters]) -> List[str]:
    return [split_filter_key(key)[0] for key in filters or {}]


def _sorted(rows: List[Row], order: Order) -> List[Row]:
    keys = parse_order(order)
    # Rows tied on every key follow the leading key's direction in insertion order
    if keys and keys[0][1]:
        rows.reverse()
    # Stable sorts applied from the last key to the first; None sorts first
    for column, descending in reversed(keys):
        rows.sort(
            key=lambda r: (r.get(column) is not None, r.get(column)),
            reverse=descending,
        )
    return rows


class MemoryUnitOfWork(UnitOfWork):
    def __init__(self, tables: Dict[str, List[Row]]):
        self._tables = tables

    def _rows(self, table: str) -> List[Row]:
        check_table(table)
        return self._tables[table]

    def select(self, table: str, filters: Optional[Filters] = None, order: Order = None) -> List[Row]:
        rows = self._rows(table)
        _check_columns(table, _filter_columns(filters) + [column for column, _ in parse_order(order)])
        found = [dict(row) for row in rows if _matches(row, filters)]
        return _sorted(found, order)

    def insert(self, table: str, rows: Iterable[Mapping[str, Any]]) -> List[Row]:
        stored = self._rows(table)
        existing_ids = {row["id"] for row in stored}
        inserted = []
        for row in rows:
            prepared = prepare_row(table, row)
            _check_columns(table, prepared)
            if prepared["id"] in existing_ids:
                raise StoreError(f"Duplicate id {prepared['id']} in {table}")
            existing_ids.add(prepared["id"])
            stored.append(prepared)
            inserted.append(dict(prepared))
        return inserted

    def update(self, table: str, filters: Filters, patch: Mapping[str, Any]) -> int:
        changes = prepare_patch(table, patch)
        rows = self._rows(table)
        _check_columns(table, _filter_columns(filters) + list(changes))
        count = 0
        for row in rows:
            if _matches(row, filters):
                row.update(changes)
                count += 1
        return count

    def delete(self, table: str, filters: Filters) -> int:
        stored = self._rows(table)
        _check_columns(table, _filter_columns(filters))
        kept = [row for row in stored if not _matches(row, filters)]
        removed = len(stored) - len(kept)
        stored[:] = kept
        return removed


class MemoryStore(DataStore):
    """
    In-process store.

    Units of work are serialised by a re-entrant lock, and a snapshot taken
    on entry is restored if the block raises, so a failed order leaves no
    trace.
    """

    backend = "memory"

    def __init__(self):
        self._tables: Dict[str, List[Row]] = {name: [] for name in TABLES}
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator[MemoryUnitOfWork]:
        with self._lock:
            snapshot = copy.deepcopy(self._tables)
            try:
                yield MemoryUnitOfWork(self._tables)
            except Exception:
                for name, rows in snapshot.items():
                    self._tables[name][:] = rows
                logger.debug("Memory store transaction rolled back")
                raise
