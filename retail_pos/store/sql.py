from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List, Mapping, Optional

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from retail_pos import models  # noqa: F401  (registers tables on Base.metadata)
from retail_pos.common.exceptions import StoreError
from retail_pos.core.database import Base, make_engine, make_session_factory
from retail_pos.logger_config import logger
from retail_pos.store.base import (
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


def _table(name: str) -> Table:
    check_table(name)
    return Base.metadata.tables[name]


def _column(table: Table, name: str):
    try:
        return table.c[name]
    except KeyError:
        raise StoreError(f"Unknown column {table.name}.{name}")


def _criteria(table: Table, filters: Optional[Filters]) -> list:
    clauses = []
    for key, expected in (filters or {}).items():
        column_name, op = split_filter_key(key)
        column = _column(table, column_name)
        if op == "eq":
            clauses.append(column.is_(None) if expected is None else column == expected)
        elif op == "in":
            clauses.append(column.in_(list(expected)))
        elif op == "gte":
            clauses.append(column >= expected)
        elif op == "gt":
            clauses.append(column > expected)
        elif op == "lte":
            clauses.append(column <= expected)
        elif op == "lt":
            clauses.append(column < expected)
        elif op == "icontains":
            clauses.append(column.ilike(f"%{expected}%"))
    return clauses


def _ordering(table: Table, order: Order) -> list:
    return [
        _column(table, name).desc() if descending else _column(table, name).asc()
        for name, descending in parse_order(order)
    ]


class SqlUnitOfWork(UnitOfWork):
    def __init__(self, session: Session):
        self.session = session

    def select(self, table: str, filters: Optional[Filters] = None, order: Order = None) -> List[Row]:
        t = _table(table)
        stmt = select(t).where(*_criteria(t, filters)).order_by(*_ordering(t, order))
        try:
            return [dict(row) for row in self.session.execute(stmt).mappings().all()]
        except SQLAlchemyError as e:
            logger.error(f"Select on {table} failed: {str(e)}")
            raise StoreError(f"Failed to read {table}") from e

    def insert(self, table: str, rows: Iterable[Mapping[str, Any]]) -> List[Row]:
        t = _table(table)
        prepared = [prepare_row(table, row) for row in rows]
        for row in prepared:
            for name in row:
                _column(t, name)
        if not prepared:
            return []
        try:
            for row in prepared:
                self.session.execute(insert(t).values(**row))
            # Re-read so column defaults and type coercion match later selects
            stored = {
                row["id"]: dict(row)
                for row in self.session.execute(
                    select(t).where(t.c.id.in_([r["id"] for r in prepared]))
                ).mappings().all()
            }
        except IntegrityError as e:
            logger.error(f"Integrity error inserting into {table}: {str(e)}")
            raise StoreError(f"Failed to insert into {table} due to a database constraint") from e
        except SQLAlchemyError as e:
            logger.error(f"Insert into {table} failed: {str(e)}")
            raise StoreError(f"Failed to insert into {table}") from e
        return [stored[row["id"]] for row in prepared]

    def update(self, table: str, filters: Filters, patch: Mapping[str, Any]) -> int:
        t = _table(table)
        changes = prepare_patch(table, patch)
        for name in changes:
            _column(t, name)
        try:
            result = self.session.execute(update(t).where(*_criteria(t, filters)).values(**changes))
        except SQLAlchemyError as e:
            logger.error(f"Update on {table} failed: {str(e)}")
            raise StoreError(f"Failed to update {table}") from e
        return result.rowcount

    def delete(self, table: str, filters: Filters) -> int:
        t = _table(table)
        try:
            result = self.session.execute(delete(t).where(*_criteria(t, filters)))
        except IntegrityError as e:
            logger.error(f"Integrity error deleting from {table}: {str(e)}")
            raise StoreError(f"Failed to delete from {table}; other records still reference it") from e
        except SQLAlchemyError as e:
            logger.error(f"Delete on {table} failed: {str(e)}")
            raise StoreError(f"Failed to delete from {table}") from e
        return result.rowcount


class SqlStore(DataStore):
    """Store backed by a SQLAlchemy engine; one session per unit of work."""

    backend = "sql"

    def __init__(self, database_url: str, echo: bool = False):
        self.engine = make_engine(database_url, echo=echo)
        self.session_factory = make_session_factory(self.engine)

    def init_schema(self) -> None:
        Base.metadata.create_all(bind=self.engine)
        logger.info(f"Schema ready on {self.engine.url.render_as_string(hide_password=True)}")

    def dispose(self) -> None:
        self.engine.dispose()

    @contextmanager
    def transaction(self) -> Iterator[SqlUnitOfWork]:
        session = self.session_factory()
        try:
            yield SqlUnitOfWork(session)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Transaction failed on commit: {str(e)}")
            raise StoreError("Failed to commit transaction") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
