"""
Row store interface and the SQLAlchemy-backed implementation.

The quadrant board never talks to the database directly. It reads and writes
rows through a RowStore: a generic table client with select/insert/update/
delete. Two implementations exist: SqlAlchemyRowStore (this module) and
RestRowStore (hosted PostgREST-style service, see rest_store.py).
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError

from focusboard.core.database import AsyncSessionLocal
from focusboard.models.task import Task

logger = logging.getLogger(__name__)


class RowStoreError(Exception):
    """A row store call failed (network, database or protocol error)."""

    def __init__(self, message: str, table: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.table = table
        self.status_code = status_code


class RowNotFoundError(RowStoreError):
    """An update or delete matched no row."""


@dataclass(frozen=True)
class RowFilter:
    """A single column filter: column <op> value, op being "eq" or "neq"."""
    column: str
    op: str
    value: Any

    OPERATORS = ("eq", "neq")

    def __post_init__(self):
        if self.op not in self.OPERATORS:
            raise ValueError(f"Unsupported filter operator '{self.op}'")

    @classmethod
    def eq(cls, column: str, value: Any) -> "RowFilter":
        return cls(column, "eq", value)

    @classmethod
    def neq(cls, column: str, value: Any) -> "RowFilter":
        return cls(column, "neq", value)


class RowStore(ABC):
    """Generic async table client used by the quadrant board."""

    @abstractmethod
    async def select(self, table: str, filters: Sequence[RowFilter] = ()) -> List[Dict[str, Any]]:
        """Return all rows of `table` matching every filter."""

    @abstractmethod
    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a row and return the stored row, including its generated id."""

    @abstractmethod
    async def update(self, table: str, row_id: str, fields: Dict[str, Any]) -> None:
        """Set `fields` on the row with the given id."""

    @abstractmethod
    async def delete(self, table: str, row_id: str) -> None:
        """Delete the row with the given id."""

    async def aclose(self) -> None:
        """Release client resources."""


class SqlAlchemyRowStore(RowStore):
    """RowStore over async SQLAlchemy sessions. One session per call."""

    MODELS = {
        "tasks": Task,
    }

    def __init__(self, session_factory=AsyncSessionLocal, models: Optional[Dict[str, Any]] = None):
        self.session_factory = session_factory
        self.models = models or dict(self.MODELS)

    def _model_for(self, table: str):
        try:
            return self.models[table]
        except KeyError:
            raise RowStoreError(f"Unknown table '{table}'", table=table)

    @staticmethod
    def _where(model, row_filter: RowFilter):
        column = getattr(model, row_filter.column)
        if row_filter.op == "eq":
            return column == row_filter.value
        return column != row_filter.value

    async def select(self, table: str, filters: Sequence[RowFilter] = ()) -> List[Dict[str, Any]]:
        model = self._model_for(table)
        stmt = select(model)
        for row_filter in filters:
            stmt = stmt.where(self._where(model, row_filter))
        stmt = stmt.order_by(model.created_at.asc())

        try:
            async with self.session_factory() as db:
                result = await db.execute(stmt)
                return [obj.to_row() for obj in result.scalars().all()]
        except SQLAlchemyError as e:
            raise RowStoreError(f"select from {table} failed: {e}", table=table) from e

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        model = self._model_for(table)
        try:
            async with self.session_factory() as db:
                obj = model(**row)
                db.add(obj)
                await db.commit()
                await db.refresh(obj)
                logger.info(f"Inserted {table} row {obj.id}")
                return obj.to_row()
        except SQLAlchemyError as e:
            raise RowStoreError(f"insert into {table} failed: {e}", table=table) from e

    async def update(self, table: str, row_id: str, fields: Dict[str, Any]) -> None:
        model = self._model_for(table)
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    update(model).where(model.id == row_id).values(**fields)
                )
                await db.commit()
        except SQLAlchemyError as e:
            raise RowStoreError(f"update of {table} row {row_id} failed: {e}", table=table) from e

        if result.rowcount == 0:
            raise RowNotFoundError(f"{table} row {row_id} not found", table=table, status_code=404)
        logger.info(f"Updated {table} row {row_id}: {list(fields.keys())}")

    async def delete(self, table: str, row_id: str) -> None:
        model = self._model_for(table)
        try:
            async with self.session_factory() as db:
                result = await db.execute(delete(model).where(model.id == row_id))
                await db.commit()
        except SQLAlchemyError as e:
            raise RowStoreError(f"delete of {table} row {row_id} failed: {e}", table=table) from e

        if result.rowcount == 0:
            raise RowNotFoundError(f"{table} row {row_id} not found", table=table, status_code=404)
        logger.info(f"Deleted {table} row {row_id}")
