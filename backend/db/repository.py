"""Narrow row-level storage interface shared by every service.

Rows are plain dicts. A ``where`` mapping matches columns by equality, except
that a list/tuple/set value means "column IN values". A ``gte`` mapping adds
inclusive lower bounds.
"""
import copy
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import async_sessionmaker

from db.base import Base
from utils.db import safe_commit

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

_MULTI = (list, tuple, set, frozenset)


class Repository:
    async def insert_row(self, table: str, values: Row) -> Row:
        raise NotImplementedError

    async def update_rows(self, table: str, where: Row, values: Row) -> int:
        raise NotImplementedError

    async def select_rows(
        self,
        table: str,
        where: Optional[Row] = None,
        gte: Optional[Row] = None,
        order_by: Optional[str] = None,
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> List[Row]:
        raise NotImplementedError

    async def delete_rows(self, table: str, where: Row) -> int:
        raise NotImplementedError


class SQLRepository(Repository):
    """Repository over the SQLAlchemy tables registered on ``Base.metadata``."""

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    @staticmethod
    def _table(name: str):
        try:
            return Base.metadata.tables[name]
        except KeyError:
            raise ValueError(f"Unknown table: {name}")

    @staticmethod
    def _conditions(table, where: Optional[Row], gte: Optional[Row] = None):
        conditions = []
        for column, value in (where or {}).items():
            if isinstance(value, _MULTI):
                conditions.append(table.c[column].in_(list(value)))
            else:
                conditions.append(table.c[column] == value)
        for column, bound in (gte or {}).items():
            conditions.append(table.c[column] >= bound)
        return conditions

    async def insert_row(self, table: str, values: Row) -> Row:
        tbl = self._table(table)
        async with self._session_factory() as session:
            await session.execute(insert(tbl).values(**values))
            await safe_commit(session, client_error_message=f"Could not store {table} row")
        return dict(values)

    async def update_rows(self, table: str, where: Row, values: Row) -> int:
        tbl = self._table(table)
        stmt = update(tbl).where(*self._conditions(tbl, where)).values(**values)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await safe_commit(session, client_error_message=f"Could not update {table} rows")
            return int(result.rowcount or 0)

    async def select_rows(self, table, where=None, gte=None, order_by=None, descending=True, limit=None):
        tbl = self._table(table)
        stmt = select(tbl).where(*self._conditions(tbl, where, gte))
        if order_by:
            column = tbl.c[order_by]
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [dict(row._mapping) for row in result]

    async def delete_rows(self, table: str, where: Row) -> int:
        tbl = self._table(table)
        stmt = delete(tbl).where(*self._conditions(tbl, where))
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await safe_commit(session, client_error_message=f"Could not delete {table} rows")
            return int(result.rowcount or 0)


class MongoRepository(Repository):
    """One collection per table; the Mongo ``_id`` never leaves this class."""

    def __init__(self, database):
        self._db = database

    @staticmethod
    def _filter(where: Optional[Row], gte: Optional[Row] = None) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        for column, value in (where or {}).items():
            query[column] = {"$in": list(value)} if isinstance(value, _MULTI) else value
        for column, bound in (gte or {}).items():
            clause = query.get(column)
            if isinstance(clause, dict):
                clause["$gte"] = bound
            elif column in query:
                query[column] = {"$eq": clause, "$gte": bound}
            else:
                query[column] = {"$gte": bound}
        return query

    async def insert_row(self, table: str, values: Row) -> Row:
        # insert_one adds _id to the document it is given
        await self._db[table].insert_one(dict(values))
        return dict(values)

    async def update_rows(self, table: str, where: Row, values: Row) -> int:
        result = await self._db[table].update_many(self._filter(where), {"$set": dict(values)})
        return int(result.matched_count)

    async def select_rows(self, table, where=None, gte=None, order_by=None, descending=True, limit=None):
        cursor = self._db[table].find(self._filter(where, gte), {"_id": 0})
        if order_by:
            cursor = cursor.sort(order_by, -1 if descending else 1)
        if limit is not None:
            cursor = cursor.limit(limit)
        return await cursor.to_list(length=limit)

    async def delete_rows(self, table: str, where: Row) -> int:
        result = await self._db[table].delete_many(self._filter(where))
        return int(result.deleted_count)


class InMemoryRepository(Repository):
    """Process-local tables, used by the test-suite and for quick local runs."""

    def __init__(self, tables: Optional[Dict[str, List[Row]]] = None):
        self.tables: Dict[str, List[Row]] = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}

    def _rows(self, table: str) -> List[Row]:
        return self.tables.setdefault(table, [])

    @staticmethod
    def _matches(row: Row, where: Optional[Row], gte: Optional[Row] = None) -> bool:
        for column, value in (where or {}).items():
            if isinstance(value, _MULTI):
                if row.get(column) not in value:
                    return False
            elif row.get(column) != value:
                return False
        for column, bound in (gte or {}).items():
            current = row.get(column)
            if current is None or current < bound:
                return False
        return True

    async def insert_row(self, table: str, values: Row) -> Row:
        self._rows(table).append(copy.deepcopy(values))
        return dict(values)

    async def update_rows(self, table: str, where: Row, values: Row) -> int:
        count = 0
        for row in self._rows(table):
            if self._matches(row, where):
                row.update(values)
                count += 1
        return count

    async def select_rows(self, table, where=None, gte=None, order_by=None, descending=True, limit=None):
        rows = [copy.deepcopy(r) for r in self._rows(table) if self._matches(r, where, gte)]
        if order_by:
            rows.sort(key=lambda r: (r.get(order_by) is not None, r.get(order_by)), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    async def delete_rows(self, table: str, where: Row) -> int:
        rows = self._rows(table)
        keep = [r for r in rows if not self._matches(r, where)]
        removed = len(rows) - len(keep)
        self.tables[table] = keep
        return removed
