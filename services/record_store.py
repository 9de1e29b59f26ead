"""
services.record_store - Table-level upsert / select / delete.

The importer talks to storage only through this class so the chunked
pipeline never holds an ORM session across round-trips.  Every call opens
its own session and commits on its own: a multi-chunk run is therefore
NOT atomic, earlier chunks stay committed when a later one fails.

Upserts use the dialect-native INSERT ... ON CONFLICT DO UPDATE, so they
need a unique constraint on the conflict columns (students.student_code,
grades(student_id, course_id)).
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from sqlalchemy import Table, delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from db.engine import session_scope
from db.models import Base
from errors import StoreError

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class RecordStore:

    # ── Helpers ────────────────────────────────────────────────────────

    @staticmethod
    def _table(name: str) -> Table:
        try:
            return Base.metadata.tables[name]
        except KeyError:
            raise StoreError(f"Unknown table '{name}'") from None

    @staticmethod
    def _column(table: Table, name: str):
        if name not in table.c:
            raise StoreError(f"Unknown column '{table.name}.{name}'")
        return table.c[name]

    @classmethod
    def _where(cls, table: Table, filters: dict | None) -> list:
        """Equality for scalars, IN (...) for lists/tuples/sets."""
        clauses = []
        for col, value in (filters or {}).items():
            column = cls._column(table, col)
            if isinstance(value, (list, tuple, set, frozenset)):
                clauses.append(column.in_(list(value)))
            else:
                clauses.append(column == value)
        return clauses

    # ── Insert ─────────────────────────────────────────────────────────

    def insert(self, table_name: str, rows: list[dict]) -> int:
        """Plain append, used for the audit trail."""
        if not rows:
            return 0
        table = self._table(table_name)
        try:
            with session_scope() as session:
                session.execute(table.insert(), rows)
        except SQLAlchemyError as exc:
            raise StoreError(f"Insert into {table_name} failed: {exc}") from exc
        return len(rows)

    # ── Upsert ─────────────────────────────────────────────────────────

    def upsert(
        self,
        table_name: str,
        rows: list[dict],
        conflict_key: Iterable[str],
    ) -> int:
        """
        Insert rows, overwriting the non-key columns of rows whose
        conflict_key already exists.  Columns not present in the row
        dicts are never touched on update.  Returns len(rows).
        """
        if not rows:
            return 0
        table = self._table(table_name)
        keys = list(conflict_key)

        try:
            with session_scope() as session:
                dialect = session.get_bind().dialect.name
                insert = _INSERT_BY_DIALECT.get(dialect)
                if insert is None:
                    raise StoreError(f"Upsert not supported on dialect '{dialect}'")

                stmt = insert(table)
                update_cols = [c for c in rows[0] if c not in keys]
                if update_cols:
                    stmt = stmt.on_conflict_do_update(
                        index_elements=keys,
                        set_={c: stmt.excluded[c] for c in update_cols},
                    )
                else:
                    stmt = stmt.on_conflict_do_nothing(index_elements=keys)
                session.execute(stmt, rows)
        except (SQLAlchemyError, OverflowError, TypeError) as exc:
            # sqlite3 raises OverflowError itself for ints it cannot bind
            raise StoreError(f"Upsert into {table_name} failed: {exc}") from exc

        logger.debug("upsert %s: %d rows on %s", table_name, len(rows), keys)
        return len(rows)

    # ── Select ─────────────────────────────────────────────────────────

    def select(
        self,
        table_name: str,
        filters: dict | None = None,
        *,
        columns: Iterable[str] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        offset: int = 0,
        limit: int | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Filtered / sorted / paginated read.
        Returns (rows as dicts, total matching count before paging).
        """
        table = self._table(table_name)
        where = self._where(table, filters)
        cols = [self._column(table, c) for c in columns] if columns else [table]

        query = select(*cols).where(*where)
        if order_by:
            col = self._column(table, order_by)
            query = query.order_by(col.desc() if descending else col.asc())
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        try:
            with session_scope() as session:
                rows = [dict(r) for r in session.execute(query).mappings().all()]
                total = session.execute(
                    select(func.count()).select_from(table).where(*where)
                ).scalar_one()
        except SQLAlchemyError as exc:
            raise StoreError(f"Select from {table_name} failed: {exc}") from exc
        return rows, total

    # ── Delete ─────────────────────────────────────────────────────────

    def delete(self, table_name: str, filters: dict | None = None) -> int:
        """Delete matching rows (all rows when filters is empty)."""
        table = self._table(table_name)
        try:
            with session_scope() as session:
                result = session.execute(delete(table).where(*self._where(table, filters)))
                deleted = result.rowcount or 0
        except SQLAlchemyError as exc:
            raise StoreError(f"Delete from {table_name} failed: {exc}") from exc
        return deleted
