"""Relational storage access for the text trees.

This module provides the Database class, a thin layer over a SQLAlchemy engine
used by the tree nodes to:

- load single rows or row sets as plain dicts
- update one column of one row
- read column metadata (used to compute storable lengths)
- widen a string column (using alembic batch operations, which recreate the
  table on SQLite and issue ALTER statements elsewhere)

Storage errors never propagate past this layer: reads degrade to None or an
empty list, writes report False. Callers turn these into node error codes.
"""

from __future__ import annotations

import logging
from typing import Any

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import MetaData, String, Table, create_engine, inspect, select, text
from sqlalchemy import update as sql_update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from .utils.core_utils import format_exception

logger = logging.getLogger(__name__)


class Database (object):
    """Row-level access to the relational store.

    Attributes:
        engine: SQLAlchemy engine.
        id_names: Mapping of table name to primary key column name, for tables
            whose key is not "id".

    Example:
        >>> db = Database("sqlite:///moodle.db")
        >>> db.get("course", 5)["fullname"]
        'Intro to CS'
    """

    def __init__(self, engine: Engine | str, id_names: dict[str, str] | None = None):
        if isinstance(engine, str):
            engine = create_engine(engine, future=True)
        self.engine = engine
        self.id_names = dict(id_names or {})
        self.metadata = MetaData()
        self._tables: dict[str, Table] = {}

    def id_name(self, table: str) -> str:
        return self.id_names.get(table, "id")

    def table(self, name: str) -> Table:
        """Reflected table object, loaded once until forgotten."""
        t = self._tables.get(name)
        if t is None:
            t = Table(name, self.metadata, autoload_with=self.engine)
            self._tables[name] = t
        return t

    def forget(self, name: str) -> None:
        """Drop the reflected definition of a table (after its schema changed)."""
        t = self._tables.pop(name, None)
        if t is not None:
            self.metadata.remove(t)

    def get(self, table: str, value: Any, name: str | None = None) -> dict | None:
        """First row of `table` where column `name` (default: the id column) equals `value`."""
        if name is None:
            name = self.id_name(table)
        try:
            t = self.table(table)
            stmt = select(t).where(t.c[name] == value).limit(1)
            with self.engine.connect() as conn:
                row = conn.execute(stmt).mappings().first()
        except (SQLAlchemyError, KeyError) as e:
            logger.debug("Unable to load %s where %s=%r: %s", table, name, value, format_exception(e))
            return None
        return dict(row) if row is not None else None

    def get_all(self, table: str, value: Any = None, name: str | None = None) -> list[dict]:
        """All rows of `table` (where column `name` equals `value` when a value is given), in id order."""
        if name is None:
            name = self.id_name(table)
        try:
            t = self.table(table)
            stmt = select(t)
            if value is not None:
                stmt = stmt.where(t.c[name] == value)
            id_name = self.id_name(table)
            if id_name in t.c:
                stmt = stmt.order_by(t.c[id_name])
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except (SQLAlchemyError, KeyError) as e:
            logger.debug("Unable to load rows of %s where %s=%r: %s", table, name, value, format_exception(e))
            return []
        return [dict(row) for row in rows]

    def load_one(self, sql: str, params: dict | None = None) -> dict | None:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(text(sql), params or {}).mappings().first()
        except SQLAlchemyError as e:
            logger.debug("Query failed: %s", format_exception(e))
            return None
        return dict(row) if row is not None else None

    def load_multiple(self, sql: str, params: dict | None = None) -> list[dict]:
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(text(sql), params or {}).mappings().all()
        except SQLAlchemyError as e:
            logger.debug("Query failed: %s", format_exception(e))
            return []
        return [dict(row) for row in rows]

    def update(self, table: str, row_id: Any, column: str, value: Any) -> bool:
        """Set one column of one row. Returns False if the row could not be written."""
        try:
            t = self.table(table)
            stmt = sql_update(t).where(t.c[self.id_name(table)] == row_id).values({column: value})
            with self.engine.begin() as conn:
                result = conn.execute(stmt)
        except (SQLAlchemyError, KeyError) as e:
            logger.warning("Unable to update %s.%s for id %s: %s", table, column, row_id, format_exception(e))
            return False
        if result.rowcount == 0:
            logger.warning("Unable to update %s.%s: no row with id %s", table, column, row_id)
            return False
        return True

    def get_columns(self, table: str) -> dict[str, dict] | None:
        """Live column metadata of `table` keyed by column name, None if the table does not exist."""
        try:
            columns = inspect(self.engine).get_columns(table)
        except NoSuchTableError:
            return None
        except SQLAlchemyError as e:
            logger.warning("Unable to inspect table %s: %s", table, format_exception(e))
            return None
        if not columns:
            return None
        return {c["name"]: c for c in columns}

    def alter_column_length(self, table: str, column: str, length: int) -> bool:
        """Change `table`.`column` to a string column of maximum `length` characters."""
        columns = self.get_columns(table)
        if not columns or column not in columns:
            return False
        existing = columns[column]
        try:
            with self.engine.begin() as conn:
                op = Operations(MigrationContext.configure(conn))
                # batch mode recreates the table where ALTER COLUMN is not supported (SQLite)
                with op.batch_alter_table(table) as batch_op:
                    batch_op.alter_column(column,
                                          type_=String(length),
                                          existing_type=existing["type"],
                                          existing_nullable=existing.get("nullable", True))
        except SQLAlchemyError as e:
            logger.warning("Unable to change the size of %s.%s to %d: %s", table, column, length, format_exception(e))
            return False
        finally:
            self.forget(table)
        return True
