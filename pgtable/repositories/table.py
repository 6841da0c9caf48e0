"""
pgtable/repositories/table.py
-----------------------------
Data access helpers bound to a single table.

Conditions are raw SQL fragments with ``$1 ... $k`` placeholders plus a
matching parameter list, e.g. ``find("*", "price > $1", [10])``.

Write helpers (insert, update, delete) return the affected row when
exactly one row was affected, otherwise the list of returned rows.
"""

from typing import Any, Optional, Sequence, Union

from pgtable.db.executor import QueryExecutor
from pgtable.errors import InvalidConditionError
from pgtable.models.query import QueryOptions, QueryResult
from pgtable.utils.logger import get_logger
from pgtable.utils.naming import to_snake
from pgtable.utils.sql import column_list, placeholders, renumber_placeholders

logger = get_logger(__name__)

Fields = Union[str, Sequence[str]]
Row = dict
WriteResult = Union[Row, list[Row]]


def _single_or_rows(result: QueryResult) -> WriteResult:
    return result.rows[0] if len(result.rows) == 1 else result.rows


class Table:
    """CRUD helpers generating SQL for one table."""

    def __init__(self, executor: QueryExecutor, name: str, camel_case: bool = False):
        self.executor = executor
        self.name = name
        self.camel_case = camel_case

    def audited(self, audit_user_id: Any) -> "AuditedTable":
        """Return a view of this table whose writes are attributed to ``audit_user_id``."""
        return AuditedTable(self, audit_user_id)

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, id: Any, fields: Fields = "*", options: Optional[QueryOptions] = None) -> Optional[Row]:
        """Fetch one row by primary key, or None."""
        result = self._query(
            f"SELECT {self._cols(fields)} FROM {self.name} WHERE id = $1 LIMIT 1",
            [id],
            options,
            f"_get_by_id_from__{self.name}",
        )
        return result.first

    def get_all(self, fields: Fields = "*", suffix: str = "", options: Optional[QueryOptions] = None) -> list[Row]:
        """
        Fetch every row.

        Args:
            fields: Columns to select.
            suffix: Trailing SQL such as ``"ORDER BY name"``.
            options: Per-call QueryOptions.
        """
        result = self._query(
            self._join(f"SELECT {self._cols(fields)} FROM {self.name}", suffix),
            [],
            options,
            f"_get_all_from__{self.name}",
        )
        return result.rows

    def first_row(self, fields: Fields = "*", order_by: str = "", options: Optional[QueryOptions] = None) -> Optional[Row]:
        order = f"ORDER BY {order_by}" if order_by else ""
        result = self._query(
            self._join(f"SELECT {self._cols(fields)} FROM {self.name}", order, "LIMIT 1"),
            [],
            options,
            f"_first_row_from__{self.name}",
        )
        return result.first

    def find(
        self,
        fields: Fields = "*",
        where: str = "TRUE",
        params: Optional[Sequence[Any]] = None,
        suffix: str = "",
        options: Optional[QueryOptions] = None,
    ) -> list[Row]:
        """
        Fetch all rows matching a condition.

        Args:
            fields: Columns to select.
            where: Condition fragment with ``$n`` placeholders.
            params: Values for the placeholders.
            suffix: Trailing SQL (ORDER BY, LIMIT, ...).
            options: Per-call QueryOptions.

        Returns:
            Matching rows in server order.
        """
        result = self._query(
            self._join(f"SELECT {self._cols(fields)} FROM {self.name} WHERE {where}", suffix),
            params,
            options,
            f"_find_from__{self.name}",
        )
        return result.rows

    def find_one(
        self,
        fields: Fields = "*",
        where: str = "TRUE",
        params: Optional[Sequence[Any]] = None,
        options: Optional[QueryOptions] = None,
    ) -> Optional[Row]:
        result = self._query(
            f"SELECT {self._cols(fields)} FROM {self.name} WHERE {where} LIMIT 1",
            params,
            options,
            f"_find_one_from__{self.name}",
        )
        return result.first

    def count(
        self,
        where: str = "TRUE",
        params: Optional[Sequence[Any]] = None,
        suffix: str = "",
        options: Optional[QueryOptions] = None,
    ) -> int:
        result = self._query(
            self._join(f"SELECT COUNT(*) AS count FROM {self.name} WHERE {where}", suffix),
            params,
            options,
            f"_count_from__{self.name}",
        )
        return int(result.rows[0]["count"]) if result.rows else 0

    def exists(self, where: str, params: Optional[Sequence[Any]] = None, options: Optional[QueryOptions] = None) -> bool:
        result = self._query(
            f"SELECT EXISTS (SELECT 1 FROM {self.name} WHERE {where}) AS found",
            params,
            options,
            f"_exists_in__{self.name}",
        )
        return bool(result.rows and result.rows[0]["found"])

    # ── CREATE ────────────────────────────────────────────

    def insert(self, data: dict, suffix: str = "", options: Optional[QueryOptions] = None) -> WriteResult:
        """
        Insert one row.

        Placeholders are numbered ``$1 ... $n`` in the payload's key order.

        Args:
            data: Column -> value mapping.
            suffix: SQL placed before RETURNING, e.g. ``"ON CONFLICT DO NOTHING"``.
            options: Per-call QueryOptions.

        Returns:
            The inserted row, or the (possibly empty) list of returned rows.

        Raises:
            ValueError: If ``data`` is empty.
        """
        return self._insert(data, suffix, options, f"_insert_into__{self.name}")

    def insert_if_not_exists(
        self,
        data: dict,
        where: str,
        params: Optional[Sequence[Any]] = None,
        options: Optional[QueryOptions] = None,
    ) -> WriteResult:
        """
        Insert ``data`` unless a row matching ``where`` already exists.

        Returns:
            The existing row, or the newly inserted one.

        Raises:
            InvalidConditionError: If more than one row matches ``where``.
        """
        alias = f"_insert_ifne_into__{self.name}"
        existing = self.find("*", where, params, options=self._options(options, alias))

        if len(existing) == 1:
            return existing[0]
        if len(existing) > 1:
            logger.warning(f"insert_if_not_exists on {self.name}: {len(existing)} rows match '{where}'")
            raise InvalidConditionError(
                f"Invalid condition for insert_if_not_exists on {self.name}, multiple rows found."
            )
        return self._insert(data, "", options, alias)

    # ── UPDATE ────────────────────────────────────────────

    def update(
        self,
        data: dict,
        where: str,
        params: Optional[Sequence[Any]] = None,
        options: Optional[QueryOptions] = None,
    ) -> WriteResult:
        """
        Update rows matching ``where``.

        An ``id`` key in ``data`` is ignored; primary keys are not updatable
        here. SET placeholders take ``$1 ... $n`` and the condition's own
        placeholders are shifted to continue from ``$n+1``.

        Returns:
            The updated row, or the (possibly empty) list of updated rows.

        Raises:
            ValueError: If nothing is left to set.
        """
        return self._update(data, where, params, options, f"_update__{self.name}")

    def upsert(
        self,
        data: dict,
        where: str,
        params: Optional[Sequence[Any]] = None,
        options: Optional[QueryOptions] = None,
    ) -> WriteResult:
        """
        Update the row matching ``where``, or insert ``data`` if none does.

        Raises:
            InvalidConditionError: If more than one row matches ``where``.
        """
        alias = f"_upsert_into__{self.name}"
        existing = self.find("*", where, params, options=self._options(options, alias))

        if len(existing) == 1:
            return self._update(data, where, params, options, alias)
        if len(existing) > 1:
            logger.warning(f"upsert on {self.name}: {len(existing)} rows match '{where}'")
            raise InvalidConditionError(
                f"Invalid condition for upsert on {self.name}, multiple rows found."
            )
        return self._insert(data, "", options, alias)

    # ── DELETE ────────────────────────────────────────────

    def delete(self, where: str, params: Optional[Sequence[Any]] = None, options: Optional[QueryOptions] = None) -> WriteResult:
        """Delete rows matching ``where``; returns the deleted row or rows."""
        result = self._query(
            f"DELETE FROM {self.name} WHERE {where} RETURNING *",
            params,
            options,
            f"_delete_from__{self.name}",
        )
        return _single_or_rows(result)

    # ── HELPERS ───────────────────────────────────────────

    def _insert(self, data: dict, suffix: str, options: Optional[QueryOptions], alias: str) -> WriteResult:
        if not data:
            raise ValueError(f"Nothing to insert into {self.name}")
        cols = [self._col(key) for key in data]
        sql = self._join(
            f"INSERT INTO {self.name} ({', '.join(cols)}) VALUES ({placeholders(len(cols))})",
            suffix,
            "RETURNING *",
        )
        result = self._query(sql, list(data.values()), options, alias)
        return _single_or_rows(result)

    def _update(
        self,
        data: dict,
        where: str,
        params: Optional[Sequence[Any]],
        options: Optional[QueryOptions],
        alias: str,
    ) -> WriteResult:
        values = {key: value for key, value in data.items() if key != "id"}
        if not values:
            raise ValueError(f"Nothing to update in {self.name}")
        statements = [f"{self._col(key)} = ${n}" for n, key in enumerate(values, start=1)]
        condition = renumber_placeholders(where, len(statements))
        sql = f"UPDATE {self.name} SET {', '.join(statements)} WHERE {condition} RETURNING *"
        result = self._query(sql, list(values.values()) + list(params or []), options, alias)
        return _single_or_rows(result)

    def _query(self, sql: str, params: Optional[Sequence[Any]], options: Optional[QueryOptions], alias: str) -> QueryResult:
        return self.executor.execute(sql, params or [], self._options(options, alias))

    @staticmethod
    def _options(options: Optional[QueryOptions], alias: str) -> QueryOptions:
        return (options or QueryOptions()).merged(alias=alias)

    def _cols(self, fields: Fields) -> str:
        return column_list(fields, self.camel_case)

    def _col(self, name: str) -> str:
        return to_snake(name) if self.camel_case else name

    @staticmethod
    def _join(*parts: str) -> str:
        return " ".join(part for part in parts if part)


class AuditedTable:
    """
    A Table view whose writes run with an audit user id.

    Reads are forwarded unchanged. An audit id passed explicitly in
    ``options`` takes precedence.
    """

    def __init__(self, table: Table, audit_user_id: Any):
        self.table = table
        self.audit_user_id = audit_user_id

    def _audit(self, options: Optional[QueryOptions]) -> QueryOptions:
        return (options or QueryOptions()).merged(audit_user_id=self.audit_user_id)

    def insert(self, data: dict, suffix: str = "", options: Optional[QueryOptions] = None) -> WriteResult:
        return self.table.insert(data, suffix, options=self._audit(options))

    def insert_if_not_exists(self, data: dict, where: str, params: Optional[Sequence[Any]] = None,
                             options: Optional[QueryOptions] = None) -> WriteResult:
        return self.table.insert_if_not_exists(data, where, params, options=self._audit(options))

    def update(self, data: dict, where: str, params: Optional[Sequence[Any]] = None,
               options: Optional[QueryOptions] = None) -> WriteResult:
        return self.table.update(data, where, params, options=self._audit(options))

    def upsert(self, data: dict, where: str, params: Optional[Sequence[Any]] = None,
               options: Optional[QueryOptions] = None) -> WriteResult:
        return self.table.upsert(data, where, params, options=self._audit(options))

    def delete(self, where: str, params: Optional[Sequence[Any]] = None,
               options: Optional[QueryOptions] = None) -> WriteResult:
        return self.table.delete(where, params, options=self._audit(options))

    def __getattr__(self, name: str):
        return getattr(self.table, name)
