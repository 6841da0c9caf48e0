"""
pgtable/db/executor.py
----------------------
Runs every statement issued through pgtable: measures it, routes audited
writes through a short transaction, reports it to the logging callback
and optionally camelizes result rows.
"""

import time
from typing import Any, Optional, Sequence

from pgtable.config import ClientOptions
from pgtable.db.connection import ConnectionPool, run_statement
from pgtable.db.transaction import Transaction
from pgtable.models.query import QueryOptions, QueryResult, QueryStats
from pgtable.utils.logger import get_logger
from pgtable.utils.naming import camelize_keys

logger = get_logger(__name__)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


class QueryExecutor:
    """Executes SQL against a ConnectionPool on behalf of a Database handle."""

    def __init__(self, pool: ConnectionPool, options: ClientOptions):
        self.pool = pool
        self.options = options

    def transaction(self, audit_user_id: Optional[Any] = None) -> Transaction:
        return Transaction.begin(self.pool, audit_user_id, self.options.audit_sql)

    def execute(
        self,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        options: Optional[QueryOptions] = None,
    ) -> QueryResult:
        """
        Execute ``sql`` and return its result.

        With ``options.audit_user_id`` and no ``options.client``, the
        statement runs in its own transaction after the audit user id is
        set for the session. Driver errors are logged as failed and then
        propagated unchanged.

        Args:
            sql: Statement using ``$n`` placeholders.
            params: Positional parameters.
            options: Per-call QueryOptions.

        Returns:
            QueryResult of the statement.
        """
        opts = options or QueryOptions()
        params = list(params) if params is not None else []
        start = time.perf_counter()

        if opts.audit_user_id is not None and opts.client is None:
            result = self._execute_audited(sql, params, opts, start)
        else:
            try:
                result = self._execute_direct(sql, params, opts.client)
            except Exception:
                self._report(sql, params, opts, None, _elapsed_ms(start), failed=True)
                raise

        self._report(sql, params, opts, result, _elapsed_ms(start))

        if self.options.camel_case:
            result.rows = [camelize_keys(row) for row in result.rows]
        return result

    # ── HELPERS ───────────────────────────────────────────

    def _execute_audited(self, sql: str, params: list, opts: QueryOptions, start: float) -> QueryResult:
        # Failures are reported before the rollback is issued
        try:
            tx = self.transaction(opts.audit_user_id)
        except BaseException:
            self._report(sql, params, opts, None, _elapsed_ms(start), failed=True)
            raise
        try:
            result = tx.query(sql, params)
            tx.commit()
        except BaseException:
            self._report(sql, params, opts, None, _elapsed_ms(start), failed=True)
            if tx.active:
                tx.rollback()
            raise
        return result

    def _execute_direct(self, sql: str, params: list, client: Any) -> QueryResult:
        if client is None:
            return self.pool.query(sql, params)
        if isinstance(client, Transaction):
            return client.query(sql, params)
        return run_statement(client, sql, params)

    def _report(
        self,
        sql: str,
        params: list,
        opts: QueryOptions,
        result: Optional[QueryResult],
        took: float,
        failed: bool = False,
    ) -> None:
        stats = QueryStats(
            command=result.command if result else None,
            took=took,
            rows=result.row_count if result else None,
            alias=opts.alias.replace('"', "") if opts.alias else None,
            audit=opts.audit_user_id,
            failed=failed,
        )
        try:
            self.options.logging_fn(sql, params, stats)
        except Exception:
            logger.exception(f"logging_fn raised while reporting query '{stats.alias or sql}'")
