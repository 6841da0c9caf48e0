"""
pgtable/db/transaction.py
-------------------------
Explicit transactions on a dedicated pooled connection.

A Transaction moves through ``created -> active -> committed | rolled_back``.
Whatever happens, the connection goes back to the pool exactly once.
"""

from typing import Any, Optional, Sequence

from pgtable.config import DEFAULT_AUDIT_SQL
from pgtable.db.connection import ConnectionPool, run_statement
from pgtable.errors import TransactionClosedError
from pgtable.models.query import QueryResult
from pgtable.utils.logger import get_logger

logger = get_logger(__name__)

CREATED = "created"
ACTIVE = "active"
COMMITTED = "committed"
ROLLED_BACK = "rolled_back"


class Transaction:
    """
    One logical unit of work.

    Use ``Transaction.begin`` (or ``Database.transaction``) to obtain an
    active transaction, then call exactly one of ``commit`` / ``rollback``.
    As a context manager it commits on success and rolls back on error.
    """

    def __init__(self, pool: ConnectionPool, connection):
        self._pool = pool
        self.connection = connection
        self.state = CREATED

    @classmethod
    def begin(
        cls,
        pool: ConnectionPool,
        audit_user_id: Optional[Any] = None,
        audit_sql: str = DEFAULT_AUDIT_SQL,
    ) -> "Transaction":
        """
        Acquire a connection and open a transaction on it.

        Args:
            pool: Pool to take the connection from.
            audit_user_id: When given, set as the session's audit user.
            audit_sql: Statement used to set the audit user id.

        Returns:
            An active Transaction.
        """
        tx = cls(pool, pool.getconn())
        try:
            run_statement(tx.connection, "BEGIN")
            tx.state = ACTIVE
            if audit_user_id is not None:
                run_statement(tx.connection, audit_sql, [audit_user_id])
        except BaseException as e:
            logger.error(f"Failed to open transaction: {e}")
            if tx.state == ACTIVE:
                tx.rollback()
            else:
                pool.putconn(tx.connection, close=True)
            raise
        return tx

    @property
    def active(self) -> bool:
        return self.state == ACTIVE

    def query(self, sql: str, params: Optional[Sequence[Any]] = None) -> QueryResult:
        """Run a statement inside this transaction."""
        self._ensure_active("query")
        return run_statement(self.connection, sql, params)

    def commit(self) -> None:
        self._finish("COMMIT", COMMITTED)

    def rollback(self) -> None:
        self._finish("ROLLBACK", ROLLED_BACK)
        logger.warning("Transaction rolled back.")

    # ── HELPERS ───────────────────────────────────────────

    def _ensure_active(self, action: str) -> None:
        if self.state != ACTIVE:
            raise TransactionClosedError(f"Cannot {action}: transaction is {self.state}")

    def _finish(self, statement: str, final_state: str) -> None:
        self._ensure_active(statement.lower())
        failed = True
        try:
            run_statement(self.connection, statement)
            failed = False
        finally:
            self.state = final_state
            self._pool.putconn(self.connection, close=failed)

    def __enter__(self) -> "Transaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.active:
            return
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
