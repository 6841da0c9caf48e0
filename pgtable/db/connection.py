"""
pgtable/db/connection.py
------------------------
Manages the PostgreSQL connection pool.
Uses psycopg2's ThreadedConnectionPool so one pool can be shared by
every thread of the host application.
"""

from typing import Any, Optional, Sequence

import psycopg2
from psycopg2 import extras, pool

from pgtable.config import ClientOptions
from pgtable.models.query import QueryResult
from pgtable.utils.logger import get_logger
from pgtable.utils.sql import to_pyformat

logger = get_logger(__name__)

# Errors after which a pooled connection can no longer be trusted
CONNECTION_ERRORS = (pool.PoolError, psycopg2.OperationalError, psycopg2.InterfaceError)


def run_statement(conn, sql: str, params: Optional[Sequence[Any]] = None) -> QueryResult:
    """
    Execute one statement on an already acquired connection.

    Args:
        conn: A psycopg2 connection.
        sql: Statement using ``$n`` placeholders.
        params: Positional parameters for the placeholders.

    Returns:
        A QueryResult with dict rows.
    """
    statement, args = to_pyformat(sql, params)
    with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
        cur.execute(statement, args)
        rows = [dict(r) for r in cur.fetchall()] if cur.description is not None else []
        command = cur.statusmessage.split()[0] if cur.statusmessage else None
        return QueryResult(command=command, row_count=cur.rowcount, rows=rows)


class ConnectionPool:
    """
    A handle around one psycopg2 pool.

    Connections are switched to autocommit when handed out, so a
    transaction exists only between explicit BEGIN and COMMIT/ROLLBACK
    statements.
    """

    def __init__(self, options: ClientOptions):
        self._on_error = options.on_connection_error
        try:
            self._pool = pool.ThreadedConnectionPool(
                options.min_connections,
                options.max_connections,
                **options.dsn_kwargs(),
            )
            logger.info(
                f"Connection pool initialized for {options.host}:{options.port}/{options.database}"
            )
        except psycopg2.OperationalError as e:
            self._on_error(e)
            raise

    @property
    def closed(self) -> bool:
        return self._pool.closed

    def getconn(self):
        """
        Get a connection from the pool.

        Raises:
            psycopg2.pool.PoolError: If the pool is exhausted or closed.
        """
        try:
            conn = self._pool.getconn()
        except CONNECTION_ERRORS as e:
            self._on_error(e)
            raise
        conn.autocommit = True
        return conn

    def putconn(self, conn, close: bool = False) -> None:
        """
        Return a connection back to the pool.

        Args:
            conn: The psycopg2 connection to release.
            close: Discard the connection instead of keeping it for reuse.
        """
        if self._pool.closed:
            return
        self._pool.putconn(conn, close=close or bool(conn.closed))

    def query(self, sql: str, params: Optional[Sequence[Any]] = None) -> QueryResult:
        """Run a single statement on a pooled connection outside any transaction."""
        conn = self.getconn()
        broken = False
        try:
            return run_statement(conn, sql, params)
        except CONNECTION_ERRORS as e:
            broken = True
            self._on_error(e)
            raise
        finally:
            self.putconn(conn, close=broken)

    def closeall(self) -> None:
        """Close all connections in the pool."""
        if self._pool.closed:
            return
        self._pool.closeall()
        logger.info("Database connection pool closed.")
