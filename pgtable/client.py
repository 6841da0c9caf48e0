"""
pgtable/client.py
-----------------
Entry point of the library.

A Database owns one connection pool. Tables obtained from it share that
pool through its QueryExecutor; there is no module-level global state.

    db = connect(ClientOptions(user="app", database="shop"))
    products = db.table("products")
    products.insert({"name": "a", "price": 1})
    products.audited(user_id).update({"price": 2}, "id = $1", [product_id])
    db.disconnect()
"""

from typing import Any, Optional, Sequence

from pgtable.config import ClientOptions
from pgtable.db.connection import ConnectionPool
from pgtable.db.executor import QueryExecutor
from pgtable.db.transaction import Transaction
from pgtable.models.query import QueryOptions, QueryResult
from pgtable.repositories.table import Table
from pgtable.utils.logger import get_logger

logger = get_logger(__name__)


class Database:
    """Handle bundling a connection pool with the query helpers built on it."""

    def __init__(self, options: ClientOptions):
        self.options = options
        self.pool = ConnectionPool(options)
        self.executor = QueryExecutor(self.pool, options)

    def query(
        self,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        options: Optional[QueryOptions] = None,
    ) -> QueryResult:
        """Run arbitrary SQL with ``$n`` placeholders."""
        return self.executor.execute(sql, params, options)

    def audited_query(
        self,
        audit_user_id: Any,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        options: Optional[QueryOptions] = None,
    ) -> QueryResult:
        """Run arbitrary SQL attributed to ``audit_user_id``."""
        opts = (options or QueryOptions()).merged(audit_user_id=audit_user_id)
        return self.executor.execute(sql, params, opts)

    def transaction(self, audit_user_id: Optional[Any] = None) -> Transaction:
        """
        Open a transaction on a dedicated connection.

        Pass the returned Transaction as ``QueryOptions(client=tx)`` to run
        statements inside it, or use it as a context manager.
        """
        return self.executor.transaction(audit_user_id)

    def table(self, name: str) -> Table:
        return Table(self.executor, name, camel_case=self.options.camel_case)

    def disconnect(self) -> None:
        self.pool.closeall()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()


def connect(options: Optional[ClientOptions] = None, **overrides) -> Database:
    """
    Create a Database handle.

    Args:
        options: Explicit settings; read from the environment when omitted.
        **overrides: Field overrides applied on top of the environment.

    Returns:
        A connected Database.
    """
    if options is None:
        options = ClientOptions.from_env(**overrides)
    elif overrides:
        raise TypeError("Pass either ClientOptions or keyword overrides, not both")
    return Database(options)
