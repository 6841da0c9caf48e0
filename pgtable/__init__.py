"""
pgtable
=======
Parameterized CRUD helpers, transactions and audited writes on top of
psycopg2.
"""

from pgtable.client import Database, connect
from pgtable.config import ClientOptions
from pgtable.db.transaction import Transaction
from pgtable.errors import DatabaseError, InvalidConditionError, TransactionClosedError
from pgtable.models.query import QueryOptions, QueryResult, QueryStats
from pgtable.repositories.table import AuditedTable, Table
from pgtable.utils.logger import query_logger

__version__ = "1.0.0"

__all__ = [
    "AuditedTable",
    "ClientOptions",
    "Database",
    "DatabaseError",
    "InvalidConditionError",
    "QueryOptions",
    "QueryResult",
    "QueryStats",
    "Table",
    "Transaction",
    "TransactionClosedError",
    "connect",
    "query_logger",
]
