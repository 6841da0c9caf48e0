"""
pgtable/errors.py
-----------------
Exceptions raised by pgtable.

Driver failures are never wrapped: ``DatabaseError`` is psycopg2's own
base error class, so callers can catch it or any of its subclasses
(``IntegrityError``, ``OperationalError``, ...) directly.
"""

from psycopg2 import Error as DatabaseError


class InvalidConditionError(Exception):
    """A conditional insert/upsert matched more than one existing row."""


class TransactionClosedError(RuntimeError):
    """Commit or rollback was called on a transaction that already finished."""


__all__ = ["DatabaseError", "InvalidConditionError", "TransactionClosedError"]
