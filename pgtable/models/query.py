"""
pgtable/models/query.py
-----------------------
Value objects passed to and returned from query execution.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Iterator, Optional


@dataclass(frozen=True)
class QueryOptions:
    """
    Per-call options.

    Attributes:
        audit_user_id: Attribute the write to this user via the audit session variable.
        alias: Label attached to the query for log aggregation.
        client: A psycopg2 connection or Transaction to run on instead of the pool.
    """
    audit_user_id: Optional[Any] = None
    alias: Optional[str] = None
    client: Optional[Any] = None

    def merged(self, **defaults) -> "QueryOptions":
        """Return a copy where unset fields are filled from ``defaults``."""
        missing = {k: v for k, v in defaults.items() if getattr(self, k) is None}
        return replace(self, **missing) if missing else self


@dataclass
class QueryResult:
    """
    Outcome of a single statement.

    Attributes:
        command: Status command reported by the server (SELECT, INSERT, ...).
        row_count: Rows returned or affected; -1 when not applicable.
        rows: Returned rows as dicts, in server order.
    """
    command: Optional[str] = None
    row_count: int = -1
    rows: list[dict] = field(default_factory=list)

    @property
    def first(self) -> Optional[dict]:
        """First returned row or None."""
        return self.rows[0] if self.rows else None

    def one(self) -> dict:
        """Return the only row; raises ValueError unless exactly one row came back."""
        if len(self.rows) != 1:
            raise ValueError(f"Expected exactly one row, got {len(self.rows)}")
        return self.rows[0]

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[dict]:
        return iter(self.rows)


@dataclass(frozen=True)
class QueryStats:
    """Measurements handed to the logging callback."""
    command: Optional[str]
    took: float  # milliseconds
    rows: Optional[int]
    alias: Optional[str]
    audit: Optional[Any]
    failed: bool = False

    def as_dict(self) -> dict:
        return {
            "command": self.command,
            "took": self.took,
            "rows": self.rows,
            "alias": self.alias,
            "audit": self.audit,
            "failed": self.failed,
        }
