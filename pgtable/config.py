"""
pgtable/config.py
-----------------
Central configuration module. Loads connection settings from the
environment (and an optional .env file) and exposes them as a typed
ClientOptions object.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from dotenv import load_dotenv

load_dotenv()

# ── Defaults ──────────────────────────────────────────────
DEFAULT_HOST: str = "localhost"
DEFAULT_PORT: int = 5432
DEFAULT_MIN_CONNECTIONS: int = 1
DEFAULT_MAX_CONNECTIONS: int = 10

# Consumed by database-side audit triggers
DEFAULT_AUDIT_SQL: str = "SELECT session_set_user_id($1)"

_TRUTHY = {"1", "true", "yes", "on"}


def _noop_logging_fn(sql: str, params: Any, stats: Any) -> None:
    return None


def _default_connection_error(error: Exception) -> None:
    from pgtable.utils.logger import get_logger
    get_logger("pgtable.pool").error(f"Unrecoverable connection pool error: {error}")


@dataclass
class ClientOptions:
    """
    Settings for a Database handle.

    Attributes:
        user: Database role.
        password: Role password.
        host: Server host name.
        port: Server port.
        database: Database name.
        sslmode: libpq sslmode (e.g. 'require'); None keeps the driver default.
        min_connections: Connections opened when the pool is created.
        max_connections: Upper bound of pooled connections.
        logging_fn: Called as ``logging_fn(sql, params, stats)`` after every query.
        on_connection_error: Called with the raw error when the pool fails.
        camel_case: Convert column names camelCase <-> snake_case.
        audit_sql: Statement setting the audit user id for the session.
    """
    user: Optional[str] = None
    password: Optional[str] = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    database: Optional[str] = None
    sslmode: Optional[str] = None
    min_connections: int = DEFAULT_MIN_CONNECTIONS
    max_connections: int = DEFAULT_MAX_CONNECTIONS
    logging_fn: Callable[..., Any] = field(default=_noop_logging_fn, repr=False)
    on_connection_error: Callable[[Exception], Any] = field(
        default=_default_connection_error, repr=False
    )
    camel_case: bool = False
    audit_sql: str = DEFAULT_AUDIT_SQL

    def __post_init__(self):
        if self.logging_fn is None:
            self.logging_fn = _noop_logging_fn
        if self.on_connection_error is None:
            self.on_connection_error = _default_connection_error
        if not callable(self.logging_fn):
            raise TypeError("logging_fn must be callable")
        if not callable(self.on_connection_error):
            raise TypeError("on_connection_error must be callable")
        if self.port <= 0:
            raise ValueError(f"Invalid port: {self.port}")
        if self.min_connections < 0 or self.max_connections <= 0:
            raise ValueError("Pool sizes must be positive")
        if self.min_connections > self.max_connections:
            raise ValueError(
                f"min_connections ({self.min_connections}) exceeds "
                f"max_connections ({self.max_connections})"
            )

    @classmethod
    def from_env(cls, **overrides) -> "ClientOptions":
        """
        Build options from environment variables.

        Reads DB_HOST, DB_PORT, DB_NAME, DB_USER, DB_PASS, DB_SSLMODE,
        DB_POOL_MIN, DB_POOL_MAX and DB_CAMEL_CASE. Keyword arguments
        take precedence over the environment.
        """
        values = {
            "host": os.getenv("DB_HOST", DEFAULT_HOST),
            "port": int(os.getenv("DB_PORT", str(DEFAULT_PORT))),
            "database": os.getenv("DB_NAME"),
            "user": os.getenv("DB_USER"),
            "password": os.getenv("DB_PASS"),
            "sslmode": os.getenv("DB_SSLMODE") or None,
            "min_connections": int(os.getenv("DB_POOL_MIN", str(DEFAULT_MIN_CONNECTIONS))),
            "max_connections": int(os.getenv("DB_POOL_MAX", str(DEFAULT_MAX_CONNECTIONS))),
            "camel_case": os.getenv("DB_CAMEL_CASE", "").strip().lower() in _TRUTHY,
        }
        values.update(overrides)
        return cls(**values)

    def dsn_kwargs(self) -> dict:
        """Keyword arguments for the psycopg2 connection pool."""
        kwargs = {
            "user": self.user,
            "password": self.password,
            "host": self.host,
            "port": self.port,
            "dbname": self.database,
        }
        if self.sslmode:
            kwargs["sslmode"] = self.sslmode
        return {k: v for k, v in kwargs.items() if v is not None}
