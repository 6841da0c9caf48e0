"""
pgtable/utils/logger.py
-----------------------
Centralized logging configuration.
All modules should use `get_logger(__name__)` to obtain a logger instance.
"""

import logging
import sys
from typing import Any, Callable, Optional

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_PACKAGE_LOGGER = "pgtable"
_initialized = False


def _init_logging() -> None:
    """Configure the package logger once."""
    global _initialized
    if _initialized:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    package = logging.getLogger(_PACKAGE_LOGGER)
    package.setLevel(logging.INFO)
    package.addHandler(handler)
    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger instance.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        A configured logging.Logger.
    """
    _init_logging()
    return logging.getLogger(name)


def query_logger(
    logger: Optional[logging.Logger] = None, level: int = logging.DEBUG
) -> Callable[[str, Any, Any], None]:
    """
    Build a ``logging_fn`` that writes one line per executed query.

    Args:
        logger: Target logger (default: ``pgtable.query``).
        level: Level used for successful queries; failures use WARNING.

    Returns:
        A callable suitable for ``ClientOptions.logging_fn``.
    """
    target = logger or get_logger(f"{_PACKAGE_LOGGER}.query")

    def _log(sql: str, params: Any, stats: Any) -> None:
        audit = f" audit={stats.audit}" if stats.audit is not None else ""
        if stats.failed:
            target.warning(
                f"FAILED [{stats.alias or '-'}] after {stats.took:.2f}ms{audit} | {sql}"
            )
            return
        target.log(
            level,
            f"[{stats.alias or '-'}] {stats.command} rows={stats.rows} "
            f"took={stats.took:.2f}ms{audit} | {sql}",
        )

    return _log
