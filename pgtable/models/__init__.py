"""
models/ - Value Objects
=======================
Plain dataclasses describing query options, results and stats.
"""

from pgtable.models.query import QueryOptions, QueryResult, QueryStats

__all__ = ["QueryOptions", "QueryResult", "QueryStats"]
