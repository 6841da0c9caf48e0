"""
pgtable/utils/naming.py
-----------------------
camelCase <-> snake_case conversion for column names and result rows.
"""

import re

_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def to_snake(name: str) -> str:
    """'createdAt' -> 'created_at'. Names already in snake_case are unchanged."""
    return _CAMEL_BOUNDARY_RE.sub("_", name).lower()


def to_camel(name: str) -> str:
    """'created_at' -> 'createdAt'. Leading underscores are kept."""
    stripped = name.lstrip("_")
    prefix = name[: len(name) - len(stripped)]
    head, *rest = stripped.split("_")
    return prefix + head + "".join(part[:1].upper() + part[1:] for part in rest)


def camelize_keys(row: dict) -> dict:
    return {to_camel(key): value for key, value in row.items()}
