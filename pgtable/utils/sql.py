"""
pgtable/utils/sql.py
--------------------
Helpers for the SQL text pgtable generates.

Statements use PostgreSQL-style positional placeholders ``$1 ... $n``.
Placeholders are located with a small scanner that skips single-quoted
string literals (including ``E'...'`` escape strings) and double-quoted
identifiers, so ``'$1'`` inside a condition fragment is left alone. Dollar-quoted bodies (``$tag$...$tag$``)
are not recognised; do not put ``$n`` sequences inside them.
"""

import re
from typing import Any, Callable, Optional, Sequence, Union

from pgtable.utils.naming import to_snake

_TOKEN_RE = re.compile(
    r"(?P<literal>(?<![A-Za-z0-9_])[Ee]'(?:[^'\\]|\\.|'')*'|'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\")"
    r"|\$(?P<index>\d+)"
    r"|(?P<percent>%)"
)
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _scan(sql: str, on_placeholder: Callable[[int], str], escape_percent: bool) -> str:
    def _sub(match: re.Match) -> str:
        if match.group("literal") is not None:
            literal = match.group("literal")
            return literal.replace("%", "%%") if escape_percent else literal
        if match.group("percent") is not None:
            return "%%" if escape_percent else "%"
        return on_placeholder(int(match.group("index")))

    return _TOKEN_RE.sub(_sub, sql)


def renumber_placeholders(fragment: str, offset: int) -> str:
    """
    Shift every ``$k`` placeholder in ``fragment`` to ``$(k + offset)``.

    Args:
        fragment: A condition fragment such as ``"id = $1 AND kind = $2"``.
        offset: Number of placeholders already used before the fragment.

    Returns:
        The renumbered fragment.
    """
    if offset == 0:
        return fragment
    return _scan(fragment, lambda index: f"${index + offset}", escape_percent=False)


def to_pyformat(sql: str, params: Optional[Sequence[Any]]) -> tuple[str, Optional[dict]]:
    """
    Translate ``$n`` placeholders into psycopg2's ``%(pN)s`` form.

    Literal ``%`` characters are doubled when parameters are passed, as
    psycopg2 requires. Without parameters the SQL is returned untouched.

    Raises:
        IndexError: If a placeholder has no matching parameter.
    """
    if not params:
        return sql, None

    values = list(params)
    args: dict = {}

    def _placeholder(index: int) -> str:
        if index < 1 or index > len(values):
            raise IndexError(f"Placeholder ${index} has no matching parameter ({len(values)} given)")
        key = f"p{index}"
        args[key] = values[index - 1]
        return f"%({key})s"

    return _scan(sql, _placeholder, escape_percent=True), args


def column_list(fields: Union[str, Sequence[str]] = "*", camel_case: bool = False) -> str:
    """
    Normalise a field list into ``"a, b, c"``.

    Accepts a comma-separated string or a sequence of names. Plain
    identifiers are converted to snake_case when ``camel_case`` is set;
    ``*`` and expressions pass through as written.
    """
    parts = fields.split(",") if isinstance(fields, str) else list(fields)
    cols = [part.strip() for part in parts if part and part.strip()]
    if camel_case:
        cols = [to_snake(col) if _IDENTIFIER_RE.match(col) else col for col in cols]
    return ", ".join(cols) or "*"


def placeholders(count: int, start: int = 1) -> str:
    """``placeholders(3)`` -> ``"$1, $2, $3"``."""
    return ", ".join(f"${n}" for n in range(start, start + count))
