"""
SQL text helper and naming tests.
"""

import pytest

from pgtable.utils.naming import camelize_keys, to_camel, to_snake
from pgtable.utils.sql import column_list, placeholders, renumber_placeholders, to_pyformat


class TestRenumber:

    def test_shifts_by_offset(self):
        assert renumber_placeholders("a = $1 AND b = $2", 3) == "a = $4 AND b = $5"

    def test_multi_digit(self):
        assert renumber_placeholders("a = $10 OR b = $1", 9) == "a = $19 OR b = $10"

    def test_repeated_placeholder_keeps_identity(self):
        assert renumber_placeholders("a = $1 OR b = $1", 2) == "a = $3 OR b = $3"

    def test_skips_literals_and_quoted_identifiers(self):
        fragment = "note = 'costs $1, it''s $2' AND \"col$1\" = $1"
        assert renumber_placeholders(fragment, 5) == (
            "note = 'costs $1, it''s $2' AND \"col$1\" = $6"
        )

    def test_skips_escape_string_literals(self):
        fragment = "note = E'it\\'s $1' AND id = $1"
        assert renumber_placeholders(fragment, 1) == "note = E'it\\'s $1' AND id = $2"

    def test_zero_offset_is_identity(self):
        assert renumber_placeholders("a = $1", 0) == "a = $1"


class TestPyformat:

    def test_no_params_passthrough(self):
        assert to_pyformat("SELECT '100%'", None) == ("SELECT '100%'", None)
        assert to_pyformat("BEGIN", []) == ("BEGIN", None)

    def test_converts_and_escapes(self):
        sql, args = to_pyformat("SELECT $2, $1 WHERE x LIKE 'a%' AND y % 2 = 0", ["one", "two"])

        assert sql == "SELECT %(p2)s, %(p1)s WHERE x LIKE 'a%%' AND y %% 2 = 0"
        assert args == {"p1": "one", "p2": "two"}

    def test_missing_parameter(self):
        with pytest.raises(IndexError):
            to_pyformat("SELECT $3", [1, 2])

    def test_escape_string_literal_untouched(self):
        sql, args = to_pyformat("SELECT E'it\\'s $1 at 5%', $1", [7])

        assert sql == "SELECT E'it\\'s $1 at 5%%', %(p1)s"
        assert args == {"p1": 7}

    def test_literal_dollar_untouched(self):
        sql, args = to_pyformat("SELECT '$1' , $1", [7])

        assert sql == "SELECT '$1' , %(p1)s"
        assert args == {"p1": 7}


class TestColumns:

    def test_column_list(self):
        assert column_list(" id,name ,price ") == "id, name, price"
        assert column_list(["id", "name"]) == "id, name"
        assert column_list("") == "*"
        assert column_list("*", camel_case=True) == "*"

    def test_column_list_camel_case(self):
        assert column_list("userId, createdAt, lower(name)", camel_case=True) == (
            "user_id, created_at, lower(name)"
        )

    def test_placeholders(self):
        assert placeholders(3) == "$1, $2, $3"
        assert placeholders(2, start=4) == "$4, $5"


@pytest.mark.parametrize("camel, snake", [
    ("id", "id"),
    ("userId", "user_id"),
    ("createdAt", "created_at"),
    ("HTTPStatus", "http_status"),
    ("address2Line", "address2_line"),
])
def test_to_snake(camel, snake):
    assert to_snake(camel) == snake


def test_to_camel():
    assert to_camel("created_at") == "createdAt"
    assert to_camel("id") == "id"
    assert to_camel("_private_field") == "_privateField"
    assert camelize_keys({"first_name": "Ada", "id": 1}) == {"firstName": "Ada", "id": 1}
