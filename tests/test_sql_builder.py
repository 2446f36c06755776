"""
Tests for identifier quoting, editability and generated SQL.
"""
import pytest
from bi_editor.errors import InvalidIdentifier
from bi_editor.util.sql_builder import (
    build_select,
    build_update,
    editable_columns,
    is_bi_col,
    quote_ident,
)


@pytest.mark.parametrize("name", ["items", "bi_price", "Col_1", "123", "_", "ABC_def_09"])
def test_quote_ident_accepts_safe_names(name):
    assert quote_ident(name) == f'"{name}"'


@pytest.mark.parametrize("name", ["", "bad name", "a-b", "x;DROP TABLE t", 'q"uote', "ñandu", "a.b", "tab\t", "name\n"])
def test_quote_ident_rejects_unsafe_names(name):
    with pytest.raises(InvalidIdentifier):
        quote_ident(name)


def test_invalid_identifier_is_value_error():
    with pytest.raises(ValueError, match="Invalid identifier: a b"):
        quote_ident("a b")


@pytest.mark.parametrize("column,expected", [
    ("bi_price", True),
    ("BI_PRICE", True),
    ("cambio", True),
    ("Bicycle", True),
    ("price", False),
    ("b_i", False),
    ("", False),
])
def test_is_bi_col(column, expected):
    assert is_bi_col(column) is expected


def test_editable_columns_excludes_pk_and_keeps_order():
    columns = ["bi_id", "name", "bi_z", "bi_a"]
    assert editable_columns(columns, ["bi_id"]) == ["bi_z", "bi_a"]


def test_build_select():
    query = build_select("items", 200)
    assert query == {"sql": 'SELECT * FROM "items" LIMIT 200', "params": []}


@pytest.mark.parametrize("limit", [0, -1, "10", True])
def test_build_select_rejects_bad_limit(limit):
    with pytest.raises(ValueError):
        build_select("items", limit)


def test_build_update_single_pk():
    query = build_update("items", {"bi_price": 20}, ["id"], {"id": 1})
    assert query["sql"] == 'UPDATE "items" SET "bi_price"=? WHERE "id"=?'
    assert query["params"] == [20, 1]


def test_build_update_composite_pk_param_order():
    query = build_update(
        "stock",
        {"bi_a": "x", "bi_b": 2},
        ["material", "center"],
        {"center": "C1", "material": "M1"},
    )
    assert query["sql"] == (
        'UPDATE "stock" SET "bi_a"=?, "bi_b"=? WHERE "material"=? AND "center"=?'
    )
    assert query["params"] == ["x", 2, "M1", "C1"]


def test_build_update_requires_columns():
    with pytest.raises(ValueError):
        build_update("items", {}, ["id"], {"id": 1})


def test_build_update_rejects_bad_column():
    with pytest.raises(InvalidIdentifier):
        build_update("items", {"bi price": 1}, ["id"], {"id": 1})
