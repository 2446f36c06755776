"""
SQL builder utilities to generate safe SQL for the editor.
Identifiers are whitelisted and quoted; values always travel as parameters.
"""
import re
from typing import Any, Dict, Iterable, List, Sequence

from bi_editor.errors import InvalidIdentifier

identifier_re = re.compile(r'^[A-Za-z0-9_]+$')

# Marker substring for user-editable ("BI") columns
EDITABLE_MARKER = "bi"


def quote_ident(name: str) -> str:
    if not isinstance(name, str) or not identifier_re.fullmatch(name):
        raise InvalidIdentifier(str(name))
    return f'"{name}"'


def is_bi_col(column: Any) -> bool:
    return EDITABLE_MARKER in str(column).lower()


def editable_columns(columns: Iterable[str], pk_cols: Sequence[str]) -> List[str]:
    """BI columns that are not part of the primary key, in column order."""
    pk_set = set(pk_cols)
    return [c for c in columns if is_bi_col(c) and c not in pk_set]


def build_select(table: str, limit: int) -> Dict[str, Any]:
    """
    Bounded read of the whole table.

    The limit is validated as an int and inlined so the statement stays
    a plain SELECT * that every DuckDB version accepts.
    """
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise ValueError(f"limit must be a positive integer, got {limit!r}")
    return {"sql": f"SELECT * FROM {quote_ident(table)} LIMIT {limit}", "params": []}


def build_update(
    table: str,
    set_values: Dict[str, Any],
    pk_cols: Sequence[str],
    pk_values: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Keyed single-statement update:

        UPDATE "t" SET "c1"=?, "c2"=? WHERE "pk1"=? AND "pk2"=?

    Params are the SET values in key order followed by the PK values in
    pk_cols order.
    """
    set_cols = list(set_values)
    if not set_cols:
        raise ValueError("update requires at least one column to set")
    if not pk_cols:
        raise ValueError("update requires at least one primary key column")

    set_sql = ", ".join(f"{quote_ident(c)}=?" for c in set_cols)
    where_sql = " AND ".join(f"{quote_ident(pk)}=?" for pk in pk_cols)
    params = [set_values[c] for c in set_cols] + [pk_values[pk] for pk in pk_cols]

    return {
        "sql": f"UPDATE {quote_ident(table)} SET {set_sql} WHERE {where_sql}",
        "params": params,
    }
