# schema.py
"""
Expected database layout and a comparison against a live SQLite database.

SCHEMA mirrors what the migrations in data/migrations produce. It is not used
to create tables; the migrations remain the source of truth for DDL.
"""
import sqlite3
from typing import Any, Dict, List

from reworkit.db.infra.sql_utils import quote_ident

SCHEMA = {
    "migrations": {
        "columns": {
            "id": {"type": "TEXT", "notnull": False, "pk": True},
            "applied_at": {"type": "TEXT", "notnull": True},
        },
    },

    "build_result": {
        "columns": {
            "name": {"type": "TEXT", "notnull": True},
            "arch": {"type": "TEXT", "notnull": True},
            "success": {"type": "BOOLEAN", "notnull": True},
            "log": {"type": "TEXT", "notnull": True},
        },
        "constraints": {
            # at most one result per package and architecture
            "unique": [("name", "arch")],
        },
    },
}


def table_names(conn: sqlite3.Connection) -> List[str]:
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
    ).fetchall()
    return [r[0] for r in rows]


def describe_table(conn: sqlite3.Connection, table: str) -> Dict[str, Any]:
    """
    Describe a live table:

    {
        "columns": { colname: {"type": str, "notnull": bool, "pk": bool}, ... },
        "unique": [ (col, ...), ... ],
    }

    Unique groups come from PRAGMA index_list, which reports both explicit
    UNIQUE indexes and the autoindexes backing inline UNIQUE constraints.
    """
    columns: Dict[str, Dict[str, Any]] = {}
    # PRAGMA table_info returns: cid, name, type, notnull, dflt_value, pk
    for c in conn.execute(f"PRAGMA table_info({quote_ident(table)})").fetchall():
        columns[c[1]] = {
            "type": (c[2] or "").upper(),
            "notnull": bool(c[3]),
            "pk": bool(c[5]),
        }

    unique: List[tuple] = []
    # PRAGMA index_list returns: seq, name, unique, origin, partial
    for idx in conn.execute(f"PRAGMA index_list({quote_ident(table)})").fetchall():
        if not idx[2]:
            continue
        # PRAGMA index_info returns: seqno, cid, name
        cols = conn.execute(f"PRAGMA index_info({quote_ident(idx[1])})").fetchall()
        unique.append(tuple(col[2] for col in sorted(cols, key=lambda r: r[0])))

    return {"columns": columns, "unique": unique}


def schema_problems(conn: sqlite3.Connection, schema: Dict[str, Any] = SCHEMA) -> List[str]:
    """
    Compare the live database against `schema`. Returns one message per
    difference; an empty list means every expected table, column, NOT NULL
    flag and unique group is present.
    """
    problems: List[str] = []
    existing = set(table_names(conn))

    for table, table_def in schema.items():
        if table not in existing:
            problems.append(f"missing table {table}")
            continue

        live = describe_table(conn, table)
        for col, expected in table_def["columns"].items():
            actual = live["columns"].get(col)
            if actual is None:
                problems.append(f"{table}: missing column {col}")
                continue
            if actual["type"] != expected["type"]:
                problems.append(
                    f"{table}.{col}: type {actual['type'] or '<none>'}, expected {expected['type']}"
                )
            if expected.get("notnull") and not actual["notnull"]:
                problems.append(f"{table}.{col}: expected NOT NULL")

        for group in table_def.get("constraints", {}).get("unique", []):
            if tuple(group) not in live["unique"]:
                problems.append(f"{table}: missing UNIQUE ({', '.join(group)})")

    return problems
