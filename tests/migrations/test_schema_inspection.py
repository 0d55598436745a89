# tests/migrations/test_schema_inspection.py
import sqlite3

import pytest

from reworkit.db.infra.core import get_conn, init_db
from reworkit.db.infra.schema import SCHEMA, describe_table, schema_problems
from reworkit.db.infra.sql_utils import quote_ident


def test_migrated_db_matches_schema(tmp_path):
    db_file = tmp_path / "schema.db"
    init_db(db_file)

    with get_conn(db_file) as conn:
        assert schema_problems(conn) == []

        table = describe_table(conn, "build_result")
        assert set(table["columns"]) == {"name", "arch", "success", "log"}
        assert all(col["notnull"] for col in table["columns"].values())
        assert table["columns"]["success"]["type"] == "BOOLEAN"
        assert ("name", "arch") in table["unique"]


def test_schema_problems_reports_missing_table(tmp_path):
    conn = sqlite3.connect(str(tmp_path / "empty.db"))
    try:
        problems = schema_problems(conn)
    finally:
        conn.close()

    assert "missing table build_result" in problems
    assert "missing table migrations" in problems


def test_schema_problems_reports_weakened_build_result(tmp_path):
    conn = sqlite3.connect(str(tmp_path / "weak.db"))
    try:
        conn.execute("CREATE TABLE migrations (id TEXT PRIMARY KEY, applied_at TEXT NOT NULL)")
        # log nullable, no unique constraint, success missing
        conn.execute("CREATE TABLE build_result (name TEXT NOT NULL, arch TEXT NOT NULL, log TEXT)")
        problems = schema_problems(conn)
    finally:
        conn.close()

    assert "build_result: missing column success" in problems
    assert "build_result.log: expected NOT NULL" in problems
    assert "build_result: missing UNIQUE (name, arch)" in problems
    assert len(problems) == 3
    assert SCHEMA["build_result"]["constraints"]["unique"] == [("name", "arch")]


def test_quote_ident_escapes_and_validates():
    assert quote_ident("build_result") == '"build_result"'
    assert quote_ident('we"ird') == '"we""ird"'
    with pytest.raises(ValueError):
        quote_ident("")
    with pytest.raises(ValueError):
        quote_ident("bad\nname")
    with pytest.raises(TypeError):
        quote_ident(42)
