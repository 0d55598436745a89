# tests/migrations/test_apply_migrations.py
import sqlite3

import pytest

from reworkit.config import MIGRATIONS_PATH
from reworkit.db.infra.core import get_conn, init_db
from reworkit.db.infra.migrations import (
    applied_migrations,
    apply_migrations,
    pending_migrations,
)

CREATE_TABLE_MIGRATION = "20241229054713_create-table.sql"


def _build_result_tables(conn) -> list:
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name = 'build_result'"
    ).fetchall()
    return [r[0] for r in rows]


def test_fresh_db_gets_build_result_table(tmp_path):
    db_file = tmp_path / "fresh.db"
    conn = sqlite3.connect(str(db_file))
    try:
        applied = apply_migrations(conn, MIGRATIONS_PATH)

        assert CREATE_TABLE_MIGRATION in applied
        assert _build_result_tables(conn) == ["build_result"]

        ids = [m["id"] for m in applied_migrations(conn)]
        assert CREATE_TABLE_MIGRATION in ids
    finally:
        conn.close()


def test_applying_twice_is_a_noop(tmp_path):
    db_file = tmp_path / "twice.db"

    first = init_db(db_file)
    second = init_db(db_file)

    assert CREATE_TABLE_MIGRATION in first
    assert second == []

    with get_conn(db_file) as conn:
        assert _build_result_tables(conn) == ["build_result"]
        assert pending_migrations(conn, MIGRATIONS_PATH) == []
        # still exactly one history row per migration
        count = conn.execute(
            "SELECT COUNT(*) FROM migrations WHERE id = ?", (CREATE_TABLE_MIGRATION,)
        ).fetchone()[0]
        assert count == 1


def test_create_table_sql_is_idempotent_without_history(tmp_path):
    """Re-running the DDL itself (e.g. after the history table was lost) must not fail."""
    sql = (MIGRATIONS_PATH / CREATE_TABLE_MIGRATION).read_text(encoding="utf-8")
    conn = sqlite3.connect(str(tmp_path / "raw.db"))
    try:
        conn.executescript(sql)
        conn.executescript(sql)
        assert _build_result_tables(conn) == ["build_result"]
    finally:
        conn.close()


def test_migrations_run_in_filename_order_and_only_once(tmp_path):
    mig_dir = tmp_path / "migrations"
    mig_dir.mkdir()
    (mig_dir / "002_second.sql").write_text(
        "INSERT INTO steps (label) VALUES ('second');", encoding="utf-8"
    )
    (mig_dir / "001_first.sql").write_text(
        "CREATE TABLE steps (label TEXT NOT NULL);\n"
        "INSERT INTO steps (label) VALUES ('first');",
        encoding="utf-8",
    )
    (mig_dir / "notes.txt").write_text("not a migration", encoding="utf-8")

    db_file = tmp_path / "ordered.db"
    with get_conn(db_file) as conn:
        assert apply_migrations(conn, mig_dir) == ["001_first.sql", "002_second.sql"]

    (mig_dir / "003_third.sql").write_text(
        "INSERT INTO steps (label) VALUES ('third');", encoding="utf-8"
    )

    with get_conn(db_file) as conn:
        assert pending_migrations(conn, mig_dir) == ["003_third.sql"]
        assert apply_migrations(conn, mig_dir) == ["003_third.sql"]
        labels = [r[0] for r in conn.execute("SELECT label FROM steps ORDER BY rowid")]

    assert labels == ["first", "second", "third"]


def test_failing_migration_is_not_recorded(tmp_path):
    mig_dir = tmp_path / "migrations"
    mig_dir.mkdir()
    (mig_dir / "001_broken.sql").write_text("CREATE TABLE (;", encoding="utf-8")

    db_file = tmp_path / "broken.db"
    with pytest.raises(sqlite3.OperationalError):
        init_db(db_file, mig_dir)

    with get_conn(db_file) as conn:
        assert pending_migrations(conn, mig_dir) == ["001_broken.sql"]


def test_listing_history_does_not_create_it(tmp_path):
    conn = sqlite3.connect(str(tmp_path / "untouched.db"))
    try:
        assert applied_migrations(conn) == []
        assert pending_migrations(conn, MIGRATIONS_PATH) == [CREATE_TABLE_MIGRATION]
        tables = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        assert tables == []
    finally:
        conn.close()
