import logging
import os
from datetime import datetime, UTC

logger = logging.getLogger(__name__)

MIGRATIONS_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS migrations (
        id TEXT PRIMARY KEY,
        applied_at TEXT NOT NULL
    )
"""


def _migration_files(migrations_dir) -> list[str]:
    return sorted(
        fname for fname in os.listdir(migrations_dir) if fname.endswith(".sql")
    )


def _ensure_migrations_table(conn) -> None:
    conn.execute(MIGRATIONS_TABLE_SQL)


def applied_migrations(conn) -> list[dict]:
    """Return the recorded migrations in the order they were applied."""
    exists = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'migrations'"
    ).fetchone()
    if not exists:
        return []
    rows = conn.execute(
        "SELECT id, applied_at FROM migrations ORDER BY applied_at, id"
    ).fetchall()
    return [{"id": row[0], "applied_at": row[1]} for row in rows]


def pending_migrations(conn, migrations_dir) -> list[str]:
    """Return migration ids found on disk that have not been applied yet."""
    applied = {m["id"] for m in applied_migrations(conn)}
    return [fname for fname in _migration_files(migrations_dir) if fname not in applied]


def apply_migrations(conn, migrations_dir) -> list[str]:
    """
    Apply SQL migrations exactly once, in filename order.

    The migration id is the file name. Each applied id is recorded in the
    `migrations` table together with a UTC timestamp, so running this again
    against the same database is a no-op.

    Returns the ids applied by this call.
    """

    # Ensure migrations table exists before reading history
    _ensure_migrations_table(conn)

    newly_applied: list[str] = []

    for migration_id in pending_migrations(conn, migrations_dir):
        path = os.path.join(migrations_dir, migration_id)
        with open(path, "r", encoding="utf-8") as f:
            sql = f.read()

        logger.info("Applying migration %s", migration_id)
        conn.executescript(sql)

        conn.execute(
            "INSERT INTO migrations (id, applied_at) VALUES (?, ?)",
            (migration_id, datetime.now(UTC).isoformat()),
        )

        conn.commit()
        newly_applied.append(migration_id)

    if not newly_applied:
        logger.debug("No pending migrations in %s", migrations_dir)

    return newly_applied
