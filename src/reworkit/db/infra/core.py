# db/infra/core.py
import logging
import sqlite3

from contextlib import contextmanager

from reworkit.config import MIGRATIONS_PATH
from reworkit.db.infra.migrations import apply_migrations

logger = logging.getLogger(__name__)


def init_db(db_path, migrations_dir=MIGRATIONS_PATH) -> list[str]:
    """
    Initialize the database:
    - open connection
    - apply pending migrations

    Returns the ids of the migrations applied by this call.
    """
    logger.info("Initializing database at %s", db_path)
    try:
        with get_conn(db_path) as conn:
            return apply_migrations(conn, migrations_dir)
    except Exception:
        logger.exception("Database initialization failed")
        raise


# -----------------------
# Connection helper
# -----------------------

@contextmanager
def get_conn(path):
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
