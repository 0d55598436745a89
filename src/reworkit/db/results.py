"""db/results.py

Construction modes:

- BuildResultDAO(db_path="...")
- BuildResultDAO(conn=sqlite3.Connection)

Support for atomic multi-step operations:

with build_result_dao(db_path) as dao:
    dao.upsert(BuildResult("bash", "amd64", True, "..."))
    dao.upsert(BuildResult("bash", "arm64", False, "..."))
"""
import logging
import sqlite3
from contextlib import contextmanager
from typing import List, Optional

from reworkit.db.errors import ConstraintViolation, ResultNotFound
from reworkit.db.infra.core import get_conn
from reworkit.models import BuildResult

logger = logging.getLogger(__name__)


class BuildResultDAO:
    def __init__(self, db_path: Optional[str] = None, conn=None):
        if conn is None and db_path is None:
            raise ValueError("BuildResultDAO requires either db_path or conn")

        self._db_path = db_path
        self._conn = conn

    # -----------------------
    # internal helpers
    # -----------------------

    @contextmanager
    def _connection(self):
        """
        Yield a connection.
        If DAO was constructed with a connection, reuse it.
        Otherwise, open a new one.
        """
        if self._conn is not None:
            yield self._conn
        else:
            with get_conn(self._db_path) as conn:
                yield conn

    # -----------------------
    # READ operations
    # -----------------------

    def get(self, name: str, arch: str) -> BuildResult:
        logger.debug("Loading build result %s (%s)", name, arch)
        try:
            with self._connection() as conn:
                row = conn.execute(
                    """
                    SELECT name, arch, success, log
                    FROM build_result
                    WHERE name = ? AND arch = ?
                    """,
                    (name, arch),
                ).fetchone()
        except Exception:
            logger.exception("Failed to load build result %s (%s)", name, arch)
            raise

        if row is None:
            raise ResultNotFound(name, arch)
        return BuildResult.from_row(row)

    def list_for_package(self, name: str) -> List[BuildResult]:
        logger.debug("Loading build results of package %s", name)
        try:
            with self._connection() as conn:
                rows = conn.execute(
                    """
                    SELECT name, arch, success, log
                    FROM build_result
                    WHERE name = ?
                    ORDER BY arch
                    """,
                    (name,),
                ).fetchall()
        except Exception:
            logger.exception("Failed to load build results of package %s", name)
            raise

        return [BuildResult.from_row(row) for row in rows]

    def list(
        self,
        arch: Optional[str] = None,
        success: Optional[bool] = None,
    ) -> List[BuildResult]:
        clauses = []
        params: list = []
        if arch is not None:
            clauses.append("arch = ?")
            params.append(arch)
        if success is not None:
            clauses.append("success = ?")
            params.append(1 if success else 0)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        logger.debug("Loading build results (arch=%s, success=%s)", arch, success)
        try:
            with self._connection() as conn:
                rows = conn.execute(
                    f"""
                    SELECT name, arch, success, log
                    FROM build_result
                    {where}
                    ORDER BY name, arch
                    """,
                    tuple(params),
                ).fetchall()
        except Exception:
            logger.exception("Failed to load build results")
            raise

        return [BuildResult.from_row(row) for row in rows]

    # -----------------------
    # WRITE operations
    # -----------------------

    def upsert(self, result: BuildResult) -> None:
        """
        Insert the result, replacing the stored one for the same
        (name, arch). Prior results are not kept.
        """
        logger.info(
            "Recording build result %s (%s): success=%s",
            result.name,
            result.arch,
            result.success,
        )
        try:
            with self._connection() as conn:
                conn.execute(
                    """
                    INSERT INTO build_result (name, arch, success, log)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT (name, arch) DO UPDATE SET
                        success = excluded.success,
                        log = excluded.log
                    """,
                    (result.name, result.arch, result.success, result.log),
                )
        except sqlite3.IntegrityError as e:
            raise ConstraintViolation(
                f"Cannot record build result {result.name} ({result.arch}): {e}"
            ) from e
        except Exception:
            logger.exception(
                "Failed to record build result %s (%s)", result.name, result.arch
            )
            raise

    def insert(self, result: BuildResult) -> None:
        """Insert a result; an existing (name, arch) raises ConstraintViolation."""
        logger.info("Inserting build result %s (%s)", result.name, result.arch)
        try:
            with self._connection() as conn:
                conn.execute(
                    """
                    INSERT INTO build_result (name, arch, success, log)
                    VALUES (?, ?, ?, ?)
                    """,
                    (result.name, result.arch, result.success, result.log),
                )
        except sqlite3.IntegrityError as e:
            raise ConstraintViolation(
                f"Cannot insert build result {result.name} ({result.arch}): {e}"
            ) from e
        except Exception:
            logger.exception(
                "Failed to insert build result %s (%s)", result.name, result.arch
            )
            raise

    def delete(self, name: str, arch: str) -> bool:
        logger.info("Deleting build result %s (%s)", name, arch)
        try:
            with self._connection() as conn:
                cur = conn.execute(
                    "DELETE FROM build_result WHERE name = ? AND arch = ?",
                    (name, arch),
                )
                return cur.rowcount > 0
        except Exception:
            logger.exception("Failed to delete build result %s (%s)", name, arch)
            raise


# -----------------------
# Transaction-scoped DAO
# -----------------------

@contextmanager
def build_result_dao(db_path: str):
    """
    Yield a BuildResultDAO bound to a single transaction.
    """
    with get_conn(db_path) as conn:
        yield BuildResultDAO(conn=conn)
