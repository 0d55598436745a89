#!/usr/bin/env python3
# db/cli.py
"""
reworkit-db

Database maintenance for the build result store.

Commands:
  migrate   apply pending migrations (safe to run repeatedly)
  status    list applied/pending migrations and compare the live schema
            with the expected one; exits 1 when they differ

Examples:
  reworkit-db migrate
  reworkit-db --db /srv/reworkit/results.db status --verbose
"""
import argparse
import os
import sys

from reworkit.config import DB_FILE_PATH, MIGRATIONS_PATH, configure_logging
from reworkit.db.infra.cli_utils import print_user_message
from reworkit.db.infra.core import get_conn, init_db
from reworkit.db.infra.migrations import applied_migrations, pending_migrations
from reworkit.db.infra.schema import schema_problems


def _cmd_migrate(args) -> int:
    try:
        applied = init_db(args.db, args.migrations)
    except Exception as e:
        print_user_message(f"Migration failed: {e}", quiet=args.quiet)
        return 1

    if applied:
        print_user_message(
            f"Applied {len(applied)} migration(s) to {args.db}",
            details="\n".join(applied),
            verbose=args.verbose,
            quiet=args.quiet,
        )
    else:
        print_user_message(f"Database {args.db} is up to date", quiet=args.quiet)
    return 0


def _cmd_status(args) -> int:
    if not os.path.exists(args.db):
        print_user_message(
            f"Database {args.db} does not exist",
            action=f"reworkit-db --db {args.db} migrate",
            quiet=args.quiet,
        )
        return 1

    with get_conn(args.db) as conn:
        applied = applied_migrations(conn)
        pending = pending_migrations(conn, args.migrations)
        problems = schema_problems(conn)

    lines = [f"applied: {m['id']} ({m['applied_at']})" for m in applied]
    lines += [f"pending: {mid}" for mid in pending]
    lines += [f"schema:  {p}" for p in problems]

    if pending or problems:
        print_user_message(
            f"{len(pending)} pending migration(s), {len(problems)} schema problem(s) in {args.db}",
            action=f"reworkit-db --db {args.db} migrate",
            details="\n".join(lines),
            verbose=args.verbose,
            quiet=args.quiet,
        )
        return 1

    print_user_message(
        f"{len(applied)} migration(s) applied, schema matches",
        details="\n".join(lines),
        verbose=args.verbose,
        quiet=args.quiet,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Maintain the ReworkIt build result database.")
    parser.add_argument(
        "--db",
        default=str(DB_FILE_PATH),
        help=f"Path to SQLite database file (default: {DB_FILE_PATH})",
    )
    parser.add_argument(
        "--migrations",
        default=str(MIGRATIONS_PATH),
        help=f"Directory holding *.sql migrations (default: {MIGRATIONS_PATH})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show details")
    parser.add_argument("-q", "--quiet", action="store_true", help="Print nothing")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("migrate", help="Apply pending migrations").set_defaults(func=_cmd_migrate)
    sub.add_parser("status", help="Show migration and schema status").set_defaults(func=_cmd_status)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
