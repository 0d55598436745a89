# worker/cli.py
"""
reworkit-worker

Builds every package of a ciel workspace TREE in a loop and pushes each
result to the ReworkIt server.

Every option can also be given through the environment (or .env):

  REWORKIT_CIEL_WORKSPACE, REWORKIT_ARCH, REWORKIT_CIEL_INSTANCE,
  REWORKIT_URL, REWORKIT_SECRET_TOKEN

Examples:
  # Build forever, one round every 10 seconds
  reworkit-worker -d /buildroots/ciel -a amd64 -u http://reworkit:3000 -t s3cret

  # A single round
  reworkit-worker --once
"""
import argparse
import logging

from reworkit.config import PUSH_RETRIES, WORKER_INTERVAL, configure_logging, env_value
from reworkit.worker.builder import BuildWorker
from reworkit.worker.client import ResultClient

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build every package of a ciel workspace and report results to ReworkIt."
    )

    parser.add_argument(
        "-d", "--workspace",
        default=env_value("REWORKIT_CIEL_WORKSPACE"),
        help="ciel workspace path (env: REWORKIT_CIEL_WORKSPACE)",
    )
    parser.add_argument(
        "-a", "--arch",
        default=env_value("REWORKIT_ARCH"),
        help="Instance architecture (env: REWORKIT_ARCH)",
    )
    parser.add_argument(
        "-n", "--name",
        default=env_value("REWORKIT_CIEL_INSTANCE", "main"),
        help="ciel instance name (env: REWORKIT_CIEL_INSTANCE, default: main)",
    )
    parser.add_argument(
        "-u", "--url",
        default=env_value("REWORKIT_URL"),
        help="ReworkIt server url (env: REWORKIT_URL)",
    )
    parser.add_argument(
        "-t", "--token",
        default=env_value("REWORKIT_SECRET_TOKEN"),
        help="ReworkIt secret token (env: REWORKIT_SECRET_TOKEN)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=WORKER_INTERVAL,
        help=f"Seconds to wait between rounds (default: {WORKER_INTERVAL})",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=PUSH_RETRIES,
        help=f"Push attempts per package (default: {PUSH_RETRIES})",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single round and exit",
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    missing = [
        flag for flag, value in (
            ("--workspace", args.workspace),
            ("--arch", args.arch),
            ("--url", args.url),
            ("--token", args.token),
        )
        if not value
    ]
    if missing:
        parser.error(f"missing required option(s): {', '.join(missing)}")

    configure_logging()

    client = ResultClient(args.url, args.token, retries=args.retries)
    worker = BuildWorker(args.workspace, args.arch, client, instance=args.name)

    logger.info(
        "Worker started (workspace=%s, arch=%s, instance=%s)",
        args.workspace,
        args.arch,
        args.name,
    )
    worker.run_forever(args.interval, once=args.once)


if __name__ == "__main__":
    main()
