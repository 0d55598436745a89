# worker/builder.py
"""
Build loop of a ReworkIt worker.

One round updates the package tree, updates the build container and builds
every package in the tree, pushing each result to the server.
"""
import logging
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Sequence

from reworkit.buildlog import compose_log, compress_log
from reworkit.worker.client import PushError, ResultClient

logger = logging.getLogger(__name__)

# top-level TREE directories that hold no packages
SKIPPED_TREE_DIRS = ("groups", "assets")


class RoundError(RuntimeError):
    """Raised when a round cannot proceed (git pull or ciel update-os failed)."""


@dataclass
class CommandResult:
    returncode: int
    stdout: bytes
    stderr: bytes

    @property
    def success(self) -> bool:
        return self.returncode == 0


def run_command(args: Sequence[str], cwd=None) -> CommandResult:
    proc = subprocess.run(list(args), cwd=cwd, capture_output=True)
    return CommandResult(proc.returncode, proc.stdout, proc.stderr)


def list_packages(tree_dir) -> List[str]:
    """
    Return the package names in a TREE checkout: directories exactly two
    levels deep (section/package), skipping git metadata, groups/ and assets/.
    """
    tree_dir = Path(tree_dir)
    packages: List[str] = []

    for section in sorted(tree_dir.iterdir()):
        if section.name.startswith(".git") or section.name in SKIPPED_TREE_DIRS:
            continue
        if not section.is_dir() or section.is_symlink():
            continue
        for entry in sorted(section.iterdir()):
            if entry.name.startswith(".git"):
                continue
            if entry.is_dir() and not entry.is_symlink():
                packages.append(entry.name)

    return packages


class BuildWorker:
    def __init__(
        self,
        workspace,
        arch: str,
        client: ResultClient,
        instance: str = "main",
        runner: Callable[..., CommandResult] = run_command,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.workspace = Path(workspace)
        self.tree_dir = self.workspace / "TREE"
        self.arch = arch
        self.client = client
        self.instance = instance
        self._run = runner
        self._sleep = sleep

    def _checked(self, args: Sequence[str], cwd=None) -> CommandResult:
        result = self._run(args, cwd=cwd)
        if not result.success:
            raise RoundError(f"Failed to run {' '.join(args)}")
        return result

    def build_package(self, package: str) -> bool:
        """Build one package and push its result. Returns whether it built."""
        logger.info("Building %s", package)
        result = self._run(["ciel", "build", "-i", self.instance, package], cwd=self.workspace)
        logger.info("is success: %s", result.success)

        log = compose_log(result.stdout, result.stderr)
        try:
            compressed = compress_log(log)
        except Exception as e:
            logger.error("Compress LOG got error: %s", e)
            return result.success

        try:
            self.client.push_log(package, self.arch, result.success, compressed)
        except PushError as e:
            logger.error("%s", e)

        return result.success

    def run_round(self) -> dict:
        """
        Run one full round. Returns {package: success} for the packages built.
        Raises RoundError when git pull or ciel update-os fails.
        """
        logger.info("Running git pull")
        self._checked(["git", "pull"], cwd=self.tree_dir)

        logger.info("Getting packages")
        packages = list_packages(self.tree_dir)

        logger.info("Running ciel update-os")
        self._checked(["ciel", "update-os"], cwd=self.workspace)

        outcome = {}
        for package in packages:
            outcome[package] = self.build_package(package)
        return outcome

    def run_forever(self, interval: float, once: bool = False) -> None:
        while True:
            try:
                self.run_round()
            except Exception:
                logger.exception("Build round failed")
            if once:
                return
            self._sleep(interval)
