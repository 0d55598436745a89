# buildlog.py
"""
Build log helpers shared by the worker and the ingest server.

Logs travel gzip-compressed between worker and server. The server stores the
decoded text in build_result.log and keeps a plain-text copy per
(package, arch) under the build log directory.
"""
import gzip
import logging
import zlib
from pathlib import Path

logger = logging.getLogger(__name__)


class LogDecodeError(ValueError):
    """Raised when an uploaded log is not valid gzip data."""


def compose_log(stdout: bytes, stderr: bytes) -> bytes:
    """Join the captured streams of a build the way they are reported."""
    return b"STDOUT:\n" + (stdout or b"") + b"STDERR:\n" + (stderr or b"")


def compress_log(log: bytes) -> bytes:
    return gzip.compress(log)


def decompress_log(data: bytes) -> str:
    """
    Decompress an uploaded log and decode it as UTF-8.
    Undecodable bytes are replaced rather than rejected; build output is not
    guaranteed to be valid UTF-8. An empty upload is an empty log.
    """
    if not data:
        return ""
    try:
        raw = gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise LogDecodeError(f"Log is not valid gzip data: {e}") from e
    return raw.decode("utf-8", errors="replace")


def log_file_name(name: str, arch: str) -> str:
    return f"{name}-{arch}.log"


def check_log_name(value: str, field: str = "name") -> str:
    """
    Reject a package or arch name that cannot be part of a log file name.
    Returns the value unchanged when it is usable.
    """
    if not value or value in (".", ".."):
        raise ValueError(f"Invalid {field}: {value!r}")
    if any(ch in value for ch in ("/", "\\", "\x00")):
        raise ValueError(f"Invalid {field}: {value!r} contains a path separator or NUL")
    return value


def write_log_file(log_dir, name: str, arch: str, text: str) -> Path:
    """Write (or overwrite) the archived log of one build."""
    check_log_name(name, "package")
    check_log_name(arch, "arch")
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    path = log_dir / log_file_name(name, arch)
    path.write_text(text, encoding="utf-8")
    logger.debug("Wrote build log %s", path)
    return path
