"""Provide global constants for the project."""
import os
from pathlib import Path
from dotenv import dotenv_values
import logging

PROJECT_ROOT = Path(__file__).resolve().parents[2]

DB_FILE = Path("reworkit.db")

DATA_DIR = Path("data")
DB_DIR = Path("db")
MIGRATIONS_DIR = Path("migrations")
LOGS_DIR = Path("logs")
BUILD_LOGS_DIR = Path("build_logs")

DATA_PATH = (PROJECT_ROOT / DATA_DIR).resolve()
DB_PATH = (DATA_PATH / DB_DIR).resolve()
MIGRATIONS_PATH = (DATA_PATH / MIGRATIONS_DIR).resolve()
LOGS_PATH = (DATA_PATH / LOGS_DIR).resolve()

# Ensure folders are created if not existing
DATA_PATH.mkdir(parents=True, exist_ok=True)
DB_PATH.mkdir(exist_ok=True)
LOGS_PATH.mkdir(exist_ok=True)

DOTENV_FILE = Path(".env")
DOTENV_FILE_PATH = (PROJECT_ROOT / DOTENV_FILE).resolve()

_DOTENV = dotenv_values(DOTENV_FILE_PATH)


def env_value(key: str, default: str | None = None) -> str | None:
    """Look up a setting in the process environment first, then in .env."""
    value = os.environ.get(key)
    if value is None:
        value = _DOTENV.get(key)
    return default if value in (None, "") else value


DB_FILE_PATH = Path(
    env_value("REWORKIT_DB_FILE", str(DB_PATH / DB_FILE))
).resolve()

# host:port the ingest server binds to
SERVER_URL = env_value("REWORKIT_URL", "127.0.0.1:3000")

# shared secret expected in the SECRET header of /push_log
SERVER_SECRET = env_value("REWORKIT_SECRET")

BUILD_LOGS_PATH = Path(
    env_value("REWORKIT_LOG_DIR", str(DATA_PATH / BUILD_LOGS_DIR))
).resolve()

LOG_LEVEL = (env_value("LOG_LEVEL", "INFO") or "INFO").upper()

LOG_FILE = Path("application.log")
LOG_FILE_PATH = (LOGS_PATH / LOG_FILE).resolve()

PUSH_RETRIES = 3
WORKER_INTERVAL = 10  # seconds between build rounds


def configure_logging():
    root = logging.getLogger()
    if root.handlers:
        return

    from logging.handlers import RotatingFileHandler

    # console/basic config
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # file handler
    file_handler = RotatingFileHandler(
        LOG_FILE_PATH,
        maxBytes=5 * 1024 * 1024,  # 5 MB per file
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(LOG_LEVEL)
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)


def main():
    """Print global constants."""
    files_and_paths = {"PROJECT_ROOT": PROJECT_ROOT,
                       "DATA_PATH": DATA_PATH,
                       "DB_PATH": DB_PATH,
                       "DB_FILE_PATH": DB_FILE_PATH,
                       "MIGRATIONS_PATH": MIGRATIONS_PATH,
                       "BUILD_LOGS_PATH": BUILD_LOGS_PATH,
                       "LOGS_PATH": LOGS_PATH,
                       "LOG_FILE_PATH": LOG_FILE_PATH,
                       }

    print("Current file and path resolutions:")
    print("----------------------------------")
    for label, file_path in files_and_paths.items():
        print(f"{label}: {file_path}")

    print("\nServer settings:")
    print("----------------")
    print(f"REWORKIT_URL: {SERVER_URL}")
    print(f"REWORKIT_SECRET: {'<set>' if SERVER_SECRET else '<unset>'}")


if __name__ == "__main__":
    main()
