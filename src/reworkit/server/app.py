"""FastAPI ingest server: build workers push results, clients read them back."""

import hmac
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool

from reworkit.buildlog import check_log_name, decompress_log, write_log_file
from reworkit.config import (
    BUILD_LOGS_PATH,
    DB_FILE_PATH,
    SERVER_SECRET,
    SERVER_URL,
    configure_logging,
)
from reworkit.db.infra.core import init_db
from reworkit.db.services import BuildResultService
from reworkit.server.errors import (
    AuthenticationError,
    InvalidFieldError,
    MissingFieldError,
    install_exception_handlers,
)

logger = logging.getLogger(__name__)

SECRET_HEADER = "SECRET"
REQUIRED_FIELDS = ("package", "arch", "success")


def _check_secret(request: Request) -> None:
    expected = request.app.state.secret
    given = request.headers.get(SECRET_HEADER)
    # no configured secret means nobody may push
    if not expected or given is None:
        raise AuthenticationError()
    if not hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8")):
        raise AuthenticationError()


async def _read_push_form(request: Request) -> tuple[dict[str, str], bytes]:
    fields: dict[str, str] = {}
    log_content = b""

    form = await request.form()
    try:
        for key, value in form.multi_items():
            if key in REQUIRED_FIELDS:
                if isinstance(value, str):
                    fields[key] = value
                else:
                    try:
                        fields[key] = (await value.read()).decode("utf-8")
                    except UnicodeDecodeError as e:
                        raise InvalidFieldError(key, f"{key} field is not valid UTF-8") from e
                if key == "package":
                    logger.info("Received package: %s", fields[key])
            elif key == "log":
                if isinstance(value, str):
                    log_content += value.encode("utf-8")
                else:
                    log_content += await value.read()
            else:
                logger.info("Received unknown field: %s", key)
    finally:
        await form.close()

    for key in REQUIRED_FIELDS:
        if key not in fields:
            raise MissingFieldError(key)
    for key in ("package", "arch"):
        if not fields[key]:
            raise MissingFieldError(key)
        try:
            check_log_name(fields[key], key)
        except ValueError as e:
            raise InvalidFieldError(key, str(e)) from e

    return fields, log_content


def create_app(db_path=None, secret=None, log_dir=None) -> FastAPI:
    """
    Create the ingest application.

    Arguments default to the values in reworkit.config. Migrations are applied
    on startup.
    """
    db_path = db_path or DB_FILE_PATH
    log_dir = Path(log_dir or BUILD_LOGS_PATH)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting ReworkIt server (db=%s)", db_path)
        init_db(db_path)
        if not app.state.secret:
            logger.warning("REWORKIT_SECRET is not set; all pushes will be rejected")
        yield
        logger.info("ReworkIt server stopped")

    app = FastAPI(title="ReworkIt", lifespan=lifespan)
    app.state.secret = secret if secret is not None else SERVER_SECRET
    app.state.service = BuildResultService(db_path)
    app.state.log_dir = log_dir

    install_exception_handlers(app)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @app.post("/push_log")
    async def push_log(request: Request):
        _check_secret(request)
        fields, log_content = await _read_push_form(request)

        name = fields["package"]
        arch = fields["arch"]
        success = fields["success"] == "true"
        log_text = decompress_log(log_content)

        service: BuildResultService = request.app.state.service
        await run_in_threadpool(service.record_result, name, arch, success, log_text)

        try:
            await run_in_threadpool(write_log_file, request.app.state.log_dir, name, arch, log_text)
        except OSError:
            logger.exception("Error writing log for %s (%s)", name, arch)

        return {"name": name, "arch": arch, "success": success}

    @app.get("/get")
    def get_package_result(request: Request, name: str = Query(...)):
        package = request.app.state.service.get_package(name)
        return package.to_dict()

    @app.get("/result")
    def get_result(request: Request, name: str = Query(...), arch: str = Query(...)):
        result = request.app.state.service.get_result(name, arch)
        return result.to_dict()

    return app


def _split_url(url: str) -> tuple[str, int]:
    host, _, port = url.rpartition(":")
    if not host or not port.isdigit():
        raise ValueError(f"REWORKIT_URL must look like host:port, got {url!r}")
    return host, int(port)


def main():
    import uvicorn

    configure_logging()
    host, port = _split_url(SERVER_URL)
    uvicorn.run(create_app(), host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
