# src/proofline/web/main.py
from contextlib import asynccontextmanager
from urllib.parse import urlsplit

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.requests import Request

from proofline import __version__
from proofline.config import config
from proofline.core.changes import add_listener, remove_listener
from proofline.core.env import load_env
from proofline.core.errors import (
    AccessDenied,
    NotFound,
    ProoflineError,
    TransportError,
    ValidationError,
    error_payload,
)
from proofline.core.logging import init_logging
from proofline.core.logs import log_message
from proofline.storage import LocalObjectStorage, get_storage
from proofline.store import configure_engine, dispose_engine, ensure_schema
from proofline.web.routes import router
from proofline.web.websocket import websocket_manager

STATUS_CODES = {
    AccessDenied: 403,
    NotFound: 404,
    ValidationError: 422,
    TransportError: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    load_env()
    init_logging()
    configure_engine()
    if config.database.migrate_on_start:
        await ensure_schema()
    storage = get_storage()
    if isinstance(storage, LocalObjectStorage):
        storage.root.mkdir(parents=True, exist_ok=True)
    add_listener(websocket_manager.broadcast)
    log_message(f"Proofline API started on port {config.system.port}")
    try:
        yield
    finally:
        remove_listener(websocket_manager.broadcast)
        await dispose_engine()


def create_app(*, use_lifespan: bool = True) -> FastAPI:
    """Build the application; tests skip the lifespan and configure the store themselves."""
    app = FastAPI(
        title="Proofline",
        description="Client review and approval of agency assets",
        version=__version__,
        lifespan=lifespan if use_lifespan else None,
    )
    app.include_router(router)
    _mount_local_files(app)

    @app.exception_handler(ProoflineError)
    async def proofline_error_handler(request: Request, exc: ProoflineError):
        status_code = STATUS_CODES.get(type(exc), 500)
        return JSONResponse(status_code=status_code, content=error_payload(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content=error_payload(ValidationError(_first_error(exc))),
        )

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": __version__}

    return app


def _mount_local_files(app: FastAPI) -> None:
    """Serve locally stored uploads under the path of their public URL."""
    storage = get_storage()
    if not isinstance(storage, LocalObjectStorage):
        return
    mount_path = urlsplit(storage.public_url).path.rstrip("/")
    if mount_path:
        app.mount(
            mount_path,
            StaticFiles(directory=storage.root, check_dir=False),
            name="files",
        )


def _first_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return ValidationError.public_message
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    msg = first.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


# Create the FastAPI application
app = create_app()


if __name__ == "__main__":  # pragma: no cover - CLI execution
    import uvicorn

    uvicorn.run("proofline.web.main:app", host="0.0.0.0", port=config.system.port)
