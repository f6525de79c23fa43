"""Main application entrypoint for fatbox."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fatbox.api.v1 import routes_health
from fatbox.api.v1.routes_upload import router as upload_router
from fatbox.core.config import Settings, settings as default_settings
from fatbox.core.exceptions import FatboxError
from fatbox.core.logging import setup_logging
from fatbox.core.middleware import HTTPErrorLoggingMiddleware
from fatbox.destinations.factory import build_destinations
from fatbox.destinations.forwarder import DestinationForwarder
from fatbox.models.upload import ErrorResponse, NotFoundResponse
from fatbox.storage.assembler import Assembler
from fatbox.storage.chunk_store import ChunkStore
from fatbox.storage.scratch import ScratchSpace

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the scratch directories before serving requests."""
    app.state.scratch.ensure()
    logger.info(
        f"{app.state.settings.SERVICE_NAME} started",
        extra={"scratch_root": str(app.state.scratch.root)},
    )
    yield
    logger.info(f"{app.state.settings.SERVICE_NAME} shutting down")


async def fatbox_error_handler(request: Request, exc: FatboxError) -> JSONResponse:
    body = ErrorResponse(error=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    body = ErrorResponse(error="Invalid request", details=str(exc.errors()))
    return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render unmatched routes and methods as a structured 404."""
    if exc.status_code in (404, 405):
        body = NotFoundResponse(message=f"Route {request.method}:{request.url.path} not found")
        return JSONResponse(status_code=404, content=body.model_dump())
    body = ErrorResponse(error=str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


def create_app(
    app_settings: Settings | None = None,
    forwarder: DestinationForwarder | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use instead of the environment singleton
        forwarder: Forwarder to use instead of one built from the settings

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app_settings = app_settings or default_settings

    setup_logging(app_settings)

    app = FastAPI(
        title=app_settings.SERVICE_NAME,
        version=app_settings.SERVICE_VERSION,
        lifespan=lifespan,
    )

    scratch = ScratchSpace(app_settings.SCRATCH_ROOT)
    chunk_store = ChunkStore(scratch.uploads_dir)

    app.state.settings = app_settings
    app.state.scratch = scratch
    app.state.chunk_store = chunk_store
    app.state.assembler = Assembler(chunk_store)
    app.state.forwarder = forwarder or DestinationForwarder(
        build_destinations(app_settings),
        timeout=app_settings.FORWARD_TIMEOUT_SECONDS,
        max_attempts=app_settings.FORWARD_MAX_ATTEMPTS,
        retry_jitter=app_settings.FORWARD_RETRY_JITTER_SECONDS,
    )

    app.add_middleware(HTTPErrorLoggingMiddleware)

    app.add_exception_handler(FatboxError, fatbox_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    app.include_router(routes_health.router, tags=["health"])
    app.include_router(upload_router)

    return app


def run() -> None:
    """Serve the application with uvicorn on ``HOST:PORT``."""
    uvicorn.run(
        "fatbox.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_config=None,
    )


# Export app instance for ASGI servers
app = create_app()
