"""IntakeDesk: reference gateway for the optional REST backend.

Serves the entity, function, auth and upload contract the HTTP-backed client
expects, on top of a local (file, memory) or SQL store.
"""

import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .api import api_router
from .client import IntakeDeskClient, create_client
from .core import RecordNotFoundError, Settings, UnknownEntityError, get_settings
from .schemas import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    client: IntakeDeskClient | None = None,
) -> FastAPI:
    """Build the gateway app.

    With ``client`` given the app serves it as is; otherwise a local client is
    created on startup and closed on shutdown.
    """
    settings = settings or get_settings()
    if settings.remote_enabled:
        raise ValueError("The gateway serves a local store; unset INTAKE_API_URL")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan: startup and shutdown."""
        owned = None
        if getattr(app.state, "client", None) is None:
            owned = await create_client(settings)
            app.state.client = owned
        logger.info(f"[STARTUP] {settings.app_name} {settings.app_version} ({settings.environment})")
        yield
        if owned is not None:
            await owned.aclose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="REST backend for the IntakeDesk client: entities, functions, auth and uploads.",
        lifespan=lifespan,
    )
    app.state.client = client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
    )

    @app.exception_handler(RecordNotFoundError)
    async def not_found_handler(request: Request, exc: RecordNotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=ErrorResponse(error="not_found", message=str(exc)).model_dump(),
        )

    @app.exception_handler(UnknownEntityError)
    async def unknown_entity_handler(request: Request, exc: UnknownEntityError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=ErrorResponse(error="unknown_entity", message=str(exc)).model_dump(),
        )

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        details = [
            ErrorDetail(
                field=".".join(str(part) for part in error["loc"]) or None,
                message=error["msg"],
                code=error["type"],
            )
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ErrorResponse(
                error="validation_error",
                message="Record failed validation",
                details=details,
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        error_detail = str(exc)
        if settings.debug or settings.environment != "production":
            error_detail = f"{exc}\n{traceback.format_exc()}"
        logger.error(f"Unhandled exception: {error_detail}")

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error="internal_error",
                message=f"An unexpected error occurred: {str(exc)[:200]}",
            ).model_dump(),
        )

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": settings.app_version}

    app.include_router(api_router, prefix=settings.api_prefix)
    return app


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host="0.0.0.0",
        port=8000,
        log_level="debug" if settings.debug else "info",
    )
