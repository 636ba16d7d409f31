"""
OTS News

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from otsnews.api.middleware.request_id import RequestIdMiddleware
from otsnews.api.v1 import router as api_v1_router
from otsnews.config import Settings, get_settings
from otsnews.database import Database
from otsnews.kernel.errors import DomainError
from otsnews.logging_config import configure_logging, get_logger
from otsnews.schemas.common import HealthResponse

logger = get_logger(__name__)

DESCRIPTION = """
Internal news platform for staff.

## Features

- **Sections**: a two-level section tree with per-section editor grants
- **Articles**: drafts and published articles with tags and attachments
- **Comments**: threaded comments moderated by section editors
- **Notifications**: new-article and comment notifications, digest preferences

## Invariants

1. Drafts are visible only to their author and to admins
2. Publishing a draft notifies every other user exactly once
3. Every mutation is written to the audit log in the same transaction
"""


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Build the application.

    The database handle is attached to ``app.state`` here rather than in
    the lifespan so that in-process clients (tests) can use it directly.
    """
    settings = settings or get_settings()
    db = database or Database.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        configure_logging(
            log_level=settings.log_level,
            environment=settings.environment,
            debug=settings.debug,
        )

        logger.info("Starting %s v%s", settings.project_name, settings.version)
        await db.create_all()

        yield

        logger.info("Shutting down...")
        await db.dispose()
        logger.info("Database connections closed")

    app = FastAPI(
        title=settings.project_name,
        description=DESCRIPTION,
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.db = db

    # Last added = outermost, so CORS wraps error responses too
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app, settings)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Check application health."""
        return HealthResponse(status="ok", version=settings.version, database="connected")

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.project_name,
            "version": settings.version,
            "docs": "/docs" if settings.debug else "disabled",
            "api": {
                "v1": settings.api_v1_prefix,
            },
        }

    app.include_router(api_v1_router, prefix=settings.api_v1_prefix)
    return app


def _with_request_id(request: Request, content: dict) -> tuple:
    headers = {}
    req_id = getattr(request.state, "request_id", None)
    if req_id:
        headers["X-Request-ID"] = req_id
        content["request_id"] = req_id
    return content, headers


def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        """Map domain errors to their HTTP status with ``{detail, kind}``."""
        if exc.status_code >= 500:
            logger.warning("%s: %s", exc.kind, exc.message)
        content, headers = _with_request_id(request, exc.to_dict())
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        content, headers = _with_request_id(request, {"detail": exc.detail})
        headers.update(exc.headers or {})
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        errors = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            errors.append({
                "field": field,
                "message": error["msg"],
                "type": error["type"],
            })
        content, headers = _with_request_id(
            request,
            {"detail": "Validation error", "kind": "validation_error", "errors": errors},
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=content,
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions without leaking internals."""
        logger.exception("Unhandled exception: %s", exc)
        if settings.debug:
            body = {"detail": str(exc), "type": type(exc).__name__}
        else:
            body = {"detail": "Internal server error"}
        content, headers = _with_request_id(request, body)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=content,
            headers=headers,
        )


app = create_app()


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "otsnews.main:app",
        host="0.0.0.0",
        port=8000,
        reload=_settings.debug,
    )
