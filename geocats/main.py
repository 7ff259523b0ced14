"""FastAPI application entrypoint. No business logic; only wiring, error mapping, and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from geocats.api.v1 import router as v1_router
from geocats.core.config import settings
from geocats.core.errors import (
    AuthError,
    AuthzError,
    QueryError,
    RepositoryConflictError,
    RepositoryError,
)
from geocats.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _authz_error_handler(request: Request, exc: AuthzError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "reason": exc.reason.value},
    )


def _auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": exc.message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def _query_error_handler(request: Request, exc: QueryError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message, "reason": "invalid_region"},
    )


def _repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    if isinstance(exc, RepositoryConflictError):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": "Resource already exists"},
        )
    logger.error(
        "Repository failure",
        extra={"path": request.url.path, "reason": exc.message[:500]},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Something went wrong with the server"},
    )


def create_app() -> FastAPI:
    """Build the application: logging, CORS, domain error handlers, and the v1 router."""
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="GeoCats API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AuthzError, _authz_error_handler)
    app.add_exception_handler(AuthError, _auth_error_handler)
    app.add_exception_handler(QueryError, _query_error_handler)
    app.add_exception_handler(RepositoryError, _repository_error_handler)

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "GeoCats API"}

    return app


app = create_app()
