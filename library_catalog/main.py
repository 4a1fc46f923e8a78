# library_catalog/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .catalog import CatalogStore, catalog_router, load_sample_books
from .catalog.errors import (
    CatalogError,
    InvalidRequestError,
    RouteNotFoundError,
    summarize_validation_errors,
)
from .config import Settings, get_settings


logger = logging.getLogger(__name__)

ENDPOINTS = (
    "GET    /books",
    "GET    /books/:id",
    "POST   /books",
    "PUT    /books/:id",
    "DELETE /books/:id",
    "POST   /books/:id/borrow",
    "POST   /books/:id/return",
)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_store(settings: Settings) -> CatalogStore:
    books = load_sample_books(settings.sample_data_file) if settings.seed_sample_data else []
    return CatalogStore(books, loan_period_days=settings.loan_period_days)


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = InvalidRequestError(summarize_validation_errors(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Unknown paths and unsupported methods both count as a missing endpoint.
    if exc.status_code in (404, 405):
        error = RouteNotFoundError(request.method, request.url.path)
        return JSONResponse(status_code=error.status_code, content=error.to_payload())
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "message": "Something went wrong on our end",
        },
    )


def create_app(settings: Optional[Settings] = None, store: Optional[CatalogStore] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Server running on http://%s:%s", settings.host, settings.port)
        logger.info("Available endpoints:\n  %s", "\n  ".join(ENDPOINTS))
        yield

    app = FastAPI(
        title=settings.app_name,
        description=(
            "In-memory library catalogue: list, create, update and delete "
            "books, and lend them out with borrow/return actions."
        ),
        version=settings.app_version,
        redirect_slashes=False,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store if store is not None else build_store(settings)

    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    @app.get("/")
    def health_check():
        return {
            "status": "ok",
            "service": settings.app_name,
            "books": len(app.state.store),
        }

    app.include_router(catalog_router)
    return app
