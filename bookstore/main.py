"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from bookstore.api.auth import router as auth_router
from bookstore.api.authors import router as authors_router
from bookstore.api.books import router as books_router
from bookstore.api.categories import router as categories_router
from bookstore.api.uploads import router as uploads_router
from bookstore.api.users import router as users_router
from bookstore.core.config import get_settings
from bookstore.core.database import init_db
from bookstore.core.tracing import setup_tracing, shutdown_tracing
from bookstore.services.file_storage import UploadValidationError
from bookstore.services.relationships import MissingReferenceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    await init_db()
    yield
    # Shutdown
    shutdown_tracing()


settings = get_settings()

app = FastAPI(
    title="Bookstore API",
    description="Catalog management for books, authors and categories, with user accounts",
    version="1.0.0",
    lifespan=lifespan,
)

# Setup OpenTelemetry tracing (must be done before adding routes)
setup_tracing(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Range"],
)


@app.exception_handler(MissingReferenceError)
async def missing_reference_handler(request: Request, exc: MissingReferenceError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


@app.exception_handler(UploadValidationError)
async def upload_validation_handler(request: Request, exc: UploadValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # The message is echoed to the client for debugging; not a hardened contract
    logger.exception(f"Unhandled error in {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error", "error": str(exc)},
    )


# Uploaded images are served from the public uploads path
upload_root = Path(settings.upload_dir)
upload_root.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=upload_root), name="uploads")

# Include routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(books_router)
app.include_router(authors_router)
app.include_router(categories_router)
app.include_router(uploads_router)


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(
        "bookstore.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
    )
