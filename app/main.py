"""FastAPI application entry point for Aurora."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from app.config import get_settings
from app.database import db
from core.exceptions import (
    ContentValidationError,
    RecordNotFoundError,
    UpstreamError,
    UploadValidationError,
)
from core.storage.blob_store import LocalBlobStore
from core.storage.repositories import build_memory_store, build_postgres_store

logger = logging.getLogger("aurora.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print(f"🚀 Starting {settings.app_name} v{settings.app_version}")
    print(f"📍 Environment: {settings.app_env}")

    if settings.uses_database:
        await db.connect()
        app.state.store = build_postgres_store(db.pool)
    else:
        print("📦 No DATABASE_URL set, keeping records in memory")
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; model calls will fail")

    yield

    # Shutdown
    print(f"👋 Shutting down {settings.app_name}...")
    await db.disconnect()


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Legal document risk analysis, threat scanning and voice Q&A",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
)

# Default stores; the lifespan swaps in PostgreSQL when configured
app.state.store = build_memory_store()
app.state.blobs = LocalBlobStore(settings.upload_dir)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(UploadValidationError)
@app.exception_handler(ContentValidationError)
async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return error_response(400, str(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return error_response(400, f"Invalid request: {details}")


@app.exception_handler(RecordNotFoundError)
async def not_found_handler(request: Request, exc: RecordNotFoundError) -> JSONResponse:
    return error_response(404, str(exc))


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} upstream failure: {exc}")
    return error_response(500, str(exc))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"{request.method} {request.url.path} failed")
    return error_response(500, str(exc) or "Internal server error")


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "operational",
    }


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


# Import and include routers
from app.api.routes import analysis, assistant, documents, threats
app.include_router(documents.router, prefix="/api/v1/documents", tags=["documents"])
app.include_router(analysis.router, prefix="/api/v1/analysis", tags=["analysis"])
app.include_router(threats.router, prefix="/api/v1/threats", tags=["threats"])
app.include_router(assistant.router, prefix="/api/v1/assistant", tags=["assistant"])
