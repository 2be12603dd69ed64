# src/forum_stage/main.py
"""Main entry point for the Forum application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from forum_stage.api.v1 import posts_router, replies_router, users_router
from forum_stage.core.settings import settings
from forum_stage.services.errors import (
    ConflictError,
    DepthExceededError,
    ForumError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[ForumError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    DepthExceededError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    ConflictError: status.HTTP_409_CONFLICT,
}

# Initialize FastAPI app
app = FastAPI(
    title="Forum API",
    description="Threaded question and answer discussions",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(posts_router, prefix="/api/v1")
app.include_router(replies_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")


@app.exception_handler(ForumError)
async def forum_error_handler(request: Request, exc: ForumError) -> JSONResponse:
    """Translate domain errors into HTTP responses that name what failed."""
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.debug("%s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.detail)
    return JSONResponse(status_code=status_code, content=exc.as_dict())


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Forum API",
        "version": settings.app_version,
        "description": "Threaded question and answer discussions",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("forum_stage.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
