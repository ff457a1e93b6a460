"""Main FastAPI application module.

This module initializes the FastAPI application, registers all route
handlers and maps the domain error taxonomy onto HTTP responses.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import admin, auth, catalog, quizzes
from config import API_HOST, API_PORT, CORS_ALLOWED_ORIGINS
from core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidCredentialsError,
    NotFoundError,
    QuizHubError,
    StorageError,
    ValidationError,
)
from core.logging_config import setup_logging

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

# Initialize FastAPI application
app = FastAPI(
    title="Quiz Hub API",
    description="Community quiz platform: submissions, moderation and leaderboard.",
    version="1.0.0",
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register route handlers
app.include_router(auth.router)
app.include_router(quizzes.router)
app.include_router(catalog.router)
app.include_router(admin.router)

# Most specific class first
_STATUS_BY_ERROR = (
    (InvalidCredentialsError, status.HTTP_401_UNAUTHORIZED),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (StorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


@app.exception_handler(QuizHubError)
async def quiz_hub_error_handler(request: Request, exc: QuizHubError) -> JSONResponse:
    """Render a domain error as ``{"error": message}``."""
    status_code = status.HTTP_400_BAD_REQUEST
    for error_class, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            status_code = code
            break
    if isinstance(exc, StorageError):
        logger.error("%s %s failed: storage error", request.method, request.url.path)
    return JSONResponse(status_code=status_code, content={"error": exc.message})


@app.get("/", summary="API root", tags=["Info"])
def root() -> dict:
    """Return API information and documentation links."""
    return {
        "name": "Quiz Hub API",
        "version": "1.0.0",
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc",
        },
        "health": "/api/health",
    }


@app.get("/api/health", summary="Health check", tags=["Health"])
def health() -> dict:
    """Health check endpoint.

    Returns:
        Dictionary with status "ok".
    """
    return {"status": "ok"}


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Quiz Hub API on http://%s:%s", API_HOST, API_PORT)
    uvicorn.run("app:app", host=API_HOST, port=API_PORT, reload=True)
