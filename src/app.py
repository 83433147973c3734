"""Main FastAPI application module.

This module initializes the FastAPI application, registers all route handlers
and maps domain errors to HTTP responses.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import analytics, assignments, auth, courses, groups, submissions, users
from config import API_HOST, API_PORT, CORS_ALLOWED_ORIGINS
from core.database import init_db
from core.exceptions import CourseHubError
from core.logging_config import setup_logging

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

API_TITLE = "CourseHub API"
API_VERSION = "1.0.0"
API_DESCRIPTION = "Backend API for courses, groups, assignments and submissions."

# Initialize FastAPI application
app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
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
app.include_router(users.router)
app.include_router(courses.router)
app.include_router(groups.router)
app.include_router(assignments.router)
app.include_router(submissions.router)
app.include_router(analytics.router)


@app.exception_handler(CourseHubError)
async def coursehub_error_handler(request: Request, exc: CourseHubError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    else:
        logger.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


@app.on_event("startup")
def startup_tasks() -> None:
    """Create database tables if they do not exist yet."""
    init_db()
    logger.info("Database initialized")


@app.get("/", summary="API root", tags=["Info"])
def root() -> dict:
    """API root, returns API information and documentation links.

    Returns:
        Dictionary with API information and documentation links.
    """
    return {
        "name": API_TITLE,
        "version": API_VERSION,
        "description": API_DESCRIPTION,
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

    server_url = f"http://{API_HOST}:{API_PORT}"
    logger.info("Starting %s at %s (docs: %s/docs)", API_TITLE, server_url, server_url)
    uvicorn.run("app:app", host=API_HOST, port=API_PORT, reload=True)
