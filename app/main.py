# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Portfolio API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    PortfolioException,
    portfolio_exception_handler,
    validation_exception_handler,
)
from app.routers import health, profile, projects, certificates, files, ai
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs the effective configuration on startup. The Supabase client is
    created lazily on first use.
    """
    logger.info(f"Starting Portfolio API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Managed buckets: {settings.managed_buckets}")
    if not settings.OPENAI_API_KEY:
        logger.info("OPENAI_API_KEY not set, AI prefill will return fallback text")

    yield

    logger.info("Shutting down Portfolio API")


# Create FastAPI application
app = FastAPI(
    title="Portfolio API",
    description="""
## Portfolio Content API

Backs a personal portfolio site and its admin panel: the owner's profile,
projects with screenshots, and certificates with PDFs.

### File lifecycle

Records store bucket keys. When an edit replaces or clears a file, the old
object is deleted after the record is saved, unless another record still
uses it. Every mutation response carries a `cleanup` report:

```json
{"deleted": ["1b9d...-cv.pdf"], "failed": [], "skipped": []}
```

### Quick Start

```bash
# 1. Stage an image
curl -X POST http://localhost:8000/api/v1/projects/uploads \\
  -H "Authorization: Bearer $TOKEN" -F "files=@screenshot.png"

# 2. Create the project with the returned key
curl -X POST http://localhost:8000/api/v1/projects \\
  -H "Authorization: Bearer $TOKEN" -H "Content-Type: application/json" \\
  -d '{"title": "Portfolio API", "file_paths": ["<key>"]}'
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Verify Supabase session tokens",
        },
        {
            "name": "Profile",
            "description": "The portfolio owner's profile, picture and CV",
        },
        {
            "name": "Projects",
            "description": "Projects and their screenshots",
        },
        {
            "name": "Certificates",
            "description": "Certificates and their PDFs",
        },
        {
            "name": "Files",
            "description": "File manager over the storage buckets",
        },
        {
            "name": "AI",
            "description": "AI-drafted descriptions",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(PortfolioException)
async def handle_portfolio_exception(request: Request, exc: PortfolioException):
    """Handle custom Portfolio exceptions."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code}: {exc.message} {exc.details}")
    return await portfolio_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError):
    """Malformed request bodies are 400 VALIDATION_FAILED, not FastAPI's 422."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Profile endpoints
app.include_router(
    profile.router,
    prefix="/api/v1/profile",
    tags=["Profile"]
)

# Project endpoints
app.include_router(
    projects.router,
    prefix="/api/v1/projects",
    tags=["Projects"]
)

# Certificate endpoints
app.include_router(
    certificates.router,
    prefix="/api/v1/certificates",
    tags=["Certificates"]
)

# File manager endpoints
app.include_router(
    files.router,
    prefix="/api/v1/files",
    tags=["Files"]
)

# AI prefill endpoints
app.include_router(
    ai.router,
    prefix="/api/v1/ai",
    tags=["AI"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Portfolio API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
