"""
FastAPI application for the Setlist API.

Wires configuration, middleware (CORS, body limit, recovery, observability),
error handlers that render the error envelope, the health endpoint, and the
shows/venues/bands/genres/search routers.
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from setlist.api.routes.bands import router as bands_router
from setlist.api.routes.genres import router as genres_router
from setlist.api.routes.search import router as search_router
from setlist.api.routes.shows import router as shows_router
from setlist.api.routes.venues import router as venues_router
from setlist.core.config import get_settings
from setlist.core.errors import APIError, ValidationFailed
from setlist.core.logging import get_logger
from setlist.db.init_db import create_all_tables
from setlist.middleware.body_limit import BYTES_PER_MB, BodyLimitMiddleware
from setlist.middleware.observability import ObservabilityMiddleware
from setlist.middleware.recovery import RecoveryMiddleware

settings = get_settings()
logger = get_logger("setlist.api")

SERVICE_NAME = "asheville-setlist-api"

openapi_tags = [
    {"name": "Health", "description": "Service health and readiness."},
    {"name": "Shows", "description": "Show listings, detail and band submissions."},
    {"name": "Venues", "description": "Venues and their upcoming shows."},
    {"name": "Bands", "description": "Bands, their shows and similar bands."},
    {"name": "Genres", "description": "Genres with show counts."},
    {"name": "Search", "description": "Search across shows, bands and venues."},
]


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.DB_CREATE_TABLES:
        logger.info("creating missing tables")
        create_all_tables()
    logger.info("setlist api started", extra={"environment": settings.ENVIRONMENT})
    yield


app = FastAPI(
    title="Setlist API",
    description="REST API for a local live music directory: shows, venues, bands and genres.",
    version=settings.SERVICE_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

# Added innermost first; the last one added wraps the rest
app.add_middleware(RecoveryMiddleware)
app.add_middleware(BodyLimitMiddleware, max_bytes=settings.MAX_BODY_MB * BYTES_PER_MB)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request failed", extra={"path": request.url.path, "error": exc.message})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', '')}" for error in exc.errors()
    )
    error = ValidationFailed("Invalid request body", {"error": problems})
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.get(
    "/health",
    summary="Health Check",
    description="Health check endpoint for liveness probes.",
    tags=["Health"],
    responses={200: {"description": "Service is healthy"}},
)
def health_check():
    """Report service name and version."""
    return {"status": "ok", "service": SERVICE_NAME, "version": settings.SERVICE_VERSION}


app.include_router(shows_router)
app.include_router(venues_router)
app.include_router(bands_router)
app.include_router(genres_router)
app.include_router(search_router)


# PUBLIC_INTERFACE
def run() -> None:
    """Serve the API with uvicorn on API_HOST:API_PORT."""
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)


if __name__ == "__main__":
    run()
