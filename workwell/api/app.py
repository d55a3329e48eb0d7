"""
WorkWell API.

FastAPI application hosting the burnout scoring and workload engine. The
optimizer loop runs inside the app's event loop for the app's lifetime.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from workwell import __version__
from workwell.config.settings import settings
from workwell.services.balancer import reset_balancer
from workwell.services.errors import InvalidInput
from workwell.services.optimizer import get_optimizer, reset_optimizer
from workwell.services.repository import close_worker_repository, get_worker_repository
from workwell.api.routes import health, burnout, workload

logger = logging.getLogger("workwell.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: storage, optimizer loop, shutdown."""
    logger.info("Starting WorkWell v%s", __version__)

    repository = await get_worker_repository()
    logger.info("Worker storage: %s", repository.backend)

    optimizer = await get_optimizer()
    optimizer.start()

    yield

    logger.info("Shutting down...")
    reset_optimizer()
    reset_balancer()
    await close_worker_repository()
    logger.info("Worker storage closed")


app = FastAPI(
    title="WorkWell",
    description="Burnout scoring and workload redistribution",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS: extend via WORKWELL_CORS_ORIGINS="https://a.example,https://b.example"
_default_origins = [
    "http://localhost:5173",
    "http://localhost:5174",
]
_extra_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()] if settings.cors_origins else []
app.add_middleware(
    CORSMiddleware,
    allow_origins=_default_origins + _extra_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_headers(request: Request, call_next):
    """Stamp the engine version on every response."""
    response = await call_next(request)
    response.headers["X-WorkWell-Version"] = __version__
    return response


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "error": "invalid_input",
            "message": exc.message,
            "missing": exc.missing,
            "path": str(request.url.path),
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler."""
    logger.error("Unhandled error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": str(exc),
            "path": str(request.url.path),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


# Register routes
app.include_router(health.router)
app.include_router(burnout.router)
app.include_router(workload.router)
