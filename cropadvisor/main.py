"""FastAPI application entrypoint: lifespan, routers, middleware."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cropadvisor.config import get_settings
from cropadvisor.middleware.logging import RequestLoggingMiddleware, configure_structured_logging
from cropadvisor.routes import crop, hybrid, irrigation, market
from cropadvisor.services.knowledge_base import get_knowledge_base

logger = structlog.get_logger("cropadvisor")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application startup / shutdown lifecycle.

    Startup:
      1. Initialize structured logging
      2. Load the crop knowledge base (validated once, shared read-only)
    """
    configure_structured_logging()
    settings = get_settings()
    knowledge_base = get_knowledge_base()
    app.state.knowledge_base_size = len(knowledge_base)
    logger.info(
        "CropAdvisor starting",
        log_level=settings.log_level,
        crops=len(knowledge_base),
        advisory_enabled=bool(settings.advisory_api_key),
        advisory_model=settings.advisory_model,
    )

    yield

    logger.info("CropAdvisor shutting down")


app = FastAPI(
    title="CropAdvisor API",
    description=(
        "Agronomic recommendation engine that scores crops against measured soil "
        "and climate conditions, projects yield, and blends the ranking with "
        "narrative guidance from a generative advisory service. Also plans irrigation "
        "and crop rotation and projects market returns."
    ),
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS ────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


# ── Health check ────────────────────────────────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Basic health check; verifies the API process is alive."""
    return {
        "status": "ok",
        "service": "cropadvisor",
        "version": "0.1.0",
    }


# ── Router registration ────────────────────────────────────────────────────
app.include_router(crop.router, prefix="/api/v1")
app.include_router(hybrid.router, prefix="/api/v1")
app.include_router(irrigation.router, prefix="/api/v1")
app.include_router(market.router, prefix="/api/v1")
