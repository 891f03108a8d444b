"""AuraCycle API: FastAPI application entry point.

Run locally:
    uvicorn src.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import get_settings
from src.cycles.config_loader import get_cycle_config
from src.middleware.session_auth import USER_HEADER, SessionAuthMiddleware
from src.routers import chat, cycles, health, logs, settings as settings_router
from src.services.storage import close_database, init_database

# ---------- Logging ----------

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("auracycle")


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup / shutdown hooks."""
    settings = get_settings()
    logger.info(
        "Starting AuraCycle API v%s [%s]",
        settings.app_version,
        settings.environment,
    )
    get_cycle_config()  # fail fast on a broken cycle_config.yaml
    await init_database(settings)
    yield
    await close_database()
    logger.info("AuraCycle API shut down")


# ---------- App factory ----------

def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="AuraCycle API",
        description=(
            "Menstrual cycle tracking: daily logs, period prediction, "
            "regularity insights, and an AI chat assistant."
        ),
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ---------- Middleware (last added runs first) ----------

    # Session identity
    app.add_middleware(SessionAuthMiddleware)

    # CORS is added last so it answers preflight before the session check
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["Content-Type", USER_HEADER],
    )

    # ---------- Health check (outside v1 prefix, always at /health) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    v1_prefix = "/api/v1"

    app.include_router(logs.router, prefix=v1_prefix)
    app.include_router(settings_router.router, prefix=v1_prefix)
    app.include_router(cycles.router, prefix=v1_prefix)
    app.include_router(chat.router, prefix=v1_prefix)

    return app


app = create_app()
