"""LinkCard API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map LinkCardError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Logging configured once on startup via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Services are lazy lru_cache singletons (api/dependencies.py), so startup
      has nothing to connect to
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from linkcard.api.error_handlers import register_error_handlers
from linkcard.api.routes import artifacts, health, identifiers, state
from linkcard.config import get_settings
from linkcard.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    logger.info("LinkCard API started")
    yield
    logger.info("LinkCard API shutting down")


app = FastAPI(title="LinkCard API", version="0.1.0", lifespan=lifespan)

# CORS — configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Routes — explicit registration
app.include_router(health.router)
app.include_router(identifiers.router)
app.include_router(artifacts.router)
app.include_router(state.router)
