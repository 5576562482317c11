"""Main FastAPI application with hexagonal architecture."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from ladder.config import settings_from_env
from ladder.gateway import LEAGUE_PAGE_CACHE
from ladder.resolver import SEARCH_CACHE

from . import __version__
from .api.rest.routes import router as ladder_router

# Load environment variables
load_dotenv()

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = settings_from_env()
    logger.info(
        f"W3C ladder API starting: base={settings.api_base} season={settings.season} "
        f"gateway={settings.gateway} analytics_seasons={list(settings.analytics_seasons)}"
    )
    yield
    for cache in (LEAGUE_PAGE_CACHE, SEARCH_CACHE):
        cache.clear()


app = FastAPI(
    title="W3C Ladder API",
    description="Warcraft III W3Champions ladder ranking and head-to-head analytics API",
    version=__version__,
    lifespan=lifespan,
)

# CORS configuration for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",  # Vite dev server
        "http://localhost:3000",  # Alternative dev port
        "*",  # Allow all for development
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    season: int
    gateway: int


@app.get("/", tags=["meta"])
async def root():
    """API root with information and available endpoints."""
    return {
        "name": "W3C Ladder API",
        "version": __version__,
        "description": "W3Champions ladder and head-to-head analytics",
        "docs": "/docs",
        "endpoints": {
            "health": "GET /health",
            "ladder": "GET /api/ladder",
            "raceLadder": "GET /api/ladder/{race}",
            "analytics": "GET /api/players/analytics?battletag=",
            "rank": "GET /api/players/rank?battletag=",
            "maps": "GET /api/players/maps?battletag=",
            "vs": "GET /api/vs?playerA=&playerB=",
        },
    }


@app.get("/health", response_model=HealthResponse, tags=["meta"])
async def health_check():
    """Check API health and configuration status."""
    settings = settings_from_env()
    return HealthResponse(
        status="healthy",
        version=__version__,
        season=settings.season,
        gateway=settings.gateway,
    )


# Include REST routes
app.include_router(ladder_router)
