"""FastAPI application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tableedit.api.deps import get_session_manager
from tableedit.config import get_settings
from tableedit.core.logging_config import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown."""
    # Startup
    setup_logging()
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    sessions = get_session_manager()
    sweeper = asyncio.create_task(sessions.sweep_forever())
    yield
    # Shutdown
    sweeper.cancel()
    await asyncio.gather(sweeper, return_exceptions=True)
    await sessions.close_all()
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Browse and edit remote tables through a SQL-over-HTTP query endpoint",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.APP_VERSION}


# Import and include routers after app is created to avoid circular imports
from tableedit.api.v1.router import api_router

app.include_router(api_router, prefix="/api/v1")
