"""Main FastAPI application for provenanced daemon.

This module creates and configures the FastAPI application that exposes
the provenance_library via REST API.
"""

import importlib
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from provenance_library.config.loader import load_config
from provenance_library.trust import TrustListCacheManager

from . import __version__
from .routers import c2pa_router
from .routers import status_router
from .routers import trust_router
from .services import TrustRefreshScheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def load_engine(target: str) -> Any:
    """Load a provenance engine from an import path.

    Args:
        target: "module:attribute" path; a class or factory function is called
            with no arguments to build the engine

    Returns:
        Provenance engine instance

    Raises:
        ValueError: If target is not in "module:attribute" form
        ImportError: If the module cannot be imported
        AttributeError: If the attribute does not exist
    """
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Engine must be given as 'module:attribute', got {target!r}")

    obj = getattr(importlib.import_module(module_name), attribute)
    if isinstance(obj, type) or (callable(obj) and not hasattr(obj, "read")):
        obj = obj()
    return obj


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Handles startup and shutdown events.

    Args:
        app: FastAPI application instance
    """
    # Startup
    settings = load_config()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info(f"Starting provenanced daemon on {settings.host}:{settings.port}")
    app.state.settings = settings

    manager = TrustListCacheManager.from_settings(settings)
    app.state.trust_manager = manager

    if settings.engine and getattr(app.state, "provenance_engine", None) is None:
        try:
            app.state.provenance_engine = load_engine(settings.engine)
            logger.info(f"Provenance engine loaded from {settings.engine}")
        except Exception as e:
            logger.error(f"Failed to load provenance engine {settings.engine}: {e}")
            # Don't fail startup, verify/read endpoints report 503

    # Initialize trust refresh scheduler
    scheduler = None
    try:
        scheduler = TrustRefreshScheduler(manager)
        await scheduler.start()
        app.state.trust_scheduler = scheduler
    except Exception as e:
        logger.error(f"Failed to start trust refresh scheduler: {e}")
        scheduler = None

    yield

    # Shutdown
    logger.info("Shutting down provenanced daemon")

    if scheduler is not None and scheduler.running:
        try:
            await scheduler.stop()
        except Exception as e:
            logger.error(f"Failed to stop trust refresh scheduler: {e}")


# Create FastAPI application
app = FastAPI(
    title="provenanced",
    description="REST API daemon for image provenance verification with cached trust lists",
    version=__version__,
    lifespan=lifespan,
)

# Add CORS middleware - origins configured in provenanced.yaml
cors_origins = load_config().cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.info(f"CORS enabled for origins: {cors_origins}")

# Include routers
app.include_router(trust_router)
app.include_router(c2pa_router)
app.include_router(status_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint.

    Returns:
        Welcome message with API information
    """
    return {
        "name": "provenanced",
        "version": __version__,
        "description": "REST API daemon for image provenance verification",
        "docs": "/docs",
        "openapi": "/openapi.json",
    }
