"""REST API module for the marketplace.

This module provides HTTP endpoints for:
- Sign up, sign in and the auth email callbacks
- Reading and updating the caller's profile and dashboard navigation
- Creating and browsing seller stores
- Searching the product catalog
- Privileged user administration
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from database import init_clients, close as db_close

logger = logging.getLogger(__name__)

# Lifecycle management
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    logger.info("Initializing API...")
    await init_clients()

    yield

    logger.info("Shutting down API...")
    await db_close()

def create_app(use_lifespan: bool = True) -> FastAPI:
    """Build the FastAPI application.

    Args:
        use_lifespan: Connect the Supabase clients on startup. Tests that
            override the client dependencies pass False.
    """
    app = FastAPI(
        title="Stellar Market API",
        description="REST API for the Stellar marketplace",
        version="1.0.0",
        lifespan=lifespan if use_lifespan else None
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from .admin import router as admin_router
    from .auth import callback_router, router as auth_router
    from .catalog import router as catalog_router
    from .profile import router as profile_router
    from .stores import router as stores_router

    app.include_router(auth_router)
    app.include_router(callback_router)
    app.include_router(profile_router)
    app.include_router(stores_router)
    app.include_router(catalog_router)
    app.include_router(admin_router)

    @app.get("/")
    async def root():
        return {
            "name": "Stellar Market API",
            "version": "1.0.0",
            "status": "running"
        }

    return app

app = create_app()
