"""
FastAPI application factory for the bridge relay monitor.

Routes:
- /api/status -> monitor phase, message flags and outcome
- /api/health -> running|passed|failed|idle
"""

from __future__ import annotations

from fastapi import FastAPI

from .routes import api


def create_app() -> FastAPI:
    """Create the FastAPI app and wire routes."""
    app = FastAPI(
        title="Bridge Relay Monitor",
        version="0.1.0",
        description="Pass/fail observer of a bridge relay",
    )
    app.include_router(api.router, prefix="/api")
    return app
