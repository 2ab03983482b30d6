#!/usr/bin/env python3
"""
Candidate Ranking API - FastAPI Application

Usage:
    python main.py serve

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from core.app_context import AppContext
from core.config_loader import load_config
from core.errors import ServiceException
from .exceptions import (
    service_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    general_exception_handler
)
from .routers import rankings_router

logger = logging.getLogger(__name__)


def create_app(ctx: Optional[AppContext] = None) -> FastAPI:
    """Build the API around `ctx`, or around a context built from config.yaml.

    A context passed in is owned by the caller and is not shut down with the app.
    """
    owns_context = ctx is None
    if ctx is None:
        ctx = AppContext.build(load_config())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_context:
            ctx.shutdown()

    app = FastAPI(
        title="Candidate Ranking API",
        description="Assessment-based candidate rankings per job",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.ctx = ctx

    # Register exception handlers
    app.add_exception_handler(ServiceException, service_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Include routers
    app.include_router(rankings_router)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "candidate-ranking"}

    return app


def main():
    """Run the web server."""
    import uvicorn

    config = load_config()
    logger.info(f"Starting Candidate Ranking API on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        "web.backend.app:create_app",
        factory=True,
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level=config.logging.level.lower()
    )


if __name__ == "__main__":
    main()
