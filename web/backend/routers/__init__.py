"""API route handlers."""

from .rankings import router as rankings_router
