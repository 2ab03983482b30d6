#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

from fastapi import Request

from core.app_context import AppContext
from core.ranking import CandidateRankingService


def get_app_context(request: Request) -> AppContext:
    """The AppContext attached to the application by create_app()."""
    return request.app.state.ctx


def get_ranking_service(request: Request) -> CandidateRankingService:
    """
    FastAPI dependency returning the shared ranking service.

    Usage:
        @router.get("/endpoint")
        def my_endpoint(service: CandidateRankingService = Depends(get_ranking_service)):
            ...
    """
    return get_app_context(request).ranking_service
