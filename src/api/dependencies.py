"""FastAPI dependency providers for application services."""

from __future__ import annotations

from fastapi import HTTPException, Request

from cover_fallback.core import CoverExtractionService
from cover_fallback.tools import ToolProber


def get_service(request: Request) -> CoverExtractionService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="SERVICE_UNAVAILABLE")
    return service


def get_prober(request: Request) -> ToolProber:
    service = get_service(request)
    return service.prober


__all__ = ["get_prober", "get_service"]
