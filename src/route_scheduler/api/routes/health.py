"""Health endpoints."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/health/services", status_code=status.HTTP_200_OK)
def health_services() -> dict:
    """Report which external providers are configured, without calling them."""
    travel_configured = (
        bool(settings.osrm_base_url) if settings.travel_provider == "osrm" else bool(settings.google_maps_api_key)
    )
    return {
        "chat": {"configured": bool(settings.openai_api_key), "model": settings.openai_model},
        "travel": {"configured": travel_configured, "provider": settings.travel_provider},
    }
