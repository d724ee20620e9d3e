"""Routing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status

from ...errors import ExternalServiceError, ScheduleValidationError
from ...schemas.routing import (
    MultiDayRouteRequest,
    MultiDayRouteResponse,
    OptimizeRouteRequest,
    OptimizeRouteResponse,
)
from ...services.routing.service import optimize_multi_day_route, optimize_route

logger = logging.getLogger(__name__)

router = APIRouter(tags=["routes"])


@router.post("/optimize-route", response_model=OptimizeRouteResponse, status_code=status.HTTP_200_OK)
def optimize(payload: OptimizeRouteRequest) -> OptimizeRouteResponse:
    try:
        return optimize_route(payload)
    except (ScheduleValidationError, ExternalServiceError):
        raise
    except Exception as exc:
        logger.exception("Error optimizing route: %s", exc)
        raise ExternalServiceError("Failed to optimize route", str(exc)) from exc


@router.post("/optimize-multi-day-route", response_model=MultiDayRouteResponse, status_code=status.HTTP_200_OK)
def optimize_multi_day(payload: MultiDayRouteRequest) -> MultiDayRouteResponse:
    try:
        return optimize_multi_day_route(payload)
    except (ScheduleValidationError, ExternalServiceError):
        raise
    except Exception as exc:
        logger.exception("Error optimizing multi-day route: %s", exc)
        raise ExternalServiceError("Failed to optimize multi-day route", str(exc)) from exc
