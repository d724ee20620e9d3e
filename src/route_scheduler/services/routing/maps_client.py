"""Travel-time lookups against the Google Distance Matrix API."""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

import httpx

from ...config import settings
from ...errors import ExternalServiceError
from ..external import request_with_retries

logger = logging.getLogger(__name__)

Coordinate = tuple[float, float]


class TravelTimeService(Protocol):
    def distance_matrix(self, origin: Coordinate, destinations: Sequence[Coordinate]) -> dict:
        """Return ``{"rows": [...]}`` with row 0 = origin and rows 1..N = each destination."""
        ...


def _format_coordinates(coordinates: Sequence[Coordinate]) -> str:
    return "|".join(f"{lat},{lon}" for lat, lon in coordinates)


class GoogleMapsClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.google_maps_api_key
        if not self.api_key:
            raise ValueError("Google Maps API key is not configured.")
        self.base_url = (base_url or settings.google_maps_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.external_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.external_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )

    def distance_matrix(self, origin: Coordinate, destinations: Sequence[Coordinate]) -> dict:
        if not destinations:
            raise ValueError("At least one destination is required for a distance matrix.")

        params = {
            "origins": _format_coordinates([origin, *destinations]),
            "destinations": _format_coordinates(destinations),
            "mode": "driving",
            "units": "metric",
            "key": self.api_key,
        }
        url = f"{self.base_url}/distancematrix/json"

        client = self._get_client()
        try:
            data = request_with_retries(
                client,
                "GET",
                url,
                service="Distance matrix",
                max_retries=self.max_retries,
                backoff_seconds=self.backoff_seconds,
                params=params,
            )
        finally:
            client.close()

        status = data.get("status") if isinstance(data, dict) else None
        if status != "OK":
            error_message = data.get("error_message", "") if isinstance(data, dict) else ""
            raise ExternalServiceError(
                "Distance matrix request failed",
                f"Google Distance Matrix status {status}: {error_message}".strip(),
            )
        logger.debug("Google distance matrix for %d destinations", len(destinations))
        return data


def get_travel_client() -> TravelTimeService:
    """Travel-time service selected by ``settings.travel_provider``."""
    try:
        if settings.travel_provider == "osrm":
            from .osrm_client import OSRMClient

            return OSRMClient()
        return GoogleMapsClient()
    except ValueError as exc:
        raise ExternalServiceError("Travel-time service is not configured", str(exc)) from exc
