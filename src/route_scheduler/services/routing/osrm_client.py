"""HTTP client for travel times from an OSRM table service.

Responses are reshaped into the Google Distance Matrix row/element layout so
the rest of the routing code reads one format.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

import httpx

from ...config import settings
from ...errors import ExternalServiceError
from ..external import request_with_retries

logger = logging.getLogger(__name__)

Coordinate = tuple[float, float]


def format_duration_text(seconds: float) -> str:
    minutes = max(1, math.ceil(seconds / 60))
    hours, minutes = divmod(minutes, 60)
    parts = []
    if hours:
        parts.append(f"{hours} hour" + ("s" if hours != 1 else ""))
    if minutes:
        parts.append(f"{minutes} min" + ("s" if minutes != 1 else ""))
    return " ".join(parts)


def format_distance_text(meters: float) -> str:
    if meters < 1000:
        return f"{int(round(meters))} m"
    return f"{meters / 1000:.1f} km"


def _element(duration: float | None, distance: float | None) -> dict:
    if duration is None:
        return {"status": "ZERO_RESULTS"}
    element = {
        "status": "OK",
        "duration": {"value": duration, "text": format_duration_text(duration)},
    }
    if distance is not None:
        element["distance"] = {"value": distance, "text": format_distance_text(distance)}
    return element


class OSRMClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.osrm_base_url
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.base_url = self.base_url.rstrip("/")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.external_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.external_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )

    def _table(self, coordinates: Sequence[Coordinate], sources: Sequence[int], destinations: Sequence[int]) -> dict:
        coordinate_str = ";".join(f"{lon},{lat}" for lat, lon in coordinates)
        params = {
            "annotations": "duration,distance",
            "sources": ";".join(str(i) for i in sources),
            "destinations": ";".join(str(i) for i in destinations),
        }
        url = f"{self.base_url}/table/v1/{self.profile}/{coordinate_str}"

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

        if not isinstance(data, dict) or data.get("code", "Ok") != "Ok" or "durations" not in data:
            message = data.get("message", "missing durations") if isinstance(data, dict) else "unexpected body"
            logger.warning("OSRM table request rejected: %s", message)
            raise ExternalServiceError("Distance matrix request failed", f"OSRM table request failed: {message}")
        return data

    def distance_matrix(self, origin: Coordinate, destinations: Sequence[Coordinate]) -> dict:
        if not destinations:
            raise ValueError("At least one destination is required for a distance matrix.")

        coordinates = [origin, *destinations]
        sources = list(range(len(coordinates)))
        targets = list(range(1, len(coordinates)))
        data = self._table(coordinates, sources, targets)

        durations = data.get("durations") or []
        distances = data.get("distances") or [[None] * len(targets) for _ in sources]
        rows = []
        for duration_row, distance_row in zip(durations, distances):
            rows.append(
                {"elements": [_element(duration, distance) for duration, distance in zip(duration_row, distance_row)]}
            )
        return {"status": "OK", "rows": rows}
