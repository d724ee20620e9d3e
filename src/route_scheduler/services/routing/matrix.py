"""Travel-time matrix parsed from a distance matrix response.

Row 0 is the start location and rows 1..N are the destinations used as
origins. Columns are the destinations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ...errors import ExternalServiceError

MALFORMED_RESPONSE = "Distance matrix response malformed"


@dataclass(slots=True)
class TravelElement:
    duration_seconds: float
    distance_meters: Optional[float] = None
    duration_text: Optional[str] = None
    distance_text: Optional[str] = None


@dataclass(slots=True)
class TravelMatrix:
    entries: dict[tuple[int, int], TravelElement] = field(default_factory=dict)

    def lookup(self, from_index: int, to_index: int) -> Optional[TravelElement]:
        return self.entries.get((from_index, to_index))

    def lookup_between(self, from_destination: int, to_destination: int) -> Optional[TravelElement]:
        """Travel from one destination to another (destination rows are offset by the start row)."""
        return self.lookup(from_destination + 1, to_destination)

    def __len__(self) -> int:
        return len(self.entries)

    @classmethod
    def from_response(cls, data: dict) -> "TravelMatrix":
        """Build from the ``{"rows": [{"elements": [...]}]}`` response shape.

        Elements without a usable duration (status other than OK, or no
        duration value) are left out so lookups fall back to defaults. A
        response that does not have this shape at all is an external failure.
        """
        if not isinstance(data, dict):
            raise ExternalServiceError(MALFORMED_RESPONSE, f"Expected a JSON object, got {type(data).__name__}.")
        entries: dict[tuple[int, int], TravelElement] = {}
        try:
            for row_index, row in enumerate(data.get("rows") or []):
                for col_index, element in enumerate((row or {}).get("elements") or []):
                    if not element or element.get("status", "OK") != "OK":
                        continue
                    duration = element.get("duration") or {}
                    if duration.get("value") is None:
                        continue
                    distance = element.get("distance") or {}
                    entries[(row_index, col_index)] = TravelElement(
                        duration_seconds=float(duration["value"]),
                        distance_meters=float(distance["value"]) if distance.get("value") is not None else None,
                        duration_text=duration.get("text"),
                        distance_text=distance.get("text"),
                    )
        except (AttributeError, TypeError, ValueError) as exc:
            raise ExternalServiceError(MALFORMED_RESPONSE, str(exc)) from exc
        return cls(entries=entries)
