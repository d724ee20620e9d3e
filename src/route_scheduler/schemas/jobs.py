"""Job and location schemas shared by the chat and routing endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

JOB_TYPE_PRIORITY = {
    "jobonsite": 3,
    "quoteinspection": 2,
    "task": 1,
}


class Location(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    formatted_address: Optional[str] = Field(default=None, alias="formattedAddress")
    street_address: Optional[str] = Field(default=None, alias="streetAddress")
    suburb: Optional[str] = None
    state: Optional[str] = None
    postcode: Optional[str] = None
    google_place_id: Optional[str] = Field(default=None, alias="googlePlaceId")
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class JobDuration(BaseModel):
    days: int = Field(default=0, ge=0)
    hours: int = Field(default=0, ge=0)
    minutes: int = Field(default=0, ge=0)

    @property
    def total_minutes(self) -> int:
        return self.days * 24 * 60 + self.hours * 60 + self.minutes

    @classmethod
    def from_minutes(cls, minutes: int) -> "JobDuration":
        return cls(days=0, hours=minutes // 60, minutes=minutes % 60)


class Job(BaseModel):
    """A unit of scheduled work. Unknown fields from the client are kept as-is."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int
    title: str
    type: str = "Task"
    location: Optional[Location] = None
    duration: JobDuration = Field(default_factory=JobDuration)
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    travel_time_to_next: Optional[str] = Field(default=None, alias="travelTimeToNext")
    route_order: Optional[int] = Field(default=None, alias="routeOrder")

    @property
    def duration_minutes(self) -> int:
        return self.duration.total_minutes

    @property
    def type_priority(self) -> int:
        key = "".join(ch for ch in self.type.lower() if ch.isalpha())
        return JOB_TYPE_PRIORITY.get(key, 1)

    @property
    def has_coordinates(self) -> bool:
        return self.location is not None and self.location.has_coordinates

    @property
    def coordinates(self) -> tuple[float, float]:
        if not self.has_coordinates:
            raise ValueError(f"Job '{self.title}' is missing location coordinates")
        return (self.location.latitude, self.location.longitude)


class StartLocation(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    formatted_address: Optional[str] = Field(default=None, alias="formattedAddress")
