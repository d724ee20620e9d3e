"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .jobs import Job, StartLocation


class OptimizeRouteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    jobs: List[Job] = Field(default_factory=list)
    start_location: Optional[StartLocation] = Field(default=None, alias="startLocation")
    routing_date: Optional[str] = Field(
        default=None,
        alias="routingDate",
        description="Calendar date (YYYY-MM-DD) the route is laid out on.",
    )


class OptimizeRouteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    optimized_jobs: List[Job] = Field(alias="optimizedJobs")
    total_travel_time: Optional[str] = Field(default=None, alias="totalTravelTime")
    explanation: Optional[str] = None
    routing_date: str = Field(alias="routingDate")
    start_location: StartLocation = Field(alias="startLocation")


class MultiDayRouteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    jobs: List[Job] = Field(default_factory=list)
    start_location: Optional[StartLocation] = Field(default=None, alias="startLocation")
    start_from_date: Optional[str] = Field(default=None, alias="startFromDate")
    max_jobs_per_day: Optional[int] = Field(default=None, alias="maxJobsPerDay")


class DateRange(BaseModel):
    start: str
    end: str


class DayScheduleModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: str
    day_number: int = Field(alias="dayNumber")
    jobs: List[Job]
    estimated_start_time: Optional[str] = Field(default=None, alias="estimatedStartTime")
    estimated_end_time: Optional[str] = Field(default=None, alias="estimatedEndTime")
    total_travel_time: Optional[str] = Field(default=None, alias="totalTravelTime")
    explanation: Optional[str] = None


class ScheduleSummaryModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_jobs: int = Field(alias="totalJobs")
    total_days: int = Field(alias="totalDays")
    date_range: DateRange = Field(alias="dateRange")
    average_jobs_per_day: float = Field(alias="averageJobsPerDay")


class MultiDayRouteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schedule: List[DayScheduleModel]
    summary: ScheduleSummaryModel
    start_location: StartLocation = Field(alias="startLocation")
