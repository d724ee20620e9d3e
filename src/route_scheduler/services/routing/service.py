"""Routing orchestration service."""

from __future__ import annotations

import logging
import random
import re
from datetime import date, timedelta
from typing import Sequence

from ...config import settings
from ...data.locations import default_start_location
from ...errors import ExternalServiceError, ScheduleValidationError
from ...schemas.jobs import Job, StartLocation
from ...schemas.routing import (
    DateRange,
    DayScheduleModel,
    MultiDayRouteRequest,
    MultiDayRouteResponse,
    OptimizeRouteRequest,
    OptimizeRouteResponse,
    ScheduleSummaryModel,
)
from ..llm.client import ChatCompletionService, get_chat_client
from .distribution import DistributionConstraints, ensure_coordinates, plan_days
from .maps_client import TravelTimeService, get_travel_client
from .matrix import TravelMatrix
from .models import DayPlan, MultiDaySchedule
from .ordering import request_ordering
from .timeline import layout_day, parse_timestamp

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_calendar_date(value: str | None, field_name: str) -> date:
    if not value or not DATE_PATTERN.match(value):
        raise ScheduleValidationError(
            f"{field_name} must be in YYYY-MM-DD format",
            details=f"Received {value!r} for {field_name}.",
        )
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ScheduleValidationError(f"{field_name} is not a valid calendar date", details=str(exc)) from exc


def _validate_jobs(jobs: Sequence[Job]) -> None:
    if not jobs:
        raise ScheduleValidationError("Jobs array is required and must not be empty")
    if len(jobs) > settings.max_jobs_per_request:
        raise ScheduleValidationError(
            f"Too many jobs: maximum {settings.max_jobs_per_request} jobs per request",
            details=f"Received {len(jobs)} jobs.",
        )


def _resolve_start(start: StartLocation | None) -> StartLocation:
    return start or default_start_location()


def _route_day(
    jobs: Sequence[Job],
    start: StartLocation,
    day: date,
    *,
    chat_client: ChatCompletionService,
    travel_client: TravelTimeService,
    rng: random.Random,
) -> tuple[list[Job], str | None, str | None]:
    """Matrix lookup, ordering and time layout for a single day of jobs."""
    destinations = [job.coordinates for job in jobs]
    response = travel_client.distance_matrix((start.latitude, start.longitude), destinations)
    matrix = TravelMatrix.from_response(response)
    logger.info("Travel matrix for %s: %d of %d entries", day.isoformat(), len(matrix), (len(jobs) + 1) * len(jobs))

    ordering = request_ordering(chat_client, jobs, matrix, start)
    ordered_jobs = [jobs[index] for index in ordering.order]
    scheduled = layout_day(ordered_jobs, matrix, ordering.order, day, rng=rng)
    return scheduled, ordering.total_travel_time, ordering.explanation


def _routing_date_for(payload: OptimizeRouteRequest) -> date:
    if payload.routing_date:
        return parse_calendar_date(payload.routing_date, "routingDate")
    first_start = payload.jobs[0].start_date
    if first_start:
        try:
            return parse_timestamp(first_start).date()
        except ValueError as exc:
            raise ScheduleValidationError(
                "routingDate is required when jobs have no valid startDate",
                details=str(exc),
            ) from exc
    raise ScheduleValidationError(
        "routingDate is required",
        details="Provide routingDate (YYYY-MM-DD) or jobs with an existing startDate.",
    )


def optimize_route(
    payload: OptimizeRouteRequest,
    *,
    chat_client: ChatCompletionService | None = None,
    travel_client: TravelTimeService | None = None,
    rng: random.Random | None = None,
) -> OptimizeRouteResponse:
    """Order and time a single day's jobs."""
    _validate_jobs(payload.jobs)
    ensure_coordinates(payload.jobs)
    routing_date = _routing_date_for(payload)
    start = _resolve_start(payload.start_location)

    chat_client = chat_client or get_chat_client()
    travel_client = travel_client or get_travel_client()

    try:
        scheduled, total_travel_time, explanation = _route_day(
            payload.jobs,
            start,
            routing_date,
            chat_client=chat_client,
            travel_client=travel_client,
            rng=rng or random.Random(),
        )
    except ExternalServiceError as exc:
        raise ExternalServiceError(f"Failed to optimize route: {exc.message}", exc.details) from exc

    return OptimizeRouteResponse(
        optimized_jobs=scheduled,
        total_travel_time=total_travel_time,
        explanation=explanation,
        routing_date=routing_date.isoformat(),
        start_location=start,
    )


def plan_multi_day_schedule(
    jobs: Sequence[Job],
    start: StartLocation,
    start_date: date,
    *,
    max_jobs_per_day: int,
    chat_client: ChatCompletionService,
    travel_client: TravelTimeService,
    rng: random.Random,
) -> MultiDaySchedule:
    buckets = plan_days(jobs, DistributionConstraints(max_jobs_per_day=max_jobs_per_day))
    schedule = MultiDaySchedule()

    for index, bucket in enumerate(buckets):
        day_number = index + 1
        day = start_date + timedelta(days=index)
        logger.info("Routing day %d (%s) with %d jobs", day_number, day.isoformat(), len(bucket))
        try:
            scheduled, total_travel_time, explanation = _route_day(
                bucket,
                start,
                day,
                chat_client=chat_client,
                travel_client=travel_client,
                rng=rng,
            )
        except ScheduleValidationError as exc:
            raise ScheduleValidationError(f"Failed to optimize day {day_number}: {exc.message}", exc.details) from exc
        except ExternalServiceError as exc:
            raise ExternalServiceError(f"Failed to optimize day {day_number}: {exc.message}", exc.details) from exc

        schedule.days.append(
            DayPlan(
                date=day.isoformat(),
                day_number=day_number,
                jobs=scheduled,
                total_travel_time=total_travel_time,
                explanation=explanation,
            )
        )
    return schedule


def optimize_multi_day_route(
    payload: MultiDayRouteRequest,
    *,
    chat_client: ChatCompletionService | None = None,
    travel_client: TravelTimeService | None = None,
    rng: random.Random | None = None,
) -> MultiDayRouteResponse:
    """Distribute jobs over consecutive days starting at ``startFromDate`` and route each day."""
    _validate_jobs(payload.jobs)
    ensure_coordinates(payload.jobs)
    start_date = parse_calendar_date(payload.start_from_date, "startFromDate")
    max_jobs_per_day = payload.max_jobs_per_day if payload.max_jobs_per_day is not None else settings.max_jobs_per_day
    if max_jobs_per_day < 1:
        raise ScheduleValidationError("maxJobsPerDay must be at least 1")
    start = _resolve_start(payload.start_location)

    schedule = plan_multi_day_schedule(
        payload.jobs,
        start,
        start_date,
        max_jobs_per_day=max_jobs_per_day,
        chat_client=chat_client or get_chat_client(),
        travel_client=travel_client or get_travel_client(),
        rng=rng or random.Random(),
    )

    days = [
        DayScheduleModel(
            date=day.date,
            day_number=day.day_number,
            jobs=day.jobs,
            estimated_start_time=day.estimated_start_time,
            estimated_end_time=day.estimated_end_time,
            total_travel_time=day.total_travel_time,
            explanation=day.explanation,
        )
        for day in schedule.days
    ]
    summary = ScheduleSummaryModel(
        total_jobs=schedule.total_jobs,
        total_days=schedule.total_days,
        date_range=DateRange(start=schedule.days[0].date, end=schedule.days[-1].date),
        average_jobs_per_day=schedule.average_jobs_per_day,
    )
    return MultiDayRouteResponse(schedule=days, summary=summary, start_location=start)
