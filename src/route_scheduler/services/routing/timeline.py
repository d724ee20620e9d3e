"""Lay out start/end times for an ordered day of jobs."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Sequence

from ...config import settings
from ...schemas.jobs import Job, JobDuration
from .matrix import TravelMatrix

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.000Z"
QUARTER_HOUR_MINUTES = 15


@dataclass(slots=True)
class TimelineSettings:
    day_start: time = time.fromisoformat(settings.day_start_time)
    default_job_minutes: int = settings.default_job_minutes
    default_travel_minutes: int = settings.default_travel_minutes
    buffer_min_minutes: int = settings.buffer_min_minutes
    buffer_max_minutes: int = settings.buffer_max_minutes


def format_timestamp(moment: datetime) -> str:
    """Wall-clock fields with a literal ``.000Z`` suffix; no UTC conversion happens."""
    return moment.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    """Read a timestamp as wall-clock time, dropping any zone designator."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1]
    parsed = datetime.fromisoformat(text)
    return parsed.replace(tzinfo=None)


def round_up_to_quarter_hour(moment: datetime) -> datetime:
    remainder = moment.minute % QUARTER_HOUR_MINUTES
    if remainder == 0 and moment.second == 0 and moment.microsecond == 0:
        return moment
    floored = moment.replace(minute=moment.minute - remainder, second=0, microsecond=0)
    return floored + timedelta(minutes=QUARTER_HOUR_MINUTES)


def travel_minutes(matrix: TravelMatrix, from_destination: int, to_destination: int, default: int) -> tuple[int, str | None]:
    element = matrix.lookup_between(from_destination, to_destination)
    if element is None:
        logger.warning(
            "No travel time from destination %d to %d; assuming %d minutes",
            from_destination,
            to_destination,
            default,
        )
        return default, None
    return math.ceil(element.duration_seconds / 60), element.duration_text


def layout_day(
    jobs: Sequence[Job],
    matrix: TravelMatrix,
    destination_indices: Sequence[int],
    base_date: date,
    *,
    rng: random.Random | None = None,
    timeline: TimelineSettings | None = None,
) -> list[Job]:
    """Assign start/end times to jobs already in visiting order.

    ``destination_indices[k]`` is the matrix column of ``jobs[k]``. Returns
    copies of the jobs; the inputs are left untouched.
    """
    if len(destination_indices) != len(jobs):
        raise ValueError("destination_indices must have one entry per job.")

    rng = rng or random.Random()
    timeline = timeline or TimelineSettings()
    cursor = datetime.combine(base_date, timeline.day_start)
    scheduled: list[Job] = []

    for position, job in enumerate(jobs):
        minutes = job.duration_minutes or timeline.default_job_minutes
        start = round_up_to_quarter_hour(cursor)
        end = start + timedelta(minutes=minutes)
        update = {
            "start_date": format_timestamp(start),
            "end_date": format_timestamp(end),
            "route_order": position + 1,
            "travel_time_to_next": None,
        }
        if not job.duration_minutes:
            update["duration"] = JobDuration.from_minutes(minutes)

        if position < len(jobs) - 1:
            travel, travel_text = travel_minutes(
                matrix,
                destination_indices[position],
                destination_indices[position + 1],
                timeline.default_travel_minutes,
            )
            buffer = rng.randint(timeline.buffer_min_minutes, timeline.buffer_max_minutes)
            update["travel_time_to_next"] = travel_text
            cursor = end + timedelta(minutes=travel + buffer)

        scheduled.append(job.model_copy(update=update))

    return scheduled
