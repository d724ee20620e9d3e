"""Turn an ``ADD_TASK: {...}`` reply from the assistant into a schedule job."""

from __future__ import annotations

import json
import re
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ...config import settings
from ...schemas.jobs import Job, JobDuration, Location
from ...data.locations import bunnings_location
from ..routing.timeline import format_timestamp

ADD_TASK_PATTERN = re.compile(r"ADD_TASK:\s*(\{.*?\})", re.DOTALL)
ADD_TASK_STRIP_PATTERN = re.compile(r"ADD_TASK:\s*\{.*?\}\s*", re.DOTALL)
LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
CLOCK_TIME = re.compile(r"(\d{1,2})(?::(\d{2}))?\s*(am|pm)?", re.IGNORECASE)


def extract_task_payload(reply: str) -> Optional[dict]:
    """Return the parsed ADD_TASK JSON, ``None`` if absent. Raises ValueError when malformed."""
    if "ADD_TASK:" not in reply:
        return None
    match = ADD_TASK_PATTERN.search(reply)
    if not match:
        return None
    payload = json.loads(match.group(1))
    if not isinstance(payload, dict):
        raise ValueError("ADD_TASK payload must be a JSON object")
    return payload


def strip_task_payload(reply: str) -> str:
    return ADD_TASK_STRIP_PATTERN.sub("", reply, count=1).strip()


def parse_duration_minutes(value: object) -> int:
    match = LEADING_INT.match(str(value or ""))
    if match:
        minutes = int(match.group(1))
        if minutes > 0:
            return minutes
    return settings.default_job_minutes


def parse_start_time(value: object) -> tuple[int, int]:
    """Hour and minute from phrases like "2pm", "10:30 AM" or "midday"; noon when unreadable."""
    text = str(value or "").lower()
    if "midday" in text or "noon" in text:
        return 12, 0
    match = CLOCK_TIME.search(text)
    if not match:
        return 12, 0
    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    period = (match.group(3) or "").lower()
    if period == "pm" and hour != 12:
        hour += 12
    if period == "am" and hour == 12:
        hour = 0
    if hour > 23 or minute > 59:
        return 12, 0
    return hour, minute


def resolve_location(value: object) -> Location:
    text = str(value or "")
    if "bunnings" in text.lower():
        return bunnings_location()
    return Location(
        formatted_address=text,
        street_address=text,
        suburb="",
        state="",
        postcode="",
        google_place_id=None,
        latitude=None,
        longitude=None,
    )


def next_job_id(schedule: Sequence[Job]) -> int:
    return max((job.id for job in schedule), default=0) + 1


def build_task(payload: dict, schedule: Sequence[Job], schedule_date: date) -> Job:
    minutes = parse_duration_minutes(payload.get("duration"))
    hour, minute = parse_start_time(payload.get("startTime"))
    start = datetime(schedule_date.year, schedule_date.month, schedule_date.day, hour, minute)
    end = start + timedelta(minutes=minutes)
    title = str(payload.get("title") or "New task")

    return Job(
        id=next_job_id(schedule),
        title=title,
        jobTitle=title,
        type=str(payload.get("type") or "Task"),
        start_date=format_timestamp(start),
        end_date=format_timestamp(end),
        location=resolve_location(payload.get("location")),
        duration=JobDuration.from_minutes(minutes),
        jobDescription=payload.get("description"),
    )
