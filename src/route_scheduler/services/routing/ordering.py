"""Visiting order for a day's jobs, proposed by the chat service."""

from __future__ import annotations

import json
import logging
from typing import Iterator, Sequence

from ...config import settings
from ...errors import ExternalServiceError
from ...schemas.jobs import Job, StartLocation
from ..llm.client import ChatCompletionService
from .matrix import TravelMatrix
from .models import RouteOrdering

logger = logging.getLogger(__name__)

INVALID_RESPONSE = "Invalid AI response format"
_DECODER = json.JSONDecoder()

SYSTEM_PROMPT = (
    "You are a route optimization assistant for a tradesperson. Given a start location, "
    "a list of jobs and the driving times between them, choose the visiting order that "
    "minimises total driving time. Prefer visiting 'Job on site' work early in the day. "
    "Respond with JSON only."
)


def _describe_job(number: int, job: Job) -> str:
    address = job.location.formatted_address if job.location and job.location.formatted_address else "Unknown address"
    return f"{number}. {job.title} ({job.type}, {job.duration_minutes or settings.default_job_minutes} min) at {address}"


def _travel_text(matrix: TravelMatrix, row: int, column: int) -> str:
    element = matrix.lookup(row, column)
    if element is None:
        return "unknown"
    return element.duration_text or f"{round(element.duration_seconds / 60)} mins"


def build_ordering_prompt(jobs: Sequence[Job], matrix: TravelMatrix, start: StartLocation) -> str:
    start_label = start.formatted_address or f"{start.latitude},{start.longitude}"
    lines = [f"Start location: {start_label}", "", "Jobs:"]
    lines.extend(_describe_job(number, job) for number, job in enumerate(jobs, start=1))

    lines.extend(["", "Driving times from the start location:"])
    for column in range(len(jobs)):
        lines.append(f"Start -> {column + 1}: {_travel_text(matrix, 0, column)}")

    lines.extend(["", "Driving times between jobs:"])
    for origin in range(len(jobs)):
        for column in range(len(jobs)):
            if origin != column:
                lines.append(f"{origin + 1} -> {column + 1}: {_travel_text(matrix, origin + 1, column)}")

    lines.extend(
        [
            "",
            "Return the order as JSON with 1-based job numbers:",
            '{"optimizedRoute": [1, 2, 3], "totalTravelTime": "1 hour 10 mins", '
            '"explanation": "short reason for the order"}',
        ]
    )
    return "\n".join(lines)


def _json_objects(content: str) -> Iterator[dict]:
    """Yield each JSON object embedded in ``content``, left to right."""
    start = content.find("{")
    while start != -1:
        try:
            value, end = _DECODER.raw_decode(content, start)
        except json.JSONDecodeError:
            start = content.find("{", start + 1)
            continue
        if isinstance(value, dict):
            yield value
        start = content.find("{", end)


def parse_ordering(content: str, job_count: int) -> RouteOrdering:
    """Extract the JSON ordering from the reply, rejecting anything unusable.

    The first embedded object carrying ``optimizedRoute`` wins, so prose or
    other braces around it are ignored.
    """
    objects = list(_json_objects(content or ""))
    if not objects:
        raise ExternalServiceError(INVALID_RESPONSE, "No JSON object found in route ordering response.")
    data = next((candidate for candidate in objects if "optimizedRoute" in candidate), objects[0])

    route = data.get("optimizedRoute")
    if not isinstance(route, list) or not all(isinstance(item, int) and not isinstance(item, bool) for item in route):
        raise ExternalServiceError(INVALID_RESPONSE, "optimizedRoute must be a list of job numbers.")
    if sorted(route) != list(range(1, job_count + 1)):
        raise ExternalServiceError(
            INVALID_RESPONSE,
            f"optimizedRoute {route} is not an ordering of jobs 1..{job_count}.",
        )

    total = data.get("totalTravelTime")
    explanation = data.get("explanation")
    return RouteOrdering(
        order=[item - 1 for item in route],
        total_travel_time=str(total) if total is not None else None,
        explanation=str(explanation) if explanation is not None else None,
    )


def request_ordering(
    chat_client: ChatCompletionService,
    jobs: Sequence[Job],
    matrix: TravelMatrix,
    start: StartLocation,
) -> RouteOrdering:
    if len(jobs) == 1:
        return RouteOrdering(order=[0], explanation="Single job; no ordering needed.")

    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_ordering_prompt(jobs, matrix, start)},
    ]
    content = chat_client.complete(
        messages,
        max_tokens=settings.ordering_max_tokens,
        temperature=settings.ordering_temperature,
    )
    try:
        return parse_ordering(content, len(jobs))
    except ExternalServiceError:
        logger.warning("Rejected route ordering response: %s", (content or "")[:200])
        raise
