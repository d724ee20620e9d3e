"""Greedy multi-day distribution of jobs into day buckets."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ...config import settings
from ...errors import ScheduleValidationError
from ...schemas.jobs import Job
from ..geospatial import mean_distance_km

logger = logging.getLogger(__name__)

# Rebalancing applies when the earlier day is above the first ratio and the
# following day is below the second (both of max_jobs_per_day).
CROWDED_DAY_RATIO = 0.8
SPARSE_DAY_RATIO = 0.6


@dataclass(slots=True)
class DistributionConstraints:
    max_jobs_per_day: int = settings.max_jobs_per_day
    max_minutes_per_day: int = settings.max_minutes_per_day
    cluster_radius_km: float = settings.cluster_radius_km
    outlier_distance_km: float = settings.outlier_distance_km


def ensure_coordinates(jobs: Sequence[Job]) -> None:
    for job in jobs:
        if not job.has_coordinates:
            raise ScheduleValidationError(
                f"Job '{job.title}' is missing location coordinates",
                details=f"Job id {job.id} has no latitude/longitude; geocode the address before routing.",
            )


def _priority_order(jobs: Sequence[Job]) -> list[Job]:
    return sorted(jobs, key=lambda job: (job.type_priority, job.duration_minutes), reverse=True)


def _fits_bucket(job: Job, bucket: list[Job], running_minutes: int, constraints: DistributionConstraints) -> bool:
    if len(bucket) >= constraints.max_jobs_per_day:
        return False
    if running_minutes + job.duration_minutes > constraints.max_minutes_per_day:
        return False
    if not bucket:
        return True
    spread = mean_distance_km(job.coordinates, (other.coordinates for other in bucket))
    return spread <= constraints.cluster_radius_km


def _pack(jobs: Sequence[Job], constraints: DistributionConstraints) -> list[list[Job]]:
    buckets: list[list[Job]] = []
    current: list[Job] = []
    running_minutes = 0

    for job in jobs:
        if _fits_bucket(job, current, running_minutes, constraints):
            current.append(job)
            running_minutes += job.duration_minutes
            continue
        if current:
            buckets.append(current)
        current = [job]
        running_minutes = job.duration_minutes

    if current:
        buckets.append(current)
    return buckets


def _find_outlier(bucket: list[Job]) -> tuple[int, float]:
    """Index of the job furthest on average from the rest of its bucket, and that mean distance."""
    best_index, best_distance = 0, -1.0
    for index, job in enumerate(bucket):
        others = [other.coordinates for position, other in enumerate(bucket) if position != index]
        distance = mean_distance_km(job.coordinates, others)
        if distance > best_distance:
            best_index, best_distance = index, distance
    return best_index, best_distance


def _rebalance(buckets: list[list[Job]], constraints: DistributionConstraints) -> None:
    crowded = constraints.max_jobs_per_day * CROWDED_DAY_RATIO
    sparse = constraints.max_jobs_per_day * SPARSE_DAY_RATIO

    for index in range(len(buckets) - 1):
        current, following = buckets[index], buckets[index + 1]
        if len(current) <= crowded or len(following) >= sparse:
            continue
        outlier_index, distance = _find_outlier(current)
        if distance > constraints.outlier_distance_km:
            moved = current.pop(outlier_index)
            following.insert(0, moved)
            logger.info(
                "Moved job %s from day %d to day %d (mean distance %.1f km)",
                moved.id,
                index + 1,
                index + 2,
                distance,
            )


def plan_days(jobs: Sequence[Job], constraints: DistributionConstraints | None = None) -> list[list[Job]]:
    """Split jobs into day buckets.

    Small job lists (no more than ``max_jobs_per_day``) always stay on a
    single day in input order, even if their total duration exceeds the
    daily minutes cap. Larger lists are sorted by type priority and
    duration, packed greedily by capacity and geographic cohesion, then
    given one rebalancing pass over adjacent days.
    """
    constraints = constraints or DistributionConstraints()
    ensure_coordinates(jobs)

    if len(jobs) <= constraints.max_jobs_per_day:
        return [list(jobs)]

    buckets = _pack(_priority_order(jobs), constraints)
    _rebalance(buckets, constraints)
    logger.info("Distributed %d jobs across %d days", len(jobs), len(buckets))
    return buckets
