"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ...schemas.jobs import Job


@dataclass(slots=True)
class RouteOrdering:
    """Visiting order proposed by the chat service, as zero-based job positions."""

    order: List[int]
    total_travel_time: Optional[str] = None
    explanation: Optional[str] = None


@dataclass(slots=True)
class DayPlan:
    date: str
    day_number: int
    jobs: List[Job]
    total_travel_time: Optional[str] = None
    explanation: Optional[str] = None

    @property
    def estimated_start_time(self) -> Optional[str]:
        return self.jobs[0].start_date if self.jobs else None

    @property
    def estimated_end_time(self) -> Optional[str]:
        return self.jobs[-1].end_date if self.jobs else None


@dataclass(slots=True)
class MultiDaySchedule:
    days: List[DayPlan] = field(default_factory=list)

    @property
    def total_jobs(self) -> int:
        return sum(len(day.jobs) for day in self.days)

    @property
    def total_days(self) -> int:
        return len(self.days)

    @property
    def average_jobs_per_day(self) -> float:
        if not self.days:
            return 0.0
        return round(self.total_jobs / self.total_days, 1)
