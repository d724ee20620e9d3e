import pytest

from src.route_scheduler.errors import ScheduleValidationError
from src.route_scheduler.schemas.jobs import Job
from src.route_scheduler.services.routing.distribution import DistributionConstraints, plan_days


def _job(job_id: int, lat: float | None, lon: float | None, minutes: int = 60, job_type: str = "Task") -> Job:
    return Job(
        id=job_id,
        title=f"Job {job_id}",
        type=job_type,
        location={"latitude": lat, "longitude": lon, "formattedAddress": f"{job_id} Test St"},
        duration={"days": 0, "hours": minutes // 60, "minutes": minutes % 60},
    )


def _constraints(**overrides) -> DistributionConstraints:
    values = dict(max_jobs_per_day=7, max_minutes_per_day=480, cluster_radius_km=15.0, outlier_distance_km=10.0)
    values.update(overrides)
    return DistributionConstraints(**values)


def _ids(buckets: list[list[Job]]) -> list[list[int]]:
    return [[job.id for job in bucket] for bucket in buckets]


def test_small_job_list_stays_on_one_day_in_input_order():
    job_a = _job(1, -33.77, 151.05, minutes=90, job_type="Job on site")
    job_b = _job(2, -33.80, 151.10, minutes=30, job_type="Task")

    buckets = plan_days([job_a, job_b], _constraints())

    assert _ids(buckets) == [[1, 2]]


def test_small_job_list_ignores_duration_overflow():
    jobs = [_job(i, -33.80, 151.00, minutes=300) for i in range(1, 4)]

    buckets = plan_days(jobs, _constraints())

    assert _ids(buckets) == [[1, 2, 3]]


def test_missing_coordinates_names_the_job():
    jobs = [_job(1, -33.80, 151.00), _job(2, None, None)]

    with pytest.raises(ScheduleValidationError, match="Job 2"):
        plan_days(jobs, _constraints())


def test_ten_clustered_jobs_split_seven_and_three():
    jobs = [_job(i, -33.80 + i * 0.002, 151.00) for i in range(1, 11)]

    buckets = plan_days(jobs, _constraints())

    assert _ids(buckets) == [[1, 2, 3, 4, 5, 6, 7], [8, 9, 10]]


def test_outlier_moves_to_front_of_sparse_next_day():
    outlier = _job(100, -33.70, 151.00, minutes=90, job_type="JobOnSite")
    cluster = [_job(i, -33.80 - i * 0.001, 151.00) for i in range(1, 10)]

    buckets = plan_days([*cluster, outlier], _constraints())

    assert _ids(buckets) == [[1, 2, 3, 4, 5, 6], [100, 7, 8, 9]]


def test_priority_and_duration_order_the_packing():
    jobs = [
        _job(1, -33.80, 151.00, minutes=30, job_type="Task"),
        _job(2, -33.80, 151.00, minutes=60, job_type="Quote inspection"),
        _job(3, -33.80, 151.00, minutes=45, job_type="Job on site"),
        _job(4, -33.80, 151.00, minutes=120, job_type="Job on site"),
        _job(5, -33.80, 151.00, minutes=30, job_type="Mystery"),
        _job(6, -33.80, 151.00, minutes=90, job_type="Task"),
        _job(7, -33.80, 151.00, minutes=15, job_type="QuoteInspection"),
        _job(8, -33.80, 151.00, minutes=15, job_type="Task"),
    ]

    buckets = plan_days(jobs, _constraints())

    assert buckets[0][:4] == [jobs[3], jobs[2], jobs[1], jobs[6]]
    assert buckets[0][4] is jobs[5]


def test_distant_job_starts_a_new_day():
    near = [_job(i, -33.80, 151.00 + i * 0.001) for i in range(1, 8)]
    far = _job(50, -34.50, 150.50)

    buckets = plan_days([*near[:3], far, *near[3:]], _constraints())

    assert _ids(buckets) == [[1, 2, 3], [50], [4, 5, 6, 7]]


def test_long_job_is_isolated():
    long_job = _job(1, -33.80, 151.00, minutes=600, job_type="Job on site")
    tasks = [_job(i, -33.80, 151.00 + i * 0.001, minutes=30) for i in range(2, 10)]

    buckets = plan_days([*tasks, long_job], _constraints())

    assert buckets[0] == [long_job]
    assert _ids(buckets[1:]) == [[2, 3, 4, 5, 6, 7, 8], [9]]


def test_minutes_cap_closes_a_day():
    jobs = [_job(i, -33.80, 151.00, minutes=150) for i in range(1, 9)]

    buckets = plan_days(jobs, _constraints())

    assert _ids(buckets) == [[1, 2, 3], [4, 5, 6], [7, 8]]
    assert all(sum(job.duration_minutes for job in bucket) <= 480 for bucket in buckets)


def test_rebalanced_outlier_may_push_next_day_over_minutes_cap():
    outlier = _job(100, -33.70, 151.00, minutes=90, job_type="Job on site")
    cluster = [_job(i, -33.80 - i * 0.001, 151.00, minutes=30, job_type="Job on site") for i in range(1, 7)]
    long_tasks = [_job(i, -33.80, 151.00, minutes=200) for i in (7, 8)]

    buckets = plan_days([*long_tasks, *cluster, outlier], _constraints())

    assert _ids(buckets) == [[1, 2, 3, 4, 5, 6], [100, 7, 8]]
    assert sum(job.duration_minutes for job in buckets[1]) == 490


@pytest.mark.parametrize("count", [8, 12, 15, 20])
def test_buckets_cover_every_job_once_and_respect_caps(count):
    jobs = [
        _job(
            i,
            -33.80 + (i % 5) * 0.05,
            151.00 + (i % 3) * 0.07,
            minutes=30 + (i % 4) * 45,
            job_type=("Task", "Quote inspection", "Job on site")[i % 3],
        )
        for i in range(1, count + 1)
    ]

    buckets = plan_days(jobs, _constraints())

    flattened = [job.id for bucket in buckets for job in bucket]
    assert sorted(flattened) == list(range(1, count + 1))
    assert all(len(bucket) <= 7 for bucket in buckets)
    assert all(bucket for bucket in buckets)
