"""Workload & availability — task counts, weekly hours, schedule conflicts, history."""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable

from shopfloor.config import WorkloadConfig
from shopfloor.exceptions import WorkerNotFound
from shopfloor.log import get_logger
from shopfloor.models import WEEKDAYS, Worker, WorkerSchedule, WorkerStatus
from shopfloor.repositories import AssignmentRepository, ScheduleRepository, WorkerRepository
from shopfloor.validation import parse_time, validate_hours

logger = get_logger(__name__)

SCHEDULABLE_STATUSES = (WorkerStatus.AVAILABLE, WorkerStatus.WORKING)


@dataclass
class WorkloadAnalysis:
    worker_id: str
    current_tasks: int
    scheduled_hours: float
    available_capacity: float
    utilization_rate: float
    overtime_hours: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PerformanceMetrics:
    worker_id: str
    efficiency: float
    quality_score: float
    tasks_completed: int
    hours_worked: float
    average_task_time: float
    on_time_completion: float
    rework_rate: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class AvailabilityResult:
    available: bool
    reason: str | None = None
    conflicts: list[WorkerSchedule] = field(default_factory=list)


def time_ranges_overlap(start1: str, end1: str, start2: str, end2: str) -> bool:
    """Half-open overlap of two same-day clock ranges. Symmetric in its two ranges."""
    s1, e1 = parse_time(start1), parse_time(end1)
    s2, e2 = parse_time(start2), parse_time(end2)
    return s1 < e2 and s2 < e1


def week_bounds(moment: datetime) -> tuple[date, date]:
    """[Sunday, next Sunday) for the week containing moment."""
    today = moment.date()
    start = today - timedelta(days=(today.weekday() + 1) % 7)
    return start, start + timedelta(days=7)


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


class WorkloadAnalyzer:
    """Computes load, capacity and history for a worker from the repositories."""

    def __init__(
        self,
        workers: WorkerRepository,
        schedules: ScheduleRepository,
        assignments: AssignmentRepository,
        config: WorkloadConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.workers = workers
        self.schedules = schedules
        self.assignments = assignments
        self.config = config or WorkloadConfig()
        self.clock = clock

    def _worker(self, worker_id: str) -> Worker:
        worker = self.workers.get(worker_id)
        if worker is None:
            raise WorkerNotFound(worker_id)
        return worker

    def get_workload(self, worker_id: str) -> WorkloadAnalysis:
        """Active task count plus this week's scheduled hours against the weekly limit."""
        worker = self._worker(worker_id)

        # Assignments are keyed by the linked user; a worker without one has none
        if worker.user_id:
            current_tasks = self.assignments.count(worker.user_id, self.config.active_statuses)
        else:
            current_tasks = 0

        week_start, week_end = week_bounds(self.clock())
        entries = self.schedules.find_between(worker_id, week_start, week_end)

        scheduled_hours = sum(float(e.scheduled_hours) for e in entries)
        overtime_hours = sum(float(e.scheduled_hours) for e in entries if e.is_overtime)

        limit = worker.weekly_hours_limit
        available_capacity = max(0.0, limit - scheduled_hours)
        utilization_rate = (scheduled_hours / limit) * 100 if limit > 0 else 0.0

        return WorkloadAnalysis(
            worker_id=worker_id,
            current_tasks=current_tasks,
            scheduled_hours=scheduled_hours,
            available_capacity=available_capacity,
            utilization_rate=utilization_rate,
            overtime_hours=overtime_hours,
        )

    def get_performance(
        self,
        worker_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> PerformanceMetrics:
        """Stored aggregates plus figures derived from completed assignments.

        average_task_time: mean hours from start to completion, averaged over all
            completed assignments (those missing a timestamp contribute 0).
        on_time_completion: % completed at or before the task due date; 100 when
            nothing has been completed yet.
        rework_rate: % of completed assignments flagged was_reassigned; only
            assignments whose task still resolves are counted.
        """
        worker = self._worker(worker_id)
        completed = (
            self.assignments.completed_with_tasks(worker.user_id, start, end)
            if worker.user_id else []
        )

        total_hours = 0.0
        on_time = 0
        rework = 0
        for assignment in completed:
            if assignment.started_at and assignment.completed_at:
                total_hours += (assignment.completed_at - assignment.started_at).total_seconds() / 3600

            task = assignment.task
            if task is None:
                continue

            if task.due_date and assignment.completed_at and assignment.completed_at <= task.due_date:
                on_time += 1

            if assignment.metadata.get("was_reassigned"):
                rework += 1

        count = len(completed)
        return PerformanceMetrics(
            worker_id=worker_id,
            efficiency=float(worker.efficiency),
            quality_score=float(worker.quality_score),
            tasks_completed=worker.total_tasks_completed,
            hours_worked=float(worker.total_hours_worked),
            average_task_time=total_hours / count if count else 0.0,
            on_time_completion=(on_time / count) * 100 if count else 100.0,
            rework_rate=(rework / count) * 100 if count else 0.0,
        )

    def check_availability(
        self,
        worker_id: str,
        day: date,
        start_time: str | None = None,
        end_time: str | None = None,
        hours_needed: float | None = None,
    ) -> AvailabilityResult:
        """Run the availability gates in order; the first failing gate decides.

        1. status must be available or working
        2. requested time range must not overlap that day's schedule
        3. hours_needed must fit the remaining weekly capacity
        4. the weekday must not be marked unavailable
        """
        worker = self._worker(worker_id)

        if worker.status not in SCHEDULABLE_STATUSES:
            return self._reject(worker, f"Worker status is {worker.status.value}")

        if start_time and end_time:
            conflicts = [
                entry for entry in self.schedules.find_for_date(worker_id, day)
                if time_ranges_overlap(entry.start_time, entry.end_time, start_time, end_time)
            ]
            if conflicts:
                return self._reject(worker, "Schedule conflict", conflicts)

        if hours_needed:
            hours_needed = validate_hours(hours_needed, "hours_needed")
            workload = self.get_workload(worker_id)
            if workload.available_capacity < hours_needed:
                return self._reject(
                    worker,
                    f"Insufficient capacity ({workload.available_capacity:g} hours available)",
                )

        day_name = weekday_name(day)
        if worker.availability:
            slot = worker.availability.get(day_name)
            if slot is not None and slot.available is False:
                return self._reject(worker, f"Worker not available on {day_name}")

        return AvailabilityResult(available=True)

    def _reject(self, worker: Worker, reason: str,
                conflicts: list[WorkerSchedule] | None = None) -> AvailabilityResult:
        logger.info("Worker %s unavailable: %s", worker.id, reason)
        return AvailabilityResult(available=False, reason=reason, conflicts=conflicts or [])
