"""WorkerService — worker lookup, skill-based candidate search, status/skill updates."""

from datetime import date, datetime
from typing import Callable

from shopfloor.config import PlantConfig
from shopfloor.db import EVENTS_DB, MAIN_DB, get_store
from shopfloor.events import SKILLS_UPDATED, STATUS_CHANGED, WORKER_UNAVAILABLE, EventLog
from shopfloor.exceptions import WorkerNotFound
from shopfloor.log import get_logger
from shopfloor.matching import SkillMatch, evaluate_skill_match
from shopfloor.models import ShiftType, SkillRequirement, Worker, WorkerSkill, WorkerStatus
from shopfloor.repositories import (
    AssignmentRepository,
    ScheduleRepository,
    TaskRepository,
    WorkerRepository,
)
from shopfloor.validation import parse_worker_status, validate_hours
from shopfloor.workload import (
    SCHEDULABLE_STATUSES,
    AvailabilityResult,
    PerformanceMetrics,
    WorkloadAnalysis,
    WorkloadAnalyzer,
)

logger = get_logger(__name__)

# Statuses that hand the worker's open tasks back for reassignment
UNAVAILABLE_STATUSES = (WorkerStatus.OFF_DUTY, WorkerStatus.SICK_LEAVE)


class WorkerService:
    """Entry point for everything worker-related: lookup, matching, workload, updates."""

    def __init__(self, config: PlantConfig, clock: Callable[[], datetime] = datetime.now):
        self.config = config
        self.clock = clock

        store = get_store(config.data_dir / MAIN_DB)
        self.tasks = TaskRepository(store)
        self.workers = WorkerRepository(store)
        self.schedules = ScheduleRepository(store)
        self.assignments = AssignmentRepository(store, self.tasks)
        self.events = EventLog(config.data_dir / EVENTS_DB)
        self.analyzer = WorkloadAnalyzer(
            self.workers, self.schedules, self.assignments,
            config=config.workload, clock=clock,
        )

    # -- lookup ---------------------------------------------------------------

    def find_all(
        self,
        status: WorkerStatus | None = None,
        department_id: str | None = None,
        work_center_id: str | None = None,
        shift_type: ShiftType | None = None,
        has_skill: str | None = None,
    ) -> list[Worker]:
        return self.workers.list(
            status=status,
            department_id=department_id,
            work_center_id=work_center_id,
            shift_type=shift_type,
            has_skill=has_skill,
        )

    def find_one(self, worker_id: str) -> Worker:
        worker = self.workers.get(worker_id)
        if worker is None:
            raise WorkerNotFound(worker_id)
        return worker

    def find_by_user_id(self, user_id: str) -> Worker | None:
        return self.workers.find_by_user_id(user_id)

    # -- matching -------------------------------------------------------------

    def find_workers_with_skills(
        self,
        requirements: list[SkillRequirement],
        include_unavailable: bool = False,
        work_center_id: str | None = None,
        minimum_match_score: float | None = None,
        eligible_only: bool = False,
    ) -> list[SkillMatch]:
        """Score the worker population against requirements, best first.

        Args:
            requirements: Skills to match.
            include_unavailable: Also consider workers not available/working.
            work_center_id: Only workers attached to this work center.
            minimum_match_score: Drop matches scoring below this. None or 0 keeps all.
            eligible_only: Drop matches missing a required skill.

        Returns:
            Matches sorted by match_score descending. Equal scores keep roster order.
        """
        statuses = None if include_unavailable else list(SCHEDULABLE_STATUSES)
        population = self.workers.list(statuses=statuses, work_center_id=work_center_id)
        today = self.clock().date()

        matches = []
        for worker in population:
            match = evaluate_skill_match(worker, requirements, today=today)
            if minimum_match_score and match.match_score < minimum_match_score:
                continue
            if eligible_only and not match.eligible:
                continue
            matches.append(match)

        matches.sort(key=lambda m: m.match_score, reverse=True)
        logger.debug("Skill search: %d of %d workers kept (%d requirements)",
                     len(matches), len(population), len(requirements))
        return matches

    # -- workload & availability ----------------------------------------------

    def get_worker_workload(self, worker_id: str) -> WorkloadAnalysis:
        return self.analyzer.get_workload(worker_id)

    def get_worker_performance(
        self, worker_id: str, start: datetime | None = None, end: datetime | None = None,
    ) -> PerformanceMetrics:
        return self.analyzer.get_performance(worker_id, start, end)

    def check_availability(
        self,
        worker_id: str,
        day: date,
        start_time: str | None = None,
        end_time: str | None = None,
        hours_needed: float | None = None,
    ) -> AvailabilityResult:
        return self.analyzer.check_availability(worker_id, day, start_time, end_time, hours_needed)

    # -- updates --------------------------------------------------------------

    def update_skills(self, worker_id: str, skills: list[WorkerSkill]) -> Worker:
        """Replace a worker's skill set. The event is emitted only after the save succeeds."""
        worker = self.find_one(worker_id)
        worker.skills = list(skills)
        self.workers.save(worker)

        self.events.emit(SKILLS_UPDATED, worker_id, skills=worker.skills)
        logger.info("Updated %d skills for worker %s", len(worker.skills), worker_id)
        return worker

    def update_status(self, worker_id: str, status: WorkerStatus | str,
                      reason: str | None = None) -> Worker:
        """Change status; off-duty and sick-leave also announce the worker as unavailable."""
        status = parse_worker_status(status)
        worker = self.find_one(worker_id)
        old_status = worker.status

        worker.status = status
        self.workers.save(worker)

        self.events.emit(STATUS_CHANGED, worker_id,
                         old_status=old_status, new_status=status, reason=reason)
        logger.info("Worker %s status %s -> %s", worker_id, old_status.value, status.value)

        if status in UNAVAILABLE_STATUSES:
            self.events.emit(WORKER_UNAVAILABLE, worker_id,
                             user_id=worker.user_id, reason=reason or status.value)

        return worker

    def record_performance_metrics(
        self,
        worker_id: str,
        efficiency: float | None = None,
        quality_score: float | None = None,
        tasks_completed: int | None = None,
        hours_worked: float | None = None,
    ) -> Worker:
        """Overwrite efficiency/quality; add tasks and hours to the running totals."""
        worker = self.find_one(worker_id)

        if efficiency is not None:
            worker.efficiency = float(efficiency)
        if quality_score is not None:
            worker.quality_score = float(quality_score)
        if tasks_completed is not None:
            worker.total_tasks_completed += int(validate_hours(tasks_completed, "tasks_completed"))
        if hours_worked is not None:
            worker.total_hours_worked += validate_hours(hours_worked, "hours_worked")

        self.workers.save(worker)
        return worker
