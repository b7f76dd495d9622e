"""TinyDB repositories for workers, schedules, assignments and tasks."""

from datetime import date, datetime

from tinydb import Query

from shopfloor.db import Store
from shopfloor.exceptions import StaleWorkerError
from shopfloor.models import (
    AssignmentStatus,
    ShiftType,
    Task,
    TaskAssignment,
    Worker,
    WorkerSchedule,
    WorkerStatus,
)


class WorkerRepository:
    """Worker records keyed by id. Saves are version-checked."""

    def __init__(self, store: Store):
        self._store = store
        self._table = store.table("workers")

    def add(self, worker: Worker) -> Worker:
        Q = Query()
        with self._store.lock:
            self._table.upsert(worker.to_dict(), Q.id == worker.id)
        return worker

    def get(self, worker_id: str) -> Worker | None:
        Q = Query()
        with self._store.lock:
            doc = self._table.get(Q.id == worker_id)
        return Worker.from_dict(doc) if doc else None

    def find_by_user_id(self, user_id: str) -> Worker | None:
        Q = Query()
        with self._store.lock:
            doc = self._table.get(Q.user_id == user_id)
        return Worker.from_dict(doc) if doc else None

    def list(
        self,
        status: WorkerStatus | None = None,
        statuses: list[WorkerStatus] | None = None,
        department_id: str | None = None,
        work_center_id: str | None = None,
        shift_type: ShiftType | None = None,
        has_skill: str | None = None,
    ) -> list[Worker]:
        """Workers matching every given filter, in insertion order."""
        Q = Query()
        conditions = []
        if status is not None:
            conditions.append(Q.status == status.value)
        if statuses is not None:
            conditions.append(Q.status.one_of([s.value for s in statuses]))
        if department_id:
            conditions.append(Q.department_id == department_id)
        if work_center_id:
            conditions.append(Q.work_center_ids.any([work_center_id]))
        if shift_type is not None:
            conditions.append(Q.shift_type == shift_type.value)
        if has_skill:
            conditions.append(Q.skills.any(Q.name == has_skill))

        with self._store.lock:
            if conditions:
                combined = conditions[0]
                for c in conditions[1:]:
                    combined = combined & c
                docs = self._table.search(combined)
            else:
                docs = self._table.all()

        docs.sort(key=lambda d: d.doc_id)
        return [Worker.from_dict(d) for d in docs]

    def save(self, worker: Worker) -> Worker:
        """Persist a loaded worker. Raises StaleWorkerError if someone saved it first."""
        Q = Query()
        with self._store.lock:
            doc = self._table.get(Q.id == worker.id)
            stored_version = doc.get("version", 0) if doc else 0
            if doc is not None and stored_version != worker.version:
                raise StaleWorkerError(worker.id, worker.version, stored_version)
            worker.version = stored_version + 1
            self._table.upsert(worker.to_dict(), Q.id == worker.id)
        return worker


class ScheduleRepository:
    """Planned shifts per worker and date."""

    def __init__(self, store: Store):
        self._store = store
        self._table = store.table("schedules")

    def add(self, schedule: WorkerSchedule) -> WorkerSchedule:
        Q = Query()
        with self._store.lock:
            self._table.upsert(schedule.to_dict(), Q.id == schedule.id)
        return schedule

    def delete(self, schedule_id: str) -> bool:
        Q = Query()
        with self._store.lock:
            removed = self._table.remove(Q.id == schedule_id)
        return bool(removed)

    def find_for_date(self, worker_id: str, day: date) -> list[WorkerSchedule]:
        Q = Query()
        with self._store.lock:
            docs = self._table.search((Q.worker_id == worker_id) & (Q.date == day.isoformat()))
        return [WorkerSchedule.from_dict(d) for d in docs]

    def find_between(self, worker_id: str, start: date, end: date) -> list[WorkerSchedule]:
        """Entries with start <= date < end."""
        lo, hi = start.isoformat(), end.isoformat()
        Q = Query()
        with self._store.lock:
            docs = self._table.search(
                (Q.worker_id == worker_id) & Q.date.test(lambda d: lo <= d[:10] < hi)
            )
        return [WorkerSchedule.from_dict(d) for d in docs]


class TaskRepository:
    def __init__(self, store: Store):
        self._store = store
        self._table = store.table("tasks")

    def add(self, task: Task) -> Task:
        Q = Query()
        with self._store.lock:
            self._table.upsert(task.to_dict(), Q.id == task.id)
        return task

    def get(self, task_id: str) -> Task | None:
        Q = Query()
        with self._store.lock:
            doc = self._table.get(Q.id == task_id)
        return Task.from_dict(doc) if doc else None


class AssignmentRepository:
    """Task assignments. Read-only for matching; add() exists for loaders and tests."""

    def __init__(self, store: Store, tasks: TaskRepository):
        self._store = store
        self._table = store.table("assignments")
        self._tasks = tasks

    def add(self, assignment: TaskAssignment) -> TaskAssignment:
        Q = Query()
        with self._store.lock:
            self._table.upsert(assignment.to_dict(), Q.id == assignment.id)
        return assignment

    def count(self, user_id: str, statuses: list[AssignmentStatus]) -> int:
        Q = Query()
        with self._store.lock:
            return self._table.count(
                (Q.user_id == user_id) & Q.status.one_of([s.value for s in statuses])
            )

    def completed_with_tasks(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[TaskAssignment]:
        """Completed assignments for a user with their task attached.

        When both bounds are given only assignments with start <= completed_at <= end
        are returned.
        """
        Q = Query()
        with self._store.lock:
            docs = self._table.search(
                (Q.user_id == user_id) & (Q.status == AssignmentStatus.COMPLETED.value)
            )

        assignments = [TaskAssignment.from_dict(d) for d in docs]
        if start is not None and end is not None:
            assignments = [
                a for a in assignments
                if a.completed_at is not None and start <= a.completed_at <= end
            ]

        for assignment in assignments:
            assignment.task = self._tasks.get(assignment.task_id)
        return assignments
