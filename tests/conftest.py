"""Shared test fixtures."""

import logging
from datetime import date, datetime

import pytest
import yaml

from shopfloor.config import PlantConfig
from shopfloor.db import close_all
from shopfloor.log import ROOT_LOGGER
from shopfloor.models import (
    AssignmentStatus,
    Task,
    TaskAssignment,
    Worker,
    WorkerSchedule,
    WorkerStatus,
)
from shopfloor.task_router import TaskRouter
from shopfloor.workers import WorkerService

# Wednesday; its week runs Sunday 2026-10-11 .. Saturday 2026-10-17
NOW = datetime(2026, 10, 14, 10, 0)

PLANT_YAML = {
    "plant": {"name": "Test Plant", "site": "Line 1"},
    "matching": {"task_floor_score": 50, "skill_weight": 0.7, "performance_weight": 0.3},
    "workload": {"active_statuses": ["pending", "assigned", "in_progress"]},
    "logging": {"level": "INFO", "file": ""},
}


@pytest.fixture(autouse=True)
def clean_stores():
    """Close TinyDB handles between tests."""
    yield
    close_all()


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop shopfloor handlers so no test logs into another test's streams."""
    root = logging.getLogger(ROOT_LOGGER)
    root.handlers.clear()
    yield
    for h in root.handlers[:]:
        h.close()
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


@pytest.fixture
def tmp_project(tmp_path, monkeypatch):
    """Create a temporary plant project with plant.yaml."""
    monkeypatch.delenv("SHOPFLOOR_DATA_DIR", raising=False)
    monkeypatch.delenv("SHOPFLOOR_LOG_LEVEL", raising=False)
    (tmp_path / "plant.yaml").write_text(yaml.dump(PLANT_YAML))
    (tmp_path / "data").mkdir()
    return tmp_path


@pytest.fixture
def config(tmp_project):
    """Load a PlantConfig from the temp project."""
    return PlantConfig.load(tmp_project)


@pytest.fixture
def service(config):
    """WorkerService pinned to NOW."""
    return WorkerService(config, clock=lambda: NOW)


@pytest.fixture
def router(config, service):
    return TaskRouter(config, service)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def add_worker(service):
    """Factory fixture to store workers."""
    def _add(worker_id="w1", skills=(), status="available", work_centers=("wc1",),
             user_id=None, **fields):
        worker = Worker(
            id=worker_id,
            first_name=worker_id.upper(),
            last_name="Test",
            status=WorkerStatus(status),
            user_id=user_id if user_id is not None else f"user-{worker_id}",
            work_center_ids=list(work_centers),
            skills=list(skills),
            **fields,
        )
        return service.workers.add(worker)
    return _add


@pytest.fixture
def add_task(service):
    """Factory fixture to store tasks."""
    def _add(task_id="t1", task_type=None, work_center="wc1", required_skills=None, due=None):
        metadata = {"required_skills": required_skills} if required_skills is not None else {}
        return service.tasks.add(Task(
            id=task_id, name=f"Task {task_id}", type=task_type,
            work_center_id=work_center, metadata=metadata, due_date=due,
        ))
    return _add


@pytest.fixture
def add_schedule(service):
    """Factory fixture to store schedule entries."""
    counter = {"n": 0}

    def _add(worker_id="w1", day=date(2026, 10, 14), start="09:00", end="17:00",
             hours=8.0, overtime=False):
        counter["n"] += 1
        return service.schedules.add(WorkerSchedule(
            id=f"s{counter['n']}", worker_id=worker_id, date=day,
            start_time=start, end_time=end, scheduled_hours=hours, is_overtime=overtime,
        ))
    return _add


@pytest.fixture
def add_assignment(service):
    """Factory fixture to store task assignments."""
    counter = {"n": 0}

    def _add(user_id="user-w1", task_id="t1", status="pending", started=None,
             completed=None, **metadata):
        counter["n"] += 1
        return service.assignments.add(TaskAssignment(
            id=f"a{counter['n']}", task_id=task_id, user_id=user_id,
            status=AssignmentStatus(status), started_at=started,
            completed_at=completed, metadata=metadata,
        ))
    return _add
