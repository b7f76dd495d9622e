"""Seed loader — bulk-import plant records from a YAML file.

File layout (every section optional):

    workers:      [ {id, first_name, status, skills: [{name, level, ...}], ...} ]
    tasks:        [ {id, type, work_center_id, metadata: {required_skills: [...]}} ]
    schedules:    [ {id, worker_id, date, start_time, end_time, scheduled_hours} ]
    assignments:  [ {id, task_id, user_id, status, started_at, completed_at} ]
"""

from pathlib import Path

import yaml

from shopfloor.exceptions import ValidationError
from shopfloor.log import get_logger
from shopfloor.models import Task, TaskAssignment, Worker, WorkerSchedule, WorkerSkill
from shopfloor.validation import normalize_clock, parse_skill_level, validate_time_range
from shopfloor.workers import WorkerService

logger = get_logger(__name__)

SECTIONS = ("workers", "tasks", "schedules", "assignments")


def read_yaml(path: Path) -> dict:
    """Read a YAML mapping, raising ValidationError on anything else."""
    path = Path(path)
    if not path.exists():
        raise ValidationError(f"File not found: {path}")
    try:
        raw = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML in {path.name}: {e}")
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValidationError(f"{path.name} must be a YAML mapping")
    return raw


def parse_skills(entries: list) -> list[WorkerSkill]:
    """Worker skill entries (mappings with name + level) to WorkerSkill records."""
    skills = []
    for entry in entries or []:
        if not isinstance(entry, dict) or not entry.get("name") or not entry.get("level"):
            raise ValidationError(
                f"Invalid skill entry: {entry!r}",
                suggestion="Each skill needs a name and a level.",
            )
        data = dict(entry)
        data["level"] = parse_skill_level(entry["level"]).value
        skills.append(WorkerSkill.from_dict(data))
    return skills


def _clock_fields(data: dict, keys: tuple[str, ...]) -> dict:
    data = dict(data)
    for key in keys:
        if data.get(key) is not None:
            data[key] = normalize_clock(data[key])
    return data


def _record(factory, data: dict, section: str):
    try:
        return factory(data)
    except (KeyError, ValueError, TypeError) as e:
        raise ValidationError(f"Bad {section} entry {data!r}: {e}")


def load_file(service: WorkerService, path: Path) -> dict[str, int]:
    """Import every section of a seed file. Returns {section: records_loaded}."""
    raw = read_yaml(path)
    unknown = set(raw) - set(SECTIONS)
    if unknown:
        raise ValidationError(
            f"Unknown sections in {Path(path).name}: {sorted(unknown)}",
            suggestion="Allowed sections: " + ", ".join(SECTIONS),
        )

    counts = {name: 0 for name in SECTIONS}

    for data in raw.get("workers") or []:
        data = dict(data)
        data["skills"] = [s.to_dict() for s in parse_skills(data.get("skills"))]
        if data.get("availability"):
            data["availability"] = {
                day: _clock_fields(slot or {}, ("start", "end"))
                for day, slot in data["availability"].items()
            }
        service.workers.add(_record(Worker.from_dict, data, "worker"))
        counts["workers"] += 1

    for data in raw.get("tasks") or []:
        service.tasks.add(_record(Task.from_dict, data, "task"))
        counts["tasks"] += 1

    for data in raw.get("schedules") or []:
        data = _clock_fields(data, ("start_time", "end_time"))
        schedule = _record(WorkerSchedule.from_dict, data, "schedule")
        validate_time_range(schedule.start_time, schedule.end_time)
        service.schedules.add(schedule)
        counts["schedules"] += 1

    for data in raw.get("assignments") or []:
        service.assignments.add(_record(TaskAssignment.from_dict, data, "assignment"))
        counts["assignments"] += 1

    logger.info("Loaded %s from %s", counts, path)
    return counts
