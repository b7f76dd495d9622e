"""Domain records — workers, tasks, schedules, assignments, skill requirements.

Each record converts to and from a plain dict so it can live in TinyDB.
Dates are stored as ISO-8601 strings.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class WorkerStatus(Enum):
    AVAILABLE = "available"
    WORKING = "working"
    BREAK = "break"
    OFF_DUTY = "off_duty"
    SICK_LEAVE = "sick_leave"
    VACATION = "vacation"
    TRAINING = "training"


class SkillLevel(Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class ShiftType(Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    NIGHT = "night"
    ROTATING = "rotating"
    FLEXIBLE = "flexible"


class AssignmentStatus(Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REASSIGNED = "reassigned"


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def _date(value) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _datetime(value) -> datetime | None:
    """Parse to a naive local datetime. Offsets are converted to local time."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


def _opt_str(value) -> str | None:
    return str(value) if value is not None else None


@dataclass
class WorkerSkill:
    name: str
    level: SkillLevel
    certified_date: date | None = None
    expiry_date: date | None = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "level": self.level.value,
            "certified_date": _iso(self.certified_date),
            "expiry_date": _iso(self.expiry_date),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkerSkill":
        return cls(
            name=data["name"],
            level=SkillLevel(data["level"]),
            certified_date=_date(data.get("certified_date")),
            expiry_date=_date(data.get("expiry_date")),
        )


@dataclass
class DayAvailability:
    start: str | None = None
    end: str | None = None
    available: bool | None = None

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end, "available": self.available}

    @classmethod
    def from_dict(cls, data: dict) -> "DayAvailability":
        return cls(start=data.get("start"), end=data.get("end"), available=data.get("available"))


@dataclass
class Worker:
    id: str
    employee_id: str = ""
    first_name: str = ""
    last_name: str = ""
    status: WorkerStatus = WorkerStatus.AVAILABLE
    shift_type: ShiftType = ShiftType.MORNING
    user_id: str | None = None
    department_id: str | None = None
    work_center_ids: list[str] = field(default_factory=list)
    skills: list[WorkerSkill] = field(default_factory=list)
    weekly_hours_limit: int = 40
    daily_hours_limit: int = 8
    availability: dict[str, DayAvailability] | None = None
    efficiency: float = 100.0
    quality_score: float = 100.0
    total_tasks_completed: int = 0
    total_hours_worked: float = 0.0
    version: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def find_skill(self, name: str) -> WorkerSkill | None:
        """Case-insensitive skill lookup."""
        wanted = name.lower()
        for skill in self.skills:
            if skill.name.lower() == wanted:
                return skill
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "status": self.status.value,
            "shift_type": self.shift_type.value,
            "user_id": self.user_id,
            "department_id": self.department_id,
            "work_center_ids": list(self.work_center_ids),
            "skills": [s.to_dict() for s in self.skills],
            "weekly_hours_limit": self.weekly_hours_limit,
            "daily_hours_limit": self.daily_hours_limit,
            "availability": (
                {day: a.to_dict() for day, a in self.availability.items()}
                if self.availability is not None else None
            ),
            "efficiency": self.efficiency,
            "quality_score": self.quality_score,
            "total_tasks_completed": self.total_tasks_completed,
            "total_hours_worked": self.total_hours_worked,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Worker":
        availability = data.get("availability")
        return cls(
            id=str(data["id"]),
            employee_id=data.get("employee_id", ""),
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            status=WorkerStatus(data.get("status", "available")),
            shift_type=ShiftType(data.get("shift_type", "morning")),
            user_id=_opt_str(data.get("user_id")),
            department_id=data.get("department_id"),
            work_center_ids=[str(wc) for wc in data.get("work_center_ids") or []],
            skills=[WorkerSkill.from_dict(s) for s in data.get("skills") or []],
            weekly_hours_limit=int(data.get("weekly_hours_limit", 40)),
            daily_hours_limit=int(data.get("daily_hours_limit", 8)),
            availability=(
                {day.lower(): DayAvailability.from_dict(a or {}) for day, a in availability.items()}
                if availability is not None else None
            ),
            efficiency=float(data.get("efficiency", 100.0)),
            quality_score=float(data.get("quality_score", 100.0)),
            total_tasks_completed=int(data.get("total_tasks_completed", 0)),
            total_hours_worked=float(data.get("total_hours_worked", 0.0)),
            version=int(data.get("version", 0)),
        )


@dataclass(frozen=True)
class SkillRequirement:
    """One skill a task needs. Transient, never persisted."""

    name: str
    minimum_level: SkillLevel | None = None
    required: bool = False
    certification_required: bool = False


@dataclass
class Task:
    id: str
    name: str = ""
    type: str | None = None
    work_center_id: str | None = None
    metadata: dict = field(default_factory=dict)
    due_date: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "work_center_id": self.work_center_id,
            "metadata": dict(self.metadata),
            "due_date": _iso(self.due_date),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            type=data.get("type"),
            work_center_id=_opt_str(data.get("work_center_id")),
            metadata=dict(data.get("metadata") or {}),
            due_date=_datetime(data.get("due_date")),
        )


@dataclass
class WorkerSchedule:
    id: str
    worker_id: str
    date: date
    start_time: str
    end_time: str
    scheduled_hours: float
    is_overtime: bool = False
    shift_name: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "worker_id": self.worker_id,
            "date": self.date.isoformat(),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "scheduled_hours": self.scheduled_hours,
            "is_overtime": self.is_overtime,
            "shift_name": self.shift_name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkerSchedule":
        return cls(
            id=str(data["id"]),
            worker_id=str(data["worker_id"]),
            date=_date(data["date"]),
            start_time=data["start_time"],
            end_time=data["end_time"],
            scheduled_hours=float(data.get("scheduled_hours", 0)),
            is_overtime=bool(data.get("is_overtime", False)),
            shift_name=data.get("shift_name"),
        )


@dataclass
class TaskAssignment:
    id: str
    task_id: str
    user_id: str
    status: AssignmentStatus = AssignmentStatus.PENDING
    assigned_at: datetime | None = None
    accepted_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    estimated_hours: float | None = None
    actual_hours: float | None = None
    metadata: dict = field(default_factory=dict)
    task: Task | None = None  # joined on read, never stored

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "task_id": self.task_id,
            "user_id": self.user_id,
            "status": self.status.value,
            "assigned_at": _iso(self.assigned_at),
            "accepted_at": _iso(self.accepted_at),
            "started_at": _iso(self.started_at),
            "completed_at": _iso(self.completed_at),
            "estimated_hours": self.estimated_hours,
            "actual_hours": self.actual_hours,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TaskAssignment":
        return cls(
            id=str(data["id"]),
            task_id=str(data["task_id"]),
            user_id=str(data["user_id"]),
            status=AssignmentStatus(data.get("status", "pending")),
            assigned_at=_datetime(data.get("assigned_at")),
            accepted_at=_datetime(data.get("accepted_at")),
            started_at=_datetime(data.get("started_at")),
            completed_at=_datetime(data.get("completed_at")),
            estimated_hours=data.get("estimated_hours"),
            actual_hours=data.get("actual_hours"),
            metadata=dict(data.get("metadata") or {}),
        )
