"""Input validation — clock times, skill levels, statuses, CLI skill specs."""

import re

from shopfloor.exceptions import ValidationError
from shopfloor.models import SkillLevel, SkillRequirement, WorkerStatus

# HH:MM with optional :SS, as stored by schedule entries
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")

_CERT_FLAGS = {"cert", "certified", "certification"}


def parse_time(value: str) -> int:
    """Parse 'HH:MM' (or 'HH:MM:SS') into minutes since midnight."""
    match = _TIME_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValidationError(
            f"Invalid time '{value}'. Expected HH:MM.",
            suggestion="Use 24-hour clock times such as 09:00 or 17:30.",
        )
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 24 or minutes > 59 or (hours == 24 and minutes > 0):
        raise ValidationError(
            f"Time '{value}' is out of range.",
            suggestion="Hours must be 0-24 and minutes 0-59.",
        )
    return hours * 60 + minutes


def normalize_clock(value) -> str:
    """Return a clock value as 'HH:MM'.

    YAML 1.1 reads unquoted 10:30 as the base-60 integer 630, which is exactly
    minutes since midnight, so integers are converted back.
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid time {value!r}. Expected HH:MM.")
    if isinstance(value, int):
        minutes = value
    else:
        minutes = parse_time(value)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def validate_time_range(start: str, end: str) -> tuple[int, int]:
    """Validate a start/end pair. Returns (start_minutes, end_minutes)."""
    start_min = parse_time(start)
    end_min = parse_time(end)
    if end_min <= start_min:
        raise ValidationError(
            f"End time {end} must be after start time {start}.",
            suggestion="Split overnight shifts into two ranges.",
        )
    return start_min, end_min


def validate_hours(hours: float, field: str = "hours") -> float:
    """Reject negative hour figures. Returns the value as float."""
    try:
        value = float(hours)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number, got {hours!r}.")
    if value < 0:
        raise ValidationError(f"{field} cannot be negative ({value}).")
    return value


def parse_skill_level(value: str | SkillLevel) -> SkillLevel:
    """Map a level name (case-insensitive) to SkillLevel."""
    if isinstance(value, SkillLevel):
        return value
    try:
        return SkillLevel(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Unknown skill level '{value}'.",
            suggestion="Use one of: " + ", ".join(l.value for l in SkillLevel) + ".",
        )


def parse_worker_status(value: str | WorkerStatus) -> WorkerStatus:
    """Map a status name (case-insensitive) to WorkerStatus."""
    if isinstance(value, WorkerStatus):
        return value
    try:
        return WorkerStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Unknown worker status '{value}'.",
            suggestion="Use one of: " + ", ".join(s.value for s in WorkerStatus) + ".",
        )


def parse_skill_spec(spec: str) -> SkillRequirement:
    """Parse the CLI form 'Name[:level][:required][:cert]'.

    Examples: 'Welding:advanced:required:cert', 'Safety', 'Quality Control:beginner'.
    """
    parts = [p.strip() for p in spec.split(":")]
    name = parts[0] if parts else ""
    if not name:
        raise ValidationError(
            f"Skill spec '{spec}' has no skill name.",
            suggestion="Write it as Name[:level][:required][:cert].",
        )

    level = None
    required = False
    certification = False
    for part in parts[1:]:
        token = part.lower()
        if not token:
            continue
        if token == "required":
            required = True
        elif token in _CERT_FLAGS:
            certification = True
        else:
            level = parse_skill_level(token)

    return SkillRequirement(
        name=name,
        minimum_level=level,
        required=required,
        certification_required=certification,
    )
