"""Task requirement extraction — explicit task metadata plus per-type defaults."""

from collections.abc import Mapping
from types import MappingProxyType

from shopfloor.exceptions import ValidationError
from shopfloor.models import SkillLevel, SkillRequirement, Task
from shopfloor.validation import parse_skill_level

DEFAULT_TASK_SKILLS: dict[str, tuple[SkillRequirement, ...]] = {
    "assembly": (
        SkillRequirement("Assembly", SkillLevel.INTERMEDIATE, required=True),
        SkillRequirement("Quality Control", SkillLevel.BEGINNER),
    ),
    "welding": (
        SkillRequirement("Welding", SkillLevel.ADVANCED, required=True, certification_required=True),
        SkillRequirement("Safety", SkillLevel.INTERMEDIATE, required=True),
    ),
    "packaging": (
        SkillRequirement("Packaging", SkillLevel.BEGINNER),
        SkillRequirement("Inventory Management", SkillLevel.BEGINNER),
    ),
    "quality_control": (
        SkillRequirement("Quality Control", SkillLevel.ADVANCED, required=True),
        SkillRequirement("Documentation", SkillLevel.INTERMEDIATE),
    ),
    "maintenance": (
        SkillRequirement("Maintenance", SkillLevel.ADVANCED, required=True),
        SkillRequirement("Troubleshooting", SkillLevel.INTERMEDIATE, required=True),
    ),
}


def requirement_from_entry(entry, default_required: bool = True) -> SkillRequirement:
    """Build a SkillRequirement from a metadata/config entry.

    An entry is either a bare skill name or a mapping with ``name`` and
    optional ``level``, ``required``, ``certification_required``.
    ``required`` is only false when explicitly set to false.
    """
    if isinstance(entry, str):
        return SkillRequirement(name=entry, required=default_required)

    if not isinstance(entry, Mapping) or not entry.get("name"):
        raise ValidationError(
            f"Invalid skill requirement entry: {entry!r}",
            suggestion="Use a skill name or a mapping with at least a 'name' key.",
        )

    level = entry.get("level") or entry.get("minimum_level")
    required = entry.get("required")
    return SkillRequirement(
        name=str(entry["name"]),
        minimum_level=parse_skill_level(level) if level else None,
        required=default_required if required is None else required is not False,
        certification_required=bool(entry.get("certification_required", False)),
    )


class TaskSkillCatalog:
    """Read-only task-type → default skill requirements table."""

    def __init__(self, table: Mapping[str, tuple[SkillRequirement, ...]] | None = None):
        source = DEFAULT_TASK_SKILLS if table is None else table
        self._table = MappingProxyType(
            {task_type.lower(): tuple(reqs) for task_type, reqs in source.items()}
        )

    @classmethod
    def from_config(cls, raw: Mapping | None) -> "TaskSkillCatalog":
        """Build from the ``task_skills`` section of plant.yaml. None → built-in table."""
        if raw is None:
            return cls()
        table = {}
        for task_type, entries in raw.items():
            table[str(task_type)] = tuple(
                requirement_from_entry(e, default_required=False) for e in entries or []
            )
        return cls(table)

    @property
    def task_types(self) -> list[str]:
        return sorted(self._table)

    def defaults_for(self, task_type: str | None) -> list[SkillRequirement]:
        if not task_type:
            return []
        return list(self._table.get(task_type.lower(), ()))


def extract_requirements(task: Task, catalog: TaskSkillCatalog | None = None) -> list[SkillRequirement]:
    """Skill requirements for a task: metadata entries first, then the type defaults.

    The two sources are concatenated as-is. A skill named in both is scored twice.
    """
    catalog = catalog or TaskSkillCatalog()
    requirements: list[SkillRequirement] = []

    for entry in (task.metadata or {}).get("required_skills") or []:
        requirements.append(requirement_from_entry(entry))

    requirements.extend(catalog.defaults_for(task.type))
    return requirements
