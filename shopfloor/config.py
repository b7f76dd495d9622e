"""Plant configuration loader — reads plant.yaml + .env."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import load_dotenv

from shopfloor.exceptions import ConfigError, ValidationError
from shopfloor.models import AssignmentStatus
from shopfloor.requirements import TaskSkillCatalog

CONFIG_FILE = "plant.yaml"

_DEFAULT_ACTIVE_STATUSES = ["pending", "assigned", "in_progress"]


@dataclass
class MatchingConfig:
    task_floor_score: float = 50.0
    skill_weight: float = 0.7
    performance_weight: float = 0.3


@dataclass
class WorkloadConfig:
    active_statuses: list[AssignmentStatus] = field(
        default_factory=lambda: [AssignmentStatus(s) for s in _DEFAULT_ACTIVE_STATUSES]
    )


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: str = ""  # empty = stderr only


@dataclass
class PlantConfig:
    name: str
    project_dir: Path
    site: str = ""
    data_dir: Path | None = None
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    workload: WorkloadConfig = field(default_factory=WorkloadConfig)
    task_skills: TaskSkillCatalog = field(default_factory=TaskSkillCatalog)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        if self.data_dir is None:
            self.data_dir = self.project_dir / "data"

    @staticmethod
    def load(project_dir: Path) -> "PlantConfig":
        """Load plant configuration from plant.yaml and .env in project_dir."""
        project_dir = Path(project_dir)

        env_file = project_dir / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        config_path = project_dir / CONFIG_FILE
        if not config_path.exists():
            raise ConfigError(
                f"{CONFIG_FILE} not found in {project_dir}",
                suggestion="Run 'floor init' to create a new plant project.",
            )

        try:
            raw = yaml.safe_load(config_path.read_text())
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {CONFIG_FILE}: {e}")

        if not isinstance(raw, dict):
            raise ConfigError(f"{CONFIG_FILE} must be a YAML mapping")

        plant = raw.get("plant")
        if not plant or not plant.get("name"):
            raise ConfigError(
                f"{CONFIG_FILE} plant.name is required",
                suggestion=f"Add a 'plant' section with a name to {CONFIG_FILE}.",
            )

        # Matching weights
        m_raw = raw.get("matching") or {}
        try:
            matching = MatchingConfig(
                task_floor_score=float(m_raw.get("task_floor_score", 50.0)),
                skill_weight=float(m_raw.get("skill_weight", 0.7)),
                performance_weight=float(m_raw.get("performance_weight", 0.3)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{CONFIG_FILE} matching section has a non-numeric value: {e}")
        if not 0 <= matching.task_floor_score <= 100:
            raise ConfigError(
                f"{CONFIG_FILE} matching.task_floor_score must be between 0 and 100",
                suggestion="The default floor is 50.",
            )

        # Workload
        w_raw = raw.get("workload") or {}
        try:
            active = [AssignmentStatus(s) for s in w_raw.get("active_statuses", _DEFAULT_ACTIVE_STATUSES)]
        except ValueError as e:
            raise ConfigError(
                f"{CONFIG_FILE} workload.active_statuses: {e}",
                suggestion="Use assignment statuses: " + ", ".join(s.value for s in AssignmentStatus),
            )
        workload = WorkloadConfig(active_statuses=active)

        # Task type → skills table
        try:
            task_skills = TaskSkillCatalog.from_config(raw.get("task_skills"))
        except ValidationError as e:
            raise ConfigError(f"{CONFIG_FILE} task_skills: {e.message}", suggestion=e.suggestion)

        # Logging, with env override
        log_raw = raw.get("logging") or {}
        logging_config = LoggingConfig(
            level=os.environ.get("SHOPFLOOR_LOG_LEVEL", log_raw.get("level", "INFO")),
            file=log_raw.get("file", ""),
        )

        data_dir_env = os.environ.get("SHOPFLOOR_DATA_DIR")
        data_dir = Path(data_dir_env) if data_dir_env else project_dir / "data"

        return PlantConfig(
            name=plant["name"],
            site=plant.get("site", ""),
            project_dir=project_dir,
            data_dir=data_dir,
            matching=matching,
            workload=workload,
            task_skills=task_skills,
            logging=logging_config,
        )
