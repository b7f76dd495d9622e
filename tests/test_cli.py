"""Tests for scripts/floor.py CLI."""

import pytest
import yaml
from click.testing import CliRunner

from scripts.floor import cli
from shopfloor.models import SkillLevel, WorkerSkill


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def floor(runner, tmp_project):
    """Invoke the CLI against the temp project."""
    def _run(*args):
        return runner.invoke(cli, ["--project-dir", str(tmp_project), *args])
    return _run


def _welder(level="advanced"):
    return [WorkerSkill("Welding", SkillLevel(level))]


class TestCLIInit:
    def test_init_creates_plant_yaml(self, runner, tmp_path):
        """init writes plant.yaml with the given name and a data dir."""
        result = runner.invoke(cli, ["--project-dir", str(tmp_path), "init", "--name", "North Line"])
        assert result.exit_code == 0
        data = yaml.safe_load((tmp_path / "plant.yaml").read_text())
        assert data["plant"]["name"] == "North Line"
        assert (tmp_path / "data").is_dir()

    def test_init_refuses_overwrite(self, runner, tmp_project):
        result = runner.invoke(cli, ["--project-dir", str(tmp_project), "init", "--name", "X"])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_config_error(self, runner, tmp_path):
        """exit 1 on missing plant.yaml."""
        result = runner.invoke(cli, ["--project-dir", str(tmp_path), "workers"])
        assert result.exit_code == 1
        assert "Config error" in result.output


class TestCLIWorkers:
    def test_workers_empty(self, floor):
        result = floor("workers")
        assert result.exit_code == 0
        assert "No workers found" in result.output

    def test_workers_lists_and_filters(self, floor, add_worker):
        add_worker("w1", skills=_welder())
        add_worker("w2", status="vacation")
        result = floor("workers", "--skill", "Welding")
        assert result.exit_code == 0
        assert "w1 W1 Test" in result.output
        assert "Welding (advanced)" in result.output
        assert "w2" not in result.output

    def test_workers_bad_status(self, floor):
        result = floor("workers", "--status", "asleep")
        assert result.exit_code == 1
        assert "Unknown worker status" in result.output

    def test_show(self, floor, add_worker):
        add_worker("w1", skills=_welder())
        result = floor("show", "w1")
        assert result.exit_code == 0
        assert '"first_name": "W1"' in result.output

    def test_show_missing(self, floor):
        result = floor("show", "nope")
        assert result.exit_code == 1
        assert "Worker with ID nope not found" in result.output


class TestCLILoad:
    def test_load_seed(self, floor, tmp_path):
        seed = tmp_path / "seed.yaml"
        seed.write_text(yaml.dump({
            "workers": [{"id": "w9", "first_name": "Nia",
                         "skills": [{"name": "Packaging", "level": "expert"}]}],
        }))
        result = floor("load", str(seed))
        assert result.exit_code == 0
        assert "workers: 1" in result.output
        assert "Nia" in floor("workers").output

    def test_load_invalid(self, floor, tmp_path):
        seed = tmp_path / "seed.yaml"
        seed.write_text("robots: []\n")
        result = floor("load", str(seed))
        assert result.exit_code == 1
        assert "Unknown sections" in result.output


class TestCLIMatching:
    def test_match_ranks(self, floor, add_worker):
        add_worker("w1", skills=_welder("beginner"))
        add_worker("w2", skills=_welder("expert"))
        result = floor("match", "--skill", "Welding:intermediate:required")
        assert result.exit_code == 0
        assert result.output.index("w2") < result.output.index("w1")
        assert "100.0" in result.output

    def test_match_json(self, floor, add_worker):
        add_worker("w1", skills=_welder("expert"))
        result = floor("match", "--skill", "Welding", "--json")
        assert result.exit_code == 0
        assert '"worker_id": "w1"' in result.output
        assert '"match_score": 100.0' in result.output

    def test_match_flags_missing_required(self, floor, add_worker):
        add_worker("w1", skills=[])
        result = floor("match", "--skill", "Welding:required")
        assert "missing required" in result.output
        assert "missing: Welding" in result.output

    def test_match_bad_spec(self, floor):
        result = floor("match", "--skill", "Welding:godlike")
        assert result.exit_code == 1
        assert "Unknown skill level" in result.output

    def test_best_match(self, floor, add_worker, add_task):
        add_worker("w1", skills=_welder("expert"))
        add_task("t1", required_skills=[{"name": "Welding", "level": "advanced"}])
        result = floor("best-match", "t1", "--workload", "--max", "1")
        assert result.exit_code == 0
        assert "w1 W1 Test" in result.output

    def test_best_match_no_candidates(self, floor, add_task):
        add_task("t1", task_type="maintenance")
        result = floor("best-match", "t1")
        assert result.exit_code == 0
        assert "No matching workers" in result.output

    def test_best_match_unknown_task(self, floor):
        result = floor("best-match", "ghost")
        assert result.exit_code == 1
        assert "Task with ID ghost not found" in result.output


class TestCLIWorkload:
    def test_workload(self, floor, add_worker, add_assignment):
        add_worker("w1")
        add_assignment("user-w1", status="pending")
        add_assignment("user-w1", status="in_progress")
        result = floor("workload", "w1")
        assert result.exit_code == 0
        assert "Active tasks: 2" in result.output

    def test_performance(self, floor, add_worker):
        add_worker("w1", efficiency=91.0)
        result = floor("performance", "w1")
        assert result.exit_code == 0
        assert '"efficiency": 91.0' in result.output
        assert '"on_time_completion": 100.0' in result.output

    def test_performance_needs_both_bounds(self, floor, add_worker):
        add_worker("w1")
        result = floor("performance", "w1", "--since", "2026-10-01")
        assert result.exit_code == 2

    def test_availability_conflict(self, floor, add_worker, add_schedule):
        add_worker("w1")
        add_schedule("w1", start="09:00", end="11:00")
        result = floor("availability", "w1", "--date", "2026-10-14", "--start", "10:00", "--end", "12:00")
        assert result.exit_code == 0
        assert "Unavailable: Schedule conflict" in result.output
        assert "conflicts with 09:00-11:00 (s1)" in result.output

    def test_availability_ok(self, floor, add_worker):
        add_worker("w1")
        result = floor("availability", "w1", "--date", "2026-10-14")
        assert "Available" in result.output

    def test_availability_bad_date(self, floor, add_worker):
        add_worker("w1")
        result = floor("availability", "w1", "--date", "14/10/2026")
        assert result.exit_code == 2


class TestCLIUpdates:
    def test_set_status_and_events(self, floor, add_worker):
        add_worker("w1")
        result = floor("set-status", "w1", "sick_leave", "--reason", "flu")
        assert result.exit_code == 0
        assert "w1 is now sick_leave" in result.output

        events = floor("events", "--worker", "w1")
        assert "worker.status.changed" in events.output
        assert "worker.unavailable" in events.output

    def test_set_status_invalid(self, floor, add_worker):
        add_worker("w1")
        result = floor("set-status", "w1", "napping")
        assert result.exit_code == 1
        assert "Unknown worker status" in result.output

    def test_set_skills(self, floor, add_worker, tmp_path):
        add_worker("w1")
        skills_file = tmp_path / "skills.yaml"
        skills_file.write_text(yaml.dump({"skills": [
            {"name": "Welding", "level": "expert"}, {"name": "Safety", "level": "advanced"}]}))
        result = floor("set-skills", "w1", str(skills_file))
        assert result.exit_code == 0
        assert "w1 now has 2 skills" in result.output

    def test_record_metrics(self, floor, add_worker):
        add_worker("w1")
        result = floor("record-metrics", "w1", "--efficiency", "95", "--tasks", "3", "--hours", "7.5")
        assert result.exit_code == 0
        assert "efficiency 95" in result.output
        assert "3 tasks, 7.5h" in result.output

    def test_events_empty(self, floor):
        result = floor("events")
        assert result.exit_code == 0
        assert "No events recorded" in result.output
