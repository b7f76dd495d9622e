"""Tests for shopfloor/loader.py — YAML seed import."""

from datetime import date, datetime

import pytest

from shopfloor.exceptions import ValidationError
from shopfloor.loader import load_file, parse_skills, read_yaml
from shopfloor.models import SkillLevel, WorkerStatus

SEED = """\
workers:
  - id: w1
    employee_id: E-001
    first_name: Ana
    last_name: Ruiz
    status: working
    user_id: u1
    work_center_ids: [wc1, wc2]
    skills:
      - {name: Welding, level: Advanced, certified_date: 2025-01-01, expiry_date: 2027-01-01}
      - {name: Safety, level: intermediate}
    availability:
      wednesday: {start: 6:00, end: 14:00}
      sunday: {available: false}
  - id: w2
    first_name: Ben
    skills: []
tasks:
  - id: t1
    name: Weld frame
    type: welding
    work_center_id: wc1
    due_date: 2026-10-05 12:00:00
schedules:
  - id: s1
    worker_id: w1
    date: 2026-10-14
    start_time: 9:00
    end_time: 11:30
    scheduled_hours: 2.5
assignments:
  - id: a1
    task_id: t1
    user_id: u1
    status: completed
    started_at: 2026-10-05 08:00:00
    completed_at: 2026-10-05 10:00:00
"""


@pytest.fixture
def seed_file(tmp_path):
    path = tmp_path / "seed.yaml"
    path.write_text(SEED)
    return path


class TestLoadFile:
    def test_counts(self, service, seed_file):
        assert load_file(service, seed_file) == {
            "workers": 2, "tasks": 1, "schedules": 1, "assignments": 1}

    def test_worker_fields(self, service, seed_file):
        load_file(service, seed_file)
        worker = service.find_one("w1")
        assert worker.full_name == "Ana Ruiz"
        assert worker.status is WorkerStatus.WORKING
        assert worker.work_center_ids == ["wc1", "wc2"]
        assert worker.skills[0].level is SkillLevel.ADVANCED
        assert worker.skills[0].expiry_date == date(2027, 1, 1)
        assert worker.availability["wednesday"].start == "06:00"
        assert worker.availability["sunday"].available is False

    def test_unquoted_times_normalized(self, service, seed_file):
        """YAML reads 9:00 as 540; stored back as '09:00'."""
        load_file(service, seed_file)
        entry = service.schedules.find_for_date("w1", date(2026, 10, 14))[0]
        assert (entry.start_time, entry.end_time) == ("09:00", "11:30")
        result = service.check_availability("w1", date(2026, 10, 14), "11:00", "12:00")
        assert result.reason == "Schedule conflict"

    def test_loaded_history_feeds_performance(self, service, seed_file):
        load_file(service, seed_file)
        perf = service.get_worker_performance("w1")
        assert perf.average_task_time == pytest.approx(2.0)
        assert perf.on_time_completion == pytest.approx(100.0)
        assert service.tasks.get("t1").due_date == datetime(2026, 10, 5, 12, 0)

    def test_reload_is_idempotent(self, service, seed_file):
        load_file(service, seed_file)
        load_file(service, seed_file)
        assert len(service.find_all()) == 2

    def test_empty_file(self, service, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert set(load_file(service, path).values()) == {0}

    def test_unknown_section(self, service, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("machines: []\n")
        with pytest.raises(ValidationError, match="Unknown sections") as exc:
            load_file(service, path)
        assert "workers" in exc.value.suggestion

    def test_bad_worker_record(self, service, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("workers:\n  - first_name: NoId\n")
        with pytest.raises(ValidationError, match="Bad worker entry"):
            load_file(service, path)

    def test_inverted_schedule_rejected(self, service, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(
            "schedules:\n"
            "  - {id: s1, worker_id: w1, date: 2026-10-14, start_time: '17:00', "
            "end_time: '09:00', scheduled_hours: 8}\n"
        )
        with pytest.raises(ValidationError, match="must be after start time"):
            load_file(service, path)


class TestHelpers:
    def test_read_yaml_missing(self, tmp_path):
        with pytest.raises(ValidationError, match="File not found"):
            read_yaml(tmp_path / "nope.yaml")

    def test_read_yaml_not_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValidationError, match="must be a YAML mapping"):
            read_yaml(path)

    def test_parse_skills_requires_level(self):
        with pytest.raises(ValidationError, match="Invalid skill entry") as exc:
            parse_skills([{"name": "Welding"}])
        assert "name and a level" in exc.value.suggestion

    def test_parse_skills_unknown_level(self):
        with pytest.raises(ValidationError, match="Unknown skill level"):
            parse_skills([{"name": "Welding", "level": "wizard"}])
