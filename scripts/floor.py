#!/usr/bin/env python3
"""floor — CLI for querying and updating the shop-floor workforce."""

import json
import sys
from datetime import date, datetime
from pathlib import Path

import click
import yaml

from shopfloor.config import CONFIG_FILE, PlantConfig
from shopfloor.exceptions import (
    ConfigError, NotFound, StaleWorkerError, ValidationError,
)
from shopfloor.loader import load_file, parse_skills, read_yaml
from shopfloor.log import setup_logging
from shopfloor.models import ShiftType
from shopfloor.task_router import TaskRouter
from shopfloor.validation import parse_skill_spec, parse_worker_status
from shopfloor.workers import WorkerService

PLANT_TEMPLATE = {
    "plant": {"name": "My Plant", "site": ""},
    "matching": {"task_floor_score": 50, "skill_weight": 0.7, "performance_weight": 0.3},
    "workload": {"active_statuses": ["pending", "assigned", "in_progress"]},
    "logging": {"level": "INFO", "file": ""},
}


def _load_project(project_dir: Path | None = None) -> tuple[PlantConfig, WorkerService, TaskRouter]:
    """Load config, service and router from the given (or current) directory."""
    config = PlantConfig.load(project_dir or Path.cwd())
    service = WorkerService(config)
    router = TaskRouter(config, service)
    return config, service, router


def _open(ctx) -> tuple[PlantConfig, WorkerService, TaskRouter]:
    try:
        config, service, router = _load_project(ctx.obj["project_dir"])
    except ConfigError as e:
        click.echo(f"Config error: {e}", err=True)
        sys.exit(1)
    log_file = Path(config.logging.file) if config.logging.file else None
    level = "DEBUG" if ctx.obj["verbose"] else config.logging.level
    setup_logging(level=level, log_file=log_file, plant=config.name)
    return config, service, router


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"'{value}' is not a YYYY-MM-DD date")


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _echo_matches(matches, as_json: bool) -> None:
    if as_json:
        _echo_json([m.to_dict() for m in matches])
        return
    if not matches:
        click.echo("No matching workers.")
        return
    for m in matches:
        flags = []
        if not m.skill_level_match:
            flags.append("missing required")
        if not m.certification_valid:
            flags.append("certification invalid")
        if m.available:
            flags.append("available")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        missing = f" missing: {', '.join(m.missing_skills)}" if m.missing_skills else ""
        click.echo(f"  {m.worker.id} {m.worker.full_name} — {m.match_score:.1f}{suffix}{missing}")


@click.group()
@click.option("--project-dir", type=click.Path(exists=True, path_type=Path), default=None,
              help="Plant project directory (defaults to cwd)")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, project_dir, verbose):
    """floor — worker skill matching and task assignment."""
    ctx.ensure_object(dict)
    ctx.obj["project_dir"] = project_dir
    ctx.obj["verbose"] = verbose


@cli.command()
@click.option("--name", prompt="Plant name", help="Plant name")
@click.pass_context
def init(ctx, name):
    """Create plant.yaml in the project directory."""
    project_dir = ctx.obj["project_dir"] or Path.cwd()
    config_path = project_dir / CONFIG_FILE
    if config_path.exists():
        click.echo(f"{CONFIG_FILE} already exists in {project_dir}", err=True)
        sys.exit(1)

    template = json.loads(json.dumps(PLANT_TEMPLATE))
    template["plant"]["name"] = name
    config_path.write_text(yaml.dump(template, default_flow_style=False, sort_keys=False))
    (project_dir / "data").mkdir(exist_ok=True)
    click.echo(f"Created {config_path}")


@cli.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def load(ctx, file):
    """Import workers, tasks, schedules and assignments from a YAML file."""
    _, service, _ = _open(ctx)
    try:
        counts = load_file(service, file)
    except ValidationError as e:
        _fail(e)
    for section, n in counts.items():
        click.echo(f"  {section}: {n}")


@cli.command()
@click.option("--status", default=None, help="Only workers with this status")
@click.option("--department", default=None, help="Department id")
@click.option("--work-center", default=None, help="Work center id")
@click.option("--shift", type=click.Choice([s.value for s in ShiftType]), default=None)
@click.option("--skill", default=None, help="Only workers with this skill name")
@click.pass_context
def workers(ctx, status, department, work_center, shift, skill):
    """List workers."""
    _, service, _ = _open(ctx)
    try:
        found = service.find_all(
            status=parse_worker_status(status) if status else None,
            department_id=department,
            work_center_id=work_center,
            shift_type=ShiftType(shift) if shift else None,
            has_skill=skill,
        )
    except ValidationError as e:
        _fail(e)

    if not found:
        click.echo("No workers found. Use: floor load <file>")
        return
    for w in found:
        skills = ", ".join(f"{s.name} ({s.level.value})" for s in w.skills) or "no skills"
        click.echo(f"  {w.id} {w.full_name} — {w.status.value} — {skills}")


@cli.command()
@click.argument("worker_id")
@click.pass_context
def show(ctx, worker_id):
    """Show one worker record."""
    _, service, _ = _open(ctx)
    try:
        worker = service.find_one(worker_id)
    except NotFound as e:
        _fail(e)
    _echo_json(worker.to_dict())


@cli.command()
@click.option("--skill", "skills", multiple=True, required=True,
              help="Requirement as Name[:level][:required][:cert]; repeatable")
@click.option("--work-center", default=None, help="Restrict to a work center")
@click.option("--min-score", type=float, default=None, help="Minimum match score (0-100)")
@click.option("--include-unavailable", is_flag=True, help="Also score workers who are off")
@click.option("--eligible-only", is_flag=True, help="Drop workers missing a required skill")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def match(ctx, skills, work_center, min_score, include_unavailable, eligible_only, as_json):
    """Rank workers against ad-hoc skill requirements."""
    _, service, _ = _open(ctx)
    try:
        requirements = [parse_skill_spec(s) for s in skills]
    except ValidationError as e:
        _fail(e)
    matches = service.find_workers_with_skills(
        requirements,
        include_unavailable=include_unavailable,
        work_center_id=work_center,
        minimum_match_score=min_score,
        eligible_only=eligible_only,
    )
    _echo_matches(matches, as_json)


@cli.command("best-match")
@click.argument("task_id")
@click.option("--workload", is_flag=True, help="Prefer workers with fewer active tasks")
@click.option("--performance", is_flag=True, help="Blend in efficiency and quality")
@click.option("--max", "max_candidates", type=int, default=None, help="Limit candidates")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def best_match(ctx, task_id, workload, performance, max_candidates, as_json):
    """Rank workers for a stored task."""
    _, _, router = _open(ctx)
    try:
        matches = router.find_best_match_for_task(
            task_id,
            consider_workload=workload,
            consider_performance=performance,
            max_candidates=max_candidates,
        )
    except (NotFound, ValidationError) as e:
        _fail(e)
    _echo_matches(matches, as_json)


@cli.command()
@click.argument("worker_id")
@click.pass_context
def workload(ctx, worker_id):
    """Show active tasks, weekly hours and remaining capacity."""
    _, service, _ = _open(ctx)
    try:
        analysis = service.get_worker_workload(worker_id)
    except NotFound as e:
        _fail(e)
    click.echo(f"Worker:       {analysis.worker_id}")
    click.echo(f"Active tasks: {analysis.current_tasks}")
    click.echo(f"Scheduled:    {analysis.scheduled_hours:g}h (overtime {analysis.overtime_hours:g}h)")
    click.echo(f"Capacity:     {analysis.available_capacity:g}h")
    click.echo(f"Utilization:  {analysis.utilization_rate:.0f}%")


@cli.command()
@click.argument("worker_id")
@click.option("--since", default=None, help="Completed on or after (YYYY-MM-DD)")
@click.option("--until", default=None, help="Completed on or before (YYYY-MM-DD)")
@click.pass_context
def performance(ctx, worker_id, since, until):
    """Show performance metrics from completed assignments."""
    _, service, _ = _open(ctx)
    if bool(since) != bool(until):
        raise click.UsageError("--since and --until must be given together")
    start = datetime.combine(_parse_date(since), datetime.min.time()) if since else None
    end = datetime.combine(_parse_date(until), datetime.max.time()) if until else None
    try:
        metrics = service.get_worker_performance(worker_id, start, end)
    except NotFound as e:
        _fail(e)
    _echo_json(metrics.to_dict())


@cli.command()
@click.argument("worker_id")
@click.option("--date", "day", required=True, help="Day to check (YYYY-MM-DD)")
@click.option("--start", default=None, help="Start time HH:MM")
@click.option("--end", default=None, help="End time HH:MM")
@click.option("--hours", type=float, default=None, help="Hours of capacity needed")
@click.pass_context
def availability(ctx, worker_id, day, start, end, hours):
    """Check whether a worker can take work on a given day."""
    _, service, _ = _open(ctx)
    try:
        result = service.check_availability(worker_id, _parse_date(day), start, end, hours)
    except (NotFound, ValidationError) as e:
        _fail(e)

    if result.available:
        click.echo("Available")
        return
    click.echo(f"Unavailable: {result.reason}")
    for entry in result.conflicts:
        click.echo(f"  conflicts with {entry.start_time}-{entry.end_time} ({entry.shift_name or entry.id})")


@cli.command("set-status")
@click.argument("worker_id")
@click.argument("status")
@click.option("--reason", default=None, help="Why the status changed")
@click.pass_context
def set_status(ctx, worker_id, status, reason):
    """Change a worker's status."""
    _, service, _ = _open(ctx)
    try:
        worker = service.update_status(worker_id, status, reason)
    except (NotFound, ValidationError, StaleWorkerError) as e:
        _fail(e)
    click.echo(f"{worker.id} is now {worker.status.value}")


@cli.command("set-skills")
@click.argument("worker_id")
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def set_skills(ctx, worker_id, file):
    """Replace a worker's skills from a YAML file with a 'skills' list."""
    _, service, _ = _open(ctx)
    try:
        skills = parse_skills(read_yaml(file).get("skills"))
        worker = service.update_skills(worker_id, skills)
    except (NotFound, ValidationError, StaleWorkerError) as e:
        _fail(e)
    click.echo(f"{worker.id} now has {len(worker.skills)} skills")


@cli.command("record-metrics")
@click.argument("worker_id")
@click.option("--efficiency", type=float, default=None)
@click.option("--quality", type=float, default=None)
@click.option("--tasks", type=int, default=None, help="Tasks completed to add")
@click.option("--hours", type=float, default=None, help="Hours worked to add")
@click.pass_context
def record_metrics(ctx, worker_id, efficiency, quality, tasks, hours):
    """Update a worker's performance aggregates."""
    _, service, _ = _open(ctx)
    try:
        worker = service.record_performance_metrics(
            worker_id, efficiency=efficiency, quality_score=quality,
            tasks_completed=tasks, hours_worked=hours,
        )
    except (NotFound, ValidationError, StaleWorkerError) as e:
        _fail(e)
    click.echo(f"{worker.id}: efficiency {worker.efficiency:g}, quality {worker.quality_score:g}, "
               f"{worker.total_tasks_completed} tasks, {worker.total_hours_worked:g}h")


@cli.command()
@click.option("--type", "event_type", default=None, help="Filter by event name")
@click.option("--worker", default=None, help="Filter by worker id")
@click.option("--limit", default=20, type=int)
@click.pass_context
def events(ctx, event_type, worker, limit):
    """Show recent worker events."""
    _, service, _ = _open(ctx)
    found = service.events.history(name=event_type, worker_id=worker, limit=limit)
    if not found:
        click.echo("No events recorded.")
        return
    for e in found:
        click.echo(f"  {e['timestamp']}  {e['name']}  {e['worker_id']}")


if __name__ == "__main__":
    cli()
