"""TaskRouter — rank the best workers for a stored task."""

from shopfloor.config import PlantConfig
from shopfloor.exceptions import TaskNotFound
from shopfloor.log import get_logger
from shopfloor.matching import SkillMatch
from shopfloor.requirements import TaskSkillCatalog, extract_requirements
from shopfloor.workers import WorkerService

logger = get_logger(__name__)


class TaskRouter:
    """Routes tasks to workers based on skill match, then optionally workload or performance."""

    def __init__(self, config: PlantConfig, service: WorkerService,
                 catalog: TaskSkillCatalog | None = None):
        self.config = config
        self.service = service
        self.catalog = catalog or config.task_skills

    def find_best_match_for_task(
        self,
        task_id: str,
        consider_workload: bool = False,
        consider_performance: bool = False,
        max_candidates: int | None = None,
    ) -> list[SkillMatch]:
        """Candidates for a task, best first.

        Candidates come from the task's work center and must score at least
        matching.task_floor_score. Each refiner re-sorts the whole list, so when both
        are requested the performance ordering is the one returned.

        Raises:
            TaskNotFound: if task_id does not resolve.
        """
        task = self.service.tasks.get(task_id)
        if task is None:
            raise TaskNotFound(task_id)

        requirements = extract_requirements(task, self.catalog)
        candidates = self.service.find_workers_with_skills(
            requirements,
            work_center_id=task.work_center_id,
            minimum_match_score=self.config.matching.task_floor_score,
        )
        logger.debug("Task %s: %d requirements, %d candidates",
                     task_id, len(requirements), len(candidates))

        if consider_workload:
            candidates = self.sort_by_workload(candidates)

        if consider_performance:
            candidates = self.sort_by_performance(candidates)

        if max_candidates:
            candidates = candidates[:max_candidates]

        return candidates

    def sort_by_workload(self, candidates: list[SkillMatch]) -> list[SkillMatch]:
        """Fewest active tasks first; higher match score breaks ties."""
        load = {
            c.worker.id: self.service.get_worker_workload(c.worker.id).current_tasks
            for c in candidates
        }
        return sorted(candidates, key=lambda c: (load[c.worker.id], -c.match_score))

    def sort_by_performance(self, candidates: list[SkillMatch]) -> list[SkillMatch]:
        """Blend match score with the worker's efficiency/quality average.

        combined = skill_weight * match_score + performance_weight * (efficiency + quality) / 2
        """
        skill_w = self.config.matching.skill_weight
        perf_w = self.config.matching.performance_weight

        combined = {}
        for c in candidates:
            perf = self.service.get_worker_performance(c.worker.id)
            perf_score = (perf.efficiency + perf.quality_score) / 2
            combined[c.worker.id] = c.match_score * skill_w + perf_score * perf_w

        return sorted(candidates, key=lambda c: combined[c.worker.id], reverse=True)
