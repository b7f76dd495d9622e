"""Skill match evaluator — scores one worker against a list of skill requirements.

Pure computation. No side effects.

Per requirement:
- skill missing: 0, and a missing *required* skill makes the match ineligible
- skill present, no minimum level: 1.0
- skill present, level met: 1.0 + 0.1 per level above the minimum
- skill present, level short: 0.5 * worker_level / required_level
- certification required but absent or expired: score halved

match_score = average per-requirement score * 100, clamped to [0, 100].
"""

from dataclasses import dataclass, field
from datetime import date

from shopfloor.models import SkillLevel, SkillRequirement, Worker, WorkerSkill, WorkerStatus

SKILL_LEVEL_VALUES = {
    SkillLevel.BEGINNER: 1,
    SkillLevel.INTERMEDIATE: 2,
    SkillLevel.ADVANCED: 3,
    SkillLevel.EXPERT: 4,
}

HAS_SKILL_CREDIT = 0.5
LEVEL_BONUS = 0.1
CERTIFICATION_PENALTY = 0.5


@dataclass
class SkillMatch:
    """How well one worker fits a requirement set."""
    worker: Worker
    match_score: float
    matched_skills: list[str] = field(default_factory=list)
    missing_skills: list[str] = field(default_factory=list)
    skill_level_match: bool = True  # all required skills present
    certification_valid: bool = True
    available: bool = False

    @property
    def eligible(self) -> bool:
        return self.skill_level_match

    def to_dict(self) -> dict:
        return {
            "worker_id": self.worker.id,
            "worker_name": self.worker.full_name,
            "match_score": round(self.match_score, 2),
            "matched_skills": list(self.matched_skills),
            "missing_skills": list(self.missing_skills),
            "skill_level_match": self.skill_level_match,
            "certification_valid": self.certification_valid,
            "available": self.available,
        }


def level_value(level: SkillLevel | None) -> int:
    """Ordinal for a skill level; 0 when unknown."""
    return SKILL_LEVEL_VALUES.get(level, 0)


def certification_is_valid(skill: WorkerSkill, today: date) -> bool:
    """A certification needs a certified date and must not have expired before today."""
    if skill.certified_date is None:
        return False
    if skill.expiry_date is not None and skill.expiry_date < today:
        return False
    return True


def score_requirement(skill: WorkerSkill, requirement: SkillRequirement) -> float:
    """Level-based score for a skill the worker has. Certification is applied separately."""
    if requirement.minimum_level is None:
        return 1.0

    required = level_value(requirement.minimum_level)
    actual = level_value(skill.level)
    if actual >= required:
        return 1.0 + (actual - required) * LEVEL_BONUS
    return HAS_SKILL_CREDIT * (actual / required)


def evaluate_skill_match(
    worker: Worker,
    requirements: list[SkillRequirement],
    today: date | None = None,
) -> SkillMatch:
    """Score a worker's skills against requirements.

    Args:
        worker: The candidate.
        requirements: Requirements to score against. Duplicate names are scored
            independently.
        today: Reference date for certification expiry. Defaults to date.today().

    Returns:
        SkillMatch with match_score in [0, 100].
    """
    today = today or date.today()
    matched: list[str] = []
    missing: list[str] = []
    total = 0.0
    required_met = True
    certification_valid = True

    for requirement in requirements:
        skill = worker.find_skill(requirement.name)
        if skill is None:
            missing.append(requirement.name)
            if requirement.required:
                required_met = False
            continue

        matched.append(requirement.name)
        score = score_requirement(skill, requirement)

        if requirement.certification_required and not certification_is_valid(skill, today):
            certification_valid = False
            score *= CERTIFICATION_PENALTY

        total += score

    match_score = (total / len(requirements)) * 100 if requirements else 0.0
    match_score = max(0.0, min(100.0, match_score))

    return SkillMatch(
        worker=worker,
        match_score=match_score,
        matched_skills=matched,
        missing_skills=missing,
        skill_level_match=required_met,
        certification_valid=certification_valid,
        available=worker.status is WorkerStatus.AVAILABLE,
    )
