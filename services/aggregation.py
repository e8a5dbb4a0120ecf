"""Dashboard statistics and the skill matrix, computed in memory."""

import logging
from collections import Counter
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from api.schemas.dashboard import (
    CategoryCount,
    DashboardStats,
    MatrixUser,
    SkillMatrixCell,
    SkillMatrixRow,
)
from api.schemas.records import (
    CertificationRecord,
    EmployeeRecord,
    SkillRecord,
    TrainingRecord,
    UserSkillRecord,
)

logger = logging.getLogger(__name__)


def round_half_away(value: float, places: int = 2) -> float:
    """Round the way the dashboard always has: scale, round half up, unscale."""
    scale = 10**places
    scaled = Decimal(value * scale).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return float(scaled) / scale


def average_skill_level(user_skills: Sequence[UserSkillRecord]) -> float:
    if not user_skills:
        return 0
    total = sum(us.proficiency_level for us in user_skills)
    return round_half_away(total / len(user_skills))


def compute_dashboard_stats(
    users: Sequence[EmployeeRecord],
    skills: Sequence[SkillRecord],
    user_skills: Sequence[UserSkillRecord],
    certifications: Sequence[CertificationRecord],
    trainings: Sequence[TrainingRecord],
) -> DashboardStats:
    """Summarize the organisation's skill data.

    Categories appear in the order they are first seen in ``skills`` and only
    when at least one skill belongs to them.
    """
    by_category = Counter(skill.category for skill in skills)

    stats = DashboardStats(
        total_users=len(users),
        total_skills=len(skills),
        total_certifications=len(certifications),
        total_trainings=len(trainings),
        average_skill_level=average_skill_level(user_skills),
        skills_by_category=[
            CategoryCount(category=category, count=count)
            for category, count in by_category.items()
        ],
    )
    logger.debug(
        "Dashboard stats computed",
        extra={
            "total_users": stats.total_users,
            "total_skills": stats.total_skills,
            "average_skill_level": stats.average_skill_level,
        },
    )
    return stats


def compute_skill_matrix(
    users: Sequence[EmployeeRecord],
    skills: Sequence[SkillRecord],
    user_skills: Sequence[UserSkillRecord],
) -> list[SkillMatrixRow]:
    """Every user against every skill, in input order.

    Pairs without an assessment are reported at level 0 with no notes.
    """
    assessments = {(us.user_id, us.skill_id): us for us in user_skills}

    matrix = []
    for user in users:
        cells = []
        for skill in skills:
            assessment = assessments.get((user.id, skill.id))
            cells.append(
                SkillMatrixCell(
                    skill_id=skill.id,
                    skill_name=skill.name,
                    category=skill.category,
                    proficiency_level=(
                        assessment.proficiency_level if assessment else 0
                    ),
                    notes=assessment.notes if assessment else None,
                    last_updated=assessment.last_updated if assessment else None,
                )
            )
        matrix.append(
            SkillMatrixRow(
                user=MatrixUser(
                    id=user.id,
                    name=user.name,
                    email=user.email,
                    department=user.department,
                    role=user.role,
                ),
                skills=cells,
            )
        )
    return matrix
