"""Administrator dashboard endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas import (
    DashboardStats,
    EmployeeRecord,
    ErrorCode,
    SkillMatrixResponse,
    create_error_response,
)
from configs.postgres import get_db
from middlewares.auth import require_admin
from services.aggregation import compute_dashboard_stats, compute_skill_matrix
from services.metrics import metrics
from services.records import load_dashboard_inputs, load_skill_matrix_inputs

logger = logging.getLogger(__name__)
router = APIRouter(tags=["admin"])


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard_stats(
    current_user: EmployeeRecord = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> DashboardStats:
    try:
        inputs = await load_dashboard_inputs(session)
    except Exception as e:
        logger.error(f"Error loading dashboard data: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=create_error_response(
                ErrorCode.INTERNAL, "Failed to load dashboard data"
            ),
        )

    return compute_dashboard_stats(
        inputs.users,
        inputs.skills,
        inputs.user_skills,
        inputs.certifications,
        inputs.trainings,
    )


@router.get("/skill-matrix", response_model=SkillMatrixResponse)
async def get_skill_matrix(
    current_user: EmployeeRecord = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> SkillMatrixResponse:
    try:
        users, skills, user_skills = await load_skill_matrix_inputs(session)
    except Exception as e:
        logger.error(f"Error loading skill matrix data: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=create_error_response(
                ErrorCode.INTERNAL, "Failed to load skill matrix"
            ),
        )

    return SkillMatrixResponse(
        matrix=compute_skill_matrix(users, skills, user_skills),
        skills=skills,
    )


@router.get("/metrics")
async def get_notification_metrics(
    current_user: EmployeeRecord = Depends(require_admin),
) -> dict:
    return metrics.get_metrics()
