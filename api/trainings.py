import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas import (
    EmployeeRecord,
    ErrorCode,
    TrainingOut,
    TrainingProgressUpdate,
    TrainingRecord,
    create_error_response,
)
from configs.postgres import get_db
from middlewares.auth import get_current_user
from services.exceptions import TrainingNotFoundError
from services.records import list_trainings_for, update_training_progress
from services.status import training_status

logger = logging.getLogger(__name__)
router = APIRouter(tags=["trainings"])


def _with_status(training: TrainingRecord) -> TrainingOut:
    return TrainingOut(
        **training.model_dump(), status=training_status(training.progress)
    )


@router.get("/me", response_model=list[TrainingOut])
async def list_my_trainings(
    current_user: EmployeeRecord = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> list[TrainingOut]:
    trainings = await list_trainings_for(session, current_user.id)
    return [_with_status(t) for t in trainings]


@router.patch("/{training_id}/progress", response_model=TrainingOut)
async def set_training_progress(
    training_id: UUID,
    update: TrainingProgressUpdate,
    current_user: EmployeeRecord = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> TrainingOut:
    try:
        training = await update_training_progress(
            session, training_id, current_user.id, update.progress
        )
    except TrainingNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=create_error_response(ErrorCode.NOT_FOUND, str(e)),
        )
    except Exception as e:
        await session.rollback()
        logger.error(f"Error updating progress for training {training_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=create_error_response(
                ErrorCode.INTERNAL, "Failed to update training progress"
            ),
        )

    logger.info(f"Training {training_id} progress set to {update.progress}")
    return _with_status(training)
