import logging
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas import (
    BulkSkillResult,
    EmployeeRecord,
    ErrorCode,
    PageMeta,
    SkillAssessmentUpdate,
    SkillCreate,
    SkillDetail,
    SkillListResponse,
    SkillRecord,
    SkillUpdate,
    UserSkillDetail,
    UserSkillRecord,
    create_error_response,
)
from configs.postgres import get_db
from middlewares.auth import get_current_user, require_admin, require_owner_or_admin
from models import SkillCategory
from services.exceptions import DuplicateRecordError, RecordNotFoundError
from services.records import (
    bulk_upsert_skills,
    create_skill,
    delete_skill,
    delete_user_skill,
    get_skill_detail,
    list_skills,
    list_user_skills,
    total_pages,
    update_skill,
    upsert_user_skill,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["skills"])

_ERROR_STATUS = (
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND, ErrorCode.NOT_FOUND),
    (DuplicateRecordError, status.HTTP_409_CONFLICT, ErrorCode.CONFLICT),
)


async def _record_error(
    session: AsyncSession, e: Exception, failure: str
) -> HTTPException:
    await session.rollback()
    for error_type, status_code, code in _ERROR_STATUS:
        if isinstance(e, error_type):
            return HTTPException(
                status_code=status_code,
                detail=create_error_response(code, str(e)),
            )
    logger.error(f"{failure}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=create_error_response(ErrorCode.INTERNAL, failure),
    )


@router.get("/", response_model=SkillListResponse)
async def get_skills(
    current_user: EmployeeRecord = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, description="Match on name or description"),
    category: Optional[SkillCategory] = Query(None),
    sort_by: Literal["name", "category", "created_at", "updated_at"] = Query("name"),
    sort_order: Literal["asc", "desc"] = Query("asc"),
) -> SkillListResponse:
    skills, total = await list_skills(
        session,
        page=page,
        limit=limit,
        search=search,
        category=category,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return SkillListResponse(
        data=skills,
        meta=PageMeta(
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages(total, limit),
        ),
    )


@router.post("/", response_model=SkillRecord, status_code=status.HTTP_201_CREATED)
async def add_skill(
    skill_data: SkillCreate,
    current_user: EmployeeRecord = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> SkillRecord:
    try:
        return await create_skill(session, skill_data)
    except Exception as e:
        raise await _record_error(session, e, "Failed to create skill")


@router.post("/bulk", response_model=BulkSkillResult)
async def add_skills_in_bulk(
    items: list[SkillCreate],
    current_user: EmployeeRecord = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> BulkSkillResult:
    """Create or update skills by name; failing rows are reported, not fatal."""
    try:
        return await bulk_upsert_skills(session, items)
    except Exception as e:
        raise await _record_error(session, e, "Failed to import skills")


@router.get("/user/{user_id}", response_model=list[UserSkillDetail])
async def get_user_skills(
    user_id: UUID,
    current_user: EmployeeRecord = Depends(require_owner_or_admin),
    session: AsyncSession = Depends(get_db),
) -> list[UserSkillDetail]:
    return await list_user_skills(session, user_id)


@router.put("/user/{user_id}/{skill_id}", response_model=UserSkillRecord)
async def assess_user_skill(
    user_id: UUID,
    skill_id: UUID,
    update: SkillAssessmentUpdate,
    current_user: EmployeeRecord = Depends(require_owner_or_admin),
    session: AsyncSession = Depends(get_db),
) -> UserSkillRecord:
    """Record a proficiency for any employee; admins sign their assessments."""
    assessed_by = "self" if current_user.id == user_id else str(current_user.id)
    try:
        return await upsert_user_skill(
            session, user_id, skill_id, update, assessed_by=assessed_by
        )
    except Exception as e:
        raise await _record_error(session, e, "Failed to save skill assessment")


@router.delete("/user/{user_id}/{skill_id}", response_model=UserSkillRecord)
async def remove_user_skill(
    user_id: UUID,
    skill_id: UUID,
    current_user: EmployeeRecord = Depends(require_owner_or_admin),
    session: AsyncSession = Depends(get_db),
) -> UserSkillRecord:
    try:
        return await delete_user_skill(session, user_id, skill_id)
    except Exception as e:
        raise await _record_error(session, e, "Failed to remove skill assessment")


@router.get("/{skill_id}", response_model=SkillDetail)
async def get_skill(
    skill_id: UUID,
    current_user: EmployeeRecord = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> SkillDetail:
    try:
        return await get_skill_detail(session, skill_id)
    except Exception as e:
        raise await _record_error(session, e, "Failed to load skill")


@router.put("/{skill_id}", response_model=SkillRecord)
async def edit_skill(
    skill_id: UUID,
    skill_data: SkillUpdate,
    current_user: EmployeeRecord = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> SkillRecord:
    try:
        return await update_skill(session, skill_id, skill_data)
    except Exception as e:
        raise await _record_error(session, e, "Failed to update skill")


@router.delete("/{skill_id}", response_model=SkillRecord)
async def remove_skill(
    skill_id: UUID,
    current_user: EmployeeRecord = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> SkillRecord:
    try:
        return await delete_skill(session, skill_id)
    except Exception as e:
        raise await _record_error(session, e, "Failed to delete skill")


@router.put("/{skill_id}/assessment", response_model=UserSkillRecord)
async def assess_skill(
    skill_id: UUID,
    update: SkillAssessmentUpdate,
    current_user: EmployeeRecord = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> UserSkillRecord:
    """Record the current employee's own proficiency for a skill."""
    try:
        return await upsert_user_skill(session, current_user.id, skill_id, update)
    except Exception as e:
        raise await _record_error(session, e, "Failed to save skill assessment")
