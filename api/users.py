import logging
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas import (
    EmployeeCreate,
    EmployeeDetail,
    EmployeeListResponse,
    EmployeeRecord,
    EmployeeUpdate,
    ErrorCode,
    PageMeta,
    create_error_response,
)
from configs.postgres import get_db
from middlewares.auth import require_admin, require_owner_or_admin
from models import EmployeeStatus, UserRole
from services.exceptions import (
    DuplicateRecordError,
    InvalidOperationError,
    RecordNotFoundError,
)
from services.records import (
    create_employee,
    delete_employee,
    get_employee_detail,
    list_employees,
    total_pages,
    update_employee,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["users"])

_ERROR_STATUS = (
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND, ErrorCode.NOT_FOUND),
    (DuplicateRecordError, status.HTTP_409_CONFLICT, ErrorCode.CONFLICT),
    (InvalidOperationError, status.HTTP_400_BAD_REQUEST, ErrorCode.BAD_REQUEST),
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


@router.get("/", response_model=EmployeeListResponse)
async def get_users(
    current_user: EmployeeRecord = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, description="Match on name or email"),
    department: Optional[str] = Query(None),
    role: Optional[UserRole] = Query(None),
    employee_status: Optional[EmployeeStatus] = Query(None, alias="status"),
    sort_by: Literal["name", "email", "created_at", "updated_at"] = Query(
        "created_at"
    ),
    sort_order: Literal["asc", "desc"] = Query("desc"),
) -> EmployeeListResponse:
    employees, total = await list_employees(
        session,
        page=page,
        limit=limit,
        search=search,
        department=department,
        role=role,
        status=employee_status,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return EmployeeListResponse(
        data=employees,
        meta=PageMeta(
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages(total, limit),
        ),
    )


@router.post("/", response_model=EmployeeRecord, status_code=status.HTTP_201_CREATED)
async def add_user(
    user_data: EmployeeCreate,
    current_user: EmployeeRecord = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> EmployeeRecord:
    """Create the employee record; sign-in accounts live in Supabase."""
    try:
        return await create_employee(session, user_data)
    except Exception as e:
        raise await _record_error(session, e, "Failed to create user")


@router.get("/{user_id}", response_model=EmployeeDetail)
async def get_user(
    user_id: UUID,
    current_user: EmployeeRecord = Depends(require_owner_or_admin),
    session: AsyncSession = Depends(get_db),
) -> EmployeeDetail:
    try:
        return await get_employee_detail(session, user_id)
    except Exception as e:
        raise await _record_error(session, e, "Failed to load user")


@router.put("/{user_id}", response_model=EmployeeRecord)
async def edit_user(
    user_id: UUID,
    user_data: EmployeeUpdate,
    current_user: EmployeeRecord = Depends(require_owner_or_admin),
    session: AsyncSession = Depends(get_db),
) -> EmployeeRecord:
    try:
        return await update_employee(session, user_id, user_data)
    except Exception as e:
        raise await _record_error(session, e, "Failed to update user")


@router.delete("/{user_id}", response_model=EmployeeRecord)
async def remove_user(
    user_id: UUID,
    current_user: EmployeeRecord = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> EmployeeRecord:
    try:
        return await delete_employee(session, user_id, current_user.id)
    except Exception as e:
        raise await _record_error(session, e, "Failed to delete user")
