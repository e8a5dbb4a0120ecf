import logging
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.errors import ErrorCode, create_error_response
from api.schemas.records import EmployeeRecord
from configs.postgres import get_db
from configs.supabase import get_supabase_client
from models import EmployeeStatus
from services.records import get_employee_by_email

logger = logging.getLogger(__name__)
security = HTTPBearer()


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=create_error_response(ErrorCode.UNAUTHENTICATED, message),
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session: AsyncSession = Depends(get_db),
) -> EmployeeRecord:
    """Resolve the bearer token to an active employee."""
    try:
        supabase = await get_supabase_client()
        response = await supabase.auth.get_user(credentials.credentials)
        email = response.user.email if response and response.user else None
    except Exception as e:
        logger.error(f"Token verification failed: {e}")
        raise _unauthorized("Invalid or expired token")

    if not email:
        raise _unauthorized("Invalid or expired token")

    employee = await get_employee_by_email(session, email)
    if employee is None:
        logger.warning(f"No employee record for authenticated email {email}")
        raise _unauthorized("User not found")
    if employee.status != EmployeeStatus.ACTIVE:
        raise _unauthorized("Account is not active")
    return employee


async def require_admin(
    current_user: EmployeeRecord = Depends(get_current_user),
) -> EmployeeRecord:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=create_error_response(
                ErrorCode.FORBIDDEN, "Administrator access required"
            ),
        )
    return current_user


async def require_owner_or_admin(
    user_id: UUID,
    current_user: EmployeeRecord = Depends(get_current_user),
) -> EmployeeRecord:
    """Allow the employee named by the ``user_id`` path parameter, or an admin."""
    if current_user.id != user_id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=create_error_response(
                ErrorCode.FORBIDDEN, "You can only access your own records"
            ),
        )
    return current_user
