from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas import CertificationOut, EmployeeRecord
from configs import get_settings
from configs.postgres import get_db
from middlewares.auth import get_current_user
from services.records import list_certifications_for
from services.status import certification_status, days_until

router = APIRouter(tags=["certifications"])


@router.get("/me", response_model=list[CertificationOut])
async def list_my_certifications(
    current_user: EmployeeRecord = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> list[CertificationOut]:
    """The employee's certifications with status derived for today."""
    today = datetime.now(timezone.utc).date()
    window = get_settings().CERT_EXPIRY_WINDOW_DAYS
    certifications = await list_certifications_for(session, current_user.id)
    return [
        CertificationOut(
            **cert.model_dump(),
            status=certification_status(cert.expiry_date, today, window),
            days_until_expiry=days_until(cert.expiry_date, today),
        )
        for cert in certifications
    ]
