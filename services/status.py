"""Status values derived from dates and progress.

Neither certification nor training status is stored; both are recomputed
from the record every time they are read.
"""

from datetime import date

from models import CertificationStatus, TrainingStatus

CERT_EXPIRY_WINDOW_DAYS = 30


def days_until(target: date, today: date) -> int:
    """Whole days from today to target, negative once target has passed."""
    return (target - today).days


def certification_status(
    expiry_date: date,
    today: date,
    window_days: int = CERT_EXPIRY_WINDOW_DAYS,
) -> CertificationStatus:
    remaining = days_until(expiry_date, today)
    if remaining <= 0:
        return CertificationStatus.EXPIRED
    if remaining <= window_days:
        return CertificationStatus.EXPIRING_SOON
    return CertificationStatus.ACTIVE


def training_status(progress: int) -> TrainingStatus:
    if progress >= 100:
        return TrainingStatus.COMPLETED
    if progress > 0:
        return TrainingStatus.IN_PROGRESS
    return TrainingStatus.NOT_STARTED
