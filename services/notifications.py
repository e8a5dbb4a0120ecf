"""Notification feed derivation and the edits a viewer can make to it.

Every derived notification has an id that is a function of the fact that
triggered it, so re-deriving from unchanged data adds nothing new. A stored
entry with the same id always wins over a fresh one: its ``read`` flag and
original timestamp are never overwritten.

All functions here are pure; persistence lives in
``services.notification_store``.
"""

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from api.schemas.notification import Notification, NotificationDraft, NotificationType
from api.schemas.records import (
    CertificationRecord,
    EmployeeRecord,
    TrainingRecord,
    UserSkillRecord,
)
from models import CertificationStatus, Priority, TrainingStatus
from services.status import (
    CERT_EXPIRY_WINDOW_DAYS,
    certification_status,
    days_until,
    training_status,
)

logger = logging.getLogger(__name__)

NOTIFICATION_LIMIT = 50
TRAINING_DUE_WINDOW_DAYS = 7
ASSESSMENT_STALE_DAYS = 30

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

SKILL_ASSESSMENT_ID = "skill-assessment-reminder"
ADMIN_CERT_EXPIRY_ID = "admin-cert-expiry"
ADMIN_PENDING_TRAINING_ID = "admin-pending-training"
WELCOME_ID = "welcome-notification"

_ID_ALPHABET = string.digits + string.ascii_lowercase


@dataclass(frozen=True)
class DerivationResult:
    notifications: list[Notification]
    unread_count: int
    welcomed: bool
    fresh_count: int = 0


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _certification_notices(
    viewer: EmployeeRecord,
    certifications: Sequence[CertificationRecord],
    now: datetime,
    window_days: int,
) -> list[Notification]:
    today = now.date()
    notices = []
    for cert in certifications:
        if cert.employee_id != viewer.id:
            continue
        status = certification_status(cert.expiry_date, today, window_days)
        if status != CertificationStatus.EXPIRING_SOON:
            continue
        remaining = days_until(cert.expiry_date, today)
        notices.append(
            Notification(
                id=f"cert-expiry-{cert.id}",
                type=NotificationType.CERTIFICATION_EXPIRY,
                title="Certification Expiring Soon",
                message=f"Your {cert.name} certification expires in {remaining} days",
                timestamp=now,
                priority=Priority.HIGH,
                action_url="/certifications",
                metadata={
                    "certification_id": str(cert.id),
                    "days_until_expiry": remaining,
                },
            )
        )
    return notices


def _training_notices(
    viewer: EmployeeRecord,
    trainings: Sequence[TrainingRecord],
    now: datetime,
    window_days: int,
) -> list[Notification]:
    # In-progress trainings are not flagged even when close to their due date.
    today = now.date()
    notices = []
    for training in trainings:
        if training.assigned_to != viewer.id or training.due_date is None:
            continue
        if training_status(training.progress) != TrainingStatus.NOT_STARTED:
            continue
        remaining = days_until(training.due_date, today)
        if not 0 < remaining <= window_days:
            continue
        notices.append(
            Notification(
                id=f"training-due-{training.id}",
                type=NotificationType.TRAINING_DUE,
                title="Training Due Soon",
                message=f"{training.course_name} is due in {remaining} days",
                timestamp=now,
                priority=Priority.MEDIUM,
                action_url="/training",
                metadata={
                    "training_id": str(training.id),
                    "days_until_due": remaining,
                },
            )
        )
    return notices


def _assessment_notice(
    viewer: EmployeeRecord,
    user_skills: Sequence[UserSkillRecord],
    now: datetime,
    stale_days: int,
) -> Optional[Notification]:
    last_assessed = max(
        (_as_utc(us.last_updated) for us in user_skills if us.user_id == viewer.id),
        default=EPOCH,
    )
    days_since = (now - last_assessed) // timedelta(days=1)
    if days_since <= stale_days:
        return None
    return Notification(
        id=SKILL_ASSESSMENT_ID,
        type=NotificationType.SKILL_ASSESSMENT,
        title="Skill Assessment Reminder",
        message=f"It's been {days_since} days since your last skill update",
        timestamp=now,
        priority=Priority.LOW,
        action_url="/skills",
        metadata={"days_since_last_assessment": days_since},
    )


def _admin_notices(
    certifications: Sequence[CertificationRecord],
    trainings: Sequence[TrainingRecord],
    now: datetime,
    window_days: int,
) -> list[Notification]:
    today = now.date()
    notices = []

    expiring = sum(
        1
        for cert in certifications
        if certification_status(cert.expiry_date, today, window_days)
        == CertificationStatus.EXPIRING_SOON
    )
    if expiring:
        notices.append(
            Notification(
                id=ADMIN_CERT_EXPIRY_ID,
                type=NotificationType.SYSTEM,
                title="Team Certifications Expiring",
                message=f"{expiring} team certifications are expiring soon",
                timestamp=now,
                priority=Priority.HIGH,
                action_url="/employees",
                metadata={"count": expiring},
            )
        )

    pending = sum(
        1
        for training in trainings
        if training_status(training.progress) == TrainingStatus.NOT_STARTED
    )
    if pending:
        notices.append(
            Notification(
                id=ADMIN_PENDING_TRAINING_ID,
                type=NotificationType.SYSTEM,
                title="Pending Training Assignments",
                message=f"{pending} training courses haven't been started yet",
                timestamp=now,
                priority=Priority.MEDIUM,
                action_url="/analytics",
                metadata={"count": pending},
            )
        )
    return notices


def _welcome_notice(viewer: EmployeeRecord, now: datetime) -> Notification:
    if viewer.is_admin:
        message = (
            "Explore the admin dashboard to manage your team's skills and development"
        )
        action_url = "/dashboard"
    else:
        message = (
            "Start by updating your skills and exploring available training courses"
        )
        action_url = "/skills"
    return Notification(
        id=WELCOME_ID,
        type=NotificationType.SYSTEM,
        title="Welcome to Skill Matrix Portal!",
        message=message,
        timestamp=now,
        priority=Priority.LOW,
        action_url=action_url,
        metadata={"is_welcome": True},
    )


def merge_notifications(
    previous: Sequence[Notification],
    fresh: Sequence[Notification],
    limit: int = NOTIFICATION_LIMIT,
) -> list[Notification]:
    """Append fresh entries with unseen ids, newest first, capped at ``limit``."""
    merged = list(previous)
    seen = {n.id for n in merged}
    for notification in fresh:
        if notification.id not in seen:
            merged.append(notification)
            seen.add(notification.id)
    merged.sort(key=lambda n: _as_utc(n.timestamp), reverse=True)
    return merged[:limit]


def count_unread(notifications: Sequence[Notification]) -> int:
    return sum(1 for n in notifications if not n.read)


def derive_notifications(
    viewer: EmployeeRecord,
    certifications: Sequence[CertificationRecord],
    trainings: Sequence[TrainingRecord],
    user_skills: Sequence[UserSkillRecord],
    previous: Sequence[Notification],
    welcomed: bool,
    now: Optional[datetime] = None,
    *,
    cert_window_days: int = CERT_EXPIRY_WINDOW_DAYS,
    training_window_days: int = TRAINING_DUE_WINDOW_DAYS,
    assessment_stale_days: int = ASSESSMENT_STALE_DAYS,
    limit: int = NOTIFICATION_LIMIT,
) -> DerivationResult:
    """Refresh a viewer's notification feed.

    Args:
        viewer: The employee the feed belongs to
        certifications: Certifications in scope; org-wide for admins
        trainings: Trainings in scope; org-wide for admins
        user_skills: The viewer's skill assessments
        previous: The feed as last persisted, possibly empty
        welcomed: Whether the viewer has already been welcomed
        now: Reference time, defaults to the current UTC time

    Returns:
        DerivationResult: merged feed, unread count and the welcomed flag to
        persist (always True after a derivation)
    """
    now = _as_utc(now or datetime.now(timezone.utc))

    fresh = _certification_notices(viewer, certifications, now, cert_window_days)
    fresh.extend(_training_notices(viewer, trainings, now, training_window_days))

    reminder = _assessment_notice(viewer, user_skills, now, assessment_stale_days)
    if reminder is not None:
        fresh.append(reminder)

    if viewer.is_admin:
        fresh.extend(_admin_notices(certifications, trainings, now, cert_window_days))

    if not welcomed:
        fresh.append(_welcome_notice(viewer, now))

    merged = merge_notifications(previous, fresh, limit)
    logger.debug(
        "Notifications derived",
        extra={
            "viewer_id": str(viewer.id),
            "fresh_count": len(fresh),
            "merged_count": len(merged),
        },
    )
    return DerivationResult(
        notifications=merged,
        unread_count=count_unread(merged),
        welcomed=True,
        fresh_count=len(fresh),
    )


def mark_as_read(
    notifications: Sequence[Notification], notification_id: str
) -> list[Notification]:
    return [
        n.model_copy(update={"read": True}) if n.id == notification_id else n
        for n in notifications
    ]


def mark_all_as_read(notifications: Sequence[Notification]) -> list[Notification]:
    return [n.model_copy(update={"read": True}) for n in notifications]


def remove_notification(
    notifications: Sequence[Notification], notification_id: str
) -> list[Notification]:
    return [n for n in notifications if n.id != notification_id]


def clear_notifications() -> list[Notification]:
    return []


def _custom_id(now: datetime) -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"custom-{int(now.timestamp() * 1000)}-{suffix}"


def add_custom_notification(
    notifications: Sequence[Notification],
    draft: NotificationDraft,
    now: Optional[datetime] = None,
    limit: int = NOTIFICATION_LIMIT,
) -> list[Notification]:
    """Put an ad hoc notification at the front of the feed."""
    now = _as_utc(now or datetime.now(timezone.utc))
    notification = Notification(
        **draft.model_dump(),
        id=_custom_id(now),
        timestamp=now,
        read=False,
    )
    return [notification, *notifications][:limit]
