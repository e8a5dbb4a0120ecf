"""Notification feed endpoints for the authenticated employee."""

import logging
import time
from typing import Callable
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas import (
    EmployeeRecord,
    ErrorCode,
    NotificationDraft,
    NotificationFeed,
    create_error_response,
)
from api.schemas.notification import Notification
from configs import get_settings
from configs.postgres import get_db
from configs.rate_limiter import limiter
from middlewares.auth import get_current_user
from services.exceptions import FeedLockTimeoutError
from services.metrics import metrics
from services.notification_store import (
    delete_notifications,
    feed_lock,
    is_welcomed,
    load_notifications,
    mark_welcomed,
    save_notifications,
)
from services.notifications import (
    add_custom_notification,
    count_unread,
    derive_notifications,
    mark_all_as_read,
    mark_as_read,
    remove_notification,
)
from services.records import load_viewer_inputs

logger = logging.getLogger(__name__)
router = APIRouter(tags=["notifications"])


def _feed(notifications: list[Notification]) -> NotificationFeed:
    return NotificationFeed(
        notifications=notifications,
        unread_count=count_unread(notifications),
    )


def _unavailable(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=create_error_response(ErrorCode.UNAVAILABLE, message),
    )


def _busy(user_id: UUID) -> HTTPException:
    logger.warning(f"Timed out waiting for the notification feed lock of {user_id}")
    return _unavailable("Notification feed is busy, retry shortly")


async def _update_feed(
    user_id: UUID,
    change: Callable[[list[Notification]], list[Notification]],
) -> NotificationFeed:
    """Apply ``change`` to the stored feed while holding the user's feed lock."""
    try:
        async with feed_lock(user_id):
            notifications = change(await load_notifications(user_id))
            saved = await save_notifications(user_id, notifications)
    except FeedLockTimeoutError:
        raise _busy(user_id)

    if not saved:
        raise _unavailable("Failed to store notifications")
    return _feed(notifications)


@router.get("/", response_model=NotificationFeed)
@limiter.limit("60/minute")
async def get_notifications(
    request: Request,
    current_user: EmployeeRecord = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> NotificationFeed:
    """Re-derive the viewer's notifications and merge them into the stored feed."""
    settings = get_settings()
    viewer_id = str(current_user.id)
    start_time = time.time()

    try:
        inputs = await load_viewer_inputs(session, current_user)
    except Exception as e:
        logger.error(
            "Error loading notification inputs",
            extra={"viewer_id": viewer_id, "error": str(e)},
        )
        metrics.record_error(error_code="INTERNAL", viewer_id=viewer_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=create_error_response(
                ErrorCode.INTERNAL, "Failed to load notifications"
            ),
        )

    try:
        async with feed_lock(current_user.id):
            previous = await load_notifications(current_user.id)
            welcomed = await is_welcomed(current_user.id)

            result = derive_notifications(
                current_user,
                inputs.certifications,
                inputs.trainings,
                inputs.user_skills,
                previous,
                welcomed,
                cert_window_days=settings.CERT_EXPIRY_WINDOW_DAYS,
                training_window_days=settings.TRAINING_DUE_WINDOW_DAYS,
                assessment_stale_days=settings.ASSESSMENT_STALE_DAYS,
                limit=settings.NOTIFICATION_LIMIT,
            )

            saved = await save_notifications(current_user.id, result.notifications)
            # The welcome notice lives only in the stored feed.
            if saved and not welcomed:
                await mark_welcomed(current_user.id)
    except FeedLockTimeoutError:
        metrics.record_error(error_code="FEED_LOCKED", viewer_id=viewer_id)
        raise _busy(current_user.id)

    if not saved:
        metrics.record_error(error_code="STORE_UNAVAILABLE", viewer_id=viewer_id)
        raise _unavailable("Failed to store notifications")

    duration_ms = int((time.time() - start_time) * 1000)
    metrics.record_derivation(
        viewer_id=viewer_id,
        fresh_count=result.fresh_count,
        merged_count=len(result.notifications),
        unread_count=result.unread_count,
        duration_ms=duration_ms,
    )
    return NotificationFeed(
        notifications=result.notifications,
        unread_count=result.unread_count,
    )


@router.post(
    "/", response_model=NotificationFeed, status_code=status.HTTP_201_CREATED
)
async def create_notification(
    draft: NotificationDraft,
    current_user: EmployeeRecord = Depends(get_current_user),
) -> NotificationFeed:
    limit = get_settings().NOTIFICATION_LIMIT
    return await _update_feed(
        current_user.id,
        lambda feed: add_custom_notification(feed, draft, limit=limit),
    )


@router.post("/read-all", response_model=NotificationFeed)
async def read_all_notifications(
    current_user: EmployeeRecord = Depends(get_current_user),
) -> NotificationFeed:
    return await _update_feed(current_user.id, mark_all_as_read)


@router.post("/{notification_id}/read", response_model=NotificationFeed)
async def read_notification(
    notification_id: str,
    current_user: EmployeeRecord = Depends(get_current_user),
) -> NotificationFeed:
    return await _update_feed(
        current_user.id, lambda feed: mark_as_read(feed, notification_id)
    )


@router.delete("/{notification_id}", response_model=NotificationFeed)
async def delete_notification(
    notification_id: str,
    current_user: EmployeeRecord = Depends(get_current_user),
) -> NotificationFeed:
    return await _update_feed(
        current_user.id, lambda feed: remove_notification(feed, notification_id)
    )


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
async def clear_all_notifications(
    current_user: EmployeeRecord = Depends(get_current_user),
) -> None:
    try:
        async with feed_lock(current_user.id):
            deleted = await delete_notifications(current_user.id)
    except FeedLockTimeoutError:
        raise _busy(current_user.id)

    if not deleted:
        raise _unavailable("Failed to clear notifications")
