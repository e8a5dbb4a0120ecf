"""Services package."""

from services.aggregation import compute_dashboard_stats, compute_skill_matrix
from services.notifications import (
    DerivationResult,
    add_custom_notification,
    clear_notifications,
    count_unread,
    derive_notifications,
    mark_all_as_read,
    mark_as_read,
    merge_notifications,
    remove_notification,
)
from services.status import certification_status, days_until, training_status

__all__ = [
    "DerivationResult",
    "add_custom_notification",
    "certification_status",
    "clear_notifications",
    "compute_dashboard_stats",
    "compute_skill_matrix",
    "count_unread",
    "days_until",
    "derive_notifications",
    "mark_all_as_read",
    "mark_as_read",
    "merge_notifications",
    "remove_notification",
    "training_status",
]
