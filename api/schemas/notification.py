from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from models import Priority


class NotificationType(str, Enum):
    CERTIFICATION_EXPIRY = "certification_expiry"
    TRAINING_DUE = "training_due"
    SKILL_ASSESSMENT = "skill_assessment"
    ACHIEVEMENT = "achievement"
    SYSTEM = "system"


class NotificationDraft(BaseModel):
    """Caller-supplied content of an ad hoc notification."""

    type: NotificationType = NotificationType.SYSTEM
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=2000)
    priority: Priority = Priority.MEDIUM
    action_url: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class Notification(NotificationDraft):
    id: str
    timestamp: datetime
    read: bool = False


class NotificationFeed(BaseModel):
    notifications: list[Notification]
    unread_count: int
