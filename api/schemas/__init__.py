"""API schemas package."""

from api.schemas.dashboard import (
    CategoryCount,
    DashboardStats,
    MatrixUser,
    SkillMatrixCell,
    SkillMatrixResponse,
    SkillMatrixRow,
)
from api.schemas.errors import ErrorCode, create_error_response
from api.schemas.notification import (
    Notification,
    NotificationDraft,
    NotificationFeed,
    NotificationType,
)
from api.schemas.records import (
    BulkRowError,
    BulkSkillResult,
    CertificationOut,
    CertificationRecord,
    EmployeeCreate,
    EmployeeDetail,
    EmployeeListResponse,
    EmployeeRecord,
    EmployeeUpdate,
    PageMeta,
    SkillAssessmentUpdate,
    SkillCreate,
    SkillDetail,
    SkillHolder,
    SkillListResponse,
    SkillRecord,
    SkillUpdate,
    TrainingOut,
    TrainingProgressUpdate,
    TrainingRecord,
    UserSkillDetail,
    UserSkillRecord,
)

__all__ = [
    "BulkRowError",
    "BulkSkillResult",
    "CategoryCount",
    "CertificationOut",
    "CertificationRecord",
    "DashboardStats",
    "EmployeeCreate",
    "EmployeeDetail",
    "EmployeeListResponse",
    "EmployeeRecord",
    "EmployeeUpdate",
    "ErrorCode",
    "MatrixUser",
    "Notification",
    "NotificationDraft",
    "NotificationFeed",
    "NotificationType",
    "PageMeta",
    "SkillAssessmentUpdate",
    "SkillCreate",
    "SkillDetail",
    "SkillHolder",
    "SkillListResponse",
    "SkillMatrixCell",
    "SkillMatrixResponse",
    "SkillMatrixRow",
    "SkillRecord",
    "SkillUpdate",
    "TrainingOut",
    "TrainingProgressUpdate",
    "TrainingRecord",
    "UserSkillDetail",
    "UserSkillRecord",
    "create_error_response",
]
