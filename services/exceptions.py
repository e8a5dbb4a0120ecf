"""Errors raised by the record and notification services."""

from uuid import UUID


class SkillMatrixError(Exception):
    """Base exception for skill matrix service failures."""

    pass


class RecordNotFoundError(SkillMatrixError):
    """Raised when a referenced record does not exist or is not visible."""

    entity = "Record"

    def __init__(self, record_id: UUID | str):
        self.record_id = record_id
        super().__init__(f"{self.entity} {record_id} not found")


class EmployeeNotFoundError(RecordNotFoundError):
    entity = "Employee"


class SkillNotFoundError(RecordNotFoundError):
    entity = "Skill"


class AssessmentNotFoundError(RecordNotFoundError):
    entity = "Skill assessment"


class TrainingNotFoundError(RecordNotFoundError):
    """Raised when a training is missing or assigned to someone else."""

    entity = "Training"


class DuplicateRecordError(SkillMatrixError):
    """Raised when a unique name or email is already taken."""

    pass


class InvalidOperationError(SkillMatrixError):
    pass


class FeedLockTimeoutError(SkillMatrixError):
    """Raised when another request keeps a user's feed locked too long."""

    def __init__(self, user_id: UUID | str):
        self.user_id = user_id
        super().__init__(f"Notification feed for {user_id} is locked")
