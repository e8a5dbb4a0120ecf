"""Validated shapes of the stored entities.

ORM rows are converted into these records before any derivation runs, so the
aggregation and notification code only ever sees well-typed input.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from models import (
    CertificationStatus,
    EmployeeStatus,
    Priority,
    SkillCategory,
    TrainingStatus,
    UserRole,
)


class EmployeeRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    role: UserRole = UserRole.USER
    department: Optional[str] = None
    location: Optional[str] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    project_assignment: Optional[str] = None
    manager_id: Optional[UUID] = None
    join_date: Optional[date] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class SkillRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    category: SkillCategory
    description: str = ""
    tags: list[str] = Field(default_factory=list)


class UserSkillRecord(BaseModel):
    """A proficiency assessment.

    The level is not range-checked here; writes are validated by
    SkillAssessmentUpdate and the database check constraint.
    """

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    skill_id: UUID
    proficiency_level: int
    notes: Optional[str] = None
    last_updated: datetime
    assessed_by: str = "self"


class CertificationRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    employee_id: UUID
    issued_date: date
    expiry_date: date
    issuer: Optional[str] = None
    credential_id: Optional[str] = None
    verification_url: Optional[str] = None
    category: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    project_assignment: Optional[str] = None
    priority: Optional[Priority] = None


class CertificationOut(CertificationRecord):
    status: CertificationStatus
    days_until_expiry: int


class TrainingRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    course_name: str
    description: Optional[str] = None
    assigned_to: UUID
    assigned_by: Optional[UUID] = None
    progress: int = Field(0, ge=0, le=100)
    due_date: Optional[date] = None
    start_date: Optional[date] = None
    completed_date: Optional[date] = None
    category: Optional[str] = None
    duration: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    project_assignment: Optional[str] = None
    priority: Optional[Priority] = None
    provider: Optional[str] = None
    cost: Optional[Decimal] = None


class TrainingOut(TrainingRecord):
    status: TrainingStatus


class SkillAssessmentUpdate(BaseModel):
    proficiency_level: int = Field(..., ge=1, le=5)
    notes: Optional[str] = Field(None, max_length=2000)


class TrainingProgressUpdate(BaseModel):
    progress: int = Field(..., ge=0, le=100)


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class SkillListResponse(BaseModel):
    data: list[SkillRecord]
    meta: PageMeta


class SkillCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    category: SkillCategory
    description: str = Field(..., min_length=10)
    tags: list[str] = Field(default_factory=list)


class SkillUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    category: Optional[SkillCategory] = None
    description: Optional[str] = Field(None, min_length=10)
    tags: Optional[list[str]] = None


class SkillHolder(BaseModel):
    """An employee's assessment of one particular skill."""

    user_id: UUID
    name: str
    email: str
    department: Optional[str] = None
    proficiency_level: int
    notes: Optional[str] = None
    last_updated: datetime


class SkillDetail(SkillRecord):
    assessments: list[SkillHolder]


class UserSkillDetail(UserSkillRecord):
    skill: SkillRecord


class BulkRowError(BaseModel):
    row: int
    message: str


class BulkSkillResult(BaseModel):
    processed: int
    created: int = 0
    updated: int = 0
    errors: list[BulkRowError] = Field(default_factory=list)


class EmployeeCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    role: UserRole = UserRole.USER
    department: Optional[str] = None
    location: Optional[str] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    project_assignment: Optional[str] = None
    manager_id: Optional[UUID] = None
    join_date: Optional[date] = None


class EmployeeUpdate(BaseModel):
    """Profile changes; the role is not editable here."""

    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    location: Optional[str] = None
    status: Optional[EmployeeStatus] = None
    project_assignment: Optional[str] = None
    manager_id: Optional[UUID] = None
    join_date: Optional[date] = None


class EmployeeDetail(EmployeeRecord):
    skills: list[UserSkillDetail]
    certifications: list[CertificationRecord]
    trainings: list[TrainingRecord]


class EmployeeListResponse(BaseModel):
    data: list[EmployeeRecord]
    meta: PageMeta
