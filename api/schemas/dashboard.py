"""Response shapes for the admin dashboard and skill matrix."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from api.schemas.records import SkillRecord
from models import SkillCategory, UserRole


class CategoryCount(BaseModel):
    category: SkillCategory
    count: int


class DashboardStats(BaseModel):
    total_users: int
    total_skills: int
    total_certifications: int
    total_trainings: int
    average_skill_level: float
    skills_by_category: list[CategoryCount]


class MatrixUser(BaseModel):
    id: UUID
    name: str
    email: str
    department: Optional[str] = None
    role: UserRole


class SkillMatrixCell(BaseModel):
    skill_id: UUID
    skill_name: str
    category: SkillCategory
    proficiency_level: int
    notes: Optional[str] = None
    last_updated: Optional[datetime] = None


class SkillMatrixRow(BaseModel):
    user: MatrixUser
    skills: list[SkillMatrixCell]


class SkillMatrixResponse(BaseModel):
    matrix: list[SkillMatrixRow]
    skills: list[SkillRecord]
