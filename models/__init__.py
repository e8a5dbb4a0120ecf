"""Database models package."""

from models.certification import Certification, CertificationStatus, Priority
from models.skill import Skill, SkillCategory, UserSkill
from models.training import Training, TrainingStatus
from models.user import EmployeeStatus, User, UserRole

__all__ = [
    "Certification",
    "CertificationStatus",
    "EmployeeStatus",
    "Priority",
    "Skill",
    "SkillCategory",
    "Training",
    "TrainingStatus",
    "User",
    "UserRole",
    "UserSkill",
]
