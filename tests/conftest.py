import os
import uuid
from datetime import date, datetime, timezone

import pytest

# Ensure test environment is set before application/settings import
os.environ.setdefault("ENVIRONMENT", "test")

from api.schemas import (  # noqa: E402
    CertificationRecord,
    EmployeeRecord,
    SkillRecord,
    TrainingRecord,
    UserSkillRecord,
)
from configs.settings import get_settings  # noqa: E402
from models import SkillCategory, UserRole  # noqa: E402

get_settings.cache_clear()

NOW = datetime(2026, 10, 17, 9, 0, tzinfo=timezone.utc)
TODAY = NOW.date()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_employee():
    def _make(name="Ada Lovelace", role=UserRole.USER, **kwargs):
        fields = {
            "id": uuid.uuid4(),
            "name": name,
            "email": f"{name.split()[0].lower()}@example.com",
            "role": role,
            "department": "Engineering",
        }
        fields.update(kwargs)
        return EmployeeRecord(**fields)

    return _make


@pytest.fixture
def make_skill():
    def _make(name="Python", category=SkillCategory.PROGRAMMING, **kwargs):
        return SkillRecord(id=uuid.uuid4(), name=name, category=category, **kwargs)

    return _make


@pytest.fixture
def make_user_skill():
    def _make(user_id, skill_id, level=3, last_updated=NOW, **kwargs):
        return UserSkillRecord(
            user_id=user_id,
            skill_id=skill_id,
            proficiency_level=level,
            last_updated=last_updated,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_certification():
    def _make(employee_id, expiry_date, name="AWS Solutions Architect", **kwargs):
        return CertificationRecord(
            id=uuid.uuid4(),
            name=name,
            employee_id=employee_id,
            issued_date=date(2024, 1, 1),
            expiry_date=expiry_date,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_training():
    def _make(assigned_to, progress=0, due_date=None, course_name="Kubernetes 101"):
        return TrainingRecord(
            id=uuid.uuid4(),
            course_name=course_name,
            assigned_to=assigned_to,
            progress=progress,
            due_date=due_date,
        )

    return _make
