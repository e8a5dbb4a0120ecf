"""Database access for the skill matrix entities.

Rows are returned as validated records from ``api.schemas.records`` so that
derivation code never touches ORM objects.
"""

import enum
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.records import (
    BulkRowError,
    BulkSkillResult,
    CertificationRecord,
    EmployeeCreate,
    EmployeeDetail,
    EmployeeRecord,
    EmployeeUpdate,
    SkillAssessmentUpdate,
    SkillCreate,
    SkillDetail,
    SkillHolder,
    SkillRecord,
    SkillUpdate,
    TrainingRecord,
    UserSkillDetail,
    UserSkillRecord,
)
from models import (
    Certification,
    EmployeeStatus,
    Skill,
    SkillCategory,
    Training,
    User,
    UserRole,
    UserSkill,
)
from services.exceptions import (
    AssessmentNotFoundError,
    DuplicateRecordError,
    EmployeeNotFoundError,
    InvalidOperationError,
    SkillNotFoundError,
    TrainingNotFoundError,
)

logger = logging.getLogger(__name__)

SKILL_SORT_COLUMNS = {
    "name": Skill.name,
    "category": Skill.category,
    "created_at": Skill.created_at,
    "updated_at": Skill.updated_at,
}

USER_SORT_COLUMNS = {
    "name": User.name,
    "email": User.email,
    "created_at": User.created_at,
    "updated_at": User.updated_at,
}


@dataclass
class DashboardInputs:
    users: list[EmployeeRecord]
    skills: list[SkillRecord]
    user_skills: list[UserSkillRecord]
    certifications: list[CertificationRecord]
    trainings: list[TrainingRecord]


@dataclass
class ViewerInputs:
    certifications: list[CertificationRecord]
    trainings: list[TrainingRecord]
    user_skills: list[UserSkillRecord]


async def _fetch(session: AsyncSession, query, record_type) -> list:
    result = await session.execute(query)
    return [record_type.model_validate(row) for row in result.scalars().all()]


async def get_employee_by_email(
    session: AsyncSession, email: str
) -> Optional[EmployeeRecord]:
    result = await session.execute(
        select(User).where(func.lower(User.email) == email.strip().lower())
    )
    user = result.scalar_one_or_none()
    return EmployeeRecord.model_validate(user) if user else None


async def load_dashboard_inputs(session: AsyncSession) -> DashboardInputs:
    return DashboardInputs(
        users=await _fetch(session, select(User), EmployeeRecord),
        skills=await _fetch(session, select(Skill), SkillRecord),
        user_skills=await _fetch(session, select(UserSkill), UserSkillRecord),
        certifications=await _fetch(
            session, select(Certification), CertificationRecord
        ),
        trainings=await _fetch(session, select(Training), TrainingRecord),
    )


async def load_skill_matrix_inputs(
    session: AsyncSession,
) -> tuple[list[EmployeeRecord], list[SkillRecord], list[UserSkillRecord]]:
    """Users and skills ordered by name, plus every assessment."""
    users = await _fetch(session, select(User).order_by(User.name), EmployeeRecord)
    skills = await _fetch(session, select(Skill).order_by(Skill.name), SkillRecord)
    user_skills = await _fetch(session, select(UserSkill), UserSkillRecord)
    return users, skills, user_skills


async def load_viewer_inputs(
    session: AsyncSession, viewer: EmployeeRecord
) -> ViewerInputs:
    """Records needed to derive a viewer's notifications.

    Admins receive org-wide certifications and trainings because their
    system alerts count across the whole organisation.
    """
    cert_query = select(Certification)
    training_query = select(Training)
    if not viewer.is_admin:
        cert_query = cert_query.where(Certification.employee_id == viewer.id)
        training_query = training_query.where(Training.assigned_to == viewer.id)

    return ViewerInputs(
        certifications=await _fetch(session, cert_query, CertificationRecord),
        trainings=await _fetch(session, training_query, TrainingRecord),
        user_skills=await _fetch(
            session,
            select(UserSkill).where(UserSkill.user_id == viewer.id),
            UserSkillRecord,
        ),
    )


async def list_certifications_for(
    session: AsyncSession, employee_id: UUID
) -> list[CertificationRecord]:
    return await _fetch(
        session,
        select(Certification)
        .where(Certification.employee_id == employee_id)
        .order_by(Certification.expiry_date),
        CertificationRecord,
    )


async def list_trainings_for(
    session: AsyncSession, employee_id: UUID
) -> list[TrainingRecord]:
    return await _fetch(
        session,
        select(Training)
        .where(Training.assigned_to == employee_id)
        .order_by(Training.due_date.asc().nulls_last()),
        TrainingRecord,
    )


async def _paginate(
    session: AsyncSession,
    model,
    filters: list,
    ordering,
    page: int,
    limit: int,
    record_type,
) -> tuple[list, int]:
    total_result = await session.execute(
        select(func.count()).select_from(model).where(*filters)
    )
    total = total_result.scalar_one()

    query = (
        select(model)
        .where(*filters)
        .order_by(ordering)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return await _fetch(session, query, record_type), total


async def _commit(session: AsyncSession, conflict_message: str) -> None:
    """Commit, turning unique constraint violations into DuplicateRecordError."""
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.error(f"Integrity error: {e}")
        raise DuplicateRecordError(conflict_message)


def _column_values(changes: dict) -> dict:
    return {
        key: value.value if isinstance(value, enum.Enum) else value
        for key, value in changes.items()
    }


async def list_skills(
    session: AsyncSession,
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    category: Optional[SkillCategory] = None,
    sort_by: str = "name",
    sort_order: str = "asc",
) -> tuple[list[SkillRecord], int]:
    """A page of the skill catalogue and the total number of matches."""
    filters = []
    if search:
        pattern = f"%{search}%"
        filters.append(
            or_(Skill.name.ilike(pattern), Skill.description.ilike(pattern))
        )
    if category:
        filters.append(Skill.category == category.value)

    column = SKILL_SORT_COLUMNS.get(sort_by, Skill.name)
    ordering = column.desc() if sort_order == "desc" else column.asc()
    return await _paginate(
        session, Skill, filters, ordering, page, limit, SkillRecord
    )


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


async def _skill_named(session: AsyncSession, name: str) -> Optional[Skill]:
    result = await session.execute(select(Skill).where(Skill.name == name))
    return result.scalar_one_or_none()


async def get_skill_detail(session: AsyncSession, skill_id: UUID) -> SkillDetail:
    """A skill with every employee assessment of it, strongest first."""
    skill = await session.get(Skill, skill_id)
    if skill is None:
        raise SkillNotFoundError(skill_id)

    result = await session.execute(
        select(UserSkill, User)
        .join(User, User.id == UserSkill.user_id)
        .where(UserSkill.skill_id == skill_id)
        .order_by(UserSkill.proficiency_level.desc())
    )
    holders = [
        SkillHolder(
            user_id=user.id,
            name=user.name,
            email=user.email,
            department=user.department,
            proficiency_level=user_skill.proficiency_level,
            notes=user_skill.notes,
            last_updated=user_skill.last_updated,
        )
        for user_skill, user in result.all()
    ]
    return SkillDetail(
        **SkillRecord.model_validate(skill).model_dump(), assessments=holders
    )


async def create_skill(session: AsyncSession, data: SkillCreate) -> SkillRecord:
    conflict = f"Skill with name {data.name!r} already exists"
    if await _skill_named(session, data.name) is not None:
        raise DuplicateRecordError(conflict)

    skill = Skill(**_column_values(data.model_dump()))
    session.add(skill)
    await _commit(session, conflict)
    await session.refresh(skill)
    logger.info(f"Skill created: {skill.name}")
    return SkillRecord.model_validate(skill)


async def update_skill(
    session: AsyncSession, skill_id: UUID, data: SkillUpdate
) -> SkillRecord:
    skill = await session.get(Skill, skill_id)
    if skill is None:
        raise SkillNotFoundError(skill_id)

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    conflict = f"Skill with name {changes.get('name')!r} already exists"
    if "name" in changes and changes["name"] != skill.name:
        if await _skill_named(session, changes["name"]) is not None:
            raise DuplicateRecordError(conflict)

    for key, value in _column_values(changes).items():
        setattr(skill, key, value)

    await _commit(session, conflict)
    await session.refresh(skill)
    logger.info(f"Skill updated: {skill.name}")
    return SkillRecord.model_validate(skill)


async def delete_skill(session: AsyncSession, skill_id: UUID) -> SkillRecord:
    """Remove a skill; its assessments go with it."""
    skill = await session.get(Skill, skill_id)
    if skill is None:
        raise SkillNotFoundError(skill_id)

    record = SkillRecord.model_validate(skill)
    await session.delete(skill)
    await session.commit()
    logger.info(f"Skill deleted: {record.name}")
    return record


async def bulk_upsert_skills(
    session: AsyncSession, items: list[SkillCreate]
) -> BulkSkillResult:
    """Create or update skills by name, one savepoint per row.

    A failing row is reported with its 1-based position and does not undo
    the rows around it.
    """
    result = BulkSkillResult(processed=len(items))
    for row, item in enumerate(items, start=1):
        try:
            async with session.begin_nested():
                existing = await _skill_named(session, item.name)
                values = _column_values(item.model_dump())
                if existing is None:
                    session.add(Skill(**values))
                else:
                    for key, value in values.items():
                        setattr(existing, key, value)
        except SQLAlchemyError as e:
            logger.warning(f"Bulk skill row {row} failed: {e}")
            result.errors.append(BulkRowError(row=row, message=str(e)))
            continue

        if existing is None:
            result.created += 1
        else:
            result.updated += 1

    await session.commit()
    logger.info(
        f"Bulk skill upsert: {result.created} created, {result.updated} updated, "
        f"{len(result.errors)} errors"
    )
    return result


async def list_user_skills(
    session: AsyncSession, user_id: UUID
) -> list[UserSkillDetail]:
    """A user's assessments with their skills, most recently updated first."""
    result = await session.execute(
        select(UserSkill, Skill)
        .join(Skill, Skill.id == UserSkill.skill_id)
        .where(UserSkill.user_id == user_id)
        .order_by(UserSkill.last_updated.desc())
    )
    return [
        UserSkillDetail(
            **UserSkillRecord.model_validate(user_skill).model_dump(),
            skill=SkillRecord.model_validate(skill),
        )
        for user_skill, skill in result.all()
    ]


async def upsert_user_skill(
    session: AsyncSession,
    user_id: UUID,
    skill_id: UUID,
    update: SkillAssessmentUpdate,
    assessed_by: str = "self",
) -> UserSkillRecord:
    """Create or replace the single assessment for (user, skill)."""
    skill = await session.get(Skill, skill_id)
    if skill is None:
        raise SkillNotFoundError(skill_id)

    now = datetime.now(timezone.utc)
    user_skill = await session.get(UserSkill, (user_id, skill_id))
    if user_skill is None:
        user_skill = UserSkill(user_id=user_id, skill_id=skill_id)
        session.add(user_skill)

    user_skill.proficiency_level = update.proficiency_level
    user_skill.notes = update.notes
    user_skill.assessed_by = assessed_by
    user_skill.last_updated = now

    await session.commit()
    await session.refresh(user_skill)
    logger.info(
        f"Skill {skill_id} assessed at level {update.proficiency_level} "
        f"for user {user_id}"
    )
    return UserSkillRecord.model_validate(user_skill)


async def delete_user_skill(
    session: AsyncSession, user_id: UUID, skill_id: UUID
) -> UserSkillRecord:
    user_skill = await session.get(UserSkill, (user_id, skill_id))
    if user_skill is None:
        raise AssessmentNotFoundError(f"{user_id}/{skill_id}")

    record = UserSkillRecord.model_validate(user_skill)
    await session.delete(user_skill)
    await session.commit()
    logger.info(f"Skill {skill_id} assessment removed for user {user_id}")
    return record


async def list_employees(
    session: AsyncSession,
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    department: Optional[str] = None,
    role: Optional[UserRole] = None,
    status: Optional[EmployeeStatus] = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> tuple[list[EmployeeRecord], int]:
    """A page of employees matching name/email search and exact filters."""
    filters = []
    if search:
        pattern = f"%{search}%"
        filters.append(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
    if department:
        filters.append(User.department == department)
    if role:
        filters.append(User.role == role.value)
    if status:
        filters.append(User.status == status.value)

    column = USER_SORT_COLUMNS.get(sort_by, User.created_at)
    ordering = column.desc() if sort_order == "desc" else column.asc()
    return await _paginate(
        session, User, filters, ordering, page, limit, EmployeeRecord
    )


async def get_employee_detail(
    session: AsyncSession, employee_id: UUID
) -> EmployeeDetail:
    user = await session.get(User, employee_id)
    if user is None:
        raise EmployeeNotFoundError(employee_id)

    return EmployeeDetail(
        **EmployeeRecord.model_validate(user).model_dump(),
        skills=await list_user_skills(session, employee_id),
        certifications=await list_certifications_for(session, employee_id),
        trainings=await list_trainings_for(session, employee_id),
    )


async def create_employee(
    session: AsyncSession, data: EmployeeCreate
) -> EmployeeRecord:
    email = data.email.strip().lower()
    conflict = f"User with email {email} already exists"
    if await get_employee_by_email(session, email) is not None:
        raise DuplicateRecordError(conflict)

    values = _column_values(data.model_dump())
    values["email"] = email
    user = User(**values)
    session.add(user)
    await _commit(session, conflict)
    await session.refresh(user)
    logger.info(f"User created: {email}")
    return EmployeeRecord.model_validate(user)


async def update_employee(
    session: AsyncSession, employee_id: UUID, data: EmployeeUpdate
) -> EmployeeRecord:
    user = await session.get(User, employee_id)
    if user is None:
        raise EmployeeNotFoundError(employee_id)

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    conflict = "User with this email already exists"
    if "email" in changes:
        changes["email"] = changes["email"].strip().lower()
        conflict = f"User with email {changes['email']} already exists"
        other = await get_employee_by_email(session, changes["email"])
        if other is not None and other.id != employee_id:
            raise DuplicateRecordError(conflict)

    for key, value in _column_values(changes).items():
        setattr(user, key, value)

    await _commit(session, conflict)
    await session.refresh(user)
    logger.info(f"User updated: {user.email}")
    return EmployeeRecord.model_validate(user)


async def delete_employee(
    session: AsyncSession, employee_id: UUID, actor_id: UUID
) -> EmployeeRecord:
    if employee_id == actor_id:
        raise InvalidOperationError("You cannot delete your own account")

    user = await session.get(User, employee_id)
    if user is None:
        raise EmployeeNotFoundError(employee_id)

    record = EmployeeRecord.model_validate(user)
    await session.delete(user)
    await session.commit()
    logger.info(f"User deleted: {record.email}")
    return record


async def update_training_progress(
    session: AsyncSession,
    training_id: UUID,
    user_id: UUID,
    progress: int,
    today: Optional[date] = None,
) -> TrainingRecord:
    """Record progress on one of the user's trainings.

    The completion date is set exactly when progress reaches 100 and cleared
    otherwise; the start date is set the first time progress moves off zero.
    """
    today = today or datetime.now(timezone.utc).date()
    result = await session.execute(
        select(Training).where(
            Training.id == training_id, Training.assigned_to == user_id
        )
    )
    training = result.scalar_one_or_none()
    if training is None:
        raise TrainingNotFoundError(training_id)

    training.progress = progress
    if progress > 0 and training.start_date is None:
        training.start_date = today
    training.completed_date = today if progress == 100 else None

    await session.commit()
    await session.refresh(training)
    return TrainingRecord.model_validate(training)
