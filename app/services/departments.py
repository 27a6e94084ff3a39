"""Category-scoped department administration."""

import uuid
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.department import Department, DepartmentCategory
from app.services.access_scope import admin_category, ensure_department_in_category
from app.services.actors import Actor, AdminActor
from app.utils.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.utils.logging_config import logger


def _require_admin(actor: Actor) -> AdminActor:
    if not isinstance(actor, AdminActor):
        raise AuthorizationError("Access denied. Admin only.")
    return actor


async def _ensure_unique_name(
    session: AsyncSession,
    name: str,
    category: DepartmentCategory,
    exclude_id: uuid.UUID | None = None,
) -> None:
    query = select(Department.id).where(
        func.lower(Department.name) == name.lower(), Department.category == category
    )
    if exclude_id is not None:
        query = query.where(Department.id != exclude_id)
    if await session.scalar(query.limit(1)) is not None:
        raise ValidationError(
            f'Department "{name}" already exists in {category.value} category'
        )


async def _get_in_scope(
    session: AsyncSession, actor: Actor, department_id: uuid.UUID
) -> Department:
    admin = _require_admin(actor)
    department = await session.get(Department, department_id)
    if department is None:
        raise NotFoundError("Department not found")
    ensure_department_in_category(await admin_category(session, admin), department)
    return department


async def list_departments(session: AsyncSession, actor: Actor) -> Sequence[Department]:
    admin = _require_admin(actor)
    category = await admin_category(session, admin)
    result = await session.execute(
        select(Department)
        .where(Department.is_active.is_(True), Department.category == category)
        .order_by(Department.name)
    )
    return result.scalars().all()


async def get_department(
    session: AsyncSession, actor: Actor, department_id: uuid.UUID
) -> Department:
    return await _get_in_scope(session, actor, department_id)


async def create_department(
    session: AsyncSession, actor: Actor, name: str, description: str | None = None
) -> Department:
    admin = _require_admin(actor)
    name = (name or "").strip()
    if not name:
        raise ValidationError("Department name is required")

    category = await admin_category(session, admin)
    await _ensure_unique_name(session, name, category)
    department = Department(name=name, description=description or "", category=category)
    session.add(department)
    await session.commit()
    logger.info(f"Created department: {name} ({category.value})")
    return department


async def update_department(
    session: AsyncSession,
    actor: Actor,
    department_id: uuid.UUID,
    name: str | None = None,
    description: str | None = None,
    is_active: bool | None = None,
) -> Department:
    department = await _get_in_scope(session, actor, department_id)
    name = (name or "").strip()
    if name:
        await _ensure_unique_name(session, name, department.category, department.id)
        department.name = name
    if description is not None:
        department.description = description
    if is_active is not None:
        department.is_active = is_active
    await session.commit()
    return department


async def deactivate_department(
    session: AsyncSession, actor: Actor, department_id: uuid.UUID
) -> Department:
    """Soft delete: departments stay referenced by historical tickets."""
    department = await _get_in_scope(session, actor, department_id)
    department.is_active = False
    await session.commit()
    logger.info(f"Deactivated department: {department.name} ({department.category.value})")
    return department
