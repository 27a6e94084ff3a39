"""Resolve the department a new ticket should be assigned to."""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.department import Department
from app.services.category_policy import category_for_code, target_department_code
from app.services.roll_number import department_name_for_code
from app.utils.time import as_utc


def rank_departments(code: str, departments: Sequence[Department]) -> list[Department]:
    """
    Order candidate departments for a student code, best match first.

    Tier 1 holds exact case-insensitive name matches on the folded code or its
    full department name; tier 2 (used only when tier 1 is empty) holds names
    containing the folded code. Inside a tier, departments of the code's own
    category come first, then the oldest, then the lowest id.
    """
    target = target_department_code(code)
    category = category_for_code(code)
    exact_names = {target.lower(), department_name_for_code(target).lower()}

    def sort_key(department: Department):
        return (
            department.category is not category,
            as_utc(department.created_at),
            str(department.id),
        )

    exact = [d for d in departments if d.name.strip().lower() in exact_names]
    if exact:
        return sorted(exact, key=sort_key)
    partial = [d for d in departments if target.lower() in d.name.lower()]
    return sorted(partial, key=sort_key)


async def resolve_target_department(
    session: AsyncSession, code: str | None
) -> Department | None:
    """
    Find the active department a student code routes to, or None when no
    department matches (the ticket then waits for manual assignment).
    """
    if not code:
        return None
    result = await session.execute(
        select(Department).where(Department.is_active.is_(True))
    )
    ranked = rank_departments(code, result.scalars().all())
    return ranked[0] if ranked else None
