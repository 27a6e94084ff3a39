"""
Which tickets, students and departments an actor may see or touch.

`resolve_ticket_scope` turns an actor into one of four scope variants. Each
variant renders the same rule twice: as a SQL clause for listings and counts,
and as an in-memory check for single-ticket reads and writes, so both paths
always agree.
"""

import uuid
from dataclasses import dataclass
from typing import Union, assert_never

from sqlalchemy import ColumnElement, false, or_, true
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.department import Department, DepartmentCategory
from app.models.ticket import Ticket
from app.models.user import User, UserRole
from app.services.actors import Actor, AdminActor, DepartmentActor, StudentActor
from app.services.category_policy import (
    category_for_department_name,
    roll_number_patterns,
    student_codes_for_department,
)
from app.utils.exceptions import AuthorizationError


def _students_with_codes(codes: frozenset[str]) -> ColumnElement[bool]:
    if not codes:
        return false()
    return (User.role == UserRole.STUDENT) & or_(
        *(User.roll_number.ilike(pattern) for pattern in roll_number_patterns(codes))
    )


@dataclass(frozen=True)
class Unrestricted:
    """The main admin: every ticket, every student."""

    def ticket_clause(self) -> ColumnElement[bool]:
        return true()

    def permits(self, ticket: Ticket) -> bool:
        return True

    def student_clause(self) -> ColumnElement[bool]:
        return User.role == UserRole.STUDENT


@dataclass(frozen=True)
class StudentDepartmentScope:
    """A department-scoped admin: tickets filed by students of given codes."""

    codes: frozenset[str]

    def ticket_clause(self) -> ColumnElement[bool]:
        return Ticket.student_department.in_(sorted(self.codes))

    def permits(self, ticket: Ticket) -> bool:
        return ticket.student_department in self.codes

    def student_clause(self) -> ColumnElement[bool]:
        return _students_with_codes(self.codes)


@dataclass(frozen=True)
class AssignedDepartmentScope:
    """A department account: tickets currently assigned to its department."""

    department_id: uuid.UUID
    student_codes: frozenset[str] = frozenset()

    def ticket_clause(self) -> ColumnElement[bool]:
        return Ticket.assigned_department_id == self.department_id

    def permits(self, ticket: Ticket) -> bool:
        return ticket.assigned_department_id == self.department_id

    def student_clause(self) -> ColumnElement[bool]:
        return _students_with_codes(self.student_codes)


@dataclass(frozen=True)
class AuthoredScope:
    """A student: only their own tickets."""

    user_id: uuid.UUID

    def ticket_clause(self) -> ColumnElement[bool]:
        return Ticket.created_by == self.user_id

    def permits(self, ticket: Ticket) -> bool:
        return ticket.created_by == self.user_id

    def student_clause(self) -> ColumnElement[bool]:
        return User.id == self.user_id


TicketScope = Union[Unrestricted, StudentDepartmentScope, AssignedDepartmentScope, AuthoredScope]


async def _admin_department(session: AsyncSession, actor: AdminActor) -> Department:
    department = await session.get(Department, actor.department_id)
    if department is None:
        raise AuthorizationError(
            "Your admin account is linked to a department that no longer exists"
        )
    return department


async def resolve_ticket_scope(session: AsyncSession, actor: Actor) -> TicketScope:
    if isinstance(actor, AdminActor):
        if actor.is_main_admin:
            return Unrestricted()
        department = await _admin_department(session, actor)
        return StudentDepartmentScope(codes=student_codes_for_department(department.name))
    if isinstance(actor, DepartmentActor):
        department = await session.get(Department, actor.department_id)
        codes = student_codes_for_department(department.name) if department else frozenset()
        return AssignedDepartmentScope(
            department_id=actor.department_id, student_codes=codes
        )
    if isinstance(actor, StudentActor):
        return AuthoredScope(user_id=actor.user_id)
    assert_never(actor)


def ensure_visible(scope: TicketScope, ticket: Ticket) -> None:
    if not scope.permits(ticket):
        raise AuthorizationError("Access denied")


async def admin_category(session: AsyncSession, actor: AdminActor) -> DepartmentCategory:
    """The department category an admin manages (no department -> MAIN)."""
    if actor.is_main_admin:
        return DepartmentCategory.MAIN
    department = await _admin_department(session, actor)
    return category_for_department_name(department.name)


def ensure_department_in_category(
    category: DepartmentCategory, department: Department
) -> None:
    if department.category is not category:
        raise AuthorizationError("Access denied to this department")
