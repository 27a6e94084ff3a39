"""Dashboard counters derived from an actor's scoped ticket set."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.department import Department
from app.models.ticket import Ticket, TicketStatus
from app.models.user import User
from app.services.access_scope import TicketScope, admin_category, resolve_ticket_scope
from app.services.actors import Actor, AdminActor, StudentActor
from app.settings import settings
from app.utils.exceptions import AuthorizationError
from app.utils.time import as_utc

NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class StatusCounts:
    total: int
    open: int
    assigned: int
    in_progress: int
    closed: int

    @property
    def in_progress_combined(self) -> int:
        return self.assigned + self.in_progress


@dataclass(frozen=True)
class DepartmentCount:
    department_id: str
    department_name: str
    count: int


@dataclass(frozen=True)
class DashboardStats:
    counts: StatusCounts
    total_departments: int
    total_students: int
    response_time: str


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_duration(hours: float) -> str:
    """Render an average duration: 42m, 5.5h, 2d 3h or 2d."""
    if hours < 1:
        return f"{_round_half_up(hours * 60)}m"
    if hours < 24:
        return f"{hours:.1f}h"
    days = math.floor(hours / 24)
    remainder = _round_half_up(hours % 24)
    if remainder == 24:
        days, remainder = days + 1, 0
    return f"{days}d {remainder}h" if remainder > 0 else f"{days}d"


def average_response_time(spans: Iterable[tuple[datetime, datetime]]) -> str:
    """Mean of (updated_at - created_at) in hours, formatted, or N/A."""
    hours = [
        (as_utc(updated) - as_utc(created)).total_seconds() / 3600
        for created, updated in spans
        if created is not None and updated is not None
    ]
    if not hours:
        return NOT_AVAILABLE
    return format_duration(sum(hours) / len(hours))


async def count_by_status(session: AsyncSession, scope: TicketScope) -> StatusCounts:
    result = await session.execute(
        select(Ticket.status, func.count(Ticket.id))
        .where(scope.ticket_clause())
        .group_by(Ticket.status)
    )
    per_status = {status: count for status, count in result.all()}
    return StatusCounts(
        total=sum(per_status.values()),
        open=per_status.get(TicketStatus.OPEN, 0),
        assigned=per_status.get(TicketStatus.ASSIGNED, 0),
        in_progress=per_status.get(TicketStatus.IN_PROGRESS, 0),
        closed=per_status.get(TicketStatus.CLOSED, 0),
    )


async def count_by_department(
    session: AsyncSession, scope: TicketScope
) -> list[DepartmentCount]:
    result = await session.execute(
        select(Department.id, Department.name, func.count(Ticket.id))
        .select_from(Ticket)
        .join(Department, Department.id == Ticket.assigned_department_id)
        .where(scope.ticket_clause())
        .group_by(Department.id, Department.name)
        .order_by(func.count(Ticket.id).desc(), Department.name)
    )
    return [
        DepartmentCount(department_id=str(dept_id), department_name=name, count=count)
        for dept_id, name, count in result.all()
    ]


async def response_time(session: AsyncSession, scope: TicketScope) -> str:
    result = await session.execute(
        select(Ticket.created_at, Ticket.updated_at)
        .where(scope.ticket_clause(), Ticket.status != TicketStatus.OPEN)
        .order_by(Ticket.created_at.desc())
        .limit(settings.RESPONSE_TIME_SAMPLE_SIZE)
    )
    return average_response_time(result.all())


async def count_students(session: AsyncSession, scope: TicketScope) -> int:
    total = await session.scalar(
        select(func.count(User.id)).where(scope.student_clause())
    )
    return total or 0


async def count_departments(session: AsyncSession, actor: Actor) -> int:
    query = select(func.count(Department.id)).where(Department.is_active.is_(True))
    if isinstance(actor, AdminActor) and not actor.is_main_admin:
        query = query.where(Department.category == await admin_category(session, actor))
    return await session.scalar(query) or 0


async def ticket_stats(
    session: AsyncSession, actor: Actor
) -> tuple[StatusCounts, list[DepartmentCount]]:
    if isinstance(actor, StudentActor):
        raise AuthorizationError("Access denied. Department or Admin only.")
    scope = await resolve_ticket_scope(session, actor)
    return await count_by_status(session, scope), await count_by_department(session, scope)


async def dashboard_stats(session: AsyncSession, actor: Actor) -> DashboardStats:
    if not isinstance(actor, AdminActor):
        raise AuthorizationError("Access denied. Admin only.")
    scope = await resolve_ticket_scope(session, actor)
    return DashboardStats(
        counts=await count_by_status(session, scope),
        total_departments=await count_departments(session, actor),
        total_students=await count_students(session, scope),
        response_time=await response_time(session, scope),
    )
