"""API endpoints for the admin dashboard."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_admin_actor, get_db_session, get_ticket_lifecycle
from app.schemas.stats import DashboardStatsResponse
from app.schemas.ticket import TicketListResponse, TicketSummary
from app.services.actors import AdminActor
from app.services.stats import dashboard_stats
from app.services.ticket_lifecycle import TicketLifecycle
from app.utils.logging_config import logger

router = APIRouter()


@router.get("/dashboard/stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats(
    admin: AdminActor = Depends(get_admin_actor),
    db: AsyncSession = Depends(get_db_session),
):
    stats = await dashboard_stats(db, admin)
    logger.info(
        f"Dashboard stats for {admin.user_id}: {stats.counts.total} tickets, "
        f"response time {stats.response_time}"
    )
    return DashboardStatsResponse(
        total_tickets=stats.counts.total,
        open_tickets=stats.counts.open,
        in_progress_tickets=stats.counts.in_progress_combined,
        resolved_tickets=stats.counts.closed,
        total_departments=stats.total_departments,
        total_students=stats.total_students,
        response_time=stats.response_time,
    )


@router.get("/tickets", response_model=TicketListResponse)
async def get_admin_tickets(
    admin: AdminActor = Depends(get_admin_actor),
    lifecycle: TicketLifecycle = Depends(get_ticket_lifecycle),
):
    """Tickets filed by students of the admin's department; everything for the main admin."""
    tickets = await lifecycle.list_scoped(admin)
    return TicketListResponse(
        tickets=[TicketSummary.model_validate(t) for t in tickets], count=len(tickets)
    )
