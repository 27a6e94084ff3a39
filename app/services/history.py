"""Append-only audit trail kept on every ticket."""

from app.models.ticket import Ticket
from app.models.ticket_history import HistoryAction, TicketHistory
from app.services.actors import Actor


def append_history(
    ticket: Ticket,
    actor: Actor,
    action: HistoryAction,
    description: str,
    old_value: str | None = None,
    new_value: str | None = None,
) -> TicketHistory:
    """Record one mutation on the ticket; the entry is flushed with the ticket."""
    entry = TicketHistory(
        action=action,
        performed_by=actor.user_id,
        performed_by_name=actor.fullname,
        performed_by_role=actor.role,
        description=description,
        old_value=old_value,
        new_value=new_value,
    )
    ticket.history.append(entry)
    return entry


def most_recent_first(ticket: Ticket) -> list[TicketHistory]:
    return list(reversed(ticket.history))
