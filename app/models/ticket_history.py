"""Append-only audit entries attached to a ticket."""

import enum
import uuid

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint, Uuid, event
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, value_enum
from app.models.user import UserRole


class HistoryAction(enum.Enum):
    CREATED = "created"
    STATUS_CHANGED = "status_changed"
    ASSIGNED = "assigned"
    PRIORITY_CHANGED = "priority_changed"
    COMMENT_ADDED = "comment_added"
    FILE_UPLOADED = "file_uploaded"


class TicketHistory(BaseModel):
    __tablename__ = "ticket_history"
    __table_args__ = (
        UniqueConstraint("ticket_id", "position", name="uq_ticket_history_position"),
    )

    ticket_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    action: Mapped[HistoryAction] = mapped_column(
        value_enum(HistoryAction, "history_action"), nullable=False
    )
    performed_by: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False
    )
    performed_by_name: Mapped[str] = mapped_column(String(150), nullable=False)
    performed_by_role: Mapped[UserRole] = mapped_column(
        value_enum(UserRole, "history_user_role"), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    old_value: Mapped[str | None] = mapped_column(String(255), nullable=True)
    new_value: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<TicketHistory(ticket_id={self.ticket_id}, action='{self.action.value}')>"


def reject_history_mutation(mapper, connection, target):
    """History entries are written once and never edited or removed."""
    raise ValueError(
        f"History entry {target.id} is append-only and cannot be modified or deleted"
    )


# Register event listeners
event.listen(TicketHistory, "before_update", reject_history_mutation)
event.listen(TicketHistory, "before_delete", reject_history_mutation)
