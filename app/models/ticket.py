"""Ticket model for tracking student support requests."""

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel, value_enum
from app.models.user import UserRole
from app.utils.time import utc_now

if TYPE_CHECKING:
    from app.models.department import Department
    from app.models.ticket_history import TicketHistory


class TicketStatus(enum.Enum):
    OPEN = "Open"
    ASSIGNED = "Assigned"
    IN_PROGRESS = "In Progress"
    CLOSED = "Closed"


class TicketPriority(enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"


class TicketCategory(enum.Enum):
    TECHNICAL_ISSUE = "Technical Issue"
    ACADEMIC_QUERY = "Academic Query"
    ADMINISTRATIVE_HELP = "Administrative Help"
    ENROLLMENT = "Enrollment"
    FINANCIAL_AID = "Financial Aid"
    LIBRARY_SERVICES = "Library Services"
    IT_SUPPORT = "IT Support"
    OTHER = "Other"


class Ticket(BaseModel):
    __tablename__ = "tickets"

    ticket_no: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        unique=True,
        comment="Sequential display number drawn from the ticket_no counter.",
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[TicketCategory] = mapped_column(
        value_enum(TicketCategory, "ticket_category"), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[TicketPriority] = mapped_column(
        value_enum(TicketPriority, "ticket_priority"),
        nullable=False,
        default=TicketPriority.MEDIUM,
    )
    status: Mapped[TicketStatus] = mapped_column(
        value_enum(TicketStatus, "ticket_status"),
        nullable=False,
        default=TicketStatus.OPEN,
        index=True,
    )

    student_email: Mapped[str] = mapped_column(String(255), nullable=False)
    student_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    student_roll_number: Mapped[str] = mapped_column(String(32), nullable=False)
    student_department: Mapped[str | None] = mapped_column(
        String(16),
        nullable=True,
        index=True,
        comment="Department code parsed from the roll number (before folding).",
    )
    student_year: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_by: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    assigned_department_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("departments.id"),
        nullable=True,
        index=True,
    )
    resolved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    assigned_department: Mapped["Department | None"] = relationship(
        "Department", lazy="selectin"
    )
    comments: Mapped[list["TicketComment"]] = relationship(
        "TicketComment",
        order_by="TicketComment.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    attachments: Mapped[list["TicketAttachment"]] = relationship(
        "TicketAttachment",
        order_by="TicketAttachment.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    history: Mapped[list["TicketHistory"]] = relationship(
        "TicketHistory",
        order_by="TicketHistory.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Ticket(no={self.ticket_no}, status='{self.status.value}')>"


class TicketComment(BaseModel):
    __tablename__ = "ticket_comments"
    __table_args__ = (
        UniqueConstraint("ticket_id", "position", name="uq_ticket_comments_position"),
    )

    ticket_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False
    )
    user_name: Mapped[str] = mapped_column(String(150), nullable=False)
    user_role: Mapped[UserRole] = mapped_column(
        value_enum(UserRole, "comment_user_role"), nullable=False
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_internal: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Internal comments are only shown to admin and department staff.",
    )


class TicketAttachment(BaseModel):
    __tablename__ = "ticket_attachments"
    __table_args__ = (
        UniqueConstraint(
            "ticket_id", "position", name="uq_ticket_attachments_position"
        ),
    )

    ticket_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    file_name: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Generated storage name."
    )
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(512), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    file_type: Mapped[str] = mapped_column(String(255), nullable=False)
    uploaded_by: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False
    )
    uploaded_by_name: Mapped[str] = mapped_column(String(150), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
