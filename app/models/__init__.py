"""Exports all models for easy access."""

from .base import Base, BaseModel
from .counter import Counter
from .department import Department, DepartmentCategory
from .ticket import (
    Ticket,
    TicketAttachment,
    TicketCategory,
    TicketComment,
    TicketPriority,
    TicketStatus,
)
from .ticket_history import HistoryAction, TicketHistory
from .user import User, UserRole

__all__ = [
    "Base",
    "BaseModel",
    "Counter",
    "Department",
    "DepartmentCategory",
    "User",
    "UserRole",
    "Ticket",
    "TicketStatus",
    "TicketPriority",
    "TicketCategory",
    "TicketComment",
    "TicketAttachment",
    "TicketHistory",
    "HistoryAction",
]
