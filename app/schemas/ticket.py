"""Pydantic schemas for ticket operations."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.ticket import TicketCategory, TicketPriority, TicketStatus
from app.models.ticket_history import HistoryAction
from app.models.user import UserRole

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
PHONE_PATTERN = r"^0\d{3}-\d{7}$"


class TicketCreate(BaseModel):
    """Request body for a new support ticket."""

    title: str = Field(..., min_length=1, max_length=200)
    category: TicketCategory
    description: str = Field(..., min_length=1)
    email: Optional[str] = Field(
        None,
        pattern=EMAIL_PATTERN,
        description="Contact email; defaults to the account email.",
    )
    phone: Optional[str] = Field(
        None,
        pattern=PHONE_PATTERN,
        description="Contact phone in the form 0XXX-XXXXXXX.",
    )
    priority: Optional[TicketPriority] = None


class StatusUpdate(BaseModel):
    # Plain strings so unknown values get the domain error listing the valid set.
    status: str


class PriorityUpdate(BaseModel):
    priority: str


class AssignRequest(BaseModel):
    department_id: uuid.UUID


class CommentCreate(BaseModel):
    message: str
    is_internal: bool = False


class DepartmentRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str


class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    user_name: str
    user_role: UserRole
    message: str
    is_internal: bool
    created_at: datetime


class AttachmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    file_name: str
    original_name: str
    file_size: int
    file_type: str
    uploaded_by: uuid.UUID
    uploaded_by_name: str
    uploaded_at: datetime


class HistoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    action: HistoryAction
    performed_by: uuid.UUID
    performed_by_name: str
    performed_by_role: UserRole
    description: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    created_at: datetime


class TicketSummary(BaseModel):
    """A ticket as shown in listings."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    ticket_no: int
    title: str
    category: TicketCategory
    description: str
    priority: TicketPriority
    status: TicketStatus
    student_email: str
    student_phone: Optional[str] = None
    student_roll_number: str
    student_department: Optional[str] = None
    student_year: Optional[int] = None
    created_by: uuid.UUID
    assigned_department: Optional[DepartmentRef] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TicketOut(TicketSummary):
    """A single ticket with its comments, attachments and history."""

    comments: List[CommentOut] = []
    attachments: List[AttachmentOut] = []
    history: List[HistoryOut] = Field(
        default_factory=list, description="Most recent entry first."
    )


class TicketListResponse(BaseModel):
    tickets: List[TicketSummary]
    count: int


class StudentInfo(BaseModel):
    roll_number: str
    year: int
    department: str


class TicketCreateResponse(BaseModel):
    message: str
    ticket: TicketOut
    assigned_to: Optional[str] = None
    student_info: Optional[StudentInfo] = None


class TicketMutationResponse(BaseModel):
    message: str
    ticket: TicketOut


class CommentResponse(BaseModel):
    message: str
    comment: CommentOut


class AttachmentResponse(BaseModel):
    message: str
    attachment: AttachmentOut
