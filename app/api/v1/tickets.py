"""API endpoints for support tickets."""

import uuid
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_actor, get_db_session, get_ticket_lifecycle
from app.models.ticket import Ticket
from app.schemas.stats import DepartmentCountOut, StatusCountsOut, TicketStatsResponse
from app.schemas.ticket import (
    AssignRequest,
    AttachmentOut,
    AttachmentResponse,
    CommentCreate,
    CommentOut,
    CommentResponse,
    HistoryOut,
    PriorityUpdate,
    StatusUpdate,
    StudentInfo,
    TicketCreate,
    TicketCreateResponse,
    TicketListResponse,
    TicketMutationResponse,
    TicketOut,
    TicketSummary,
)
from app.services.actors import Actor, StudentActor
from app.services.history import most_recent_first
from app.services.stats import ticket_stats
from app.services.ticket_lifecycle import AttachmentUpload, NewTicket, TicketLifecycle
from app.utils.file_validator import content_type_of, read_upload

router = APIRouter()


def render_ticket(ticket: Ticket, actor: Actor) -> TicketOut:
    """Serialize a ticket for the given viewer; students never see internal comments."""
    hide_internal = isinstance(actor, StudentActor)
    summary = TicketSummary.model_validate(ticket)
    return TicketOut(
        **summary.model_dump(),
        comments=[
            CommentOut.model_validate(c)
            for c in ticket.comments
            if not (hide_internal and c.is_internal)
        ],
        attachments=[AttachmentOut.model_validate(a) for a in ticket.attachments],
        history=[HistoryOut.model_validate(h) for h in most_recent_first(ticket)],
    )


def _listing(tickets) -> TicketListResponse:
    return TicketListResponse(
        tickets=[TicketSummary.model_validate(t) for t in tickets], count=len(tickets)
    )


@router.post(
    "",
    status_code=201,
    response_model=TicketCreateResponse,
    summary="Create a support ticket",
    description="Parses the student's roll number, routes the ticket to a department and records its creation.",
)
async def create_ticket(
    body: TicketCreate,
    actor: Actor = Depends(get_actor),
    lifecycle: TicketLifecycle = Depends(get_ticket_lifecycle),
) -> TicketCreateResponse:
    created = await lifecycle.create(
        actor,
        NewTicket(
            title=body.title,
            category=body.category,
            description=body.description,
            student_email=body.email,
            student_phone=body.phone,
            priority=body.priority,
        ),
    )
    message = (
        "Ticket created and assigned successfully"
        if created.department
        else "Ticket created successfully. An admin will assign it to a department."
    )
    student_info = None
    if created.roll_number is not None:
        student_info = StudentInfo(
            roll_number=created.ticket.student_roll_number,
            year=created.roll_number.student_year,
            department=created.roll_number.department_name,
        )
    return TicketCreateResponse(
        message=message,
        ticket=render_ticket(created.ticket, actor),
        assigned_to=created.department.name if created.department else None,
        student_info=student_info,
    )


@router.get("/my", response_model=TicketListResponse)
async def list_my_tickets(
    actor: Actor = Depends(get_actor),
    lifecycle: TicketLifecycle = Depends(get_ticket_lifecycle),
):
    return _listing(await lifecycle.list_own(actor))


@router.get("/all", response_model=TicketListResponse)
async def list_all_tickets(
    actor: Actor = Depends(get_actor),
    lifecycle: TicketLifecycle = Depends(get_ticket_lifecycle),
):
    """Every ticket the caller's scope covers."""
    return _listing(await lifecycle.list_scoped(actor))


@router.get("/department", response_model=TicketListResponse)
async def list_department_tickets(
    actor: Actor = Depends(get_actor),
    lifecycle: TicketLifecycle = Depends(get_ticket_lifecycle),
):
    return _listing(await lifecycle.list_scoped(actor))


@router.get("/stats", response_model=TicketStatsResponse)
async def get_ticket_stats(
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db_session),
):
    counts, by_department = await ticket_stats(db, actor)
    return TicketStatsResponse(
        stats=StatusCountsOut.model_validate(counts),
        by_department=[DepartmentCountOut.model_validate(d) for d in by_department],
    )


@router.get("/{ticket_id}", response_model=TicketOut)
async def get_ticket(
    ticket_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    lifecycle: TicketLifecycle = Depends(get_ticket_lifecycle),
):
    return render_ticket(await lifecycle.get(actor, ticket_id), actor)


@router.put("/{ticket_id}/assign", response_model=TicketMutationResponse)
async def assign_ticket(
    ticket_id: uuid.UUID,
    body: AssignRequest,
    actor: Actor = Depends(get_actor),
    lifecycle: TicketLifecycle = Depends(get_ticket_lifecycle),
):
    ticket = await lifecycle.assign(actor, ticket_id, body.department_id)
    return TicketMutationResponse(
        message="Ticket assigned successfully", ticket=render_ticket(ticket, actor)
    )


@router.put("/{ticket_id}/status", response_model=TicketMutationResponse)
async def update_ticket_status(
    ticket_id: uuid.UUID,
    body: StatusUpdate,
    actor: Actor = Depends(get_actor),
    lifecycle: TicketLifecycle = Depends(get_ticket_lifecycle),
):
    ticket = await lifecycle.change_status(actor, ticket_id, body.status)
    return TicketMutationResponse(
        message="Ticket status updated successfully",
        ticket=render_ticket(ticket, actor),
    )


@router.put("/{ticket_id}/priority", response_model=TicketMutationResponse)
async def update_ticket_priority(
    ticket_id: uuid.UUID,
    body: PriorityUpdate,
    actor: Actor = Depends(get_actor),
    lifecycle: TicketLifecycle = Depends(get_ticket_lifecycle),
):
    ticket = await lifecycle.change_priority(actor, ticket_id, body.priority)
    return TicketMutationResponse(
        message="Ticket priority updated successfully",
        ticket=render_ticket(ticket, actor),
    )


@router.post("/{ticket_id}/comments", status_code=201, response_model=CommentResponse)
async def add_comment(
    ticket_id: uuid.UUID,
    body: CommentCreate,
    actor: Actor = Depends(get_actor),
    lifecycle: TicketLifecycle = Depends(get_ticket_lifecycle),
):
    _, comment = await lifecycle.add_comment(
        actor, ticket_id, body.message, is_internal=body.is_internal
    )
    return CommentResponse(
        message="Comment added successfully", comment=CommentOut.model_validate(comment)
    )


@router.post(
    "/{ticket_id}/attachments",
    status_code=201,
    response_model=AttachmentResponse,
    summary="Attach a file to a ticket",
)
async def upload_attachment(
    ticket_id: uuid.UUID,
    file: UploadFile = File(...),
    actor: Actor = Depends(get_actor),
    lifecycle: TicketLifecycle = Depends(get_ticket_lifecycle),
):
    data = await read_upload(file)
    _, attachment = await lifecycle.add_attachment(
        actor,
        ticket_id,
        AttachmentUpload(
            original_name=file.filename or "",
            content_type=content_type_of(file),
            data=data,
        ),
    )
    return AttachmentResponse(
        message="File uploaded successfully",
        attachment=AttachmentOut.model_validate(attachment),
    )


@router.get("/{ticket_id}/attachments/{attachment_id}/download")
async def download_attachment(
    ticket_id: uuid.UUID,
    attachment_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    lifecycle: TicketLifecycle = Depends(get_ticket_lifecycle),
) -> Response:
    attachment, data = await lifecycle.get_attachment(actor, ticket_id, attachment_id)
    return Response(
        content=data,
        media_type=attachment.file_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(attachment.original_name)}"
        },
    )
