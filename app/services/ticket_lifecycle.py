"""
Ticket creation, transitions, comments and attachments.

Every mutation is one transaction: the ticket row is updated (bumping its
version) together with exactly one new history entry and any new child row.
A concurrent writer makes the flush fail with a stale version or a duplicate
child position; the operation is then replayed on fresh state a bounded
number of times.
"""

import posixpath
import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError
from uuid_extensions import uuid7

from app.models.department import Department
from app.models.ticket import (
    Ticket,
    TicketAttachment,
    TicketCategory,
    TicketComment,
    TicketPriority,
    TicketStatus,
)
from app.models.ticket_history import HistoryAction
from app.services.access_scope import (
    AuthoredScope,
    TicketScope,
    ensure_visible,
    resolve_ticket_scope,
)
from app.services.actors import Actor, AdminActor, DepartmentActor, StudentActor
from app.services.department_router import resolve_target_department
from app.services.history import append_history
from app.services.roll_number import RollNumber, parse_roll_number
from app.services.storage import BlobStore
from app.services.ticket_numbers import next_ticket_no
from app.settings import settings
from app.utils.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidRollNumberFormat,
    NotFoundError,
    ValidationError,
)
from app.utils.logging_config import logger
from app.utils.time import utc_now

T = TypeVar("T")


@dataclass(frozen=True)
class NewTicket:
    title: str
    category: TicketCategory
    description: str
    student_email: str | None = None
    student_phone: str | None = None
    priority: TicketPriority | None = None


@dataclass(frozen=True)
class AttachmentUpload:
    original_name: str
    content_type: str
    data: bytes


@dataclass(frozen=True)
class CreatedTicket:
    ticket: Ticket
    department: Department | None
    roll_number: RollNumber | None


def parse_status(value: str) -> TicketStatus:
    try:
        return TicketStatus(value)
    except ValueError:
        raise ValidationError(
            f"Invalid status: {value!r}", valid_values=[s.value for s in TicketStatus]
        ) from None


def parse_priority(value: str) -> TicketPriority:
    try:
        return TicketPriority(value)
    except ValueError:
        raise ValidationError(
            f"Invalid priority: {value!r}",
            valid_values=[p.value for p in TicketPriority],
        ) from None


class TicketLifecycle:
    def __init__(
        self,
        session: AsyncSession,
        blob_store: BlobStore | None = None,
        max_attempts: int | None = None,
    ):
        self.session = session
        self.blob_store = blob_store
        self.max_attempts = max_attempts or settings.TICKET_UPDATE_RETRIES

    # ----------------------------------------------------------------- reads

    async def _load(self, ticket_id: uuid.UUID) -> Ticket:
        result = await self.session.execute(
            select(Ticket)
            .where(Ticket.id == ticket_id)
            .execution_options(populate_existing=True)
        )
        ticket = result.scalars().first()
        if ticket is None:
            raise NotFoundError("Ticket not found")
        return ticket

    async def _list(self, scope: TicketScope) -> Sequence[Ticket]:
        result = await self.session.execute(
            select(Ticket)
            .where(scope.ticket_clause())
            .order_by(Ticket.created_at.desc(), Ticket.ticket_no.desc())
        )
        return result.scalars().all()

    async def get(self, actor: Actor, ticket_id: uuid.UUID) -> Ticket:
        scope = await resolve_ticket_scope(self.session, actor)
        ticket = await self._load(ticket_id)
        ensure_visible(scope, ticket)
        return ticket

    async def list_own(self, actor: Actor) -> Sequence[Ticket]:
        return await self._list(AuthoredScope(user_id=actor.user_id))

    async def list_scoped(self, actor: Actor) -> Sequence[Ticket]:
        if isinstance(actor, StudentActor):
            raise AuthorizationError("Access denied. Department or Admin only.")
        return await self._list(await resolve_ticket_scope(self.session, actor))

    async def get_attachment(
        self, actor: Actor, ticket_id: uuid.UUID, attachment_id: uuid.UUID
    ) -> tuple[TicketAttachment, bytes]:
        ticket = await self.get(actor, ticket_id)
        attachment = next((a for a in ticket.attachments if a.id == attachment_id), None)
        if attachment is None:
            raise NotFoundError("Attachment not found")
        data = await self._require_blob_store().read(attachment.file_path)
        return attachment, data

    # -------------------------------------------------------------- creation

    async def create(self, actor: Actor, new: NewTicket) -> CreatedTicket:
        if not isinstance(actor, StudentActor):
            raise AuthorizationError("Only students can create support tickets")
        if not actor.roll_number:
            raise ValidationError(
                "Your account does not have a roll number. Please contact administration."
            )

        # Enrollment-window failures abort; a malformed number only costs routing.
        roll: RollNumber | None
        try:
            roll = parse_roll_number(actor.roll_number)
        except InvalidRollNumberFormat as exc:
            logger.warning(
                f"Creating unrouted ticket for {actor.user_id}: {exc.detail}"
            )
            roll = None

        department = None
        if roll is not None:
            department = await resolve_target_department(
                self.session, roll.department_code
            )
            if department is None:
                logger.warning(
                    f"No department resolves for code {roll.department_code}; "
                    "ticket left for manual assignment"
                )

        ticket = Ticket(
            ticket_no=await next_ticket_no(self.session),
            title=new.title,
            category=new.category,
            description=new.description,
            priority=new.priority or TicketPriority.MEDIUM,
            status=TicketStatus.ASSIGNED if department else TicketStatus.OPEN,
            student_email=new.student_email or actor.email,
            student_phone=new.student_phone or actor.phone,
            student_roll_number=actor.roll_number.upper(),
            student_department=roll.department_code if roll else None,
            student_year=roll.student_year if roll else None,
            created_by=actor.user_id,
            assigned_department_id=department.id if department else None,
        )
        append_history(
            ticket, actor, HistoryAction.CREATED, f"Ticket created by {actor.fullname}"
        )
        self.session.add(ticket)
        try:
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise

        logger.info(
            f"Ticket #{ticket.ticket_no} created by {actor.user_id} "
            f"({ticket.status.value}, department={department.name if department else None})"
        )
        return CreatedTicket(
            ticket=await self._load(ticket.id), department=department, roll_number=roll
        )

    # ------------------------------------------------------------- mutations

    async def _mutate(
        self,
        actor: Actor,
        ticket_id: uuid.UUID,
        apply: Callable[[Ticket], Awaitable[T]],
        check_scope: bool = True,
    ) -> tuple[Ticket, T]:
        scope = await resolve_ticket_scope(self.session, actor) if check_scope else None
        for attempt in range(1, self.max_attempts + 1):
            ticket = await self._load(ticket_id)
            if scope is not None:
                ensure_visible(scope, ticket)
            outcome = await apply(ticket)
            ticket.updated_at = utc_now()
            try:
                await self.session.commit()
                return ticket, outcome
            except (StaleDataError, IntegrityError) as exc:
                await self.session.rollback()
                logger.warning(
                    f"Concurrent update on ticket {ticket_id} "
                    f"(attempt {attempt}/{self.max_attempts}): {exc}"
                )
            except SQLAlchemyError:
                await self.session.rollback()
                raise
        raise ConflictError(
            "Ticket was modified by another request. Please retry."
        )

    async def assign(
        self, actor: Actor, ticket_id: uuid.UUID, department_id: uuid.UUID
    ) -> Ticket:
        # Reassignment is an admin power independent of department scope.
        if not isinstance(actor, AdminActor):
            raise AuthorizationError("Only main admin can reassign tickets")

        async def apply(ticket: Ticket) -> None:
            department = await self.session.get(Department, department_id)
            if department is None:
                raise NotFoundError("Department not found")
            old = str(ticket.assigned_department_id) if ticket.assigned_department_id else "None"
            ticket.assigned_department = department
            ticket.status = TicketStatus.ASSIGNED
            ticket.resolved_at = None
            append_history(
                ticket,
                actor,
                HistoryAction.ASSIGNED,
                f"Ticket assigned to {department.name}",
                old_value=old,
                new_value=department.name,
            )

        ticket, _ = await self._mutate(actor, ticket_id, apply, check_scope=False)
        logger.info(f"Ticket #{ticket.ticket_no} assigned to {department_id} by {actor.user_id}")
        return ticket

    async def change_status(self, actor: Actor, ticket_id: uuid.UUID, status: str) -> Ticket:
        async def apply(ticket: Ticket) -> None:
            if isinstance(actor, DepartmentActor):
                if ticket.assigned_department_id != actor.department_id:
                    raise AuthorizationError(
                        "You can only update tickets assigned to your department"
                    )
            elif not isinstance(actor, AdminActor):
                raise AuthorizationError("Unauthorized to update ticket status")

            new_status = parse_status(status)
            old_status = ticket.status
            ticket.status = new_status
            if new_status is TicketStatus.CLOSED:
                ticket.resolved_at = utc_now()
            else:
                ticket.resolved_at = None
            append_history(
                ticket,
                actor,
                HistoryAction.STATUS_CHANGED,
                f"Status changed from {old_status.value} to {new_status.value}",
                old_value=old_status.value,
                new_value=new_status.value,
            )

        ticket, _ = await self._mutate(actor, ticket_id, apply)
        logger.info(f"Ticket #{ticket.ticket_no} status -> {ticket.status.value} by {actor.user_id}")
        return ticket

    async def change_priority(
        self, actor: Actor, ticket_id: uuid.UUID, priority: str
    ) -> Ticket:
        async def apply(ticket: Ticket) -> None:
            if isinstance(actor, StudentActor):
                raise AuthorizationError("Students cannot change ticket priority")
            new_priority = parse_priority(priority)
            old_priority = ticket.priority
            ticket.priority = new_priority
            append_history(
                ticket,
                actor,
                HistoryAction.PRIORITY_CHANGED,
                f"Priority changed from {old_priority.value} to {new_priority.value}",
                old_value=old_priority.value,
                new_value=new_priority.value,
            )

        ticket, _ = await self._mutate(actor, ticket_id, apply)
        return ticket

    async def add_comment(
        self,
        actor: Actor,
        ticket_id: uuid.UUID,
        message: str,
        is_internal: bool = False,
    ) -> tuple[Ticket, TicketComment]:
        text = (message or "").strip()
        if not text:
            raise ValidationError("Comment message is required")

        async def apply(ticket: Ticket) -> TicketComment:
            comment = TicketComment(
                user_id=actor.user_id,
                user_name=actor.fullname,
                user_role=actor.role,
                message=text,
                is_internal=is_internal,
            )
            ticket.comments.append(comment)
            append_history(ticket, actor, HistoryAction.COMMENT_ADDED, "Added a comment")
            return comment

        return await self._mutate(actor, ticket_id, apply)

    async def add_attachment(
        self, actor: Actor, ticket_id: uuid.UUID, upload: AttachmentUpload
    ) -> tuple[Ticket, TicketAttachment]:
        """
        Store the blob and append it to the ticket, or leave no trace at all.

        Visibility is checked before anything is written; once the blob exists,
        any failure to commit the ticket append deletes it again.
        """
        blob_store = self._require_blob_store()
        await self.get(actor, ticket_id)

        _, extension = posixpath.splitext(upload.original_name)
        storage_name = f"{uuid7().hex}{extension.lower()}"
        path = f"{ticket_id}/{storage_name}"
        await blob_store.save(path, upload.data, upload.content_type)

        async def apply(ticket: Ticket) -> TicketAttachment:
            attachment = TicketAttachment(
                file_name=storage_name,
                original_name=upload.original_name,
                file_path=path,
                file_size=len(upload.data),
                file_type=upload.content_type,
                uploaded_by=actor.user_id,
                uploaded_by_name=actor.fullname,
                uploaded_at=utc_now(),
            )
            ticket.attachments.append(attachment)
            append_history(
                ticket,
                actor,
                HistoryAction.FILE_UPLOADED,
                f"Uploaded file: {upload.original_name}",
            )
            return attachment

        try:
            return await self._mutate(actor, ticket_id, apply)
        except Exception:
            logger.warning(f"Rolling back stored attachment {path} for ticket {ticket_id}")
            try:
                await blob_store.delete(path)
            except Exception as cleanup_exc:
                logger.error(
                    f"Failed to remove orphaned attachment {path}: {cleanup_exc}",
                    exc_info=True,
                )
            raise

    def _require_blob_store(self) -> BlobStore:
        if self.blob_store is None:
            raise RuntimeError("No blob store configured for attachments")
        return self.blob_store
