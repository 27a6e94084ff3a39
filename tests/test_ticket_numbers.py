import asyncio

import pytest
from sqlalchemy import select

from app.models import Counter, Ticket, TicketCategory, UserRole
from app.services.ticket_lifecycle import NewTicket, TicketLifecycle
from app.services.ticket_numbers import TICKET_NO_COUNTER, next_ticket_no
from conftest import roll_for


@pytest.mark.asyncio
async def test_first_number_starts_at_1001(db_session):
    assert await next_ticket_no(db_session) == 1001
    assert await next_ticket_no(db_session) == 1002
    await db_session.commit()

    counter = await db_session.get(Counter, TICKET_NO_COUNTER)
    assert counter.value == 1002


@pytest.mark.asyncio
async def test_rolled_back_draw_does_not_consume_a_number(db_session):
    assert await next_ticket_no(db_session) == 1001
    await db_session.commit()

    assert await next_ticket_no(db_session) == 1002
    await db_session.rollback()

    assert await next_ticket_no(db_session) == 1002


@pytest.mark.asyncio
async def test_counter_is_seeded_above_existing_tickets(db_session, make_user):
    student = await make_user(UserRole.STUDENT, roll_number=roll_for("IT"))
    db_session.add(
        Ticket(
            ticket_no=2040,
            title="Imported",
            category=TicketCategory.OTHER,
            description="From the old system",
            student_email=student.email,
            student_roll_number=student.roll_number,
            created_by=student.id,
        )
    )
    await db_session.commit()

    assert await next_ticket_no(db_session) == 2041


@pytest.mark.asyncio
async def test_concurrent_creations_get_distinct_contiguous_numbers(
    session_factory, make_user, actor_of
):
    students = [
        actor_of(await make_user(UserRole.STUDENT, roll_number=roll_for("IT", number=n)))
        for n in range(1, 6)
    ]

    async def create(actor):
        async with session_factory() as session:
            created = await TicketLifecycle(session).create(
                actor,
                NewTicket(
                    title=f"Ticket from {actor.fullname}",
                    category=TicketCategory.ACADEMIC_QUERY,
                    description="Concurrent creation",
                ),
            )
            return created.ticket.ticket_no

    numbers = await asyncio.gather(*(create(actor) for actor in students))

    assert sorted(numbers) == [1001, 1002, 1003, 1004, 1005]
    async with session_factory() as session:
        stored = (await session.execute(select(Ticket.ticket_no))).scalars().all()
    assert sorted(stored) == sorted(numbers)
