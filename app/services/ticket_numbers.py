"""Atomic allocation of sequential ticket numbers."""

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.counter import Counter
from app.models.ticket import Ticket
from app.settings import settings
from app.utils.logging_config import logger

TICKET_NO_COUNTER = "ticket_no"


async def _increment(session: AsyncSession) -> int | None:
    result = await session.execute(
        update(Counter)
        .where(Counter.name == TICKET_NO_COUNTER)
        .values(value=Counter.value + 1)
        .returning(Counter.value)
    )
    return result.scalar_one_or_none()


async def _seed_counter(session: AsyncSession) -> None:
    """Create the counter row just below the next number to hand out."""
    current_max = await session.scalar(select(func.max(Ticket.ticket_no)))
    floor = settings.TICKET_NO_START - 1
    start = max(current_max or floor, floor)
    try:
        async with session.begin_nested():
            session.add(Counter(name=TICKET_NO_COUNTER, value=start))
        logger.info(f"Seeded ticket number counter at {start}")
    except IntegrityError:
        # Another request seeded it first; its row is now visible to us.
        logger.info("Ticket number counter already seeded concurrently")


async def next_ticket_no(session: AsyncSession) -> int:
    """
    Draw the next ticket number with a single UPDATE ... RETURNING.

    The increment runs inside the caller's transaction: a ticket that fails to
    insert rolls the counter back with it, and concurrent callers block on the
    counter row until the holder commits.
    """
    value = await _increment(session)
    if value is None:
        await _seed_counter(session)
        value = await _increment(session)
    if value is None:
        raise RuntimeError("Ticket number counter could not be initialised")
    return value
