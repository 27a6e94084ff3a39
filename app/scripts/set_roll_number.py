"""
Attach a roll number to an existing student account.

    python -m app.scripts.set_roll_number student@example.com 2K24-IT-17

The number is upper-cased and must have the 2KYY-DEPT-N shape. The enrollment
window is not checked here; it is enforced when the student files a ticket.
"""

import argparse
import asyncio
import sys

from sqlalchemy import select

from app.config.db import SessionLocal, engine
from app.models import User, UserRole
from app.services.roll_number import ROLL_NUMBER_RE, department_name_for_code
from app.utils.exceptions import (
    HelpdeskError,
    InvalidRollNumberFormat,
    NotFoundError,
    ValidationError,
)
from app.utils.logging_config import logger


async def set_roll_number(email: str, roll_number: str) -> User:
    roll_number = roll_number.strip().upper()
    match = ROLL_NUMBER_RE.fullmatch(roll_number)
    if not match:
        raise InvalidRollNumberFormat(
            f"Invalid roll number {roll_number!r}. Expected format: 2KYY-DEPT-N"
        )

    async with SessionLocal() as session:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalars().first()
        if user is None:
            raise NotFoundError(f"User not found: {email}")
        if user.role is not UserRole.STUDENT:
            raise ValidationError(f"User {email} is not a student (role: {user.role.value})")

        user.roll_number = roll_number
        await session.commit()
        logger.info(
            f"Roll number {roll_number} added to {user.fullname} "
            f"({department_name_for_code(match.group(2))})"
        )
        return user


async def run(email: str, roll_number: str) -> int:
    try:
        await set_roll_number(email, roll_number)
        return 0
    except HelpdeskError as e:
        logger.error(e.detail)
        return 1
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Attach a roll number to a student.")
    parser.add_argument("email")
    parser.add_argument("roll_number", help="e.g. 2K24-IT-17")
    args = parser.parse_args()
    sys.exit(asyncio.run(run(args.email, args.roll_number)))


if __name__ == "__main__":
    main()
