"""Parsing and validation of student roll numbers (e.g. ``2K21-IT-1``)."""

import re
from dataclasses import dataclass
from datetime import datetime, timezone

from app.services.category_policy import normalize_code, target_department_code
from app.utils.exceptions import (
    GraduatedError,
    InvalidEnrollmentYear,
    InvalidRollNumberFormat,
)

ROLL_NUMBER_PATTERN = r"^2K(\d{2})-([A-Za-z]+)-(\d+)$"
ROLL_NUMBER_RE = re.compile(ROLL_NUMBER_PATTERN, re.IGNORECASE | re.ASCII)

PROGRAM_YEARS = 4

DEPARTMENT_NAMES: dict[str, str] = {
    "IT": "Information Technology",
    "CS": "Computer Science",
    "SE": "Software Engineering",
    "EE": "Electrical Engineering",
    "ME": "Mechanical Engineering",
    "CE": "Civil Engineering",
    "AI": "Artificial Intelligence",
    "DS": "Data Science",
    "CY": "Cyber Security",
    "DVM": "DVM",
    "CPD": "CPD",
}


@dataclass(frozen=True)
class RollNumber:
    enrollment_year: int
    student_year: int
    department_code: str
    department_name: str
    student_number: str


def department_name_for_code(code: str) -> str:
    """Human readable department for a code; unknown codes are returned as given."""
    return DEPARTMENT_NAMES.get(target_department_code(code), code)


def extract_department_code(roll_number: str) -> str | None:
    match = ROLL_NUMBER_RE.fullmatch(roll_number or "")
    return normalize_code(match.group(2)) if match else None


def parse_roll_number(roll_number: str | None, current_year: int | None = None) -> RollNumber:
    """
    Parse a roll number and check the student is currently enrolled.

    Args:
        roll_number: The identifier in ``2K<YY>-<CODE>-<N>`` form, any case.
        current_year: Calendar year to evaluate enrollment against; defaults to now.

    Returns:
        RollNumber: The derived enrollment metadata.

    Raises:
        InvalidRollNumberFormat: The value does not match the pattern.
        GraduatedError: The four-year program has already elapsed.
        InvalidEnrollmentYear: The enrollment year lies in the future.
    """
    match = ROLL_NUMBER_RE.fullmatch(roll_number or "")
    if not match:
        raise InvalidRollNumberFormat(
            "Invalid roll number format. Expected format: 2KYY-DEPT-N "
            f"(e.g., 2K21-IT-1, 2K21-DVM-1), got {roll_number!r}"
        )

    year_suffix, code, student_number = match.groups()
    enrollment_year = 2000 + int(year_suffix)
    if current_year is None:
        current_year = datetime.now(timezone.utc).year
    student_year = current_year - enrollment_year + 1

    if student_year > PROGRAM_YEARS:
        raise GraduatedError(
            f"Roll number {roll_number} indicates graduation year "
            f"{enrollment_year + PROGRAM_YEARS}. Only currently enrolled students "
            "can create tickets."
        )
    if student_year < 1:
        raise InvalidEnrollmentYear(
            f"Invalid enrollment year {enrollment_year} in roll number {roll_number}"
        )

    return RollNumber(
        enrollment_year=enrollment_year,
        student_year=student_year,
        department_code=normalize_code(code),
        department_name=department_name_for_code(code),
        student_number=student_number,
    )
