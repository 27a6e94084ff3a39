"""
Single source of truth for how student department codes fold into departments
and how departments fall into admin categories.

The roll-number parser, the department router and the access-scope policy all
depend on these functions; none of them keeps its own copy of the rules.
"""

from typing import Iterable

from app.models.department import DepartmentCategory

# Codes that are routed to another department's tickets.
FOLDED_CODES: dict[str, str] = {
    "CPT": "CPD",
}

# Department names whose admins manage a category of their own.
CATEGORY_DEPARTMENTS: dict[str, DepartmentCategory] = {
    "DVM": DepartmentCategory.DVM,
    "CPD": DepartmentCategory.CPD,
}


def normalize_code(code: str) -> str:
    return code.strip().upper()


def target_department_code(code: str) -> str:
    """Return the department code a student code is routed to (CPT -> CPD)."""
    normalized = normalize_code(code)
    return FOLDED_CODES.get(normalized, normalized)


def category_for_department_name(name: str | None) -> DepartmentCategory:
    """DVM -> DVM, CPD -> CPD, anything else (or no department) -> MAIN."""
    if not name:
        return DepartmentCategory.MAIN
    return CATEGORY_DEPARTMENTS.get(normalize_code(name), DepartmentCategory.MAIN)


def category_for_code(code: str) -> DepartmentCategory:
    return category_for_department_name(target_department_code(code))


def student_codes_for_department(name: str) -> frozenset[str]:
    """All student department codes whose tickets belong to department `name`."""
    target = normalize_code(name)
    folded = {code for code, folded_to in FOLDED_CODES.items() if folded_to == target}
    return frozenset({target, *folded})


def roll_number_patterns(codes: Iterable[str]) -> list[str]:
    """SQL LIKE patterns matching roll numbers of students with the given codes."""
    return [f"2K__-{normalize_code(code)}-%" for code in sorted(codes)]
