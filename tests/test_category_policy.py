import pytest

from app.models import DepartmentCategory, Ticket, UserRole
from app.services.access_scope import StudentDepartmentScope, resolve_ticket_scope
from app.services.category_policy import (
    category_for_code,
    category_for_department_name,
    roll_number_patterns,
    student_codes_for_department,
    target_department_code,
)
from app.services.department_router import resolve_target_department
from app.services.roll_number import parse_roll_number


def test_cpt_folds_into_cpd():
    assert target_department_code("CPT") == "CPD"
    assert target_department_code("cpt") == "CPD"
    assert target_department_code("IT") == "IT"


def test_categories():
    assert category_for_department_name("DVM") is DepartmentCategory.DVM
    assert category_for_department_name("cpd") is DepartmentCategory.CPD
    assert category_for_department_name("Information Technology") is DepartmentCategory.MAIN
    assert category_for_department_name(None) is DepartmentCategory.MAIN
    assert category_for_code("CPT") is DepartmentCategory.CPD


def test_student_codes_for_department():
    assert student_codes_for_department("CPD") == frozenset({"CPD", "CPT"})
    assert student_codes_for_department("DVM") == frozenset({"DVM"})
    assert student_codes_for_department("it") == frozenset({"IT"})


def test_roll_number_patterns():
    assert roll_number_patterns({"CPT", "CPD"}) == ["2K__-CPD-%", "2K__-CPT-%"]


@pytest.mark.asyncio
async def test_cpt_and_cpd_agree_across_parser_router_and_scope(
    db_session, make_department, make_user, actor_of
):
    """One CPT student: parsed, routed and scoped consistently with CPD."""
    await make_department("Information Technology")
    cpd = await make_department("CPD", DepartmentCategory.CPD)
    admin = await make_user(UserRole.ADMIN, department=cpd)

    parsed = parse_roll_number("2K21-CPT-3", current_year=2022)
    routed = await resolve_target_department(db_session, parsed.department_code)
    scope = await resolve_ticket_scope(db_session, actor_of(admin))

    assert parsed.department_name == routed.name == "CPD"
    assert routed.category is category_for_code(parsed.department_code)
    assert isinstance(scope, StudentDepartmentScope)
    assert parsed.department_code in scope.codes
    assert scope.permits(Ticket(student_department=parsed.department_code))
    assert scope.permits(Ticket(student_department="CPD"))
    assert not scope.permits(Ticket(student_department="DVM"))
