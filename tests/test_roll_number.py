import pytest

from app.services.roll_number import (
    department_name_for_code,
    extract_department_code,
    parse_roll_number,
)
from app.utils.exceptions import (
    GraduatedError,
    InvalidEnrollmentYear,
    InvalidRollNumberFormat,
    ValidationError,
)


def test_parse_first_year_student():
    parsed = parse_roll_number("2K21-IT-1", current_year=2021)

    assert parsed.enrollment_year == 2021
    assert parsed.student_year == 1
    assert parsed.department_code == "IT"
    assert parsed.department_name == "Information Technology"
    assert parsed.student_number == "1"


def test_parse_is_case_insensitive_and_normalises_code():
    parsed = parse_roll_number("2k23-cs-42", current_year=2024)

    assert parsed.department_code == "CS"
    assert parsed.student_year == 2


def test_final_year_is_still_enrolled():
    assert parse_roll_number("2K21-IT-1", current_year=2024).student_year == 4


def test_graduated_student_is_rejected_with_graduation_year():
    with pytest.raises(GraduatedError) as exc_info:
        parse_roll_number("2K21-IT-1", current_year=2025)

    assert "2025" in exc_info.value.detail
    assert exc_info.value.status_code == 400


def test_future_enrollment_is_rejected():
    with pytest.raises(InvalidEnrollmentYear):
        parse_roll_number("2K26-IT-1", current_year=2025)


@pytest.mark.parametrize(
    "value",
    ["", None, "21-IT-1", "2K21IT1", "2K2-IT-1", "2K21-IT-", "2K21-I T-1", "2K21-IT-1-2", "2K21-IT-1\n"],
)
def test_malformed_roll_numbers_are_rejected(value):
    with pytest.raises(InvalidRollNumberFormat):
        parse_roll_number(value, current_year=2022)


def test_parser_errors_are_validation_errors():
    assert issubclass(InvalidRollNumberFormat, ValidationError)
    assert issubclass(GraduatedError, ValidationError)
    assert issubclass(InvalidEnrollmentYear, ValidationError)


def test_cpt_keeps_its_own_code_but_reads_as_cpd():
    parsed = parse_roll_number("2K21-CPT-3", current_year=2022)

    assert parsed.department_code == "CPT"
    assert parsed.department_name == "CPD"
    assert parsed.student_year == 2


def test_unknown_code_name_falls_back_to_code():
    assert department_name_for_code("ZZ") == "ZZ"


def test_extract_department_code():
    assert extract_department_code("2k22-dvm-7") == "DVM"
    assert extract_department_code("not-a-roll") is None
