import pytest

from import_engine.dedupe import CODE, NATIONAL_ID, Deduplicator
from import_engine.row_validator import (
    DUPLICATE_CODE, DUPLICATE_NATIONAL_ID, GRADE_MISSING, INVALID_GRADE,
    INVALID_STATUS, LEGACY_FORMAT, MISSING_REQUIRED, NATIONAL_ID_MISSING,
    STATUS_MISSING, RowValidator, cell_text, to_number,
)


@pytest.fixture
def validator():
    return RowValidator(Deduplicator())


def test_valid_row_is_typed(validator):
    outcome, row = validator.validate(
        ["1001", "Ahmed Ali", "29012345678901", "27", "active"], 2)

    assert outcome.valid
    assert row.row_number == 2
    assert row.student_code == "1001"
    assert row.student_name == "Ahmed Ali"
    assert row.national_id == "29012345678901"
    assert row.grade == 27
    assert row.status == "active"


def test_missing_national_id(validator):
    outcome, row = validator.validate(["1002", "Sara", "", "20", "active"], 3)

    assert row is None
    assert outcome.reasons == [NATIONAL_ID_MISSING]
    assert outcome.message == "Row 3: national id missing"


def test_invalid_grade(validator):
    outcome, _ = validator.validate(["1003", "Omar", "290111", "xx", "active"], 2)
    assert outcome.reasons == [INVALID_GRADE]


def test_status_is_trimmed_and_case_insensitive(validator):
    outcome, row = validator.validate(["1004", "Mona", "290222", 15, "Active "], 2)

    assert outcome.valid
    assert row.status == "active"


@pytest.mark.parametrize("raw, expected", [
    (["", "Name", "290", 10, "active"], [MISSING_REQUIRED]),
    (["1001", "  ", "290", 10, "active"], [MISSING_REQUIRED]),
    (["1001", "Name", "290", None, "active"], [GRADE_MISSING]),
    (["1001", "Name", "290", 10, None], [STATUS_MISSING]),
    (["1001", "Name", "290", 10, "graduated"], [INVALID_STATUS]),
    (["1001", "Name", "290", "nan", "active"], [INVALID_GRADE]),
    (["1001", "Name"], [NATIONAL_ID_MISSING, LEGACY_FORMAT, STATUS_MISSING]),
])
def test_single_rule_failures(validator, raw, expected):
    outcome, _ = validator.validate(raw, 2)
    assert outcome.reasons == expected


def test_reasons_accumulate_in_rule_order(validator):
    outcome, _ = validator.validate([None, None, None, "abc", "unknown"], 2)

    assert outcome.reasons == [
        MISSING_REQUIRED, NATIONAL_ID_MISSING, INVALID_GRADE, INVALID_STATUS,
    ]


def test_legacy_three_column_layout(validator):
    outcome, _ = validator.validate(["1001", "Ahmed", 27, None, None], 2)

    assert LEGACY_FORMAT in outcome.reasons
    assert GRADE_MISSING not in outcome.reasons


def test_large_national_id_with_missing_grade_is_not_legacy(validator):
    outcome, _ = validator.validate(["1001", "Ahmed", "29012345678901", None, "active"], 2)
    assert outcome.reasons == [GRADE_MISSING]


def test_empty_national_id_with_missing_grade_reads_as_legacy(validator):
    outcome, _ = validator.validate(["1001", "Ahmed", None, None, "active"], 2)
    assert outcome.reasons == [NATIONAL_ID_MISSING, LEGACY_FORMAT]


@pytest.mark.parametrize("grade", [1e20, -1e20, 2 ** 63, "9223372036854775808"])
def test_grade_outside_integer_column_is_invalid(validator, grade):
    outcome, row = validator.validate(["1001", "Ahmed", "290111", grade, "active"], 2)

    assert row is None
    assert outcome.reasons == [INVALID_GRADE]


def test_largest_storable_grade_is_accepted(validator):
    outcome, row = validator.validate(["1001", "Ahmed", "290111", 2 ** 63 - 1, "active"], 2)

    assert outcome.valid
    assert row.grade == 2 ** 63 - 1


def test_duplicate_code_and_national_id_are_independent(validator):
    validator.validate(["1001", "A", "290111", 10, "active"], 2)

    dup_code, _ = validator.validate(["1001", "B", "290222", 10, "active"], 3)
    dup_nid, _ = validator.validate(["1003", "C", "290111", 10, "active"], 4)
    both, _ = validator.validate([" 1001 ", "D", "290222", 10, "active"], 5)

    assert dup_code.reasons == [DUPLICATE_CODE]
    assert dup_nid.reasons == [DUPLICATE_NATIONAL_ID]
    assert both.reasons == [DUPLICATE_NATIONAL_ID, DUPLICATE_CODE]


def test_duplicates_tracked_even_for_invalid_rows(validator):
    validator.validate(["1001", "A", "290111", "xx", "active"], 2)
    outcome, _ = validator.validate(["1001", "B", "290111", 10, "active"], 3)

    assert outcome.reasons == [DUPLICATE_NATIONAL_ID, DUPLICATE_CODE]


def test_numeric_cells_are_stringified_like_the_sheet():
    assert cell_text(29012345678901.0) == "29012345678901"
    assert cell_text(1001) == "1001"
    assert cell_text("  x ") == "x"
    assert cell_text(None) == ""


def test_to_number():
    assert to_number("27") == 27
    assert to_number(" 27.5 ") == 27.5
    assert to_number(30.0) == 30
    assert to_number("inf") is None
    assert to_number("xx") is None
    assert to_number(True) is None
    assert to_number("") is None


def test_deduplicator_reset():
    d = Deduplicator()
    d.record("1001", CODE)

    assert d.is_duplicate("1001", CODE)
    assert not d.is_duplicate("1001", NATIONAL_ID)

    d.reset()
    assert not d.is_duplicate("1001", CODE)
