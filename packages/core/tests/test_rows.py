"""Tests for row classification and deposit extraction."""

from datetime import date
from decimal import Decimal

import pytest

from pension_import import rows
from pension_import.fields import UNKNOWN_EMPLOYER
from pension_import.rows import (
    RejectReason,
    extract_row,
    extract_rows,
    is_candidate_row,
    locate_salary_month,
)

FULL_ROW = '3,1551,2049401,01214,45412/202402/01/2025וויאנטיס בע"מ'


class TestRowGate:
    """Lines must carry a date, a salary month and a legal suffix."""

    def test_full_row_passes_gate(self):
        assert is_candidate_row(FULL_ROW)

    @pytest.mark.parametrize("line", [
        "",
        "מיטב דש גמל ופנסיה",
        'incomplete row data בע"מ',
        "another broken line 02/01/2025",
        "3,00012/202402/01/2025 no suffix",
        '3,00012/2024xx/yy/zzzzחברה בע"מ',
    ])
    def test_non_data_lines_are_skipped_silently(self, line):
        outcome = extract_row(line)

        assert not outcome.accepted
        assert outcome.reason == RejectReason.NOT_A_DATA_ROW
        assert not outcome.is_error

    def test_full_date_alone_is_not_a_salary_month(self):
        """The month/year inside the deposit date does not satisfy the gate."""
        outcome = extract_row('3,00002/01/2025חברה בע"מ')
        assert outcome.reason == RejectReason.NOT_A_DATA_ROW

    @pytest.mark.parametrize("line", [
        'מועד הפקדה 12/202402/01/2025בע"מ',
        'שם המעסיק 3,00012/202402/01/2025חברה בע"מ',
        'סה"כ 3,00012/202402/01/2025חברה בע"מ',
        'סה״כ 3,00012/202402/01/2025חברה בע"מ',
    ])
    def test_header_and_total_rows_are_excluded(self, line):
        outcome = extract_row(line)

        assert outcome.reason == RejectReason.HEADER_ROW
        assert not outcome.is_error


class TestExtractRow:
    """Tests for extracting a deposit from a data row."""

    def test_full_provider_row(self):
        outcome = extract_row(FULL_ROW)

        assert outcome.accepted
        deposit = outcome.deposit
        assert deposit.salary_month == date(2024, 12, 1)
        assert deposit.deposit_date == date(2025, 1, 2)
        assert deposit.amount == Decimal("3155")
        assert deposit.employer == 'וויאנטיס בע"מ'
        assert deposit.raw_text == FULL_ROW

    def test_raw_text_is_stripped(self):
        outcome = extract_row('  3,00012/202402/01/2025חברה בע"מ  ')
        assert outcome.deposit.raw_text == '3,00012/202402/01/2025חברה בע"מ'

    def test_space_separated_columns_use_fallback_month(self):
        outcome = extract_row('3,000 12/2024 02/01/2025חברה בע"מ')

        assert outcome.accepted
        assert outcome.deposit.salary_month == date(2024, 12, 1)
        assert outcome.deposit.amount == Decimal("3000")

    def test_unknown_employer_does_not_reject_row(self):
        outcome = extract_row('3,00012/202402/01/2025ABC Corp בע"מ')

        assert outcome.accepted
        assert outcome.deposit.employer == UNKNOWN_EMPLOYER

    def test_amount_above_limit_is_invalid(self):
        outcome = extract_row('60,00012/202402/01/2025חברה בע"מ')

        assert outcome.reason == RejectReason.INVALID_AMOUNT
        assert outcome.is_error
        assert "Invalid amount 60000" in outcome.message

    def test_amount_at_limit_is_accepted(self):
        outcome = extract_row('50,00012/202402/01/2025חברה בע"מ')
        assert outcome.deposit.amount == Decimal("50000")

    def test_custom_limit(self):
        outcome = extract_row('5,00012/202402/01/2025חברה בע"מ', max_amount=Decimal("4000"))
        assert outcome.reason == RejectReason.INVALID_AMOUNT

    def test_zero_amount_is_invalid(self):
        outcome = extract_row('012/202402/01/2025חברה בע"מ')

        assert outcome.reason == RejectReason.INVALID_AMOUNT
        assert "Invalid amount 0" in outcome.message

    def test_no_amount_before_salary_month(self):
        outcome = extract_row('12/202402/01/2025חברה בע"מ')

        assert outcome.reason == RejectReason.NO_AMOUNT
        assert outcome.message.startswith("Could not extract amounts from:")

    def test_salary_month_after_deposit_date(self):
        outcome = extract_row('3,00002/01/2025 12/2024חברה בע"מ')

        assert outcome.reason == RejectReason.NO_SALARY_MONTH
        assert outcome.is_error

    def test_impossible_deposit_date_is_dropped_silently(self):
        outcome = extract_row('3,00012/202431/02/2025חברה בע"מ')

        assert outcome.reason == RejectReason.NO_DEPOSIT_DATE
        assert not outcome.is_error

    def test_error_message_is_truncated(self):
        line = '60,00012/202402/01/2025' + 'חברה ' * 20 + 'בע"מ'
        outcome = extract_row(line)
        assert outcome.message.endswith(line[:50])


class TestLocateSalaryMonth:
    """Tests for salary month disambiguation."""

    def test_prefers_token_adjacent_to_deposit_date(self):
        line = "01/2024 3,00012/202402/01/2025"
        match = locate_salary_month(line, line.index("02/01/2025"))
        assert match.group(0) == "12/2024"

    def test_falls_back_to_leftmost_month(self):
        line = "3,000 11/2024 x 02/01/2025"
        match = locate_salary_month(line, line.index("02/01/2025"))
        assert match.group(0) == "11/2024"

    def test_never_returns_part_of_deposit_date(self):
        line = "3,000 02/01/2025"
        assert locate_salary_month(line, line.index("02/01/2025")) is None


class TestExtractRows:
    """Tests for extracting across many lines."""

    LINES = [
        "מיטב דש",
        '2,00010/202401/11/2024חברה א בע"מ',
        '60,00012/202402/01/2025חברה בע"מ',
        "",
        '3,00012/202402/01/2025חברה א בע"מ',
        '2,50011/202401/12/2024חברה א בע"מ',
    ]

    def test_collects_deposits_and_errors_in_source_order(self):
        extraction = extract_rows(self.LINES)

        assert [d.amount for d in extraction.deposits] == [
            Decimal("2000"), Decimal("3000"), Decimal("2500"),
        ]
        assert len(extraction.errors) == 1
        assert extraction.errors[0].startswith("Invalid amount 60000")
        assert extraction.rejected == 1
        assert extraction.skipped == 2
        assert extraction.candidate_rows == 4

    def test_thread_pool_matches_sequential(self):
        sequential = extract_rows(self.LINES)
        threaded = extract_rows(self.LINES, max_workers=4)

        assert threaded.deposits == sequential.deposits
        assert threaded.errors == sequential.errors

    def test_empty_input(self):
        extraction = extract_rows([])
        assert extraction.deposits == []
        assert extraction.errors == []

    def test_unexpected_failure_is_isolated_to_its_line(self, monkeypatch):
        real_extract_row = rows.extract_row

        def flaky_extract_row(line, **kwargs):
            if line.startswith("3,000"):
                raise RuntimeError("boom")
            return real_extract_row(line, **kwargs)

        monkeypatch.setattr(rows, "extract_row", flaky_extract_row)
        extraction = extract_rows(self.LINES)

        assert [d.amount for d in extraction.deposits] == [Decimal("2000"), Decimal("2500")]
        assert extraction.errors[-1] == (
            'Error parsing line: 3,00012/202402/01/2025חברה א בע"מ: boom'
        )
        assert extraction.rejected == 2
