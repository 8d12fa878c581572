"""Row classification and deposit extraction for Meitav statements.

PDF text extraction flattens each row of the deposit table into one line
with the columns run together, for example::

    3,1551,2049401,01214,45412/202402/01/2025וויאנטיס בע"מ

which reads as total 3,155 / severance 1,204 / employer 940 / employee
1,012 / salary 14,454 / salary month 12/2024 / deposit date 02/01/2025 /
employer name. Only the total, the two dates and the employer are kept.
"""

import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

import pydantic
import structlog

from .config import DEFAULT_MAX_DEPOSIT_AMOUNT
from .fields import (
    DEPOSIT_DATE_PATTERN,
    SALARY_MONTH_PATTERN,
    extract_employer,
    find_amount_tokens,
    has_legal_suffix,
    make_date,
    parse_amount,
)
from .models import ParsedDeposit

logger = structlog.get_logger()

# Column headers ("employer name", "deposit date") and the "total" marker
HEADER_MARKERS = (
    'שם המעסיק',
    'מועד',
    'סה"כ',
    'סה״כ',
    'סה”כ',
)

# Salary month sitting directly against the deposit date: ...12/202402/01/2025
_ADJACENT_MONTH = re.compile(r'(?<!\d\d/)(\d{2})/(\d{4})$')

_MESSAGE_CONTEXT_CHARS = 50


class RejectReason(str, Enum):
    """Why a line did not produce a deposit."""
    NOT_A_DATA_ROW = "not_a_data_row"
    HEADER_ROW = "header_row"
    NO_DEPOSIT_DATE = "no_deposit_date"
    NO_SALARY_MONTH = "no_salary_month"
    NO_AMOUNT = "no_amount"
    INVALID_AMOUNT = "invalid_amount"
    INVALID_ROW = "invalid_row"


# Rejections that are reported back to the caller; the rest are noise.
REPORTED_REASONS = frozenset({
    RejectReason.NO_SALARY_MONTH,
    RejectReason.NO_AMOUNT,
    RejectReason.INVALID_AMOUNT,
    RejectReason.INVALID_ROW,
})


@dataclass(frozen=True)
class RowOutcome:
    """Result of processing one line: a deposit or a rejection."""
    line: str
    deposit: Optional[ParsedDeposit] = None
    reason: Optional[RejectReason] = None
    message: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.deposit is not None

    @property
    def is_error(self) -> bool:
        return self.reason in REPORTED_REASONS


@dataclass
class RowExtraction:
    """Deposits and diagnostics collected from all lines, in source order."""
    deposits: list[ParsedDeposit] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    skipped: int = 0
    rejected: int = 0

    @property
    def candidate_rows(self) -> int:
        """Lines that looked like deposit rows, accepted or not."""
        return len(self.deposits) + self.rejected


def _reject(line: str, reason: RejectReason, message: Optional[str] = None) -> RowOutcome:
    return RowOutcome(line=line, reason=reason, message=message)


def _context(line: str) -> str:
    return line[:_MESSAGE_CONTEXT_CHARS]


def is_candidate_row(line: str) -> bool:
    """
    Check the row gate: a full date, a standalone month/year and the
    employer legal suffix must all appear in the line.
    """
    return (
        DEPOSIT_DATE_PATTERN.search(line) is not None
        and SALARY_MONTH_PATTERN.search(line) is not None
        and has_legal_suffix(line)
    )


def is_header_row(line: str) -> bool:
    return any(marker in line for marker in HEADER_MARKERS)


def locate_salary_month(line: str, deposit_date_start: int) -> Optional[re.Match]:
    """
    Find the salary month token for a row whose deposit date starts at
    ``deposit_date_start``.

    The provider prints the salary month directly before the deposit date,
    so that adjacency is tried first. Otherwise the left-most standalone
    MM/YYYY before the deposit date is used. The returned match is never
    part of the deposit date token itself.
    """
    prefix = line[:deposit_date_start]

    adjacent = _ADJACENT_MONTH.search(prefix)
    if adjacent and make_date(1, int(adjacent.group(1)), int(adjacent.group(2))):
        return adjacent

    fallback = SALARY_MONTH_PATTERN.search(prefix)
    if fallback and make_date(1, int(fallback.group(1)), int(fallback.group(2))):
        return fallback

    return None


def extract_row(
    line: str,
    *,
    max_amount: Decimal = DEFAULT_MAX_DEPOSIT_AMOUNT,
) -> RowOutcome:
    """
    Classify a single line and extract its deposit if it is a data row.

    Args:
        line: One line of normalized statement text
        max_amount: Largest amount accepted as a single deposit

    Returns:
        RowOutcome holding either the deposit or the rejection reason
    """
    if not is_candidate_row(line):
        return _reject(line, RejectReason.NOT_A_DATA_ROW)

    if is_header_row(line):
        return _reject(line, RejectReason.HEADER_ROW)

    date_match = DEPOSIT_DATE_PATTERN.search(line)
    day, month, year = (int(g) for g in date_match.groups())
    deposit_date = make_date(day, month, year)
    if deposit_date is None:
        return _reject(
            line,
            RejectReason.NO_DEPOSIT_DATE,
            f"Invalid deposit date {date_match.group(0)} from: {_context(line)}",
        )

    month_match = locate_salary_month(line, date_match.start())
    if month_match is None:
        return _reject(
            line,
            RejectReason.NO_SALARY_MONTH,
            f"Could not find salary month in: {_context(line)}",
        )
    salary_month = make_date(1, int(month_match.group(1)), int(month_match.group(2)))

    employer = extract_employer(line)

    # Everything before the salary month is the run of numeric columns;
    # the first number in it is the total deposit.
    amount_tokens = find_amount_tokens(line[:month_match.start()])
    if not amount_tokens:
        return _reject(
            line,
            RejectReason.NO_AMOUNT,
            f"Could not extract amounts from: {_context(line)}",
        )

    amount = parse_amount(amount_tokens[0])
    if amount is None or amount > max_amount:
        shown = amount if amount is not None else amount_tokens[0].replace(',', '')
        return _reject(
            line,
            RejectReason.INVALID_AMOUNT,
            f"Invalid amount {shown} from: {_context(line)}",
        )

    try:
        deposit = ParsedDeposit(
            deposit_date=deposit_date,
            salary_month=salary_month,
            amount=amount,
            employer=employer,
            raw_text=line.strip(),
        )
    except pydantic.ValidationError as e:
        return _reject(
            line,
            RejectReason.INVALID_ROW,
            f"Error parsing line: {_context(line)}: {e.errors()[0].get('msg')}",
        )

    return RowOutcome(line=line, deposit=deposit)


def extract_rows(
    lines: Iterable[str],
    *,
    max_amount: Decimal = DEFAULT_MAX_DEPOSIT_AMOUNT,
    max_workers: int = 1,
) -> RowExtraction:
    """
    Run ``extract_row`` over every line and collect the results.

    Lines are independent, so with ``max_workers > 1`` they are processed
    on a thread pool. Deposits and errors always come back in source order.
    """
    lines = list(lines)

    def process(line: str) -> RowOutcome:
        # A failure on one line must not cost the rest of the table
        try:
            return extract_row(line, max_amount=max_amount)
        except Exception as e:
            logger.warning("deposit_row_failed", error=str(e), error_type=type(e).__name__)
            return _reject(
                line,
                RejectReason.INVALID_ROW,
                f"Error parsing line: {_context(line)}: {e}",
            )

    if max_workers > 1 and len(lines) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            outcomes = list(executor.map(process, lines))
    else:
        outcomes = [process(line) for line in lines]

    extraction = RowExtraction()
    for line_number, outcome in enumerate(outcomes, start=1):
        if outcome.accepted:
            extraction.deposits.append(outcome.deposit)
            continue

        if outcome.reason in (RejectReason.NOT_A_DATA_ROW, RejectReason.HEADER_ROW):
            extraction.skipped += 1
            continue

        extraction.rejected += 1
        if outcome.is_error:
            extraction.errors.append(outcome.message)
            logger.info(
                "deposit_row_rejected",
                line_number=line_number,
                reason=outcome.reason.value,
            )
        else:
            logger.debug(
                "deposit_row_dropped",
                line_number=line_number,
                reason=outcome.reason.value,
            )

    return extraction
