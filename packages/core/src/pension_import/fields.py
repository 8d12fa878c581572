"""Field recognizers for Meitav deposit rows.

Each recognizer takes a span of text and returns a typed value, or None
when the field is not present. They know nothing about row layout; the
positional reasoning that decides which span to feed them lives in
``pension_import.rows``.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

UNKNOWN_EMPLOYER = "Unknown"

# The Hebrew "Ltd." suffix. PDF extraction emits the abbreviation mark as an
# ASCII quote, a Hebrew gershayim or a typographic quote, and mixes them
# within a single document.
LEGAL_SUFFIX_VARIANTS = (
    'בע"מ',       # ASCII double quote
    'בע״מ',  # HEBREW PUNCTUATION GERSHAYIM
    'בע”מ',  # RIGHT DOUBLE QUOTATION MARK
    'בע“מ',  # LEFT DOUBLE QUOTATION MARK
)

_SUFFIX_ALTERNATION = '|'.join(re.escape(s) for s in LEGAL_SUFFIX_VARIANTS)

LEGAL_SUFFIX_PATTERN = re.compile(_SUFFIX_ALTERNATION)

# DD/MM/YYYY
DEPOSIT_DATE_PATTERN = re.compile(r'(\d{2})/(\d{2})/(\d{4})')

# MM/YYYY that is not the month/year tail of a DD/MM/YYYY token
SALARY_MONTH_PATTERN = re.compile(r'(?<!\d\d/)(\d{2})/(\d{4})')

# Digit groups with optional comma thousands separators: 500, 3,155, 10,500
AMOUNT_PATTERN = re.compile(r'\d{1,3}(?:,\d{3})*')

EMPLOYER_PATTERN = re.compile(
    r'([א-ת][א-ת\s\'"״“”]+(?:' + _SUFFIX_ALTERNATION + r'))'
)


def make_date(day: int, month: int, year: int) -> Optional[date]:
    """Build a calendar date, returning None for impossible dates."""
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_deposit_date(text: str) -> Optional[date]:
    """Parse the first DD/MM/YYYY token in ``text``."""
    match = DEPOSIT_DATE_PATTERN.search(text)
    if not match:
        return None
    day, month, year = match.groups()
    return make_date(int(day), int(month), int(year))


def parse_salary_month(text: str) -> Optional[date]:
    """Parse the first standalone MM/YYYY token in ``text`` to the 1st of that month."""
    match = SALARY_MONTH_PATTERN.search(text)
    if not match:
        return None
    month, year = match.groups()
    return make_date(1, int(month), int(year))


def find_amount_tokens(text: str) -> list[str]:
    """Return grouped-digit number tokens in reading order."""
    return AMOUNT_PATTERN.findall(text)


def parse_amount(text: str) -> Optional[Decimal]:
    """
    Parse an amount such as ``3,155`` into a Decimal.

    Zero, negative and unparseable values return None; a deposit of zero
    is never a real deposit.
    """
    cleaned = text.replace(',', '').strip()
    if not cleaned:
        return None

    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None

    if not value.is_finite() or value <= 0:
        return None
    return value


def has_legal_suffix(text: str) -> bool:
    return LEGAL_SUFFIX_PATTERN.search(text) is not None


def extract_employer(text: str) -> str:
    """
    Extract a Hebrew employer name ending in a legal suffix.

    Falls back to ``UNKNOWN_EMPLOYER`` instead of failing, so a row with an
    unreadable employer still yields a deposit.
    """
    match = EMPLOYER_PATTERN.search(text)
    if not match:
        return UNKNOWN_EMPLOYER
    return match.group(1).strip()
