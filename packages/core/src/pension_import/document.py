"""Document-level metadata for Meitav pension statements.

Provider identity, report date and member name each appear once per
statement. They are searched for over the whole text, independently of
the deposit rows, and a missing value is never fatal.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .fields import make_date

MEITAV_PROVIDER_NAME = "Meitav"

# "Meitav" in Hebrew
MEITAV_MARKER = 'מיטב'

# "Report date: DD.MM.YYYY"
REPORT_DATE_PATTERN = re.compile(r'תאריך הדוח[:\s]+(\d{2})\.(\d{2})\.(\d{4})')

# "Member name: <name>" up to the next "number" label or end of line
MEMBER_NAME_PATTERN = re.compile(
    r'שם העמית[:\s]+([א-ת \t]+?)(?:\s+מספר|$)',
    re.MULTILINE,
)


@dataclass(frozen=True)
class DocumentMetadata:
    """Single-occurrence fields found in a statement."""
    provider_name: Optional[str] = None
    report_date: Optional[date] = None
    member_name: Optional[str] = None

    @property
    def is_meitav(self) -> bool:
        return self.provider_name == MEITAV_PROVIDER_NAME


def extract_provider_name(text: str) -> Optional[str]:
    if MEITAV_MARKER in text:
        return MEITAV_PROVIDER_NAME
    return None


def extract_report_date(text: str) -> Optional[date]:
    """Extract the labelled report date, rejecting impossible dates."""
    match = REPORT_DATE_PATTERN.search(text)
    if not match:
        return None
    day, month, year = match.groups()
    return make_date(int(day), int(month), int(year))


def extract_member_name(text: str) -> Optional[str]:
    """Extract the plan member's name from the labelled header field."""
    match = MEMBER_NAME_PATTERN.search(text)
    if not match:
        return None
    name = match.group(1).strip()
    return name or None


def extract_metadata(text: str) -> DocumentMetadata:
    return DocumentMetadata(
        provider_name=extract_provider_name(text),
        report_date=extract_report_date(text),
        member_name=extract_member_name(text),
    )
