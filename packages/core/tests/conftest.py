"""Shared fixtures for pension_import tests."""

import os
from typing import Optional

import pytest

from pension_import.config import ParserSettings
from pension_import.parser import MeitavParser

STATEMENT_HEADER = """
מיטב דש גמל ופנסיה
תאריך הדוח: 01.01.2025
"""


class FakeTextExtractor:
    """Text extraction backend returning canned text or raising."""

    def __init__(self, text: str = "", error: Optional[BaseException] = None):
        self.text = text
        self.error = error
        self.calls: list[bytes] = []

    def extract_text(self, data: bytes) -> str:
        self.calls.append(data)
        if self.error is not None:
            raise self.error
        return self.text


def statement(*rows: str, header: str = STATEMENT_HEADER) -> str:
    """Build statement text: the standard header followed by ``rows``."""
    return header + "\n" + "\n".join(rows) + "\n"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep PENSION_IMPORT_* variables from leaking into tests."""
    for key in list(os.environ):
        if key.startswith("PENSION_IMPORT_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings() -> ParserSettings:
    return ParserSettings(_env_file=None)


@pytest.fixture
def parse_text(settings):
    """Parse statement text through a parser with a fake PDF backend."""
    def _parse(text: str):
        parser = MeitavParser(text_extractor=FakeTextExtractor(text), settings=settings)
        return parser.parse(b"%PDF-fake")
    return _parse
