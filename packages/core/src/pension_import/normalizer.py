"""Line splitting for text extracted from pension statement PDFs."""

import re

_LINE_BREAK = re.compile(r'\r\n|\r|\n')


def split_lines(text: str) -> list[str]:
    """
    Split extracted PDF text into lines.

    Lines are returned in document order and none are dropped, including
    blank ones; deciding which lines are deposit rows happens later.
    """
    if not text:
        return []
    return _LINE_BREAK.split(text)
