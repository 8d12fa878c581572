"""Tests for line splitting."""

from pension_import.normalizer import split_lines


class TestSplitLines:
    def test_keeps_blank_lines(self):
        assert split_lines("a\n\nb\n") == ["a", "", "b", ""]

    def test_mixed_line_endings(self):
        assert split_lines("a\r\nb\rc\nd") == ["a", "b", "c", "d"]

    def test_empty_text(self):
        assert split_lines("") == []

    def test_lines_are_not_modified(self):
        line = '  3,00012/202402/01/2025חברה בע"מ  '
        assert split_lines(line) == [line]
