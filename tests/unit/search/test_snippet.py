"""Unit tests for match context extraction."""

import pytest

from crashlog_search.search.snippet import extract_context


@pytest.mark.unit
class TestExtractContext:
    """Test extract_context."""

    def test_window_around_position(self):
        """Test the window spans both sides of the match."""
        text = "x" * 300 + "MATCH" + "y" * 300

        context = extract_context(text, 300)

        assert len(context) == 200
        assert context.startswith("x" * 100)
        assert context[100:105] == "MATCH"

    def test_clamped_at_start(self):
        """Test the window is clamped at the start of the text."""
        assert extract_context("NullPointerException here", 0, 4) == "Null"

    def test_clamped_at_end(self):
        """Test the window is clamped at the end of the text."""
        text = "error at end"

        assert extract_context(text, 9, 100) == text

    def test_custom_width(self):
        """Test a custom window width."""
        assert extract_context("abcdefghij", 5, 2) == "defg"

    def test_empty_text(self):
        """Test empty text yields an empty context."""
        assert extract_context("", 0) == ""
