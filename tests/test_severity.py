#!/usr/bin/env python3
"""Tests for Severity enum."""

from carledger import Severity


class TestSeverity:
    """Tests for Severity enum ordering."""

    def test_urgency_ordering(self):
        """Lower value = more urgent."""
        assert Severity.OVERDUE.value < Severity.WARNING.value
        assert Severity.WARNING.value < Severity.OK.value

    def test_sorting_by_value_puts_overdue_first(self):
        ordered = sorted([Severity.OK, Severity.OVERDUE, Severity.WARNING], key=lambda s: s.value)
        assert ordered == [Severity.OVERDUE, Severity.WARNING, Severity.OK]
