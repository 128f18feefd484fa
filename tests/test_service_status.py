#!/usr/bin/env python3
"""Tests for ServiceStatus dataclass."""
from carledger import ServiceStatus, Severity


class TestServiceStatus:
    """Tests for ServiceStatus dataclass."""

    def test_is_due_overdue(self):
        """is_due returns True when OVERDUE."""
        svc = ServiceStatus(distance_remaining=-5, days_remaining=30, severity=Severity.OVERDUE)
        assert svc.is_due is True

    def test_is_due_warning(self):
        """is_due returns True when WARNING."""
        svc = ServiceStatus(distance_remaining=300, days_remaining=30, severity=Severity.WARNING)
        assert svc.is_due is True

    def test_is_due_ok(self):
        """is_due returns False when OK."""
        svc = ServiceStatus(distance_remaining=3000, days_remaining=30, severity=Severity.OK)
        assert svc.is_due is False

    def test_distance_overdue(self):
        """distance_overdue at zero or below."""
        assert ServiceStatus(0, 30, Severity.OVERDUE).distance_overdue is True
        assert ServiceStatus(1, 30, Severity.WARNING).distance_overdue is False

    def test_days_overdue(self):
        """days_overdue at zero or below."""
        assert ServiceStatus(3000, -2, Severity.OVERDUE).days_overdue is True
        assert ServiceStatus(3000, 1, Severity.WARNING).days_overdue is False
