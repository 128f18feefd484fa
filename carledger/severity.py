"""Severity enum for service due urgency levels."""

from enum import Enum


class Severity(Enum):
    """Service urgency categories. Lower value = more urgent."""

    OVERDUE = 1
    WARNING = 2
    OK = 3
