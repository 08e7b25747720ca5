"""Tri-state health severity and its escalation reducer."""
from enum import IntEnum
from functools import reduce
from typing import Iterable


class Severity(IntEnum):
    OK = 0
    WARN = 1
    BAD = 2

    def __str__(self) -> str:
        return self.name


def escalate(current: Severity, candidate: Severity) -> Severity:
    """Return the worse of the two; a run's severity never goes back down."""
    return max(current, candidate)


def overall(severities: Iterable[Severity]) -> Severity:
    return reduce(escalate, severities, Severity.OK)
