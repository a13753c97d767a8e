"""
Severity and status derivation.

This is the single place where a result's aggregate severity is computed.
The rule looks at every condition, not just the first one:

- any condition False   -> CRITICAL / Fail
- else any Unknown      -> WARNING / Error
- else (all True)       -> INFO / Pass

Display order of conditions is independent of this precedence.
"""

from enum import Enum
from typing import Iterable, Optional

from .result import Condition, ConditionStatus


class Severity(Enum):
    """
    Severity level of a diagnostic finding.

    - CRITICAL: A requirement is violated
    - WARNING: A requirement could not be evaluated
    - INFO: Informational only, all requirements met
    """
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {Severity.INFO: 0, Severity.WARNING: 1, Severity.CRITICAL: 2}


class ResultStatus(Enum):
    """Aggregate status label paired with Severity."""
    PASS = "Pass"
    FAIL = "Fail"
    ERROR = "Error"


_STATUS_FOR_SEVERITY = {
    Severity.CRITICAL: ResultStatus.FAIL,
    Severity.WARNING: ResultStatus.ERROR,
    Severity.INFO: ResultStatus.PASS,
}


def resolve_severity(conditions: Iterable[Condition]) -> Optional[Severity]:
    """
    Derive the aggregate severity of a condition sequence.

    Args:
        conditions: Conditions of one result, in any order

    Returns:
        Severity, or None if the sequence is empty
    """
    seen = False
    has_unknown = False
    for condition in conditions:
        seen = True
        if condition.status == ConditionStatus.FALSE:
            return Severity.CRITICAL
        if condition.status == ConditionStatus.UNKNOWN:
            has_unknown = True

    if not seen:
        return None
    if has_unknown:
        return Severity.WARNING
    return Severity.INFO


def resolve_status(conditions: Iterable[Condition]) -> Optional[ResultStatus]:
    """Derive the Pass/Fail/Error label; same precedence as resolve_severity."""
    severity = resolve_severity(conditions)
    if severity is None:
        return None
    return _STATUS_FOR_SEVERITY[severity]


class MinimumSeverity(Enum):
    """
    Display filter on severity.

    ALL and INFO keep everything; WARNING keeps warning and critical;
    CRITICAL keeps only critical findings.
    """
    ALL = ""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"

    def should_include(self, severity: Optional[Severity]) -> bool:
        if self in (MinimumSeverity.ALL, MinimumSeverity.INFO):
            return True
        if severity is None:
            return False
        return severity.rank >= Severity(self.value).rank


def parse_minimum_severity(value: Optional[str]) -> MinimumSeverity:
    """Parse a minimum severity string; empty or 'all' means no filtering."""
    value = (value or "").strip().lower()
    if value in ("", "all"):
        return MinimumSeverity.ALL
    try:
        return MinimumSeverity(value)
    except ValueError:
        raise ValueError(
            f"Invalid minimum severity: {value}. Must be critical, warning, info, or all."
        ) from None
