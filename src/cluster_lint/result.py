"""
Diagnostic result model.

A DiagnosticResult mirrors a Kubernetes custom resource: metadata identifies
the target and check, spec describes what is validated, and status holds an
ordered list of conditions. Each condition records one validation requirement
with a True/False/Unknown status.

Example usage:
    from cluster_lint.result import ConditionStatus, DiagnosticResult, new_condition

    dr = DiagnosticResult.new(
        group="components",
        kind="kueue",
        name="managed-removal",
        description="Validates that Kueue managed option is not used",
    )
    dr.status.conditions.append(
        new_condition("Compatible", ConditionStatus.TRUE, "VersionCompatible", "ok")
    )
    dr.validate()
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from .errors import ValidationError


class ConditionStatus(str, Enum):
    """
    Status of a single condition.

    - TRUE: the requirement is met
    - FALSE: the requirement is violated
    - UNKNOWN: the requirement could not be evaluated
    """
    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class Impact(str, Enum):
    """Upgrade impact hint attached to a condition."""
    BLOCKING = "blocking"
    ADVISORY = "advisory"
    NONE = "none"


@dataclass(frozen=True)
class Condition:
    """
    One reported validation requirement.

    Attributes:
        type: Capability being asserted (e.g. 'Available', 'Compatible')
        status: True, False or Unknown
        reason: Machine-stable CamelCase code, required for every status
        message: Human-readable explanation
        last_transition_time: When the condition was recorded (UTC)
        impact: Optional upgrade impact hint
    """
    type: str
    status: ConditionStatus
    reason: str
    message: str = ""
    last_transition_time: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc).replace(microsecond=0)
    )
    impact: Optional[Impact] = None


def new_condition(
    condition_type: str,
    status: ConditionStatus,
    reason: str,
    message: str,
    impact: Optional[Impact] = None,
) -> Condition:
    """Create a condition stamped with the current time."""
    return Condition(
        type=condition_type,
        status=ConditionStatus(status),
        reason=reason,
        message=message,
        impact=impact,
    )


def is_valid_annotation_key(key: str) -> bool:
    """
    Check that an annotation key has the form '<domain>/<key>'.

    The key must contain exactly one '/', the domain must be non-empty and
    contain at least one '.', and the name part must be non-empty.
    Valid: 'check.example.io/target-version'. Invalid: 'version', '/name',
    'example.com/'.
    """
    parts = key.split("/")
    if len(parts) != 2:
        return False
    domain, name = parts
    if not domain or not name:
        return False
    return "." in domain


@dataclass(frozen=True)
class ImpactedObject:
    """Reference to a cluster object that a finding concerns."""
    kind: str
    name: str
    namespace: str = ""
    api_version: str = ""

    def display(self) -> str:
        """Render as 'namespace/name (Kind)' or 'name (Kind)' when cluster-scoped."""
        ref = f"{self.namespace}/{self.name}" if self.namespace else self.name
        return f"{ref} ({self.kind})"


@dataclass
class DiagnosticMetadata:
    """Identifies the diagnostic target (group, kind) and the check (name)."""
    group: str
    kind: str
    name: str
    annotations: Dict[str, str] = field(default_factory=dict)

    def validate(self) -> None:
        """Raise ValidationError if any identity field or annotation key is malformed."""
        if not self.group:
            raise ValidationError("metadata.group must not be empty")
        if not self.kind:
            raise ValidationError("metadata.kind must not be empty")
        if not self.name:
            raise ValidationError("metadata.name must not be empty")
        for key in self.annotations:
            if not is_valid_annotation_key(key):
                raise ValidationError(
                    f"annotation key {key!r} must be in domain/key format "
                    "(e.g., check.example.io/target-version)"
                )


@dataclass
class DiagnosticSpec:
    description: str = ""


@dataclass
class DiagnosticStatus:
    # Ordered by execution sequence, never sorted.
    conditions: List[Condition] = field(default_factory=list)


@dataclass
class DiagnosticResult:
    """
    Result of one check invocation against one target.

    Checks build a result with DiagnosticResult.new(), append conditions in
    the order they evaluate them, and return it. The executor validates the
    result before collecting it; a result is not modified after that.
    """
    metadata: DiagnosticMetadata
    spec: DiagnosticSpec = field(default_factory=DiagnosticSpec)
    status: DiagnosticStatus = field(default_factory=DiagnosticStatus)
    impacted_objects: List[ImpactedObject] = field(default_factory=list)

    @classmethod
    def new(cls, group: str, kind: str, name: str, description: str) -> "DiagnosticResult":
        """Create an empty result for the given identity."""
        return cls(
            metadata=DiagnosticMetadata(group=group, kind=kind, name=name),
            spec=DiagnosticSpec(description=description),
        )

    @property
    def group(self) -> str:
        return self.metadata.group

    @property
    def kind(self) -> str:
        return self.metadata.kind

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def annotations(self) -> Dict[str, str]:
        return self.metadata.annotations

    @property
    def conditions(self) -> List[Condition]:
        return self.status.conditions

    @property
    def identity(self) -> tuple:
        return (self.group, self.kind, self.name)

    def validate(self) -> None:
        """
        Check the result against the condition model invariants.

        Raises:
            ValidationError: On empty metadata fields, malformed annotation
                keys, an empty condition list, or a condition with an empty
                type, an unrecognised status, or an empty reason.
        """
        self.metadata.validate()

        if not self.status.conditions:
            raise ValidationError("status.conditions must contain at least one condition")

        for condition in self.status.conditions:
            if not condition.type:
                raise ValidationError("condition with empty type found")
            if not isinstance(condition.status, ConditionStatus):
                raise ValidationError(
                    f"condition {condition.type!r} has invalid status "
                    "(must be True, False, or Unknown)"
                )
            if not condition.reason:
                raise ValidationError(f"condition {condition.type!r} has empty reason")

    def is_failing(self) -> bool:
        """True if any condition is False or Unknown."""
        return any(c.status != ConditionStatus.TRUE for c in self.status.conditions)

    @property
    def message(self) -> str:
        """Message of the first condition, used as the one-line summary."""
        if not self.status.conditions:
            return ""
        return self.status.conditions[0].message
