"""
Standard condition vocabulary and result helpers shared by checks.

Condition types and reasons are kept stable so downstream tooling can match
on them. The helpers below build the common findings ("compatible",
"not configured", "DataScienceCluster not found") the same way in every
check.
"""

from typing import Any, Dict, Optional, Tuple

from .resources import lookup
from .result import (
    ConditionStatus,
    DiagnosticResult,
    Impact,
    new_condition,
)

# Condition types
TYPE_VALIDATED = "Validated"
TYPE_AVAILABLE = "Available"
TYPE_READY = "Ready"
TYPE_COMPATIBLE = "Compatible"
TYPE_CONFIGURED = "Configured"
TYPE_AUTHORIZED = "Authorized"

# Reasons: requirement met
REASON_REQUIREMENTS_MET = "RequirementsMet"
REASON_RESOURCE_FOUND = "ResourceFound"
REASON_RESOURCE_AVAILABLE = "ResourceAvailable"
REASON_CONFIGURATION_VALID = "ConfigurationValid"
REASON_VERSION_COMPATIBLE = "VersionCompatible"
REASON_PERMISSION_GRANTED = "PermissionGranted"

# Reasons: requirement violated
REASON_RESOURCE_NOT_FOUND = "ResourceNotFound"
REASON_RESOURCE_UNAVAILABLE = "ResourceUnavailable"
REASON_CONFIGURATION_INVALID = "ConfigurationInvalid"
REASON_VERSION_INCOMPATIBLE = "VersionIncompatible"
REASON_PERMISSION_DENIED = "PermissionDenied"
REASON_QUOTA_EXCEEDED = "QuotaExceeded"
REASON_DEPENDENCY_UNAVAILABLE = "DependencyUnavailable"
REASON_COMPONENT_NOT_MANAGED = "ComponentNotManaged"

# Reasons: undetermined
REASON_CHECK_EXECUTION_FAILED = "CheckExecutionFailed"
REASON_CHECK_SKIPPED = "CheckSkipped"
REASON_API_ACCESS_DENIED = "APIAccessDenied"
REASON_INSUFFICIENT_DATA = "InsufficientData"

# Annotation keys
ANNOTATION_TARGET_VERSION = "check.opendatahub.io/target-version"
ANNOTATION_MANAGEMENT_STATE = "component.opendatahub.io/management-state"
ANNOTATION_IMPACTED_WORKLOAD_COUNT = "workload.opendatahub.io/impacted-count"

# Management states
MANAGEMENT_STATE_MANAGED = "Managed"
MANAGEMENT_STATE_UNMANAGED = "Unmanaged"
MANAGEMENT_STATE_REMOVED = "Removed"


def set_condition(
    dr: DiagnosticResult,
    condition_type: str,
    status: ConditionStatus,
    reason: str,
    message: str,
    impact: Optional[Impact] = None,
) -> None:
    """
    Replace the condition of this type in place, or append a new one.

    Replacing keeps the original position so display order stays the order
    in which the check first evaluated each requirement.
    """
    condition = new_condition(condition_type, status, reason, message, impact)
    conditions = dr.status.conditions
    for i, existing in enumerate(conditions):
        if existing.type == condition_type:
            conditions[i] = condition
            return
    conditions.append(condition)


def compatibility_success(dr: DiagnosticResult, message: str) -> None:
    set_condition(dr, TYPE_COMPATIBLE, ConditionStatus.TRUE, REASON_VERSION_COMPATIBLE, message)


def compatibility_failure(
    dr: DiagnosticResult,
    message: str,
    impact: Optional[Impact] = Impact.BLOCKING,
) -> None:
    set_condition(
        dr, TYPE_COMPATIBLE, ConditionStatus.FALSE, REASON_VERSION_INCOMPATIBLE, message, impact
    )


def availability_success(dr: DiagnosticResult, message: str) -> None:
    set_condition(dr, TYPE_AVAILABLE, ConditionStatus.TRUE, REASON_RESOURCE_FOUND, message)


def availability_failure(dr: DiagnosticResult, message: str) -> None:
    set_condition(dr, TYPE_AVAILABLE, ConditionStatus.FALSE, REASON_RESOURCE_NOT_FOUND, message)


def component_not_configured(dr: DiagnosticResult, component: str) -> None:
    set_condition(
        dr,
        TYPE_CONFIGURED,
        ConditionStatus.FALSE,
        REASON_RESOURCE_NOT_FOUND,
        f"{component} component is not configured in DataScienceCluster",
    )


def service_not_configured(dr: DiagnosticResult, service: str) -> None:
    set_condition(
        dr,
        TYPE_CONFIGURED,
        ConditionStatus.FALSE,
        REASON_RESOURCE_NOT_FOUND,
        f"{service} is not configured in DSCInitialization",
    )


def data_science_cluster_not_found(dr: DiagnosticResult) -> DiagnosticResult:
    """Mark a component check result as 'no DataScienceCluster'."""
    set_condition(
        dr, TYPE_AVAILABLE, ConditionStatus.FALSE, REASON_RESOURCE_NOT_FOUND,
        "No DataScienceCluster found",
    )
    return dr


def dsc_initialization_not_found(dr: DiagnosticResult) -> DiagnosticResult:
    """Mark a service check result as 'no DSCInitialization'."""
    set_condition(
        dr, TYPE_AVAILABLE, ConditionStatus.FALSE, REASON_RESOURCE_NOT_FOUND,
        "No DSCInitialization found",
    )
    return dr


def get_management_state(obj: Dict[str, Any], path: str) -> Tuple[str, bool]:
    """
    Read a managementState field.

    Args:
        obj: DataScienceCluster or DSCInitialization manifest
        path: Dotted path to the owning block, e.g. 'spec.components.kueue'

    Returns:
        (state, configured); configured is False when the block or field
        is absent or empty.

    Raises:
        ValueError: If the field exists but is not a string
    """
    state = lookup(obj, f"{path}.managementState")
    if state is None or state == "":
        return "", False
    if not isinstance(state, str):
        raise ValueError(f"{path}.managementState must be a string, got {type(state).__name__}")
    return state, True
