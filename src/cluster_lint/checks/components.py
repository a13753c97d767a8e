"""
Component checks: DataScienceCluster component settings that block an upgrade.
"""

from typing import Optional

from packaging.version import Version

from ..check import Category, Check, CheckContext, Target, is_major_upgrade
from ..conditions import (
    ANNOTATION_MANAGEMENT_STATE,
    ANNOTATION_TARGET_VERSION,
    MANAGEMENT_STATE_MANAGED,
    REASON_REQUIREMENTS_MET,
    TYPE_CONFIGURED,
    compatibility_failure,
    compatibility_success,
    component_not_configured,
    data_science_cluster_not_found,
    get_management_state,
    set_condition,
)
from ..errors import NotFoundError
from ..reader import get_singleton
from ..resources import DATA_SCIENCE_CLUSTER
from ..result import ConditionStatus, DiagnosticResult


class KueueManagedRemovalCheck(Check):
    """Kueue can no longer be Managed by the platform in 3.x; RHBOK replaces it."""

    check_id = "components.kueue.managed-removal"
    name = "Components :: Kueue :: Managed Removal (3.x)"
    description = (
        "Validates that Kueue managed option is not used before upgrading from "
        "RHOAI 2.x to 3.x (managed option will be removed)"
    )
    category = Category.COMPONENT

    def can_apply(self, current_version: Optional[Version], target_version: Optional[Version]) -> bool:
        return is_major_upgrade(current_version, target_version, 2, 3)

    def validate(self, ctx: CheckContext, target: Target) -> DiagnosticResult:
        dr = self.new_result("kueue", "managed-removal")
        try:
            dsc = get_singleton(target.reader, DATA_SCIENCE_CLUSTER)
        except NotFoundError:
            return data_science_cluster_not_found(dr)

        state, configured = get_management_state(dsc, "spec.components.kueue")
        if not configured:
            component_not_configured(dr, "Kueue")
            return dr

        dr.annotations[ANNOTATION_MANAGEMENT_STATE] = state
        if target.version is not None:
            dr.annotations[ANNOTATION_TARGET_VERSION] = str(target.version)

        if state == MANAGEMENT_STATE_MANAGED:
            compatibility_failure(
                dr,
                f"Kueue is managed by OpenShift AI (state: {state}) but will be removed "
                "in RHOAI 3.x - migrate to RHBOK operator",
            )
            return dr

        compatibility_success(dr, f"Kueue configuration (state: {state}) is compatible with RHOAI 3.x")
        return dr


class CodeFlareRemovalCheck(Check):
    """CodeFlare is removed in 3.x; only the Managed state needs action."""

    check_id = "components.codeflare.removal"
    name = "Components :: CodeFlare :: Removal (3.x)"
    description = (
        "Validates that CodeFlare is disabled before upgrading from RHOAI 2.x to 3.x "
        "(component will be removed)"
    )
    category = Category.COMPONENT

    def can_apply(self, current_version: Optional[Version], target_version: Optional[Version]) -> bool:
        return is_major_upgrade(current_version, target_version, 2, 3)

    def validate(self, ctx: CheckContext, target: Target) -> DiagnosticResult:
        dr = self.new_result("codeflare", "removal")
        try:
            dsc = get_singleton(target.reader, DATA_SCIENCE_CLUSTER)
        except NotFoundError:
            return data_science_cluster_not_found(dr)

        state, configured = get_management_state(dsc, "spec.components.codeflare")
        if target.version is not None:
            dr.annotations[ANNOTATION_TARGET_VERSION] = str(target.version)

        if not configured or state != MANAGEMENT_STATE_MANAGED:
            if configured:
                dr.annotations[ANNOTATION_MANAGEMENT_STATE] = state
            set_condition(
                dr,
                TYPE_CONFIGURED,
                ConditionStatus.TRUE,
                REASON_REQUIREMENTS_MET,
                f"CodeFlare is not managed (state: {state or 'not configured'}) - ready for RHOAI 3.x",
            )
            return dr

        dr.annotations[ANNOTATION_MANAGEMENT_STATE] = state
        compatibility_failure(
            dr,
            f"CodeFlare is enabled (state: {state}) but will be removed in RHOAI 3.x - "
            "set it to Removed and migrate RayClusters to KubeRay",
        )
        return dr
