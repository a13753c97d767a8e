"""
Service checks: DSCInitialization settings.
"""

from typing import Optional

from packaging.version import Version

from ..check import Category, Check, CheckContext, Target, is_major_upgrade
from ..conditions import (
    ANNOTATION_MANAGEMENT_STATE,
    ANNOTATION_TARGET_VERSION,
    MANAGEMENT_STATE_MANAGED,
    compatibility_failure,
    compatibility_success,
    dsc_initialization_not_found,
    get_management_state,
    service_not_configured,
)
from ..errors import NotFoundError
from ..reader import get_singleton
from ..resources import DSC_INITIALIZATION
from ..result import DiagnosticResult


class ServiceMeshRemovalCheck(Check):
    check_id = "services.servicemesh.removal"
    name = "Services :: ServiceMesh :: Removal (3.x)"
    description = (
        "Validates that ServiceMesh is not managed by the platform before upgrading "
        "from RHOAI 2.x to 3.x (service will be removed)"
    )
    category = Category.SERVICE

    def can_apply(self, current_version: Optional[Version], target_version: Optional[Version]) -> bool:
        return is_major_upgrade(current_version, target_version, 2, 3)

    def validate(self, ctx: CheckContext, target: Target) -> DiagnosticResult:
        dr = self.new_result("servicemesh", "removal")
        try:
            dsci = get_singleton(target.reader, DSC_INITIALIZATION)
        except NotFoundError:
            return dsc_initialization_not_found(dr)

        state, configured = get_management_state(dsci, "spec.serviceMesh")
        if not configured:
            service_not_configured(dr, "ServiceMesh")
            return dr

        dr.annotations[ANNOTATION_MANAGEMENT_STATE] = state
        if target.version is not None:
            dr.annotations[ANNOTATION_TARGET_VERSION] = str(target.version)

        if state == MANAGEMENT_STATE_MANAGED:
            compatibility_failure(
                dr,
                f"ServiceMesh is managed by OpenShift AI (state: {state}) but will be "
                "removed in RHOAI 3.x - set it to Removed before upgrading",
            )
            return dr

        compatibility_success(dr, f"ServiceMesh configuration (state: {state}) is compatible with RHOAI 3.x")
        return dr
