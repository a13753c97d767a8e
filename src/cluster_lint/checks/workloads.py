"""
Workload checks.

These run once per discovered instance: the executor lists every object of
the declared resource_types and binds each to target.resource. Each result
reports the bound instance in impacted_objects when it is affected.
"""

from typing import List, Optional

from packaging.version import Version

from ..check import Category, Check, CheckContext, Target, is_major_upgrade
from ..conditions import (
    ANNOTATION_IMPACTED_WORKLOAD_COUNT,
    ANNOTATION_TARGET_VERSION,
    REASON_CONFIGURATION_INVALID,
    REASON_RESOURCE_NOT_FOUND,
    REASON_VERSION_COMPATIBLE,
    TYPE_CONFIGURED,
    compatibility_failure,
    compatibility_success,
    set_condition,
)
from ..errors import ResourceTypeNotFoundError
from ..resources import (
    ACCELERATOR_PROFILE,
    NOTEBOOK,
    RAY_CLUSTER,
    get_annotations,
    get_finalizers,
    get_name,
    get_namespace,
    object_key,
    to_impacted_object,
)
from ..result import ConditionStatus, DiagnosticResult, Impact

FINALIZER_CODEFLARE_OAUTH = "ray.openshift.ai/oauth-finalizer"

ANNOTATION_ACCELERATOR_NAME = "opendatahub.io/accelerator-name"
ANNOTATION_ACCELERATOR_NAMESPACE = "opendatahub.io/accelerator-profile-namespace"


class RayCodeFlareFinalizerCheck(Check):
    """RayClusters carrying the CodeFlare OAuth finalizer lose their controller in 3.x."""

    check_id = "workloads.ray.codeflare-finalizer"
    name = "Workloads :: Ray :: CodeFlare Managed (3.x)"
    description = (
        "Lists RayClusters managed by CodeFlare that will be impacted in RHOAI 3.x "
        "(CodeFlare not available)"
    )
    category = Category.WORKLOAD
    resource_types = (RAY_CLUSTER,)

    def can_apply(self, current_version: Optional[Version], target_version: Optional[Version]) -> bool:
        return is_major_upgrade(current_version, target_version, 2, 3)

    def validate(self, ctx: CheckContext, target: Target) -> DiagnosticResult:
        dr = self.new_result("ray", "codeflare-finalizer")
        cluster = target.resource or {}
        if target.version is not None:
            dr.annotations[ANNOTATION_TARGET_VERSION] = str(target.version)

        key = object_key(cluster)
        if FINALIZER_CODEFLARE_OAUTH not in get_finalizers(cluster):
            dr.annotations[ANNOTATION_IMPACTED_WORKLOAD_COUNT] = "0"
            compatibility_success(dr, f"RayCluster {key} is not managed by CodeFlare")
            return dr

        dr.annotations[ANNOTATION_IMPACTED_WORKLOAD_COUNT] = "1"
        dr.impacted_objects.append(to_impacted_object(cluster))
        compatibility_failure(
            dr,
            f"RayCluster {key} is managed by CodeFlare ({FINALIZER_CODEFLARE_OAUTH}) "
            "and will be impacted in RHOAI 3.x - migrate it before upgrading",
        )
        return dr


class NotebookAcceleratorProfileCheck(Check):
    """Notebooks referencing AcceleratorProfiles must move to HardwareProfiles."""

    check_id = "workloads.notebook.accelerator-profile"
    name = "Workloads :: Notebook :: AcceleratorProfile Migration"
    description = (
        "Validates that Notebooks referencing AcceleratorProfiles point at existing "
        "profiles and flags them for migration to HardwareProfiles"
    )
    category = Category.WORKLOAD
    resource_types = (NOTEBOOK,)

    def _profile_names(self, target: Target, namespace: str) -> List[str]:
        try:
            profiles = target.reader.list(ACCELERATOR_PROFILE)
        except ResourceTypeNotFoundError:
            return []
        return [get_name(p) for p in profiles if not namespace or get_namespace(p) == namespace]

    def validate(self, ctx: CheckContext, target: Target) -> DiagnosticResult:
        dr = self.new_result("notebook", "accelerator-profile")
        notebook = target.resource or {}
        key = object_key(notebook)
        annotations = get_annotations(notebook)

        profile = annotations.get(ANNOTATION_ACCELERATOR_NAME, "")
        if not profile:
            set_condition(
                dr, TYPE_CONFIGURED, ConditionStatus.TRUE, REASON_VERSION_COMPATIBLE,
                f"Notebook {key} does not use an AcceleratorProfile",
            )
            return dr

        dr.impacted_objects.append(to_impacted_object(notebook))
        namespace = annotations.get(ANNOTATION_ACCELERATOR_NAMESPACE, "")

        ctx.raise_if_expired()
        if profile not in self._profile_names(target, namespace):
            set_condition(
                dr, TYPE_CONFIGURED, ConditionStatus.FALSE, REASON_RESOURCE_NOT_FOUND,
                f"Notebook {key} references AcceleratorProfile '{profile}' which does not "
                "exist - ensure the AcceleratorProfile exists and migrate to HardwareProfiles",
                Impact.BLOCKING,
            )
            return dr

        set_condition(
            dr, TYPE_CONFIGURED, ConditionStatus.FALSE, REASON_CONFIGURATION_INVALID,
            f"Notebook {key} uses AcceleratorProfile '{profile}' - migrate to "
            "HardwareProfiles before upgrading",
            Impact.ADVISORY,
        )
        return dr
