"""
Resource types and helpers for unstructured cluster objects.

Cluster objects are plain dicts in manifest shape ('apiVersion', 'kind',
'metadata', 'spec', 'status'). ResourceType names a kind the engine knows how
to look up.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .result import ImpactedObject


@dataclass(frozen=True)
class ResourceType:
    """
    A group/version/kind the reader can list.

    Attributes:
        group: API group ('' for the core group)
        version: API version within the group
        kind: Object kind
        plural: Lowercase plural resource name
        namespaced: Whether instances live in namespaces
    """
    group: str
    version: str
    kind: str
    plural: str
    namespaced: bool = True

    @property
    def api_version(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"

    def matches(self, obj: Dict[str, Any]) -> bool:
        """True if the object has this type's apiVersion and kind."""
        return obj.get("apiVersion") == self.api_version and obj.get("kind") == self.kind

    def __str__(self) -> str:
        if not self.group:
            return f"{self.plural}.{self.version}"
        return f"{self.plural}.{self.version}.{self.group}"


DATA_SCIENCE_CLUSTER = ResourceType(
    "datasciencecluster.opendatahub.io", "v1", "DataScienceCluster", "datascienceclusters", False
)
DSC_INITIALIZATION = ResourceType(
    "dscinitialization.opendatahub.io", "v1", "DSCInitialization", "dscinitializations", False
)
SUBSCRIPTION = ResourceType("operators.coreos.com", "v1alpha1", "Subscription", "subscriptions")
CLUSTER_SERVICE_VERSION = ResourceType(
    "operators.coreos.com", "v1alpha1", "ClusterServiceVersion", "clusterserviceversions"
)
RAY_CLUSTER = ResourceType("ray.io", "v1", "RayCluster", "rayclusters")
NOTEBOOK = ResourceType("kubeflow.org", "v1", "Notebook", "notebooks")
ACCELERATOR_PROFILE = ResourceType(
    "dashboard.opendatahub.io", "v1", "AcceleratorProfile", "acceleratorprofiles"
)

WELL_KNOWN_TYPES = (
    DATA_SCIENCE_CLUSTER,
    DSC_INITIALIZATION,
    SUBSCRIPTION,
    CLUSTER_SERVICE_VERSION,
    RAY_CLUSTER,
    NOTEBOOK,
    ACCELERATOR_PROFILE,
)


def get_name(obj: Dict[str, Any]) -> str:
    return str((obj.get("metadata") or {}).get("name", ""))


def get_namespace(obj: Dict[str, Any]) -> str:
    return str((obj.get("metadata") or {}).get("namespace") or "")


def get_annotations(obj: Dict[str, Any]) -> Dict[str, str]:
    return dict((obj.get("metadata") or {}).get("annotations") or {})


def get_finalizers(obj: Dict[str, Any]) -> List[str]:
    return list((obj.get("metadata") or {}).get("finalizers") or [])


def object_key(obj: Dict[str, Any]) -> str:
    """Return 'namespace/name', or just 'name' for cluster-scoped objects."""
    namespace = get_namespace(obj)
    name = get_name(obj)
    return f"{namespace}/{name}" if namespace else name


def lookup(obj: Dict[str, Any], path: str, default: Optional[Any] = None) -> Any:
    """
    Look up a dotted path such as 'spec.components.kueue.managementState'.

    Returns default when any segment is missing or a non-mapping is reached.
    """
    current: Any = obj
    for segment in path.split("."):
        if not isinstance(current, dict) or segment not in current:
            return default
        current = current[segment]
    return current


def to_impacted_object(obj: Dict[str, Any]) -> ImpactedObject:
    """Build an ImpactedObject reference from a manifest."""
    return ImpactedObject(
        kind=str(obj.get("kind", "")),
        name=get_name(obj),
        namespace=get_namespace(obj),
        api_version=str(obj.get("apiVersion", "")),
    )
