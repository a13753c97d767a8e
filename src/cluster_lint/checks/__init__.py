"""
Built-in check catalog.

BUILTIN_CHECKS is the composition root: every check shipped with the
package is listed here and registered by default_registry(). Add a check by
writing a Check subclass and appending it to this list.
"""

from typing import List

from ..registry import CheckFactory, CheckRegistry, build_registry
from .components import CodeFlareRemovalCheck, KueueManagedRemovalCheck
from .dependencies import CertManagerInstalledCheck
from .services import ServiceMeshRemovalCheck
from .workloads import NotebookAcceleratorProfileCheck, RayCodeFlareFinalizerCheck

BUILTIN_CHECKS: List[CheckFactory] = [
    KueueManagedRemovalCheck,
    CodeFlareRemovalCheck,
    ServiceMeshRemovalCheck,
    CertManagerInstalledCheck,
    RayCodeFlareFinalizerCheck,
    NotebookAcceleratorProfileCheck,
]


def default_registry() -> CheckRegistry:
    """Return a registry holding every built-in check."""
    return build_registry(BUILTIN_CHECKS)


__all__ = [
    "BUILTIN_CHECKS",
    "default_registry",
    "CertManagerInstalledCheck",
    "CodeFlareRemovalCheck",
    "KueueManagedRemovalCheck",
    "NotebookAcceleratorProfileCheck",
    "RayCodeFlareFinalizerCheck",
    "ServiceMeshRemovalCheck",
]
