"""
Check capability and execution target.

A check is one validation rule. It declares who it is (check_id, name,
description, category), when it applies (can_apply), and how it validates a
Target (validate). Variants are added by subclassing Check, never by
branching on a kind tag.

Example:
    class DashboardAvailable(Check):
        check_id = "components.dashboard.available"
        name = "Components :: Dashboard :: Available"
        description = "Validates that the dashboard component is configured"
        category = Category.COMPONENT

        def validate(self, ctx, target):
            dr = self.new_result("dashboard", "available")
            ...
            return dr
"""

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from packaging.version import InvalidVersion, Version

from .reader import ClusterReader
from .resources import ResourceType, object_key
from .result import DiagnosticResult


class Category(Enum):
    """
    Coarse classification of what a check targets.

    - COMPONENT: Platform components configured in the DataScienceCluster
    - SERVICE: Platform services configured in the DSCInitialization
    - WORKLOAD: User workloads; checks run once per discovered instance
    - DEPENDENCY: Operators and services the platform relies on
    """
    COMPONENT = "component"
    SERVICE = "service"
    WORKLOAD = "workload"
    DEPENDENCY = "dependency"

    @property
    def group(self) -> str:
        """Plural group name used in result metadata and selectors."""
        return _GROUPS[self]


_GROUPS = {
    Category.COMPONENT: "components",
    Category.SERVICE: "services",
    Category.WORKLOAD: "workloads",
    Category.DEPENDENCY: "dependencies",
}


CATEGORY_ORDER = (
    Category.COMPONENT,
    Category.SERVICE,
    Category.DEPENDENCY,
    Category.WORKLOAD,
)


def parse_category(value: str) -> Category:
    """Parse a category from its singular or plural name."""
    value = value.strip().lower()
    for category in Category:
        if value in (category.value, category.group):
            return category
    raise ValueError(
        f"Invalid category: {value}. Must be component, service, workload, or dependency."
    )


def parse_version(value: Optional[str]) -> Optional[Version]:
    """Parse a platform version string such as '2.16.0' or 'v3.0'."""
    if value is None or not str(value).strip():
        return None
    raw = str(value).strip()
    if raw.startswith("v"):
        raw = raw[1:]
    try:
        return Version(raw)
    except InvalidVersion:
        raise ValueError(f"Invalid version: {value}") from None


def is_major_upgrade(
    current: Optional[Version],
    target: Optional[Version],
    from_major: int,
    to_major: int,
) -> bool:
    """True when upgrading from a from_major.x release to to_major.x or later."""
    if current is None or target is None:
        return False
    return current.major == from_major and target.major >= to_major


class DeadlineExceeded(Exception):
    """Raised inside a check when the run deadline has passed."""

    pass


@dataclass
class CheckContext:
    """
    Cancellation scope shared by every invocation of a run.

    Attributes:
        deadline: time.monotonic() value after which the run is abandoned,
            or None for no deadline
        cancelled: Set when the executor abandons the run
    """
    deadline: Optional[float] = None
    cancelled: threading.Event = field(default_factory=threading.Event)

    @classmethod
    def with_timeout(cls, timeout: Optional[float]) -> "CheckContext":
        if timeout is None or timeout <= 0:
            return cls()
        return cls(deadline=time.monotonic() + timeout)

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without a deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def expired(self) -> bool:
        if self.cancelled.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def raise_if_expired(self) -> None:
        """Checks doing several reads call this between them."""
        if self.expired():
            raise DeadlineExceeded("run deadline exceeded")


@dataclass(frozen=True)
class Target:
    """
    Read-only context for one check invocation.

    Attributes:
        reader: Cluster read capability
        current_version: Installed platform version (None in lint mode)
        target_version: Version being upgraded to (None in lint mode)
        resource: Bound workload instance; set only for workload checks
    """
    reader: ClusterReader
    current_version: Optional[Version] = None
    target_version: Optional[Version] = None
    resource: Optional[Dict[str, Any]] = None

    @property
    def version(self) -> Optional[Version]:
        """Version the findings are evaluated against."""
        return self.target_version or self.current_version

    def describe(self) -> Optional[str]:
        if self.resource is None:
            return None
        return f"{self.resource.get('kind', '')} {object_key(self.resource)}"


class Check(ABC):
    """
    Base class for a validation rule.

    Subclasses set the class attributes and implement validate(). Workload
    checks also set resource_types; the executor lists every instance of
    those types and calls validate() once per instance with target.resource
    bound.
    """

    check_id: str = ""
    name: str = ""
    description: str = ""
    category: Category = Category.COMPONENT
    resource_types: Tuple[ResourceType, ...] = ()

    def can_apply(self, current_version: Optional[Version], target_version: Optional[Version]) -> bool:
        """
        Whether the check runs for this version pair.

        Both versions are None in lint mode. May raise when applicability
        cannot be decided; the executor records that as an error.
        """
        return True

    @abstractmethod
    def validate(self, ctx: CheckContext, target: Target) -> DiagnosticResult:
        """Validate the target and return a result with at least one condition."""

    def new_result(self, kind: str, check_type: str) -> DiagnosticResult:
        """Create an empty result in this check's group."""
        return DiagnosticResult.new(
            group=self.category.group,
            kind=kind,
            name=check_type,
            description=self.description,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.check_id}>"
