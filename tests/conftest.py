"""Shared fixtures for cluster-lint tests."""

import time
from typing import Any, Dict, List, Optional

import pytest
from cluster_lint import (
    Category,
    Check,
    ConditionStatus,
    SnapshotReader,
    new_condition,
)
from cluster_lint.resources import ResourceType


class StaticCheck(Check):
    """Check whose behaviour is fixed at construction."""

    def __init__(
        self,
        check_id: str,
        category: Category = Category.COMPONENT,
        status: ConditionStatus = ConditionStatus.TRUE,
        applies: bool = True,
        apply_error: Optional[Exception] = None,
        validate_error: Optional[Exception] = None,
        resource_types=(),
        delay: float = 0.0,
        conditions: int = 1,
    ):
        self.check_id = check_id
        self.name = f"Test :: {check_id}"
        self.description = f"Test check {check_id}"
        self.category = category
        self.status = status
        self.applies = applies
        self.apply_error = apply_error
        self.validate_error = validate_error
        self.resource_types = tuple(resource_types)
        self.delay = delay
        self.conditions = conditions
        self.seen_resources: List[Optional[Dict[str, Any]]] = []

    def can_apply(self, current_version, target_version):
        if self.apply_error is not None:
            raise self.apply_error
        return self.applies

    def validate(self, ctx, target):
        self.seen_resources.append(target.resource)
        if self.delay:
            time.sleep(self.delay)
        if self.validate_error is not None:
            raise self.validate_error
        dr = self.new_result("test", self.check_id.rsplit(".", 1)[-1])
        for i in range(self.conditions):
            dr.status.conditions.append(
                new_condition(f"Type{i}", self.status, "TestReason", f"{self.check_id} condition {i}")
            )
        return dr


WIDGET = ResourceType("example.io", "v1", "Widget", "widgets")


def make_object(api_version: str, kind: str, name: str, namespace: str = "", **extra) -> Dict[str, Any]:
    metadata: Dict[str, Any] = {"name": name}
    if namespace:
        metadata["namespace"] = namespace
    metadata.update(extra.pop("metadata", {}))
    obj = {"apiVersion": api_version, "kind": kind, "metadata": metadata}
    obj.update(extra)
    return obj


def make_dsc(components: Dict[str, str]) -> Dict[str, Any]:
    return make_object(
        "datasciencecluster.opendatahub.io/v1",
        "DataScienceCluster",
        "default-dsc",
        spec={"components": {name: {"managementState": state} for name, state in components.items()}},
    )


def make_dsci(service_mesh: Optional[str] = None) -> Dict[str, Any]:
    spec: Dict[str, Any] = {"applicationsNamespace": "opendatahub"}
    if service_mesh is not None:
        spec["serviceMesh"] = {"managementState": service_mesh}
    return make_object("dscinitialization.opendatahub.io/v1", "DSCInitialization", "default-dsci", spec=spec)


@pytest.fixture
def static_check():
    """Factory for StaticCheck instances."""
    return StaticCheck


@pytest.fixture
def widget_type():
    return WIDGET


@pytest.fixture
def widgets():
    """Three namespaced Widget objects."""
    return [make_object("example.io/v1", "Widget", f"w{i}", namespace="ns") for i in range(3)]


@pytest.fixture
def widget_reader(widgets):
    return SnapshotReader(widgets, served_types=[WIDGET])


@pytest.fixture
def object_factory():
    return make_object


@pytest.fixture
def dsc_factory():
    return make_dsc


@pytest.fixture
def dsci_factory():
    return make_dsci
