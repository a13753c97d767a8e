"""
Read-only access to cluster state.

Checks never talk to the cluster directly; they receive a ClusterReader on
their Target. Any object with list() and get() methods satisfies the
protocol, so a live API client adapter can be dropped in by the caller.

SnapshotReader serves objects from a manifest dump, which is what the CLI
uses:

    reader = load_snapshot(Path("cluster-dump.yaml"))
    notebooks = reader.list(NOTEBOOK)
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Union, runtime_checkable

import yaml

from .errors import ConfigError, NotFoundError, ResourceTypeNotFoundError
from .resources import WELL_KNOWN_TYPES, ResourceType, get_name, get_namespace

logger = logging.getLogger(__name__)


@runtime_checkable
class ClusterReader(Protocol):
    """
    Read capability handed to checks.

    Implementations must be safe for concurrent use. list() raises
    ResourceTypeNotFoundError when the cluster does not serve the type;
    get() raises NotFoundError when the object does not exist.
    """

    def list(self, resource_type: ResourceType) -> List[Dict[str, Any]]: ...

    def get(
        self,
        resource_type: ResourceType,
        name: str,
        namespace: Optional[str] = None,
    ) -> Dict[str, Any]: ...


def get_singleton(reader: ClusterReader, resource_type: ResourceType) -> Dict[str, Any]:
    """
    Return the single instance of a cluster-wide configuration resource.

    An unserved resource type is reported the same way as a missing object,
    so callers only need to handle NotFoundError.

    Raises:
        NotFoundError: If no instance exists
    """
    try:
        items = reader.list(resource_type)
    except ResourceTypeNotFoundError:
        raise NotFoundError(resource_type, "<singleton>") from None
    if not items:
        raise NotFoundError(resource_type, "<singleton>")
    if len(items) > 1:
        logger.debug(
            "Found %d instances of %s, using %s",
            len(items), resource_type, get_name(items[0]),
        )
    return items[0]


class SnapshotReader:
    """
    ClusterReader backed by an in-memory list of manifests.

    Objects are grouped by resource type at construction and deep-copied on
    every read, so concurrent checks cannot observe each other's edits.

    Args:
        objects: Manifests (dicts with apiVersion/kind/metadata)
        served_types: Resource types the simulated cluster serves. Defaults
            to the well-known types plus the types of every object given.
    """

    def __init__(
        self,
        objects: Iterable[Dict[str, Any]] = (),
        served_types: Optional[Sequence[ResourceType]] = None,
    ):
        self._served: List[ResourceType] = list(
            served_types if served_types is not None else WELL_KNOWN_TYPES
        )
        self._objects: List[Dict[str, Any]] = []
        for obj in objects:
            if not isinstance(obj, dict) or "apiVersion" not in obj or "kind" not in obj:
                raise ConfigError("snapshot objects must be mappings with apiVersion and kind")
            self._objects.append(copy.deepcopy(obj))
            if served_types is None and not any(rt.matches(obj) for rt in self._served):
                self._served.append(_infer_type(obj))

    @property
    def served_types(self) -> List[ResourceType]:
        return list(self._served)

    def _check_served(self, resource_type: ResourceType) -> None:
        if resource_type not in self._served:
            raise ResourceTypeNotFoundError(resource_type)

    def list(self, resource_type: ResourceType) -> List[Dict[str, Any]]:
        self._check_served(resource_type)
        return [copy.deepcopy(obj) for obj in self._objects if resource_type.matches(obj)]

    def get(
        self,
        resource_type: ResourceType,
        name: str,
        namespace: Optional[str] = None,
    ) -> Dict[str, Any]:
        self._check_served(resource_type)
        for obj in self._objects:
            if not resource_type.matches(obj) or get_name(obj) != name:
                continue
            if namespace is not None and get_namespace(obj) != namespace:
                continue
            return copy.deepcopy(obj)
        raise NotFoundError(resource_type, name, namespace)


def _infer_type(obj: Dict[str, Any]) -> ResourceType:
    api_version = str(obj["apiVersion"])
    group, _, version = api_version.rpartition("/")
    kind = str(obj["kind"])
    namespaced = bool(get_namespace(obj))
    return ResourceType(group, version, kind, kind.lower() + "s", namespaced)


def _flatten(documents: Iterable[Any]) -> List[Dict[str, Any]]:
    objects: List[Dict[str, Any]] = []
    for doc in documents:
        if doc is None:
            continue
        if isinstance(doc, list):
            objects.extend(_flatten(doc))
        elif isinstance(doc, dict) and doc.get("kind") == "List":
            objects.extend(_flatten(doc.get("items") or []))
        else:
            objects.append(doc)
    return objects


def load_snapshot(path: Union[str, Path]) -> SnapshotReader:
    """
    Load a SnapshotReader from a YAML or JSON manifest dump.

    Accepts multi-document YAML, a single 'kind: List' document (as written
    by 'kubectl get -o yaml'), or a JSON array of objects.

    Raises:
        ConfigError: If the file is missing or cannot be parsed
    """
    snapshot_path = Path(path)
    if not snapshot_path.exists():
        raise ConfigError(f"Snapshot file not found: {snapshot_path}")

    text = snapshot_path.read_text()
    try:
        if snapshot_path.suffix == ".json":
            documents = [json.loads(text)]
        else:
            documents = list(yaml.safe_load_all(text))
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot parse snapshot {snapshot_path}: {e}") from e

    objects = _flatten(documents)
    logger.debug("Loaded %d objects from %s", len(objects), snapshot_path)
    return SnapshotReader(objects)
