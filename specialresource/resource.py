"""Rules for how manifest objects are created, updated and prepared for the cluster."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from specialresource import proxy
from specialresource.proxy import ProxyConfiguration

_log = logging.getLogger(__name__)

RELEASE_NAME_ANNOTATION = "meta.helm.sh/release-name"
RELEASE_NAMESPACE_ANNOTATION = "meta.helm.sh/release-namespace"
MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"
DRIVER_CONTAINER_VENDOR_ANNOTATION = "specialresource.openshift.io/driver-container-vendor"
PROXY_ANNOTATION = "specialresource.openshift.io/proxy"
CALLBACK_ANNOTATION = "specialresource.openshift.io/callback"

_CLUSTER_SCOPED_KINDS = frozenset(
    {
        "Namespace",
        "ClusterRole",
        "ClusterRoleBinding",
        "SecurityContextConstraint",
        "SpecialResource",
    }
)

_NOT_UPDATEABLE_KINDS = frozenset({"ServiceAccount", "Pod"})

_RESOURCE_VERSION_KINDS = frozenset(
    {
        "SecurityContextConstraints",
        "Service",
        "ServiceMonitor",
        "Route",
        "Build",
        "BuildRun",
        "BuildConfig",
        "ImageStream",
        "PrometheusRule",
        "CSIDriver",
        "Issuer",
        "CustomResourceDefinition",
        "Certificate",
        "SpecialResource",
        "OperatorGroup",
        "CertManager",
        "MutatingWebhookConfiguration",
        "ValidatingWebhookConfiguration",
        "Deployment",
        "ImagePolicy",
    }
)

# "Statefulset" is matched with this exact spelling.
_TEMPLATED_KINDS = ("DaemonSet", "Deployment", "Statefulset")
_PLAIN_KINDS = ("Pod", "BuildConfig")


def is_namespaced(kind: str) -> bool:
    """Tell whether objects of ``kind`` live in a namespace."""
    return kind not in _CLUSTER_SCOPED_KINDS


def is_not_updateable(kind: str) -> bool:
    """Tell whether objects of ``kind`` cannot be updated in place."""
    return kind in _NOT_UPDATEABLE_KINDS


def needs_resource_version_update(kind: str) -> bool:
    """Tell whether an update of ``kind`` must carry the current resourceVersion."""
    return kind in _RESOURCE_VERSION_KINDS


def _required_string(obj: Mapping[str, Any], *fields: str) -> str:
    current: Any = obj
    path = ".".join(fields)
    for field in fields:
        if not isinstance(current, Mapping):
            raise TypeError(f"{path} cannot be read: a parent is not an object")
        if field not in current:
            raise LookupError(f"{path} not found")
        current = current[field]
    if not isinstance(current, str):
        raise TypeError(f"{path} is of type {type(current).__name__}, expected a string")
    return current


def _map_for_update(obj: dict[str, Any], *fields: str) -> dict[str, Any]:
    """Return the map at ``fields``, creating missing maps along the way."""
    current = obj
    for depth, field in enumerate(fields):
        child = current.get(field)
        if child is None:
            child = {}
            current[field] = child
        elif not isinstance(child, dict):
            path = ".".join(fields[: depth + 1])
            raise TypeError(f"{path} is of type {type(child).__name__}, expected an object")
        current = child
    return current


def _metadata_map(obj: Mapping[str, Any], field: str) -> dict[str, Any]:
    value = (obj.get("metadata") or {}).get(field) or {}
    if not isinstance(value, dict):
        raise TypeError(f"metadata.{field} is of type {type(value).__name__}, expected an object")
    return value


def update_resource_version(req: dict[str, Any], found: Mapping[str, Any]) -> None:
    """Copy the fields an update of ``req`` must keep from the live object ``found``.

    The kind of ``found`` decides: kinds that need it get the resourceVersion,
    Services also keep their clusterIP. A missing field raises LookupError.
    """
    kind = found.get("kind")
    if needs_resource_version_update(kind):
        version = _required_string(found, "metadata", "resourceVersion")
        _map_for_update(req, "metadata")["resourceVersion"] = version
    if kind == "Service":
        cluster_ip = _required_string(found, "spec", "clusterIP")
        _map_for_update(req, "spec")["clusterIP"] = cluster_ip


def set_node_selector_terms(obj: dict[str, Any], terms: Mapping[str, str] | None) -> None:
    """Merge ``terms`` into the node selector of workloads, Pods and BuildConfigs.

    The node selector is created when absent. Other kinds are left alone.
    """
    kind = obj.get("kind")
    if kind in _TEMPLATED_KINDS:
        fields: tuple[str, ...] = ("spec", "template", "spec", "nodeSelector")
    elif kind in _PLAIN_KINDS:
        fields = ("spec", "nodeSelector")
    else:
        return
    node_selector = _map_for_update(obj, *fields)
    node_selector.update(terms or {})


def is_one_timer(obj: Mapping[str, Any]) -> bool:
    """Tell whether the object is a Pod that is never restarted.

    A Pod without ``spec.restartPolicy`` raises LookupError.
    """
    if obj.get("kind") != "Pod":
        return False
    return _required_string(obj, "spec", "restartPolicy") == "Never"


def set_meta_data(obj: dict[str, Any], name: str, namespace: str) -> None:
    """Mark the object as belonging to release ``name`` in ``namespace``, managed by Helm."""
    metadata = _map_for_update(obj, "metadata")
    annotations = _map_for_update(metadata, "annotations")
    annotations[RELEASE_NAME_ANNOTATION] = name
    annotations[RELEASE_NAMESPACE_ANNOTATION] = namespace
    labels = _map_for_update(metadata, "labels")
    labels[MANAGED_BY_LABEL] = "Helm"


def rebuild_driver_container(obj: Mapping[str, Any], update_vendor: str) -> bool:
    """Tell whether the object should be applied.

    A BuildConfig annotated with a driver-container vendor is only applied
    when that vendor is the one whose image needs rebuilding; every other
    object is always applied.
    """
    if obj.get("kind") != "BuildConfig":
        return True
    annotations = _metadata_map(obj, "annotations")
    vendor = annotations.get(DRIVER_CONTAINER_VENDOR_ANNOTATION)
    if vendor is None:
        _log.info("No annotation driver-container-vendor found, not skipping")
        return True
    if vendor == update_vendor:
        _log.info("vendor %s == updateVendor %s", vendor, update_vendor)
        return True
    _log.info("vendor %s != updateVendor %s", vendor, update_vendor)
    return False


def before_crud(obj: dict[str, Any], config: ProxyConfiguration) -> None:
    """Prepare the object before it is applied.

    Objects annotated for the proxy get the proxy environment from ``config``.
    """
    annotations = _metadata_map(obj, "annotations")
    if annotations.get(PROXY_ANNOTATION) == "true":
        proxy.setup(obj, config)
    callback = annotations.get(CALLBACK_ANNOTATION)
    if callback is not None:
        _log.info("No handler registered for callback %s", callback)