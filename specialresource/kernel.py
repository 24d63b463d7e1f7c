"""Kernel-version affinity of cluster objects."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

_log = logging.getLogger(__name__)

KERNEL_VERSION_LABEL = "feature.node.kubernetes.io/kernel-version.full"
KERNEL_AFFINE_ANNOTATION = "specialresource.openshift.io/kernel-affine"

# "Statefulset" is matched with this exact spelling.
_TEMPLATED_KINDS = ("DaemonSet", "Deployment", "Statefulset")
_PLAIN_KINDS = ("Pod", "BuildConfig")


def _metadata_map(obj: dict[str, Any], field: str) -> dict[str, Any]:
    metadata = obj.get("metadata") or {}
    value = metadata.get(field) or {}
    if not isinstance(value, dict):
        raise TypeError(f"metadata.{field} is of type {type(value).__name__}, expected an object")
    return value


def _nested_map_for_update(obj: dict[str, Any], fields: tuple[str, ...]) -> dict[str, Any]:
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


def _version_node_affinity(kernel_full_version: str, obj: dict[str, Any], *fields: str) -> None:
    node_selector = _nested_map_for_update(obj, fields)
    node_selector[KERNEL_VERSION_LABEL] = kernel_full_version


def set_version_node_affinity(obj: dict[str, Any], kernel_full_version: str) -> None:
    """Pin the object's pods to nodes running ``kernel_full_version``.

    Workloads with a pod template get the node selector in the template;
    Pods and BuildConfigs get it in their own spec. Other kinds are left as they are.
    """
    kind = obj.get("kind")
    if kind in _TEMPLATED_KINDS:
        _version_node_affinity(kernel_full_version, obj, "spec", "template", "spec", "nodeSelector")
    elif kind in _PLAIN_KINDS:
        _version_node_affinity(kernel_full_version, obj, "spec", "nodeSelector")


def is_object_affine(obj: dict[str, Any]) -> bool:
    """Tell whether the object is annotated as kernel affine."""
    annotations = _metadata_map(obj, "annotations")
    if annotations.get(KERNEL_AFFINE_ANNOTATION) == "true":
        _log.info("Object is Kernel Affine: %s", (obj.get("metadata") or {}).get("name", ""))
        return True
    return False


def full_version(nodes: Iterable[dict[str, Any]]) -> str:
    """Return the full kernel version the nodes report through their labels.

    All nodes are assumed to run the same kernel; the last node's label wins.
    Raises LookupError if a node lacks the label. No nodes yield an empty string.
    """
    version = ""
    for node in nodes:
        labels = _metadata_map(node, "labels")
        if KERNEL_VERSION_LABEL not in labels:
            raise LookupError(
                f"Label {KERNEL_VERSION_LABEL} not found is NFD running? Check node labels"
            )
        version = labels[KERNEL_VERSION_LABEL]
    return version


def patch_version(kernel_full_version: str) -> str:
    """Return ``version.major.minor-patch`` of a full kernel version.

    A version without a ``-`` patch part is cut to its first three dotted parts.
    """
    version, sep, rest = kernel_full_version.partition("-")
    if not sep:
        short = kernel_full_version.split(".")
        if len(short) < 3:
            raise ValueError(f"kernel version {kernel_full_version!r} has fewer than three parts")
        return ".".join(short[:3])
    patch = rest.split("-", 1)[0].split(".", 1)[0]
    return f"{version}-{patch}"