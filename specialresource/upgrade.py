"""Node version information combined with driver-toolkit releases."""

from __future__ import annotations

import dataclasses
import logging
import platform
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from specialresource.kernel import KERNEL_VERSION_LABEL
from specialresource.registry import DriverToolkitEntry

_log = logging.getLogger(__name__)

RHEL_VERSION_LABEL = "feature.node.kubernetes.io/system-os_release.RHEL_VERSION"
VERSION_ID_LABEL = "feature.node.kubernetes.io/system-os_release.VERSION_ID"


@dataclass
class NodeVersion:
    """The OS and cluster version of nodes running one kernel, with its toolkit."""

    os_version: str = ""
    cluster_version: str = ""
    driver_toolkit: DriverToolkitEntry = field(default_factory=DriverToolkitEntry)


def node_version_info(nodes: Iterable[dict[str, Any]]) -> dict[str, NodeVersion]:
    """Map each full kernel version found on the nodes to its OS and cluster version.

    Raises LookupError if a node lacks the kernel or OS version-id label.
    """
    info: dict[str, NodeVersion] = {}
    for node in nodes:
        labels = (node.get("metadata") or {}).get("labels") or {}
        if KERNEL_VERSION_LABEL not in labels:
            raise LookupError(
                f"Label {KERNEL_VERSION_LABEL} not found is NFD running? Check node labels"
            )
        kernel_full_version = labels[KERNEL_VERSION_LABEL]
        rhel_version = labels.get(RHEL_VERSION_LABEL)
        if rhel_version is None:
            _log.warning("Label %s not found. Can be ignored on vanilla k8s", RHEL_VERSION_LABEL)
            rhel_version = ""
        if VERSION_ID_LABEL not in labels:
            raise LookupError(
                f"Label {VERSION_ID_LABEL} not found is NFD running? Check node labels"
            )
        info[kernel_full_version] = NodeVersion(
            os_version=rhel_version, cluster_version=labels[VERSION_ID_LABEL]
        )
    return info


def _running_arch() -> str:
    return platform.machine()


def _attach(
    info: dict[str, NodeVersion], lookup: str, store: str, dtk: DriverToolkitEntry
) -> None:
    current = info[lookup]
    if current.os_version != dtk.os_version:
        raise ValueError(
            f"OSVersion mismatch NFD: {current.os_version} vs. DTK: {dtk.os_version}"
        )
    info[store] = dataclasses.replace(
        current, os_version=dtk.os_version, driver_toolkit=dataclasses.replace(dtk)
    )


def update_info(
    info: dict[str, NodeVersion],
    dtk: DriverToolkitEntry,
    image_url: str,
    arch: str | None = None,
) -> dict[str, NodeVersion]:
    """Return ``info`` with the driver toolkit attached to the kernels it was built for.

    The architecture (``amd64`` is read as ``x86_64``) is appended to the toolkit's
    kernel versions when they lack it. A matching entry whose OS version differs
    from the toolkit's raises ValueError. The inputs are not modified.
    """
    running_arch = arch if arch is not None else _running_arch()
    if running_arch.lower() == "amd64":
        running_arch = "x86_64"

    dtk = dataclasses.replace(dtk)
    if running_arch not in dtk.kernel_full_version:
        dtk.kernel_full_version = f"{dtk.kernel_full_version}.{running_arch}"
        dtk.rt_kernel_full_version = f"{dtk.rt_kernel_full_version}.{running_arch}"
        _log.info("Updating version: %s", dtk.kernel_full_version)

    result = dict(info)
    if dtk.kernel_full_version in result:
        dtk.image_url = image_url
        _attach(result, dtk.kernel_full_version, dtk.kernel_full_version, dtk)
    if dtk.rt_kernel_full_version in result:
        dtk.image_url = image_url
        # The real-time entry is recorded under the general kernel version.
        _attach(result, dtk.rt_kernel_full_version, dtk.kernel_full_version, dtk)
    return result