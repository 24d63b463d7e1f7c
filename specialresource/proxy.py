"""Cluster proxy settings and their injection into container environments."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from specialresource.warn import on_error

_log = logging.getLogger(__name__)


@dataclass
class ProxyConfiguration:
    """The cluster-wide proxy settings."""

    http_proxy: str = ""
    https_proxy: str = ""
    no_proxy: str = ""
    trusted_ca: str = ""


def _containers(obj: dict[str, Any], *fields: str) -> list[Any]:
    current: Any = obj
    for depth, field in enumerate(fields):
        if not isinstance(current, dict):
            path = ".".join(fields[:depth])
            raise TypeError(f"{path} is of type {type(current).__name__}, expected an object")
        if field not in current:
            raise LookupError(f"{'.'.join(fields)} not found")
        current = current[field]
    if not isinstance(current, list):
        raise TypeError(f"{'.'.join(fields)} is of type {type(current).__name__}, expected a list")
    return current


def _setup_containers_proxy(containers: list[Any], config: ProxyConfiguration) -> None:
    # Only the first container receives the proxy environment.
    if not containers:
        return
    container = containers[0]
    if not isinstance(container, dict):
        _log.info("container is not an object: %r", container)
        return
    env = container.get("env")
    if env is None:
        env = []
    elif not isinstance(env, list):
        raise TypeError(f"env is of type {type(env).__name__}, expected a list")
    env.extend(
        [
            {"name": "HTTP_PROXY", "value": config.http_proxy},
            {"name": "HTTPS_PROXY", "value": config.https_proxy},
            {"name": "NO_PROXY", "value": config.no_proxy},
        ]
    )
    container["env"] = env


def setup_daemon_set(obj: dict[str, Any], config: ProxyConfiguration) -> None:
    """Add the proxy environment to a DaemonSet's pod template."""
    _setup_containers_proxy(_containers(obj, "spec", "template", "spec", "containers"), config)


def setup_pod(obj: dict[str, Any], config: ProxyConfiguration) -> None:
    """Add the proxy environment to a Pod."""
    _setup_containers_proxy(_containers(obj, "spec", "containers"), config)


def setup(obj: dict[str, Any], config: ProxyConfiguration) -> None:
    """Add the proxy environment to Pods and DaemonSets; other kinds are left alone."""
    kind = obj.get("kind")
    if kind == "Pod":
        setup_pod(obj, config)
    elif kind == "DaemonSet":
        setup_daemon_set(obj, config)


def _spec_string(obj: dict[str, Any], *fields: str) -> str:
    current: Any = obj
    for field in fields:
        if not isinstance(current, dict):
            on_error(TypeError(f"{'.'.join(fields)} cannot be read"))
            return ""
        if field not in current:
            return ""
        current = current[field]
    if not isinstance(current, str):
        on_error(TypeError(f"{'.'.join(fields)} is of type {type(current).__name__}, expected a string"))
        return ""
    return current


def cluster_configuration(
    proxy_items: Iterable[dict[str, Any]] | None,
    config: ProxyConfiguration | None = None,
) -> ProxyConfiguration:
    """Return the proxy settings read from the cluster's Proxy objects.

    ``proxy_items`` is None when the cluster has no proxies API; the given
    settings are then returned unchanged. Fields missing or malformed on a
    cluster proxy become empty strings.
    """
    result = dataclasses.replace(config) if config is not None else ProxyConfiguration()
    if proxy_items is None:
        _log.warning("Could not find proxies API resource. Can be ignored on vanilla K8s.")
        return result
    for item in proxy_items:
        name = (item.get("metadata") or {}).get("name", "")
        if "cluster" not in name:
            continue
        result.http_proxy = _spec_string(item, "spec", "httpProxy")
        result.https_proxy = _spec_string(item, "spec", "httpsProxy")
        result.no_proxy = _spec_string(item, "spec", "noProxy")
        result.trusted_ca = _spec_string(item, "spec", "trustedCA", "name")
    return result