"""Waiting for cluster objects to appear, disappear or become ready."""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable, Mapping
from typing import Any, Protocol

from specialresource.warn import on_error

_log = logging.getLogger(__name__)

_MISSING = object()

StatusCallback = Callable[[Mapping[str, Any]], bool]


class NotFoundError(LookupError):
    """The requested object does not exist in the cluster."""


class PollTimeoutError(TimeoutError):
    """A condition did not become true within the timeout."""


class _ClusterClient(Protocol):
    def get(self, api_version: str, kind: str, namespace: str, name: str) -> dict[str, Any]:
        """Return the live object or raise NotFoundError."""

    def list(
        self,
        api_version: str,
        kind: str,
        namespace: str,
        labels: Mapping[str, str] | None,
    ) -> list[dict[str, Any]]:
        """Return the objects of ``kind`` in ``namespace`` matching ``labels``."""

    def pod_logs(self, namespace: str, name: str) -> str:
        """Return the logs of a pod."""


def _nested(obj: Mapping[str, Any], fields: tuple[str, ...]) -> Any:
    current: Any = obj
    for depth, field in enumerate(fields):
        if not isinstance(current, Mapping):
            path = ".".join(fields[:depth])
            raise TypeError(f"{path} is of type {type(current).__name__}, expected an object")
        if field not in current:
            return _MISSING
        current = current[field]
    return current


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _required(obj: Mapping[str, Any], fields: tuple[str, ...], check: Callable[[Any], bool], what: str) -> Any:
    value = _nested(obj, fields)
    path = ".".join(fields)
    if value is _MISSING:
        raise LookupError(f"{path} not found")
    if not check(value):
        raise TypeError(f"{path} is of type {type(value).__name__}, expected {what}")
    return value


def _required_int(obj: Mapping[str, Any], *fields: str) -> int:
    return _required(obj, fields, _is_int, "an integer")


def _required_string(obj: Mapping[str, Any], *fields: str) -> str:
    return _required(obj, fields, lambda v: isinstance(v, str), "a string")


def _metadata(obj: Mapping[str, Any]) -> Mapping[str, Any]:
    return obj.get("metadata") or {}


def _describe(obj: Mapping[str, Any]) -> str:
    meta = _metadata(obj)
    return f"{obj.get('kind', '')}: {meta.get('namespace', '')}/{meta.get('name', '')}"


def make_status_callback(status: int | str, *fields: str) -> StatusCallback:
    """Return a check that the value at ``fields`` of an object equals ``status``.

    A missing field raises LookupError; a field of the wrong type raises TypeError.
    """
    if _is_int(status):
        def check(obj: Mapping[str, Any]) -> bool:
            return _required_int(obj, *fields) == status
    elif isinstance(status, str):
        def check(obj: Mapping[str, Any]) -> bool:
            return _required_string(obj, *fields) == status
    else:
        raise TypeError(f"cannot extract type from {type(status).__name__}")
    return check


def daemon_set_ready(obj: Mapping[str, Any]) -> bool:
    """Tell whether a DaemonSet's pods are available on every node they should run on.

    ``status.desiredNumberScheduled`` must be present. ``status.numberAvailable``
    takes precedence over ``status.numberUnavailable``; with neither the set is not ready.
    """
    desired = _required_int(obj, "status", "desiredNumberScheduled")
    callback: StatusCallback = lambda _obj: False
    if _is_int(_nested(obj, ("status", "numberUnavailable"))):
        callback = make_status_callback(0, "status", "numberUnavailable")
    if _is_int(_nested(obj, ("status", "numberAvailable"))):
        callback = make_status_callback(desired, "status", "numberAvailable")
    return callback(obj)


class Poller:
    """Polls the cluster through ``client`` until objects reach the wanted state.

    Each poll waits ``retry_interval`` seconds before checking and gives up
    with PollTimeoutError once ``timeout`` seconds have passed. ``namespace``
    is where builds and daemon-set pods are looked up.
    """

    def __init__(
        self,
        client: _ClusterClient,
        namespace: str = "",
        retry_interval: float = 5.0,
        timeout: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.namespace = namespace
        self.retry_interval = retry_interval
        self.timeout = timeout
        self._sleep = sleep
        self._clock = clock
        self._wait_for: dict[str, Callable[[Mapping[str, Any]], None]] = {
            "Pod": self.for_pod,
            "DaemonSet": self.for_daemon_set,
            "BuildConfig": self._for_build,
            "Secret": self.for_secret,
            "CustomResourceDefinition": self._for_crd,
            "Job": self.for_job,
            "Deployment": self.for_deployment,
            "StatefulSet": self.for_stateful_set,
            "Namespace": self.for_resource_availability,
            "Certificates": self.for_resource_availability,
        }

    def _poll(self, condition: Callable[[], bool], description: str) -> None:
        deadline = self._clock() + self.timeout
        while True:
            self._sleep(self.retry_interval)
            if condition():
                return
            if self._clock() >= deadline:
                raise PollTimeoutError(f"timed out waiting for {description}")

    def _get(self, obj: Mapping[str, Any]) -> dict[str, Any]:
        meta = _metadata(obj)
        return self.client.get(
            obj.get("apiVersion", ""),
            obj.get("kind", ""),
            meta.get("namespace", ""),
            meta.get("name", ""),
        )

    def for_resource(self, obj: Mapping[str, Any]) -> bool:
        """Wait for the object in the way its kind requires.

        Returns False, after a warning, when no wait is known for the kind.
        """
        kind = obj.get("kind", "")
        wait = self._wait_for.get(kind)
        if wait is None:
            on_error(LookupError(f"No wait function registered for Kind: {kind}"))
            return False
        _log.info("ForResource Kind=%s", kind)
        wait(obj)
        return True

    def for_resource_availability(self, obj: Mapping[str, Any]) -> None:
        """Wait until the object exists."""
        def exists() -> bool:
            try:
                self._get(obj)
            except NotFoundError:
                _log.info("Waiting for creation of %s", _describe(obj))
                return False
            return True

        self._poll(exists, f"creation of {_describe(obj)}")

    def for_resource_unavailability(self, obj: Mapping[str, Any]) -> None:
        """Wait until the object no longer exists."""
        def gone() -> bool:
            try:
                self._get(obj)
            except NotFoundError:
                _log.info("Waiting done for deletion of %s", _describe(obj))
                return True
            _log.info("Waiting for deletion of %s", _describe(obj))
            return False

        self._poll(gone, f"deletion of {_describe(obj)}")

    def for_resource_full_availability(self, obj: Mapping[str, Any], callback: StatusCallback) -> None:
        """Wait until ``callback`` accepts the live object; errors from the client propagate."""
        def ready() -> bool:
            found = self._get(obj)
            if callback(found):
                _log.info("Resource available %s", _describe(obj))
                return True
            _log.info("Waiting for availability of %s", _describe(obj))
            return False

        self._poll(ready, f"availability of {_describe(obj)}")

    def for_secret(self, obj: Mapping[str, Any]) -> None:
        """Wait until the Secret exists."""
        self.for_resource_availability(obj)

    def _for_crd(self, obj: Mapping[str, Any]) -> None:
        self.for_resource_availability(obj)

    def for_pod(self, obj: Mapping[str, Any]) -> None:
        """Wait until the Pod exists and has succeeded."""
        self.for_resource_availability(obj)
        self.for_resource_full_availability(
            obj, make_status_callback("Succeeded", "status", "phase")
        )

    def _replica_sets_ready(self, obj: Mapping[str, Any]) -> bool:
        labels = _nested(obj, ("spec", "selector", "matchLabels"))
        if not isinstance(labels, Mapping):
            return False
        matching = {str(k): str(v) for k, v in labels.items()}
        namespace = _metadata(obj).get("namespace", "")
        try:
            replica_sets = self.client.list("apps/v1", "ReplicaSet", namespace, matching)
        except Exception as err:  # the check is simply retried
            _log.info("Could not get ReplicaSet for Deployment %s: %s", _metadata(obj).get("name", ""), err)
            return False
        for rs in replica_sets:
            status = rs.get("status")
            if not isinstance(status, Mapping):
                _log.info("No status for ReplicaSet %s", _metadata(rs).get("name", ""))
                return False
            if "availableReplicas" not in status or "replicas" not in status:
                return False
            available, replicas = status["availableReplicas"], status["replicas"]
            _log.info("Status AvailableReplicas=%s Replicas=%s", available, replicas)
            if available == replicas:
                return True
        return False

    def for_deployment(self, obj: Mapping[str, Any]) -> None:
        """Wait until a ReplicaSet of the Deployment has all its replicas available."""
        self.for_resource_availability(obj)
        self.for_resource_full_availability(obj, self._replica_sets_ready)

    @staticmethod
    def _stateful_set_ready(obj: Mapping[str, Any]) -> bool:
        replicas = _required_int(obj, "spec", "replicas")
        status = obj.get("status")
        if not isinstance(status, Mapping):
            _log.info("No status for StatefulSet %s", _metadata(obj).get("name", ""))
            return False
        if "currentReplicas" not in status:
            return False
        current = status["currentReplicas"]
        _log.info("Status Replicas=%s CurrentReplicas=%s", replicas, current)
        return replicas == current

    def for_stateful_set(self, obj: Mapping[str, Any]) -> None:
        """Wait until the StatefulSet runs as many current replicas as it specifies."""
        self.for_resource_availability(obj)
        self.for_resource_full_availability(obj, self._stateful_set_ready)

    @staticmethod
    def _job_complete(obj: Mapping[str, Any]) -> bool:
        conditions = _nested(obj, ("status", "conditions"))
        if not isinstance(conditions, list):
            return False
        for condition in conditions:
            if not isinstance(condition, Mapping):
                raise TypeError("status.conditions holds an entry that is not an object")
            if _required_string(condition, "status") == "True" and _required_string(condition, "type") == "Complete":
                return True
        return False

    def for_job(self, obj: Mapping[str, Any]) -> None:
        """Wait until the Job has a true Complete condition."""
        self.for_resource_availability(obj)
        self.for_resource_full_availability(obj, self._job_complete)

    def for_daemon_set(self, obj: Mapping[str, Any]) -> None:
        """Wait until the DaemonSet is available on all its nodes."""
        self.for_resource_availability(obj)
        self.for_resource_full_availability(obj, daemon_set_ready)

    def _for_build(self, obj: Mapping[str, Any]) -> None:
        self.for_resource_availability(obj)
        builds = self.client.list("build.openshift.io/v1", "Build", self.namespace, None)
        for build in builds:
            self.for_resource_full_availability(
                build, make_status_callback("Complete", "status", "phase")
            )

    def for_daemon_set_logs(self, obj: Mapping[str, Any], pattern: str) -> None:
        """Check that the tail of every daemon-set pod's log matches ``pattern``.

        Pods are found by the object's ``app`` label, which must be present.
        Only the last 100 characters of logs longer than 100 characters are
        searched; shorter logs are searched as an empty string.
        Raises RuntimeError when a pod's log does not match yet.
        """
        labels = _metadata(obj).get("labels") or {}
        if "app" not in labels:
            raise LookupError("Cannot find Label app=, missing take a look at the manifests")
        selector = labels["app"]
        _log.info("Looking for Pods with label app=%s", selector)
        pods = self.client.list("v1", "Pod", self.namespace, {"app": selector})
        for pod in pods:
            meta = _metadata(pod)
            logs = self.client.pod_logs(meta.get("namespace", ""), meta.get("name", ""))
            cutoff = 100 if len(logs) > 100 else 0
            last = logs[len(logs) - cutoff:]
            _log.info("WaitForDaemonSetLogs LastBytes=%s", last)
            if not re.search(pattern, last):
                raise RuntimeError(f"Not yet done. Not matched against: {pattern}")