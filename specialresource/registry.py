"""Reading driver-toolkit and release information from image layers."""

from __future__ import annotations

import io
import json
import logging
import tarfile
from dataclasses import dataclass
from typing import IO, Any, Union

_log = logging.getLogger(__name__)

_TOOLKIT_RELEASE = "etc/driver-toolkit-release.json"
_IMAGE_REFERENCES = "release-manifests/image-references"
_RELEASE_METADATA = "release-manifests/release-metadata"

Layer = Union[bytes, bytearray, memoryview, IO[bytes]]

_MISSING = object()


@dataclass
class DriverToolkitEntry:
    """Versions a driver-toolkit image was built for."""

    image_url: str = ""
    kernel_full_version: str = ""
    rt_kernel_full_version: str = ""
    os_version: str = ""


def _open_layer(layer: Layer) -> tarfile.TarFile:
    fileobj = io.BytesIO(bytes(layer)) if isinstance(layer, (bytes, bytearray, memoryview)) else layer
    return tarfile.open(fileobj=fileobj, mode="r|gz")


def _read_json(archive: tarfile.TarFile, member: tarfile.TarInfo) -> dict[str, Any]:
    handle = archive.extractfile(member)
    if handle is None:
        raise ValueError(f"{member.name} is not a regular file")
    with handle:
        data = json.loads(handle.read())
    if not isinstance(data, dict):
        raise ValueError(f"{member.name} does not hold a JSON object")
    return data


def _nested(obj: dict[str, Any], *fields: str) -> Any:
    current: Any = obj
    for depth, field in enumerate(fields):
        if not isinstance(current, dict):
            path = ".".join(fields[:depth])
            raise TypeError(f"{path} is of type {type(current).__name__}, expected an object")
        if field not in current:
            return _MISSING
        current = current[field]
    return current


def _nested_string(obj: dict[str, Any], *fields: str) -> str:
    value = _nested(obj, *fields)
    if value is _MISSING:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"{'.'.join(fields)} is of type {type(value).__name__}, expected a string")
    return value


def extract_toolkit_release(layer: Layer) -> DriverToolkitEntry:
    """Read the driver-toolkit release file from a gzipped tar layer.

    Raises LookupError if the layer does not hold the release file.
    """
    with _open_layer(layer) as archive:
        for member in archive:
            if member.name != _TOOLKIT_RELEASE:
                continue
            data = _read_json(archive, member)
            entry = DriverToolkitEntry(
                kernel_full_version=_nested_string(data, "KERNEL_VERSION"),
                rt_kernel_full_version=_nested_string(data, "RT_KERNEL_VERSION"),
                os_version=_nested_string(data, "RHEL_VERSION"),
            )
            _log.info(
                "DTK kernel-version=%s rt-kernel-version=%s rhel-version=%s",
                entry.kernel_full_version,
                entry.rt_kernel_full_version,
                entry.os_version,
            )
            return entry
    raise LookupError("Missing driver toolkit entry: /etc/driver-toolkit-release.json")


def _toolkit_image(data: dict[str, Any]) -> str:
    tags = _nested(data, "spec", "tags")
    if tags is _MISSING:
        return ""
    if not isinstance(tags, list):
        raise TypeError("spec.tags is not a list")
    image_url = ""
    for tag in tags:
        if not isinstance(tag, dict):
            raise TypeError("spec.tags holds an entry that is not an object")
        if tag.get("name") != "driver-toolkit":
            continue
        source = tag.get("from")
        if not isinstance(source, dict) or not isinstance(source.get("name"), str):
            raise TypeError("driver-toolkit tag has no from.name string")
        image_url = source["name"]
    return image_url


def release_manifests(layer: Layer) -> tuple[str, str]:
    """Return the release version and the driver-toolkit image URL found in a release layer.

    Either value is empty when the layer does not provide it.
    """
    version = ""
    image_url = ""
    with _open_layer(layer) as archive:
        for member in archive:
            if member.name == _IMAGE_REFERENCES:
                image_url = _toolkit_image(_read_json(archive, member))
            elif member.name == _RELEASE_METADATA:
                version = _nested_string(_read_json(archive, member), "version")
            if version and image_url:
                break
    return version, image_url