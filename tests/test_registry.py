import io
import json
import tarfile

import pytest

from specialresource.registry import DriverToolkitEntry, extract_toolkit_release, release_manifests


def _layer(files):
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        for name, content in files.items():
            data = content if isinstance(content, bytes) else json.dumps(content).encode()
            info = tarfile.TarInfo(name)
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def test_extract_toolkit_release():
    kernel = "4.18.0-305.el8.x86_64"
    rt_kernel = "4.18.0-305.rt7.72.el8.x86_64"
    layer = _layer({
        "usr/bin/other": b"binary",
        "etc/driver-toolkit-release.json": {
            "KERNEL_VERSION": kernel,
            "RT_KERNEL_VERSION": rt_kernel,
            "RHEL_VERSION": "8.4",
        },
    })
    entry = extract_toolkit_release(layer)
    assert entry == DriverToolkitEntry(
        kernel_full_version=kernel, rt_kernel_full_version=rt_kernel, os_version="8.4"
    )


def test_extract_toolkit_release_from_file_object():
    layer = _layer({"etc/driver-toolkit-release.json": {"KERNEL_VERSION": "5.0"}})
    entry = extract_toolkit_release(io.BytesIO(layer))
    assert entry.kernel_full_version == "5.0"
    assert entry.rt_kernel_full_version == ""


def test_extract_toolkit_release_missing():
    layer = _layer({"etc/os-release": b"ID=rhel"})
    with pytest.raises(LookupError):
        extract_toolkit_release(layer)


def test_extract_toolkit_release_wrong_type():
    layer = _layer({"etc/driver-toolkit-release.json": {"KERNEL_VERSION": 4}})
    with pytest.raises(TypeError):
        extract_toolkit_release(layer)


def test_release_manifests():
    image = "quay.example.com/ocp/release@sha256:abc"
    layer = _layer({
        "release-manifests/image-references": {
            "spec": {
                "tags": [
                    {"name": "cli", "from": {"name": "quay.example.com/cli"}},
                    {"name": "driver-toolkit", "from": {"name": image}},
                ]
            }
        },
        "release-manifests/release-metadata": {"version": "4.8.2"},
    })
    assert release_manifests(layer) == ("4.8.2", image)


def test_release_manifests_without_toolkit():
    layer = _layer({
        "release-manifests/image-references": {"spec": {"tags": [{"name": "cli", "from": {"name": "x"}}]}},
        "release-manifests/release-metadata": {"version": "4.8.2"},
    })
    assert release_manifests(layer) == ("4.8.2", "")


def test_release_manifests_empty_layer():
    assert release_manifests(_layer({})) == ("", "")


def test_release_manifests_bad_tag():
    layer = _layer({
        "release-manifests/image-references": {"spec": {"tags": [{"name": "driver-toolkit"}]}},
    })
    with pytest.raises(TypeError):
        release_manifests(layer)