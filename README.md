# specialresource

Building blocks for an operator that rolls out hardware-enablement stacks, such
as driver containers and device plugins, onto Kubernetes and OpenShift nodes.
The package works on plain Python dictionaries that hold Kubernetes objects, so
it can be driven by any API client. It has no dependencies outside the
standard library.

## Modules

- `specialresource.yamlscan`: `YAMLScanner` iterates over the documents of a
  multi-document YAML manifest and `split_documents` returns them as a list.
  A line that starts with `---` and holds nothing else ends a document. The
  documents come back as bytes and are not parsed.
- `specialresource.resource`: rules for applying objects.
  - `is_namespaced` tells whether a kind lives in a namespace.
  - `is_not_updateable` tells whether a kind cannot be updated in place.
  - `needs_resource_version_update` tells whether an update must carry the
    current `resourceVersion`.
  - `update_resource_version` copies `resourceVersion` from the live object
    and, for Services, the `clusterIP` as well.
  - `set_node_selector_terms` merges terms into the node selector.
  - `is_one_timer` tells whether an object is a Pod with `restartPolicy: Never`.
  - `set_meta_data` adds the Helm release annotations and the managed-by label.
  - `rebuild_driver_container` decides whether a vendor-annotated BuildConfig
    is applied.
  - `before_crud` adds the proxy environment to objects annotated with
    `specialresource.openshift.io/proxy: "true"`.
- `specialresource.kernel`: `set_version_node_affinity` pins workloads, Pods
  and BuildConfigs to nodes that carry a given kernel-version label.
  `is_object_affine` checks the kernel-affine annotation. `full_version` reads
  the kernel version from node labels. `patch_version` shortens a full kernel
  version to `version.major.minor-patch`.
- `specialresource.proxy`: `ProxyConfiguration` holds the proxy settings.
  `setup`, `setup_pod` and `setup_daemon_set` add `HTTP_PROXY`, `HTTPS_PROXY`
  and `NO_PROXY` to the first container's environment.
  `cluster_configuration` reads the settings from the cluster's Proxy objects.
- `specialresource.poll`: `Poller` waits for objects through a client you
  supply. It handles Pods, DaemonSets, Deployments, StatefulSets, Jobs,
  Secrets, CRDs, BuildConfigs and Namespaces; see below for the waiting.
  `make_status_callback` and `daemon_set_ready` are readiness checks that
  can be used on their own.
- `specialresource.registry`: `extract_toolkit_release` reads
  `etc/driver-toolkit-release.json` from a gzipped tar layer into a
  `DriverToolkitEntry`. `release_manifests` returns the release version and the
  driver-toolkit image URL found in a release payload layer. A layer is given
  as bytes or as a binary file object.
- `specialresource.upgrade`: `node_version_info` maps each kernel running on
  the nodes to a `NodeVersion`. `update_info` attaches a `DriverToolkitEntry`
  to the kernels it was built for. It raises `ValueError` when the OS versions
  do not match.
- `specialresource.osversion`: `render_operating_system` turns node OS labels
  into forms such as `rhel8`, `rhel8.2` and `8.2`. RHCOS 4 is mapped to the
  RHEL release it is based on.
- `specialresource.helmtypes`: `HelmRepo` and `HelmChart` describe a chart and
  its repository. Both have a `deep_copy` method.
- `specialresource.slice`: `find`, `contains`, `find_cr_file` and `insert`.
- `specialresource.state`: `generate_name` builds a state name from a
  template file name.
- `specialresource.warn`: `on_error` and `on_error_or_not_found` log errors
  that are not fatal.

## Example

```python
from specialresource.yamlscan import split_documents
from specialresource.resource import is_namespaced, set_meta_data
from specialresource.osversion import render_operating_system

manifest = b"""kind: DaemonSet
metadata:
  name: driver
---
kind: Namespace
metadata:
  name: drivers
"""

for document in split_documents(manifest):
    print(document.decode())

print(is_namespaced("Namespace"))                 # False
print(render_operating_system("rhcos", "4", "6"))  # ('rhel8', 'rhel8.2', '8.2')

obj = {"kind": "DaemonSet", "metadata": {"name": "driver"}}
set_meta_data(obj, "driver-release", "drivers")
print(obj["metadata"]["labels"])  # {'app.kubernetes.io/managed-by': 'Helm'}
```

## Polling

`Poller(client, namespace="", retry_interval=5.0, timeout=30.0)` needs a
client with these three methods:

- `get(api_version, kind, namespace, name)` returns the live object, or raises
  `specialresource.poll.NotFoundError` if it does not exist.
- `list(api_version, kind, namespace, labels)` returns a list of objects.
- `pod_logs(namespace, name)` returns a pod's log as a string.

Each check first waits `retry_interval` seconds. If the condition still does
not hold once `timeout` seconds have passed, `PollTimeoutError` is raised. The
`sleep` and `clock` functions can be replaced, for example in tests.
`for_resource` picks the right wait for the object's kind. For a kind it has
no wait for, it logs a warning and returns `False`.

## What the package does not do

The package talks to no cluster and to no image registry. It does not:

- install Helm charts;
- create, update or delete objects;
- export metrics;
- provide a command-line program.

The caller fetches the objects, the node list and the image layers, passes
them in, and applies the results with a Kubernetes client of its own choice.

## Running the tests

```
pip install -e ".[test]"
pytest
```