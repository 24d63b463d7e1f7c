import logging

import pytest

from specialresource.proxy import (
    ProxyConfiguration,
    cluster_configuration,
    setup,
    setup_daemon_set,
    setup_pod,
)

CONFIG = ProxyConfiguration(
    http_proxy="http://proxy.example.com:3128",
    https_proxy="https://proxy.example.com:3129",
    no_proxy=".cluster.local",
    trusted_ca="ca-bundle",
)

EXPECTED_ENV = [
    {"name": "HTTP_PROXY", "value": CONFIG.http_proxy},
    {"name": "HTTPS_PROXY", "value": CONFIG.https_proxy},
    {"name": "NO_PROXY", "value": CONFIG.no_proxy},
]


def test_setup_pod_adds_env():
    pod = {"kind": "Pod", "spec": {"containers": [{"name": "c"}]}}
    setup_pod(pod, CONFIG)
    assert pod["spec"]["containers"][0]["env"] == EXPECTED_ENV


def test_setup_pod_keeps_existing_env_and_only_first_container():
    existing = {"name": "A", "value": "1"}
    pod = {"kind": "Pod", "spec": {"containers": [{"env": [existing]}, {"name": "second"}]}}
    setup(pod, CONFIG)
    assert pod["spec"]["containers"][0]["env"] == [existing] + EXPECTED_ENV
    assert pod["spec"]["containers"][1] == {"name": "second"}


def test_setup_daemon_set():
    ds = {"kind": "DaemonSet", "spec": {"template": {"spec": {"containers": [{}]}}}}
    setup(ds, CONFIG)
    assert ds["spec"]["template"]["spec"]["containers"][0]["env"] == EXPECTED_ENV


def test_setup_other_kind_untouched():
    svc = {"kind": "Service", "spec": {"containers": [{}]}}
    setup(svc, CONFIG)
    assert svc == {"kind": "Service", "spec": {"containers": [{}]}}


def test_missing_containers_raises():
    with pytest.raises(LookupError):
        setup_daemon_set({"kind": "DaemonSet", "spec": {}}, CONFIG)


def test_bad_env_type_raises():
    with pytest.raises(TypeError):
        setup_pod({"kind": "Pod", "spec": {"containers": [{"env": "x"}]}}, CONFIG)


def _proxy(name, spec):
    return {"kind": "Proxy", "metadata": {"name": name}, "spec": spec}


def test_cluster_configuration_reads_cluster_proxy():
    items = [
        _proxy(
            "cluster",
            {
                "httpProxy": CONFIG.http_proxy,
                "httpsProxy": CONFIG.https_proxy,
                "noProxy": CONFIG.no_proxy,
                "trustedCA": {"name": CONFIG.trusted_ca},
            },
        )
    ]
    assert cluster_configuration(items, ProxyConfiguration()) == CONFIG


def test_cluster_configuration_ignores_other_names():
    items = [_proxy("other", {"httpProxy": "http://x.example.com"})]
    assert cluster_configuration(items, CONFIG) == CONFIG


def test_cluster_configuration_without_api_returns_copy():
    result = cluster_configuration(None, CONFIG)
    assert result == CONFIG
    result.http_proxy = "changed"
    assert CONFIG.http_proxy != "changed"


def test_cluster_configuration_missing_and_malformed_fields(caplog):
    items = [_proxy("cluster", {"httpProxy": 5, "trustedCA": "flat"})]
    with caplog.at_level(logging.WARNING):
        result = cluster_configuration(items, CONFIG)
    assert result == ProxyConfiguration()
    assert "OnError" in caplog.text