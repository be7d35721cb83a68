import pytest
import responses
import yaml
from responses import matchers

from kubemulti.kube import (
    ApiError,
    KubeConfigError,
    default_kubeconfig_path,
    load_kubeconfig,
)
from kubemulti.resources import GroupVersionResource

CONFIG = {
    "apiVersion": "v1",
    "kind": "Config",
    "current-context": "its1",
    "clusters": [
        {"name": "its1", "cluster": {"server": "https://its1.example.com"}},
        {"name": "cluster1", "cluster": {"server": "https://cluster1.example.com", "insecure-skip-tls-verify": True}},
    ],
    "contexts": [
        {"name": "its1", "context": {"cluster": "its1", "user": "admin"}},
        {"name": "cluster1", "context": {"cluster": "cluster1", "user": "basic"}},
        {"name": "broken", "context": {"cluster": "missing", "user": "admin"}},
    ],
    "users": [
        {"name": "admin", "user": {"token": "token"}},
        {"name": "basic", "user": {"username": "user", "password": "password"}},
    ],
}


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config"
    path.write_text(yaml.safe_dump(CONFIG), encoding="utf-8")
    return path


def test_current_context_name(config_path):
    config = load_kubeconfig(config_path)
    assert config.current_context_name(None) == "its1"
    assert config.current_context_name("cluster1") == "cluster1"


def test_cluster_for_context(config_path):
    config = load_kubeconfig(config_path)
    assert config.cluster_for_context("cluster1") == "cluster1"
    assert config.cluster_for_context("nope") == "<unknown>"


def test_missing_file_raises(tmp_path):
    with pytest.raises(KubeConfigError):
        load_kubeconfig(tmp_path / "absent")


def test_unknown_context_raises(config_path):
    config = load_kubeconfig(config_path)
    with pytest.raises(KubeConfigError, match="does not exist"):
        config.client_for("nope")
    with pytest.raises(KubeConfigError, match="missing"):
        config.client_for("broken")


def test_empty_config_has_no_context(tmp_path):
    path = tmp_path / "config"
    path.write_text("{}", encoding="utf-8")
    with pytest.raises(KubeConfigError, match="no configuration"):
        load_kubeconfig(path).client_for(None)


def test_default_path_from_environment(monkeypatch, config_path):
    monkeypatch.setenv("KUBECONFIG", str(config_path))
    assert default_kubeconfig_path() == config_path


def test_basic_auth_and_insecure(config_path):
    client = load_kubeconfig(config_path).client_for("cluster1")
    assert client.server == "https://cluster1.example.com"
    assert client.session.verify is False
    assert client.session.auth == ("user", "password")


def test_list_namespaced_with_selector(config_path):
    client = load_kubeconfig(config_path).client_for(None)
    with responses.RequestsMock() as rsps:
        rsps.get(
            "https://its1.example.com/api/v1/namespaces/default/pods",
            json={"items": [{"metadata": {"name": "a"}}, {"metadata": {"name": "b"}}]},
            match=[matchers.query_param_matcher({"labelSelector": "app=nginx"})],
        )
        items = client.list(GroupVersionResource("", "v1", "pods"), "default", "app=nginx")
        assert rsps.calls[0].request.headers["Authorization"] == "Bearer token"
    assert [item["metadata"]["name"] for item in items] == ["a", "b"]


def test_list_grouped_cluster_wide(config_path):
    client = load_kubeconfig(config_path).client_for("its1")
    with responses.RequestsMock() as rsps:
        rsps.get("https://its1.example.com/apis/apps/v1/deployments", json={"items": []})
        assert client.list(GroupVersionResource("apps", "v1", "deployments")) == []


def test_list_error_status(config_path):
    client = load_kubeconfig(config_path).client_for(None)
    with responses.RequestsMock() as rsps:
        rsps.get(
            "https://its1.example.com/api/v1/nodes",
            json={"message": "forbidden"},
            status=403,
        )
        with pytest.raises(ApiError, match="forbidden") as info:
            client.list(GroupVersionResource("", "v1", "nodes"))
    assert info.value.status == 403


def test_server_groups_and_resources(config_path):
    client = load_kubeconfig(config_path).client_for(None)
    base = "https://its1.example.com"
    with responses.RequestsMock() as rsps:
        rsps.get(f"{base}/api", json={"versions": ["v1"]})
        rsps.get(f"{base}/api/v1", json={"groupVersion": "v1", "resources": [{"name": "pods"}]})
        rsps.get(
            f"{base}/apis",
            json={"groups": [{"name": "apps", "versions": [{"groupVersion": "apps/v1", "version": "v1"}]}]},
        )
        rsps.get(f"{base}/apis/apps/v1", json={"groupVersion": "apps/v1", "resources": [{"name": "deployments"}]})
        groups, lists = client.server_groups_and_resources()
    assert [group["name"] for group in groups] == ["", "apps"]
    assert [entry["groupVersion"] for entry in lists] == ["v1", "apps/v1"]