import pytest

from kubemulti.kube import ApiError
from kubemulti.resources import (
    DiscoveryError,
    GroupVersionResource,
    default_gvr,
    discover_gvr,
    matches_resource_type,
    normalize_resource_type,
    parse_group_version,
)


class FakeDiscovery:
    def __init__(self, resource_lists=None, error=None):
        self.resource_lists = resource_lists or []
        self.error = error

    def server_groups_and_resources(self):
        if self.error is not None:
            raise self.error
        return [], self.resource_lists


RESOURCE_LISTS = [
    {"groupVersion": "bad/group/version", "resources": [{"name": "widgets"}]},
    {
        "groupVersion": "v1",
        "resources": [
            {"name": "pods", "singularName": "pod", "namespaced": True, "shortNames": ["po"]},
            {"name": "nodes", "singularName": "node", "namespaced": False, "shortNames": ["no"]},
        ],
    },
    {
        "groupVersion": "apps/v1",
        "resources": [
            {"name": "deployments", "singularName": "deployment", "namespaced": True, "shortNames": ["deploy"]},
        ],
    },
]


@pytest.mark.parametrize(
    "text, expected",
    [("apps/v1", ("apps", "v1")), ("v1", ("", "v1")), ("", ("", ""))],
)
def test_parse_group_version(text, expected):
    assert parse_group_version(text) == expected


def test_parse_group_version_rejects_extra_parts():
    with pytest.raises(ValueError):
        parse_group_version("a/b/c")


@pytest.mark.parametrize(
    "given, expected",
    [
        ("po", "pods"),
        ("Deploy", "deployments"),
        ("pod", "pods"),
        ("secrets", "secrets"),
        ("sts", "statefulsets"),
    ],
)
def test_normalize_resource_type(given, expected):
    assert normalize_resource_type(given) == expected


def test_matches_resource_type_by_every_name():
    resource = {"name": "deployments", "singularName": "deployment", "shortNames": ["deploy"]}
    assert matches_resource_type(resource, "Deployments")
    assert matches_resource_type(resource, "deployment")
    assert matches_resource_type(resource, "DEPLOY")
    assert not matches_resource_type(resource, "pods")


def test_default_gvr():
    assert default_gvr("deployments") == GroupVersionResource("apps", "v1", "deployments")
    assert default_gvr("ingresses") == GroupVersionResource("networking.k8s.io", "v1", "ingresses")
    assert default_gvr("widgets") == GroupVersionResource("", "v1", "widgets")


def test_group_version_and_prefix():
    apps = GroupVersionResource("apps", "v1", "deployments")
    core = GroupVersionResource("", "v1", "pods")
    assert apps.group_version == "apps/v1"
    assert core.group_version == "v1"
    assert apps.api_prefix == "/apis/apps/v1"
    assert core.api_prefix == "/api/v1"


def test_discover_gvr_matches_server_resources():
    client = FakeDiscovery(RESOURCE_LISTS)
    assert discover_gvr(client, "deploy") == (GroupVersionResource("apps", "v1", "deployments"), True)
    assert discover_gvr(client, "node") == (GroupVersionResource("", "v1", "nodes"), False)


def test_discover_gvr_falls_back_to_default():
    client = FakeDiscovery(RESOURCE_LISTS)
    gvr, namespaced = discover_gvr(client, "cj")
    assert gvr == GroupVersionResource("batch", "v1", "cronjobs")
    assert namespaced is True


def test_discover_gvr_reports_failure():
    client = FakeDiscovery(error=ApiError("forbidden", status=403))
    with pytest.raises(DiscoveryError, match="failed to discover API resources"):
        discover_gvr(client, "pods")