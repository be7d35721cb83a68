from datetime import datetime, timezone

import pytest

from kubemulti.formatting import age, format_labels, pod_restarts
from kubemulti.resources import GroupVersionResource
from kubemulti.tables import align_columns, generic_view, view_for

NOW = datetime(2024, 1, 2, tzinfo=timezone.utc)


def _item(name="thing", namespace="default", labels=None, **extra):
    item = {
        "metadata": {
            "name": name,
            "namespace": namespace,
            "creationTimestamp": "2024-01-01T00:00:00Z",
        }
    }
    if labels is not None:
        item["metadata"]["labels"] = labels
    item.update(extra)
    return item


def test_pod_headers():
    view = view_for("pods")
    assert view.header(False, False) == ["CLUSTER", "NAME", "READY", "STATUS", "RESTARTS", "AGE"]
    assert view.header(True, True) == [
        "CLUSTER", "NAMESPACE", "NAME", "READY", "STATUS", "RESTARTS", "AGE", "LABELS",
    ]


def test_cluster_scoped_header_ignores_all_namespaces():
    view = view_for("nodes")
    assert view.header(False, True) == ["CLUSTER", "NAME", "STATUS", "ROLES", "AGE", "VERSION"]


def test_pv_header_columns():
    assert view_for("pv").header(False, False) == [
        "CLUSTER", "NAME", "CAPACITY", "ACCESS MODES", "RECLAIM POLICY",
        "STATUS", "CLAIM", "STORAGE CLASS", "REASON", "AGE",
    ]


def test_aliases_resolve_to_same_view():
    assert view_for("po") is view_for("pods")
    assert view_for("PODS") is view_for("pod")
    assert view_for("deploy").gvr == GroupVersionResource("apps", "v1", "deployments")
    assert view_for("widgets") is None


def test_pod_row():
    pod = _item(
        name="web",
        spec={"containers": [{"name": "a"}, {"name": "b"}]},
        status={
            "phase": "Running",
            "containerStatuses": [
                {"ready": True, "restartCount": 3},
                {"ready": False, "restartCount": 2},
            ],
        },
    )
    row = view_for("pods").row("c1", pod, False, False, NOW)
    assert row[:4] == ["c1", "web", "1/2", "Running"]
    assert row[4] == str(pod_restarts(pod))
    assert row[5] == age(pod, NOW)


def test_namespace_and_labels_in_row():
    labels = {"app": "web", "tier": "front"}
    pod = _item(name="web", namespace="prod", labels=labels)
    row = view_for("pods").row("c1", pod, True, True, NOW)
    assert row[:3] == ["c1", "prod", "web"]
    assert row[-1] == format_labels(labels)


def test_deployment_without_replicas():
    deploy = _item(spec={}, status={})
    row = view_for("deployments").row("c1", deploy, False, False, NOW)
    assert row[2] == "0/0"


def test_configmap_counts_binary_data():
    cm = _item(data={"a": "1", "b": "2"}, binaryData={"c": "AA=="})
    row = view_for("cm").row("c1", cm, False, False, NOW)
    assert row[2] == "3"


def test_generic_view_header_and_row_disagree_for_cluster_scoped():
    view = generic_view(False)
    assert view.header(False, True) == ["CLUSTER", "NAMESPACE", "NAME", "AGE"]
    row = view.row("c1", _item(name="x"), False, True, NOW)
    assert row[:2] == ["c1", "x"]
    assert len(row) == len(view.header(False, True)) - 1


def test_generic_namespaced_row_has_namespace():
    view = generic_view(True)
    row = view.row("c1", _item(name="x", namespace="ns1"), False, True, NOW)
    assert row[:3] == ["c1", "ns1", "x"]


@pytest.mark.parametrize(
    "resource_type",
    ["nodes", "pods", "services", "deployments", "namespaces",
     "configmaps", "secrets", "pv", "pvc"],
)
@pytest.mark.parametrize("show_labels", [False, True])
@pytest.mark.parametrize("all_namespaces", [False, True])
def test_row_matches_header_width(resource_type, show_labels, all_namespaces):
    view = view_for(resource_type)
    row = view.row("c1", _item(labels={"k": "v"}), show_labels, all_namespaces, NOW)
    assert len(row) == len(view.header(show_labels, all_namespaces))


def test_align_columns_lines_up_cells():
    lines = align_columns([["CLUSTER", "NAME", "AGE"], ["c1", "pod-a", "5s"]])
    assert lines[0].index("NAME") == lines[1].index("pod-a")
    assert lines[0].index("AGE") == lines[1].index("5s")
    assert lines[0][: lines[0].index("NAME")].endswith("  ")
    assert lines[1].endswith("5s")


def test_align_columns_padding():
    lines = align_columns([["ab", "x"], ["abcd", "y"]], 4)
    assert lines[0].index("x") == len("abcd") + 4
    assert lines[1].index("y") == len("abcd") + 4


def test_short_row_breaks_column_block():
    lines = align_columns([["a", "b", "c"], ["x"], ["longer", "y", "z"]])
    assert lines[1] == "x"
    assert lines[0].index("b") == len("a") + 2
    assert lines[2].index("y") == len("longer") + 2


def test_align_columns_empty():
    assert align_columns([]) == []
    assert align_columns([[]]) == [""]