"""Listing resources across every discovered cluster as one table."""

from __future__ import annotations

import os
import sys
from datetime import datetime
from typing import Any, Iterator, Mapping, Sequence, TextIO

from kubemulti.discovery import ClusterInfo, discover_clusters, target_namespace
from kubemulti.kube import ApiError
from kubemulti.resources import DiscoveryError, discover_gvr
from kubemulti.tables import ResourceView, align_columns, generic_view, view_for

_LIST_NOUNS = {
    "persistentvolumes": "persistent volumes",
    "persistentvolumeclaims": "persistent volume claims",
}


class GetError(Exception):
    """Raised when a get request cannot be carried out."""


def _name(item: Mapping[str, Any]) -> str:
    return (item.get("metadata") or {}).get("name", "")


def _specific_rows(
    view: ResourceView,
    clusters: Sequence[ClusterInfo],
    resource_name: str,
    selector: str,
    show_labels: bool,
    namespace: str,
    all_namespaces: bool,
    now: datetime | None,
) -> Iterator[list[str]]:
    noun = _LIST_NOUNS.get(view.gvr.resource, view.gvr.resource)
    for cluster in clusters:
        if cluster.client is None:
            continue
        scope = None
        if view.namespaced and not all_namespaces:
            scope = target_namespace(namespace)
        try:
            items = cluster.client.list(view.gvr, scope, selector)
        except ApiError as exc:
            print(f"Warning: failed to list {noun} in cluster {cluster.name}: {exc}")
            continue
        for item in items:
            if resource_name and _name(item) != resource_name:
                continue
            yield view.row(cluster.name, item, show_labels, all_namespaces, now)


def _generic_rows(
    clusters: Sequence[ClusterInfo],
    resource_type: str,
    resource_name: str,
    selector: str,
    show_labels: bool,
    namespace: str,
    all_namespaces: bool,
    now: datetime | None,
) -> Iterator[list[str]]:
    for cluster in clusters:
        if cluster.client is None:
            continue
        try:
            gvr, namespaced = discover_gvr(cluster.client, resource_type)
        except DiscoveryError as exc:
            print(
                f"Warning: failed to discover resource {resource_type} "
                f"in cluster {cluster.name}: {exc}"
            )
            continue
        scope = target_namespace(namespace)
        in_namespace = namespaced and not all_namespaces and scope
        try:
            items = cluster.client.list(gvr, scope if in_namespace else None, selector)
        except ApiError as exc:
            print(f"Warning: failed to list {resource_type} in cluster {cluster.name}: {exc}")
            continue
        view = generic_view(namespaced)
        for item in items:
            if resource_name and _name(item) != resource_name:
                continue
            yield view.row(cluster.name, item, show_labels, all_namespaces, now)


def collect_rows(
    clusters: Sequence[ClusterInfo],
    resource_type: str,
    resource_name: str = "",
    selector: str = "",
    show_labels: bool = False,
    namespace: str = "",
    all_namespaces: bool = False,
    now: datetime | None = None,
) -> list[list[str]]:
    """Return the header followed by one row per matching object in every cluster.

    Clusters that cannot be listed are reported with a warning and skipped.
    """
    view = view_for(resource_type)
    if view is not None:
        header = view.header(show_labels, all_namespaces)
        body = _specific_rows(
            view, clusters, resource_name, selector, show_labels, namespace, all_namespaces, now
        )
    else:
        header = generic_view().header(show_labels, all_namespaces)
        body = _generic_rows(
            clusters, resource_type, resource_name, selector, show_labels,
            namespace, all_namespaces, now,
        )
    return [header, *body]


def run_get(
    args: Sequence[str],
    output_format: str = "",
    selector: str = "",
    show_labels: bool = False,
    watch: bool = False,
    watch_only: bool = False,
    kubeconfig: str | os.PathLike[str] | None = None,
    remote_context: str = "",
    namespace: str = "",
    all_namespaces: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Discover the clusters and write a table of the requested resources."""
    if not args:
        raise GetError("resource type must be specified")
    resource_type = args[0]
    resource_name = args[1] if len(args) > 1 else ""

    if watch or watch_only:
        raise GetError("watch operations are not supported in multi-cluster mode")

    clusters = discover_clusters(kubeconfig or None, remote_context)
    rows = collect_rows(
        clusters, resource_type, resource_name, selector, show_labels, namespace, all_namespaces
    )
    out = stream if stream is not None else sys.stdout
    for line in align_columns(rows, padding=2):
        out.write(line + "\n")
    out.flush()