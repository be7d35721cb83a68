"""Discovery of the managed clusters and the local hosting cluster."""

from __future__ import annotations

import os
from dataclasses import dataclass

from kubemulti.kube import ApiError, KubeClient, KubeConfigError, load_kubeconfig
from kubemulti.resources import GroupVersionResource

MANAGED_CLUSTERS = GroupVersionResource("cluster.open-cluster-management.io", "v1", "managedclusters")


@dataclass
class ClusterInfo:
    """A reachable cluster with the context it was found through."""

    name: str
    context: str
    client: KubeClient | None = None


def is_wds_cluster(name: str) -> bool:
    """Tell whether a cluster name denotes a workload description space."""
    lower = name.lower()
    return lower.startswith("wds") or "-wds-" in lower or "_wds_" in lower


def build_cluster_client(
    kubeconfig: str | os.PathLike[str] | None = None, context: str | None = None
) -> ClusterInfo | None:
    """Build a client for a context, reporting the config's current context and cluster.

    Prints a warning and returns None when no client can be built.
    """
    try:
        config = load_kubeconfig(kubeconfig)
    except KubeConfigError as exc:
        print(f"Warning: failed to load kubeconfig: {exc}")
        return None
    try:
        client = config.client_for(context or None)
    except KubeConfigError as exc:
        print(f"Warning: failed to create rest config: {exc}")
        return None
    current = config.current_context
    return ClusterInfo(name=config.cluster_for_context(current), context=current, client=client)


def list_managed_clusters(
    kubeconfig: str | os.PathLike[str] | None, remote_context: str
) -> list[str]:
    """Return the sorted names of managed clusters, leaving out WDS clusters."""
    info = build_cluster_client(kubeconfig, remote_context)
    if info is None or info.client is None:
        raise KubeConfigError(f"failed to create dynamic client for remote context {remote_context}")
    try:
        items = info.client.list(MANAGED_CLUSTERS)
    except ApiError as exc:
        raise ApiError(f"failed to list managed clusters: {exc}", status=exc.status) from exc
    names = ((item.get("metadata") or {}).get("name", "") for item in items)
    return sorted(name for name in names if not is_wds_cluster(name))


def discover_clusters(
    kubeconfig: str | os.PathLike[str] | None = None, remote_context: str = ""
) -> list[ClusterInfo]:
    """Find the managed clusters followed by the local cluster, if not already listed."""
    clusters: list[ClusterInfo] = []

    if remote_context:
        try:
            managed = list_managed_clusters(kubeconfig, remote_context)
        except (KubeConfigError, ApiError) as exc:
            print(f"Warning: could not list managed clusters: {exc}")
        else:
            for name in managed:
                if is_wds_cluster(name):
                    continue
                info = build_cluster_client(kubeconfig, name)
                if info is not None and info.client is not None:
                    clusters.append(ClusterInfo(name=name, context=remote_context, client=info.client))

    local = build_cluster_client(kubeconfig, None)
    if local is not None and local.client is not None and not is_wds_cluster(local.name):
        if all(cluster.name != local.name for cluster in clusters):
            clusters.append(local)

    return clusters


def target_namespace(namespace: str | None) -> str:
    """Return the namespace to operate in, defaulting to "default"."""
    return namespace or "default"