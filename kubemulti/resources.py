"""Resolution of resource type names to API group, version and resource."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


class DiscoveryError(Exception):
    """Raised when the API resources of a cluster cannot be discovered."""


@dataclass(frozen=True)
class GroupVersionResource:
    """An API resource identified by group, version and plural name."""

    group: str
    version: str
    resource: str

    @property
    def group_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    @property
    def api_prefix(self) -> str:
        """The URL path under which this resource's group version is served."""
        if self.group:
            return f"/apis/{self.group}/{self.version}"
        return f"/api/{self.version}"


_ALIASES = {
    "po": "pods",
    "svc": "services",
    "no": "nodes",
    "ns": "namespaces",
    "pv": "persistentvolumes",
    "pvc": "persistentvolumeclaims",
    "cm": "configmaps",
    "deploy": "deployments",
    "rs": "replicasets",
    "ds": "daemonsets",
    "sts": "statefulsets",
    "job": "jobs",
    "cj": "cronjobs",
    "ing": "ingresses",
    "ep": "endpoints",
    "sa": "serviceaccounts",
}

_DEFAULTS = {
    "pods": GroupVersionResource("", "v1", "pods"),
    "services": GroupVersionResource("", "v1", "services"),
    "nodes": GroupVersionResource("", "v1", "nodes"),
    "namespaces": GroupVersionResource("", "v1", "namespaces"),
    "persistentvolumes": GroupVersionResource("", "v1", "persistentvolumes"),
    "persistentvolumeclaims": GroupVersionResource("", "v1", "persistentvolumeclaims"),
    "configmaps": GroupVersionResource("", "v1", "configmaps"),
    "secrets": GroupVersionResource("", "v1", "secrets"),
    "deployments": GroupVersionResource("apps", "v1", "deployments"),
    "replicasets": GroupVersionResource("apps", "v1", "replicasets"),
    "daemonsets": GroupVersionResource("apps", "v1", "daemonsets"),
    "statefulsets": GroupVersionResource("apps", "v1", "statefulsets"),
    "jobs": GroupVersionResource("batch", "v1", "jobs"),
    "cronjobs": GroupVersionResource("batch", "v1", "cronjobs"),
    "ingresses": GroupVersionResource("networking.k8s.io", "v1", "ingresses"),
    "endpoints": GroupVersionResource("", "v1", "endpoints"),
    "serviceaccounts": GroupVersionResource("", "v1", "serviceaccounts"),
}


def parse_group_version(group_version: str) -> tuple[str, str]:
    """Split "group/version" or "version" into a (group, version) pair."""
    if not group_version:
        return "", ""
    parts = group_version.split("/")
    if len(parts) == 1:
        return "", parts[0]
    if len(parts) == 2:
        return parts[0], parts[1]
    raise ValueError(f"unexpected GroupVersion string: {group_version}")


def normalize_resource_type(resource_type: str) -> str:
    """Expand known aliases and make the type lower case and plural."""
    lower = resource_type.lower()
    if lower in _ALIASES:
        return _ALIASES[lower]
    return lower if lower.endswith("s") else lower + "s"


def matches_resource_type(api_resource: Mapping[str, Any], resource_type: str) -> bool:
    """Tell whether an API resource entry answers to the given type name."""
    wanted = resource_type.casefold()
    names = [api_resource.get("name", ""), api_resource.get("singularName", "")]
    names.extend(api_resource.get("shortNames") or [])
    return any(name.casefold() == wanted for name in names)


def default_gvr(resource_type: str) -> GroupVersionResource:
    """Return the well-known resource for a type, or a core v1 guess."""
    return _DEFAULTS.get(resource_type, GroupVersionResource("", "v1", resource_type))


def discover_gvr(client: Any, resource_type: str) -> tuple[GroupVersionResource, bool]:
    """Find the resource for a type name on a server and whether it is namespaced.

    Falls back to a default namespaced resource when the server lists no match.
    """
    try:
        _, resource_lists = client.server_groups_and_resources()
    except (RuntimeError, OSError, ValueError) as exc:
        raise DiscoveryError(f"failed to discover API resources: {exc}") from exc

    normalized = normalize_resource_type(resource_type)
    for resource_list in resource_lists:
        try:
            group, version = parse_group_version(resource_list.get("groupVersion", ""))
        except ValueError:
            continue
        for api_resource in resource_list.get("resources") or []:
            if matches_resource_type(api_resource, normalized):
                gvr = GroupVersionResource(group, version, api_resource.get("name", ""))
                return gvr, bool(api_resource.get("namespaced", False))

    return default_gvr(normalized), True