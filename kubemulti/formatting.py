"""Column values derived from Kubernetes objects for table output."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Mapping

NODE_ROLE_PREFIX = "node-role.kubernetes.io/"

_ACCESS_MODE_ABBREVIATIONS = {
    "ReadWriteOnce": "RWO",
    "ReadOnlyMany": "ROX",
    "ReadWriteMany": "RWX",
    "ReadWriteOncePod": "RWOP",
}

_TIMESTAMP = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r"(?P<tz>[Zz]|[+-]\d{2}:\d{2})$"
)


def _section(obj: Mapping[str, Any], *keys: str) -> Mapping[str, Any]:
    """Walk nested mappings, yielding an empty mapping for anything missing."""
    current: Any = obj
    for key in keys:
        current = current.get(key) if isinstance(current, Mapping) else None
        if current is None:
            return {}
    return current if isinstance(current, Mapping) else {}


def node_status(node: Mapping[str, Any]) -> str:
    """Return Ready, NotReady or Unknown from the node's Ready condition."""
    for condition in _section(node, "status").get("conditions") or []:
        if condition.get("type") == "Ready":
            return "Ready" if condition.get("status") == "True" else "NotReady"
    return "Unknown"


def node_role(node: Mapping[str, Any]) -> str:
    """Return the first role found among the node's role labels."""
    for label in sorted(_section(node, "metadata", "labels")):
        if label.startswith(NODE_ROLE_PREFIX):
            role = label[len(NODE_ROLE_PREFIX):]
            if role:
                return role
    return "<none>"


def pod_ready_containers(pod: Mapping[str, Any]) -> int:
    """Count the containers of a pod that report ready."""
    statuses = _section(pod, "status").get("containerStatuses") or []
    return sum(1 for status in statuses if status.get("ready"))


def pod_restarts(pod: Mapping[str, Any]) -> int:
    """Sum the restart counts of all containers in a pod."""
    statuses = _section(pod, "status").get("containerStatuses") or []
    return sum(int(status.get("restartCount") or 0) for status in statuses)


def service_external_ip(svc: Mapping[str, Any]) -> str:
    """Return the load balancer address or the external IPs of a service."""
    ingress = _section(svc, "status", "loadBalancer").get("ingress") or []
    if ingress:
        first = ingress[0]
        if first.get("ip"):
            return first["ip"]
        if first.get("hostname"):
            return first["hostname"]
    external_ips = _section(svc, "spec").get("externalIPs") or []
    if external_ips:
        return ",".join(external_ips)
    return "<none>"


def service_ports(svc: Mapping[str, Any]) -> str:
    """Format a service's ports as PORT[:NODEPORT]/PROTOCOL, comma separated."""
    ports = []
    for port in _section(svc, "spec").get("ports") or []:
        protocol = port.get("protocol") or "TCP"
        node_port = port.get("nodePort") or 0
        if node_port:
            ports.append(f"{port.get('port', 0)}:{node_port}/{protocol}")
        else:
            ports.append(f"{port.get('port', 0)}/{protocol}")
    return ",".join(ports) if ports else "<none>"


def format_labels(labels: Mapping[str, str] | None) -> str:
    """Render labels as sorted key=value pairs, or <none>."""
    if not labels:
        return "<none>"
    return ",".join(sorted(f"{key}={value}" for key, value in labels.items()))


def _access_modes(modes: list[str] | None) -> str:
    return ",".join(_ACCESS_MODE_ABBREVIATIONS.get(mode, mode) for mode in modes or [])


def pv_capacity(pv: Mapping[str, Any]) -> str:
    """Return the storage capacity of a persistent volume."""
    capacity = _section(pv, "spec", "capacity")
    return str(capacity["storage"]) if "storage" in capacity else "<unknown>"


def pv_access_modes(pv: Mapping[str, Any]) -> str:
    """Return the abbreviated access modes of a persistent volume."""
    return _access_modes(_section(pv, "spec").get("accessModes"))


def pv_claim(pv: Mapping[str, Any]) -> str:
    """Return namespace/name of the claim bound to a persistent volume."""
    spec = _section(pv, "spec")
    claim = spec.get("claimRef")
    if claim is not None:
        return f"{claim.get('namespace', '')}/{claim.get('name', '')}"
    return "<none>"


def pv_storage_class(pv: Mapping[str, Any]) -> str:
    """Return the storage class of a persistent volume."""
    return _section(pv, "spec").get("storageClassName") or "<none>"


def pvc_capacity(pvc: Mapping[str, Any]) -> str:
    """Return the provisioned capacity of a persistent volume claim."""
    capacity = _section(pvc, "status", "capacity")
    return str(capacity["storage"]) if "storage" in capacity else "<unset>"


def pvc_access_modes(pvc: Mapping[str, Any]) -> str:
    """Return the abbreviated access modes granted to a claim."""
    return _access_modes(_section(pvc, "status").get("accessModes"))


def pvc_storage_class(pvc: Mapping[str, Any]) -> str:
    """Return the storage class requested by a claim."""
    spec = _section(pvc, "spec")
    if spec.get("storageClassName") is not None:
        return spec["storageClassName"]
    return "<none>"


def human_duration(seconds: float) -> str:
    """Render an elapsed time the way kubectl shows resource ages."""
    secs = int(seconds)
    if secs < -1:
        return "<invalid>"
    if secs < 0:
        return "0s"
    if secs < 60 * 2:
        return f"{secs}s"

    minutes = secs // 60
    if minutes < 10:
        rest = secs % 60
        return f"{minutes}m" if rest == 0 else f"{minutes}m{rest}s"
    if minutes < 60 * 3:
        return f"{minutes}m"

    hours = secs // 3600
    if hours < 8:
        rest = minutes % 60
        return f"{hours}h" if rest == 0 else f"{hours}h{rest}m"
    if hours < 48:
        return f"{hours}h"
    if hours < 24 * 8:
        rest = hours % 24
        return f"{hours // 24}d" if rest == 0 else f"{hours // 24}d{rest}h"
    if hours < 24 * 365 * 2:
        return f"{hours // 24}d"
    if hours < 24 * 365 * 8:
        days = (hours // 24) % 365
        years = hours // 24 // 365
        return f"{years}y" if days == 0 else f"{years}y{days}d"
    return f"{hours // 24 // 365}y"


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse an RFC 3339 timestamp into an aware datetime; empty gives None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    match = _TIMESTAMP.match(value.strip())
    if match is None:
        raise ValueError(f"invalid timestamp: {value!r}")
    text = match["base"].replace("t", "T").replace(" ", "T")
    if match["frac"]:
        text += "." + match["frac"][:6].ljust(6, "0")
    tz = match["tz"]
    text += "+00:00" if tz in ("Z", "z") else tz
    return datetime.fromisoformat(text)


def age(item: Mapping[str, Any], now: datetime | None = None) -> str:
    """Return the human-readable age of an object from its creation time."""
    created = parse_timestamp(_section(item, "metadata").get("creationTimestamp"))
    if created is None:
        return "<unknown>"
    current = now or datetime.now(timezone.utc)
    return human_duration((current - created).total_seconds())