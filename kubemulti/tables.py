"""Table layouts for listing resources across clusters."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from itertools import groupby
from typing import Any, Callable, Iterable, Mapping, Sequence

from kubemulti.formatting import (
    age,
    format_labels,
    node_role,
    node_status,
    pod_ready_containers,
    pod_restarts,
    pv_access_modes,
    pv_capacity,
    pv_claim,
    pv_storage_class,
    pvc_access_modes,
    pvc_capacity,
    pvc_storage_class,
    service_external_ip,
    service_ports,
)
from kubemulti.resources import GroupVersionResource

Cell = Callable[[Mapping[str, Any], "datetime | None"], str]


def _field(item: Mapping[str, Any], *keys: str) -> Any:
    current: Any = item
    for key in keys:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def _text(*keys: str) -> Cell:
    def cell(item: Mapping[str, Any], now: datetime | None) -> str:
        value = _field(item, *keys)
        return "" if value is None else str(value)

    return cell


def _number(*keys: str) -> Cell:
    def cell(item: Mapping[str, Any], now: datetime | None) -> str:
        return str(int(_field(item, *keys) or 0))

    return cell


def _plain(func: Callable[[Mapping[str, Any]], Any]) -> Cell:
    return lambda item, now: str(func(item))


def _age(item: Mapping[str, Any], now: datetime | None) -> str:
    return age(item, now)


def _pod_ready(item: Mapping[str, Any], now: datetime | None) -> str:
    containers = _field(item, "spec", "containers") or []
    return f"{pod_ready_containers(item)}/{len(containers)}"


def _deployment_ready(item: Mapping[str, Any], now: datetime | None) -> str:
    ready = int(_field(item, "status", "readyReplicas") or 0)
    replicas = int(_field(item, "spec", "replicas") or 0)
    return f"{ready}/{replicas}"


def _configmap_data(item: Mapping[str, Any], now: datetime | None) -> str:
    data = _field(item, "data") or {}
    binary = _field(item, "binaryData") or {}
    return str(len(data) + len(binary))


def _secret_data(item: Mapping[str, Any], now: datetime | None) -> str:
    return str(len(_field(item, "data") or {}))


@dataclass(frozen=True)
class ResourceView:
    """How one kind of resource is listed: its columns and where it lives.

    ``always_namespace_header`` puts a NAMESPACE heading under --all-namespaces
    even for cluster-scoped resources, as the generic listing does.
    """

    names: tuple[str, ...]
    gvr: GroupVersionResource
    namespaced: bool
    columns: tuple[tuple[str, Cell], ...]
    always_namespace_header: bool = False

    def _namespace_in_header(self, all_namespaces: bool) -> bool:
        return all_namespaces and (self.namespaced or self.always_namespace_header)

    def header(self, show_labels: bool = False, all_namespaces: bool = False) -> list[str]:
        """Return the column headings."""
        headings = ["CLUSTER"]
        if self._namespace_in_header(all_namespaces):
            headings.append("NAMESPACE")
        headings.append("NAME")
        headings.extend(title for title, _ in self.columns)
        if show_labels:
            headings.append("LABELS")
        return headings

    def row(
        self,
        cluster_name: str,
        item: Mapping[str, Any],
        show_labels: bool = False,
        all_namespaces: bool = False,
        now: datetime | None = None,
    ) -> list[str]:
        """Return the cells of one object's line."""
        metadata = item.get("metadata") or {}
        cells = [cluster_name]
        if self.namespaced and all_namespaces:
            cells.append(metadata.get("namespace", ""))
        cells.append(metadata.get("name", ""))
        cells.extend(cell(item, now) for _, cell in self.columns)
        if show_labels:
            cells.append(format_labels(metadata.get("labels")))
        return cells


_VIEWS = (
    ResourceView(
        names=("nodes", "node", "no"),
        gvr=GroupVersionResource("", "v1", "nodes"),
        namespaced=False,
        columns=(
            ("STATUS", _plain(node_status)),
            ("ROLES", _plain(node_role)),
            ("AGE", _age),
            ("VERSION", _text("status", "nodeInfo", "kubeletVersion")),
        ),
    ),
    ResourceView(
        names=("pods", "pod", "po"),
        gvr=GroupVersionResource("", "v1", "pods"),
        namespaced=True,
        columns=(
            ("READY", _pod_ready),
            ("STATUS", _text("status", "phase")),
            ("RESTARTS", _plain(pod_restarts)),
            ("AGE", _age),
        ),
    ),
    ResourceView(
        names=("services", "service", "svc"),
        gvr=GroupVersionResource("", "v1", "services"),
        namespaced=True,
        columns=(
            ("TYPE", _text("spec", "type")),
            ("CLUSTER-IP", _text("spec", "clusterIP")),
            ("EXTERNAL-IP", _plain(service_external_ip)),
            ("PORT(S)", _plain(service_ports)),
            ("AGE", _age),
        ),
    ),
    ResourceView(
        names=("deployments", "deployment", "deploy"),
        gvr=GroupVersionResource("apps", "v1", "deployments"),
        namespaced=True,
        columns=(
            ("READY", _deployment_ready),
            ("UP-TO-DATE", _number("status", "updatedReplicas")),
            ("AVAILABLE", _number("status", "availableReplicas")),
            ("AGE", _age),
        ),
    ),
    ResourceView(
        names=("namespaces", "namespace", "ns"),
        gvr=GroupVersionResource("", "v1", "namespaces"),
        namespaced=False,
        columns=(
            ("STATUS", _text("status", "phase")),
            ("AGE", _age),
        ),
    ),
    ResourceView(
        names=("configmaps", "configmap", "cm"),
        gvr=GroupVersionResource("", "v1", "configmaps"),
        namespaced=True,
        columns=(
            ("DATA", _configmap_data),
            ("AGE", _age),
        ),
    ),
    ResourceView(
        names=("secrets", "secret"),
        gvr=GroupVersionResource("", "v1", "secrets"),
        namespaced=True,
        columns=(
            ("TYPE", _text("type")),
            ("DATA", _secret_data),
            ("AGE", _age),
        ),
    ),
    ResourceView(
        names=("persistentvolumes", "persistentvolume", "pv"),
        gvr=GroupVersionResource("", "v1", "persistentvolumes"),
        namespaced=False,
        columns=(
            ("CAPACITY", _plain(pv_capacity)),
            ("ACCESS MODES", _plain(pv_access_modes)),
            ("RECLAIM POLICY", _text("spec", "persistentVolumeReclaimPolicy")),
            ("STATUS", _text("status", "phase")),
            ("CLAIM", _plain(pv_claim)),
            ("STORAGE CLASS", _plain(pv_storage_class)),
            ("REASON", _text("status", "reason")),
            ("AGE", _age),
        ),
    ),
    ResourceView(
        names=("persistentvolumeclaims", "persistentvolumeclaim", "pvc"),
        gvr=GroupVersionResource("", "v1", "persistentvolumeclaims"),
        namespaced=True,
        columns=(
            ("STATUS", _text("status", "phase")),
            ("VOLUME", _text("spec", "volumeName")),
            ("CAPACITY", _plain(pvc_capacity)),
            ("ACCESS MODES", _plain(pvc_access_modes)),
            ("STORAGE CLASS", _plain(pvc_storage_class)),
            ("AGE", _age),
        ),
    ),
)

_BY_NAME = {name: view for view in _VIEWS for name in view.names}


def view_for(resource_type: str) -> ResourceView | None:
    """Return the built-in view for a resource type name, or None if it has none."""
    return _BY_NAME.get(resource_type.lower())


def generic_view(namespaced: bool = True) -> ResourceView:
    """Return the NAME/AGE view used for resources without a built-in layout."""
    return ResourceView(
        names=(),
        gvr=GroupVersionResource("", "", ""),
        namespaced=namespaced,
        columns=(("AGE", _age),),
        always_namespace_header=True,
    )


def _assign_widths(
    rows: Sequence[Sequence[str]],
    indices: Iterable[int],
    column: int,
    padding: int,
    widths: list[list[int]],
) -> None:
    # Consecutive rows that have a terminated cell in this column form a block
    # sharing one width; rows with fewer cells break the block.
    for has_cell, group in groupby(indices, key=lambda i: column < len(rows[i]) - 1):
        if not has_cell:
            continue
        block = list(group)
        width = max(len(rows[i][column]) + padding for i in block)
        for i in block:
            widths[i].append(width)
        _assign_widths(rows, block, column + 1, padding, widths)


def align_columns(rows: Iterable[Sequence[str]], padding: int = 2) -> list[str]:
    """Lay out rows of cells as lines with aligned columns.

    Every cell but the last of a row is padded to its column's width plus
    ``padding``; the last cell is written as it is.
    """
    table = [list(row) for row in rows]
    widths: list[list[int]] = [[] for _ in table]
    _assign_widths(table, range(len(table)), 0, padding, widths)
    lines = []
    for row, row_widths in zip(table, widths):
        if not row:
            lines.append("")
            continue
        padded = "".join(cell.ljust(width) for cell, width in zip(row, row_widths))
        lines.append(padded + row[-1])
    return lines