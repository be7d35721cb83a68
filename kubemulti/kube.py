"""Kubeconfig loading and a small REST client for the Kubernetes API."""

from __future__ import annotations

import atexit
import base64
import binascii
import contextlib
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import requests
import yaml

from kubemulti.resources import GroupVersionResource


class KubeConfigError(ValueError):
    """Raised when a kubeconfig cannot be read or does not describe a usable cluster."""


class ApiError(RuntimeError):
    """Raised when the API server cannot be reached or answers with an error."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def default_kubeconfig_path() -> Path:
    """Return the kubeconfig named by KUBECONFIG, else ~/.kube/config."""
    env = os.environ.get("KUBECONFIG", "")
    entries = [Path(entry) for entry in env.split(os.pathsep) if entry]
    for entry in entries:
        if entry.exists():
            return entry
    if entries:
        return entries[0]
    return Path.home() / ".kube" / "config"


def _write_temp(data: bytes) -> str:
    handle = tempfile.NamedTemporaryFile(prefix="kubemulti-", suffix=".pem", delete=False)
    with handle:
        handle.write(data)
    atexit.register(_remove_quietly, handle.name)
    return handle.name


def _remove_quietly(path: str) -> None:
    with contextlib.suppress(OSError):
        os.unlink(path)


class KubeClient:
    """Read-only access to one API server."""

    def __init__(self, server: str, *, session: requests.Session | None = None, timeout: float = 30.0) -> None:
        self.server = server.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get(self, path: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        try:
            response = self.session.get(self.server + path, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ApiError(str(exc)) from exc
        if response.status_code >= 400:
            try:
                message = response.json().get("message") or response.reason
            except ValueError:
                message = response.text or response.reason
            raise ApiError(f"{response.status_code}: {message}", status=response.status_code)
        try:
            body = response.json()
        except ValueError as exc:
            raise ApiError(f"invalid response from {path}") from exc
        if not isinstance(body, dict):
            raise ApiError(f"invalid response from {path}")
        return body

    def list(
        self,
        gvr: GroupVersionResource,
        namespace: str | None = None,
        label_selector: str = "",
    ) -> list[dict[str, Any]]:
        """List objects of a resource, in one namespace or across all of them."""
        path = gvr.api_prefix
        if namespace:
            path += f"/namespaces/{namespace}"
        path += f"/{gvr.resource}"
        params = {"labelSelector": label_selector} if label_selector else None
        return self._get(path, params).get("items") or []

    def server_groups_and_resources(self) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        """Return the server's API groups and the resource list of every group version."""
        groups: list[dict[str, Any]] = []
        resource_lists: list[dict[str, Any]] = []

        core_versions = self._get("/api").get("versions") or []
        if core_versions:
            groups.append(
                {"name": "", "versions": [{"groupVersion": v, "version": v} for v in core_versions]}
            )
        for version in core_versions:
            resource_lists.append(self._get(f"/api/{version}"))

        for group in self._get("/apis").get("groups") or []:
            groups.append(group)
            for version in group.get("versions") or []:
                group_version = version.get("groupVersion")
                if group_version:
                    resource_lists.append(self._get(f"/apis/{group_version}"))

        return groups, resource_lists


@dataclass
class KubeConfig:
    """The contexts, clusters and users of a kubeconfig file."""

    current_context: str = ""
    contexts: dict[str, dict[str, Any]] = field(default_factory=dict)
    clusters: dict[str, dict[str, Any]] = field(default_factory=dict)
    users: dict[str, dict[str, Any]] = field(default_factory=dict)
    base_dir: Path = field(default_factory=Path.cwd)

    def current_context_name(self, override: str | None = None) -> str:
        """Return the context to use: the override if given, else the current one."""
        return override or self.current_context

    def cluster_for_context(self, context: str) -> str:
        """Return the cluster name a context points at, or <unknown>."""
        entry = self.contexts.get(context)
        if entry is None:
            return "<unknown>"
        return entry.get("cluster", "")

    def _resolve(self, path: str) -> str:
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = self.base_dir / candidate
        return str(candidate)

    def _credential_file(self, data: str | None, path: str | None) -> str | None:
        if data:
            try:
                return _write_temp(base64.b64decode(data))
            except (binascii.Error, ValueError) as exc:
                raise KubeConfigError(f"invalid base64 credential data: {exc}") from exc
        if path:
            return self._resolve(path)
        return None

    def client_for(self, context: str | None = None) -> KubeClient:
        """Build a client for a context, the current one when none is given."""
        name = self.current_context_name(context)
        if not name:
            raise KubeConfigError("invalid configuration: no configuration has been provided")
        entry = self.contexts.get(name)
        if entry is None:
            raise KubeConfigError(f'context "{name}" does not exist')
        cluster_name = entry.get("cluster", "")
        cluster = self.clusters.get(cluster_name)
        if cluster is None:
            raise KubeConfigError(f'cluster "{cluster_name}" of context "{name}" does not exist')
        server = cluster.get("server")
        if not server:
            raise KubeConfigError(f'cluster "{cluster_name}" has no server')
        user = self.users.get(entry.get("user", ""), {})

        session = requests.Session()
        if cluster.get("insecure-skip-tls-verify"):
            session.verify = False
        else:
            ca = self._credential_file(
                cluster.get("certificate-authority-data"), cluster.get("certificate-authority")
            )
            session.verify = ca if ca else True

        cert = self._credential_file(user.get("client-certificate-data"), user.get("client-certificate"))
        key = self._credential_file(user.get("client-key-data"), user.get("client-key"))
        if cert and key:
            session.cert = (cert, key)
        elif cert:
            session.cert = cert

        bearer = user.get("token")
        if not bearer and user.get("tokenFile"):
            try:
                bearer = Path(self._resolve(user["tokenFile"])).read_text(encoding="utf-8").strip()
            except OSError as exc:
                raise KubeConfigError(f"cannot read token file: {exc}") from exc
        if bearer:
            session.headers["Authorization"] = f"Bearer {bearer}"
        elif user.get("username"):
            session.auth = (user["username"], user.get("password", ""))

        return KubeClient(server, session=session)


def load_kubeconfig(path: str | os.PathLike[str] | None = None) -> KubeConfig:
    """Read a kubeconfig file, the default one when no path is given."""
    config_path = Path(path) if path else default_kubeconfig_path()
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise KubeConfigError(f"cannot read kubeconfig {config_path}: {exc}") from exc
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise KubeConfigError(f"invalid kubeconfig {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise KubeConfigError(f"invalid kubeconfig {config_path}: not a mapping")

    def named(section: str, key: str) -> dict[str, dict[str, Any]]:
        return {
            entry["name"]: entry.get(key) or {}
            for entry in data.get(section) or []
            if isinstance(entry, dict) and "name" in entry
        }

    return KubeConfig(
        current_context=data.get("current-context") or "",
        contexts=named("contexts", "context"),
        clusters=named("clusters", "cluster"),
        users=named("users", "user"),
        base_dir=config_path.resolve().parent,
    )