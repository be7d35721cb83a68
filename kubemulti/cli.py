"""Command line entry point for multi-cluster resource operations."""

from __future__ import annotations

import argparse
import os
import sys
from typing import Sequence, TextIO

from kubemulti.discovery import discover_clusters
from kubemulti.get import GetError, run_get

_DESCRIPTION = """\
kubectl-multi provides multi-cluster operations for KubeStellar managed clusters.
It executes kubectl commands across all managed clusters and presents unified output.

This plugin automatically discovers KubeStellar managed clusters and executes
kubectl operations across all of them, displaying results with cluster context
information for easy identification."""

_EXAMPLES = """\
Examples:
  # Get nodes from all managed clusters
  kubectl multi get nodes

  # Get pods from all clusters in default namespace
  kubectl multi get pods

  # Get pods from all clusters in all namespaces
  kubectl multi get pods -A

  # Describe a specific pod across all clusters
  kubectl multi describe pod mypod

  # Get services in specific namespace across all clusters
  kubectl multi get services -n kube-system"""

_GET_EXAMPLES = """\
Examples:
  # List all pods in all managed clusters
  kubectl multi get pods

  # List deployments in specific namespace across all clusters
  kubectl multi get deployments -n production

  # Get pods with labels
  kubectl multi get pods -l app=nginx

  # Get specific pod across all clusters
  kubectl multi get pod nginx-pod"""

_UNAVAILABLE = (
    ("delete", "Delete resources across all managed clusters"),
    ("logs", "Print the logs for a container in a pod across managed clusters"),
    ("exec", "Execute a command in a container across managed clusters"),
    ("create", "Create a resource from a file or from stdin across managed clusters"),
    ("edit", "Edit a resource on the server across managed clusters"),
    ("patch", "Update field(s) of a resource across managed clusters"),
    ("scale", "Set a new size for a deployment, replica set, or stateful set across managed clusters"),
    ("rollout", "Manage the rollout of a resource across managed clusters"),
    ("port-forward", "Forward one or more local ports to a pod across managed clusters"),
    ("top", "Display resource (CPU/memory/storage) usage across managed clusters"),
)


class CommandError(Exception):
    """Raised when a command cannot be carried out."""


def _add_global_options(parser: argparse.ArgumentParser, inherited: bool) -> None:
    def default(value: object) -> object:
        return argparse.SUPPRESS if inherited else value

    parser.add_argument(
        "--kubeconfig", default=default(""),
        help="path to kubeconfig file (defaults to $HOME/.kube/config)",
    )
    parser.add_argument(
        "--remote-context", dest="remote_context", default=default("its1"),
        help="remote hosting context for ManagedCluster resources",
    )
    parser.add_argument(
        "--all-clusters", dest="all_clusters", action=argparse.BooleanOptionalAction,
        default=default(True), help="operate on all managed clusters",
    )
    parser.add_argument("-n", "--namespace", default=default(""), help="target namespace")
    parser.add_argument(
        "-A", "--all-namespaces", dest="all_namespaces", action="store_true",
        default=default(False), help="list resources across all namespaces",
    )


def run_describe(
    args: Sequence[str],
    kubeconfig: str | os.PathLike[str] | None = None,
    remote_context: str = "",
    namespace: str = "",
    all_namespaces: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Write a section for every discovered cluster for the requested resource."""
    if not args:
        raise CommandError("resource type must be specified")
    out = stream if stream is not None else sys.stdout
    clusters = discover_clusters(kubeconfig or None, remote_context)
    out.write(f"Describing {args[0]} across {len(clusters)} clusters...\n\n")
    for cluster in clusters:
        if cluster.client is None:
            continue
        out.write(f"=== Cluster: {cluster.name} (Context: {cluster.context}) ===\n")
        out.write(f"Describe output for cluster {cluster.name} is unavailable\n")
        out.write("\n")
    out.flush()


def _handle_get(options: argparse.Namespace, stream: TextIO) -> None:
    run_get(
        options.args, options.output, options.selector, options.show_labels,
        options.watch, options.watch_only, options.kubeconfig or None,
        options.remote_context, options.namespace, options.all_namespaces, stream,
    )


def _handle_describe(options: argparse.Namespace, stream: TextIO) -> None:
    run_describe(
        options.args, options.kubeconfig or None, options.remote_context,
        options.namespace, options.all_namespaces, stream,
    )


def _unavailable(name: str):
    def handler(options: argparse.Namespace, stream: TextIO) -> None:
        raise CommandError(f"{name} is not available in multi-cluster mode")

    return handler


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with the global options and every subcommand."""
    parser = argparse.ArgumentParser(
        prog="kubectl-multi",
        description=_DESCRIPTION,
        epilog=_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_global_options(parser, inherited=False)
    common = argparse.ArgumentParser(add_help=False)
    _add_global_options(common, inherited=True)

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    get = commands.add_parser(
        "get", parents=[common],
        help="Display one or many resources across all managed clusters",
        description="Get resources from all managed clusters and display them in a unified view.",
        epilog=_GET_EXAMPLES, formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    get.add_argument("args", nargs="*", metavar="TYPE [NAME]")
    get.add_argument("-o", "--output", default="", help="output format")
    get.add_argument("-l", "--selector", default="", help="selector (label query) to filter on")
    get.add_argument("--show-labels", dest="show_labels", action="store_true",
                     help="show all labels as the last column")
    get.add_argument("-w", "--watch", action="store_true",
                     help="watch for changes to the requested object(s)")
    get.add_argument("--watch-only", dest="watch_only", action="store_true",
                     help="watch for changes without listing first")
    get.set_defaults(handler=_handle_get)

    describe = commands.add_parser(
        "describe", parents=[common],
        help="Show details of a specific resource or group of resources across managed clusters",
    )
    describe.add_argument("args", nargs="*", metavar="TYPE [NAME]")
    describe.set_defaults(handler=_handle_describe)

    apply = commands.add_parser(
        "apply", parents=[common],
        help="Apply a configuration to resources across all managed clusters",
    )
    apply.add_argument("-f", "--filename", default="",
                       help="filename, directory, or URL to files to use to apply the resource")
    apply.add_argument("-R", "--recursive", action="store_true",
                       help="process the directory used in -f, --filename recursively")
    apply.add_argument("--dry-run", dest="dry_run", default="none",
                       help='must be "none", "server", or "client"')
    apply.set_defaults(handler=_unavailable("apply"))

    for name, summary in _UNAVAILABLE:
        sub = commands.add_parser(name, parents=[common], help=summary)
        sub.add_argument("args", nargs=argparse.REMAINDER)
        sub.set_defaults(handler=_unavailable(name))

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; return the process exit status."""
    parser = build_parser()
    options = parser.parse_args(argv)
    handler = getattr(options, "handler", None)
    if handler is None:
        parser.print_help(sys.stdout)
        return 0
    try:
        handler(options, sys.stdout)
    except (CommandError, GetError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())