# kubemulti

`kubemulti` lists Kubernetes resources from every KubeStellar managed cluster
at once and prints them as one table. Each row starts with the name of the
cluster it came from.

## How clusters are found

1. In the remote hosting context (`--remote-context`, default `its1`) the
   `managedclusters` resources of `cluster.open-cluster-management.io/v1` are
   listed. Their names are sorted.
2. A client is built for each name by using that name as a context in your
   kubeconfig. Names with no usable context are left out.
3. The kubeconfig's current context is added last, unless a cluster of the
   same name is already in the list.

Workload Description Space clusters are always skipped. These are names that
start with `wds` or contain `-wds-` or `_wds_`, in any letter case.

When something goes wrong, a `Warning:` line is printed and the work goes on
without that part. This happens when the kubeconfig cannot be read, a context
is missing, or the managed clusters cannot be listed.

## Installation

```
pip install .
```

This installs the `kubectl-multi` command. If its directory is on your `PATH`,
`kubectl` also finds it as the plugin `kubectl multi`.

## Usage

```
kubectl-multi get nodes
kubectl-multi get pods
kubectl-multi get pods -A
kubectl-multi get services -n kube-system
kubectl-multi get deployments -n production
kubectl-multi get pods -l app=nginx
kubectl-multi get pod nginx-pod
kubectl-multi get pods --show-labels
kubectl-multi describe pod mypod
```

Run `kubectl-multi` with no command to see the help.

### Global options

These options can go before or after the command name.

| Option | Default | Meaning |
| --- | --- | --- |
| `--kubeconfig PATH` | first existing entry of `$KUBECONFIG`, else `~/.kube/config` | kubeconfig file to use |
| `--remote-context NAME` | `its1` | context that hosts the `ManagedCluster` resources |
| `--all-clusters` / `--no-all-clusters` | on | accepted; every discovered cluster is always used |
| `-n`, `--namespace NS` | `default` | namespace for namespaced resources |
| `-A`, `--all-namespaces` | off | list across all namespaces and add a NAMESPACE column |

### `get`

```
kubectl-multi get TYPE [NAME] [-l SELECTOR] [--show-labels] [-o FORMAT]
```

These resource types have their own columns, laid out the way `kubectl`
shows them. Each type also accepts its short name.

- `nodes` (`no`)
- `pods` (`po`)
- `services` (`svc`)
- `deployments` (`deploy`)
- `namespaces` (`ns`)
- `configmaps` (`cm`)
- `secrets`
- `persistentvolumes` (`pv`)
- `persistentvolumeclaims` (`pvc`)

For any other type, each cluster's discovery endpoints (`/api` and `/apis`)
are searched for a matching resource. The match is on the plural name, the
singular name or a short name, and common aliases such as `rs`, `sts`, `ds`,
`cj`, `ing` and `sa` are expanded first. If nothing matches, a built-in guess
is used. Such types are shown with NAME and AGE columns.

- `NAME` keeps only objects with exactly that name.
- `-l` passes a label selector to the API server.
- `--show-labels` adds a LABELS column.
- `-o` is accepted, but the output is always the table.
- `-w`/`--watch` and `--watch-only` are rejected with an error.

### `describe`

```
kubectl-multi describe TYPE [NAME]
```

This prints a heading with the number of clusters, then one section per
cluster with its name and context. No object details are shown.

### Other commands

The parser accepts the following commands, but each one exits with status 1
and the message `Error: <command> is not available in multi-cluster mode`:

- `apply`
- `delete`
- `logs`
- `exec`
- `create`
- `edit`
- `patch`
- `scale`
- `rollout`
- `port-forward`
- `top`

## Authentication

The built-in client reads these kubeconfig fields:

- the cluster's `server`
- the cluster's `certificate-authority` and `certificate-authority-data`
- the cluster's `insecure-skip-tls-verify`
- the user's `client-certificate`, `client-key` and their `-data` forms
- the user's `token` and `tokenFile`
- the user's `username` and `password`

Relative paths are taken relative to the kubeconfig's directory.

## What it does not do

- It only reads. Nothing is created, changed or deleted on any cluster.
- It does not describe objects in detail, and it does not print JSON, YAML or
  other `-o` formats.
- It does not watch for changes.
- It does not run kubeconfig `exec` credential plugins or `auth-provider`
  entries. Clusters that need them cannot be reached.

## Using it from Python

```python
from kubemulti.discovery import discover_clusters
from kubemulti.get import collect_rows
from kubemulti.tables import align_columns

clusters = discover_clusters(None, "its1")
rows = collect_rows(clusters, "pods", all_namespaces=True)
print("\n".join(align_columns(rows, padding=2)))
```

Other useful pieces:

- `kubemulti.get.run_get` writes the whole table to a stream.
- `kubemulti.kube.load_kubeconfig` and `KubeConfig.client_for` give you a
  `KubeClient`. It has `list()` and `server_groups_and_resources()`.
- `kubemulti.resources.discover_gvr` resolves a type name on a server.

## Tests

```
pip install .[test]
pytest
```