# clusterlens

clusterlens looks at Kubernetes objects and points out the ones that are
likely broken: pods stuck in a crash loop or failing their readiness probe,
deployments that do not reach their replica count, services with no
endpoints, ingresses that refer to classes, services or secrets that do not
exist, invalid cron schedules, unhealthy nodes, and more.

Each finding comes back as a `Result` (`clusterlens.common`). It names the
kind of object and its `namespace/name` (just the name for nodes), the
top-level owner it belongs to where one can be found, and holds a list of
`Failure` entries. Every failure carries a human-readable text, an optional
excerpt from the Kubernetes API reference, and the sensitive values
(namespaces, object names, labels) it mentions, each paired with a random
masked stand-in so that reports can be shared without exposing cluster
details.

## What is checked

Core analyzers (`clusterlens.registry.CORE_ANALYZERS`):

| Name | Analyzer | Module |
| --- | --- | --- |
| Pod | `PodAnalyzer` | `clusterlens.analyzers.pod` |
| Deployment | `DeploymentAnalyzer` | `clusterlens.analyzers.deployment` |
| ReplicaSet | `ReplicaSetAnalyzer` | `clusterlens.analyzers.replicaset` |
| PersistentVolumeClaim | `PvcAnalyzer` | `clusterlens.analyzers.pvc` |
| Service | `ServiceAnalyzer` | `clusterlens.analyzers.service` |
| Ingress | `IngressAnalyzer` | `clusterlens.analyzers.ingress` |
| StatefulSet | `StatefulSetAnalyzer` | `clusterlens.analyzers.statefulset` |
| CronJob | `CronJobAnalyzer` | `clusterlens.analyzers.cronjob` |
| Node | `NodeAnalyzer` | `clusterlens.analyzers.node` |
| ValidatingWebhookConfiguration | `ValidatingWebhookAnalyzer` | `clusterlens.analyzers.webhook` |
| MutatingWebhookConfiguration | `MutatingWebhookAnalyzer` | `clusterlens.analyzers.webhook` |

Additional analyzers (`clusterlens.registry.ADDITIONAL_ANALYZERS`):

| Name | Analyzer | Module |
| --- | --- | --- |
| HorizontalPodAutoScaler | `HpaAnalyzer` | `clusterlens.analyzers.hpa` |
| PodDisruptionBudget | `PdbAnalyzer` | `clusterlens.analyzers.pdb` |
| NetworkPolicy | `NetworkPolicyAnalyzer` | `clusterlens.analyzers.netpol` |

`clusterlens.analyzers.cronjob.check_cron_schedule_is_valid` can also be used
on its own: it returns `True` for a valid five-field schedule or descriptor
(`@daily`, `@every 1h30m`, optionally prefixed with `TZ=` or `CRON_TZ=`) and
raises `CronScheduleError` otherwise.

Integrations can add analyzers of their own. The Trivy integration
(`clusterlens.integrations.trivy.Trivy`) adds `VulnerabilityReport` and
`ConfigAuditReport` analysis through `TrivyAnalyzer`
(`clusterlens.integrations.trivy_analyzer`) once it is active. These read
`VulnerabilityReport` and `ConfigAuditReport` objects from the client and
report critical vulnerabilities, and config checks of medium severity or
higher.

## Using it

`clusterlens.kube.Client` is an in-memory store of cluster objects, given as
plain mappings in the shape of Kubernetes manifests. You add objects with
`Client.add` (or pass them to the constructor), and the analyzers read them
back through `Client.list`, which supports namespace, label selector and field
selector filtering, and `Client.get`, which raises `NotFoundError` when the
object is not there.

```python
from clusterlens.analyzers.deployment import DeploymentAnalyzer
from clusterlens.common import AnalysisContext
from clusterlens.kube import Client

client = Client()
client.add({
    "kind": "Deployment",
    "metadata": {"name": "example", "namespace": "default"},
    "spec": {"replicas": 3},
    "status": {"replicas": 2},
})

context = AnalysisContext(client=client, namespace="default")
for result in DeploymentAnalyzer().analyze(context):
    print(result.kind, result.name)
    for failure in result.error:
        print("  -", failure.text)
```

An empty namespace in the context means every namespace. `Result.to_dict()`
turns a result into plain data for JSON or YAML output.

To get every analyzer, including those contributed by active integrations,
use `clusterlens.registry` with an `IntegrationRegistry`, which keeps its
active filters in a `Config` file:

```python
from clusterlens.config import Config
from clusterlens.integration import IntegrationRegistry
from clusterlens.registry import get_analyzer_map, list_filters

integrations = IntegrationRegistry(Config("clusterlens.yaml"))
core, additional, from_integrations = list_filters(integrations)
core_map, merged_map = get_analyzer_map(integrations)
```

`IntegrationRegistry.activate` installs an integration (unless told to skip
that) and adds its analyzers to the `active_filters` setting;
`deactivate` removes them and uninstalls it; `analyzer_by_integration` tells
which integration provides a given analyzer. Unknown names raise
`IntegrationNotFoundError`.

## Helpers

`clusterlens.util` holds the small pieces the analyzers share:
`mask_string` for anonymising values, `get_parent` for walking owner
references up to the top-level workload, `map_to_string` for turning a label
map into a selector, `get_pod_list_by_labels`, `remove_duplicates`,
`slice_diff`, `slice_contains_string`, `replace_if_match`, `get_cache_key`
(a SHA-256 hex key), `file_exists` and `ensure_dir_exists`.

`clusterlens.events.fetch_latest_event` returns the most recent event about a
named object.

`clusterlens.kube.K8sApiReference.get_api_doc_v2` looks up the description of
a field path such as `spec.replicas` in an OpenAPI v2 (Swagger) document
passed as `AnalysisContext.openapi_schema`, so findings can quote the relevant
part of the API reference. Without a schema the excerpt is empty.

`clusterlens.metrics.GaugeVec` is a labelled gauge; `ANALYZER_ERRORS` holds
the number of failures per analyzer, object and namespace from the latest run.

## Caching and configuration

`clusterlens.config.Config` is a YAML settings file with case-insensitive
keys (`get`, `set`, `get_string_list`, `write`).

`clusterlens.cache.FileBasedCache` stores cached text as files, by default in
the user's cache directory under `clusterlens`, each written readable by the
owner only. `new_cache` returns one for the `file` cache type (and for
unknown types). Remote cache settings (`CacheProvider`) live in the `cache`
entry of a `Config` and are managed with `add_remote_cache`,
`remove_remote_cache` and `remote_cache_enabled`; problems raise
`CacheError`.

## What it does not do

- It does not connect to a live cluster. Objects have to be loaded into a
  `Client` by the caller.
- It has no command line and no server; it is used as a library.
- It does not produce AI explanations of the findings.
- The S3 and Azure cache types can be configured, but `new_cache` raises
  `CacheError` for them: only the file cache is available.
- The Trivy integration keeps its installed release in an
  `InMemoryReleaseManager`; deploying it records the release but does not
  install anything into a cluster.