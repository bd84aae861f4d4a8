"""Detects autoscalers whose scale target is missing or has no resources set."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from clusterlens.common import AnalysisContext, Analyzer, Failure, Result, Sensitive
from clusterlens.kube import GroupVersion, K8sApiReference, NotFoundError
from clusterlens.metrics import ANALYZER_ERRORS
from clusterlens.util import get_parent, mask_string

KIND = "HorizontalPodAutoscaler"

SCALABLE_KINDS = frozenset({"Deployment", "ReplicationController", "ReplicaSet", "StatefulSet"})


def get_pod_spec(workload: Mapping[str, Any]) -> dict[str, Any]:
    """Return the pod spec of a workload's pod template, or an empty spec."""
    template = (workload.get("spec") or {}).get("template") or {}
    return template.get("spec") or {}


def _has_resources(container: Mapping[str, Any]) -> bool:
    resources = container.get("resources") or {}
    return resources.get("requests") is not None and resources.get("limits") is not None


class HpaAnalyzer(Analyzer):
    """Reports autoscalers pointing at missing or unconfigured workloads."""

    def analyze(self, context: AnalysisContext) -> list[Result]:
        api_doc = K8sApiReference(
            api_version=GroupVersion("autoscaling", "v1"),
            kind=KIND,
            openapi_schema=context.openapi_schema,
        )
        ANALYZER_ERRORS.delete_partial_match({"analyzer_name": KIND})
        client = context.client
        pre_analysis: dict[str, tuple[dict[str, Any], list[Failure]]] = {}

        for hpa in client.list(KIND, context.namespace):
            meta: dict[str, Any] = hpa.get("metadata") or {}
            name = meta.get("name", "")
            namespace = meta.get("namespace", "")
            target = (hpa.get("spec") or {}).get("scaleTargetRef") or {}
            target_kind = target.get("kind", "") or ""
            target_name = target.get("name", "") or ""
            failures = []

            workload = None
            if target_kind in SCALABLE_KINDS:
                try:
                    workload = client.get(target_kind, target_name, namespace)
                except NotFoundError:
                    workload = None
            else:
                failures.append(
                    Failure(
                        text=(
                            f"HorizontalPodAutoscaler uses {target_kind} as ScaleTargetRef "
                            "which is not an option."
                        )
                    )
                )

            if workload is None:
                failures.append(
                    Failure(
                        text=(
                            f"HorizontalPodAutoscaler uses {target_kind}/{target_name} "
                            "as ScaleTargetRef which does not exist."
                        ),
                        kubernetes_doc=api_doc.get_api_doc_v2("spec.scaleTargetRef"),
                        sensitive=[Sensitive(target_name, mask_string(target_name))],
                    )
                )
            else:
                containers = get_pod_spec(workload).get("containers") or []
                configured = sum(1 for container in containers if _has_resources(container))
                if configured <= 0:
                    failures.append(
                        Failure(
                            text=(
                                f"{target_kind} {context.namespace}/{target_name} "
                                "does not have resource configured."
                            ),
                            kubernetes_doc=api_doc.get_api_doc_v2("spec.scaleTargetRef.kind"),
                            sensitive=[Sensitive(target_name, mask_string(target_name))],
                        )
                    )

            if failures:
                pre_analysis[f"{namespace}/{name}"] = (meta, failures)
                ANALYZER_ERRORS.set(len(failures), KIND, name, namespace)

        results = list(context.results)
        for key, (meta, failures) in pre_analysis.items():
            results.append(
                Result(
                    kind=KIND,
                    name=key,
                    error=failures,
                    parent_object=get_parent(client, meta),
                )
            )
        return results