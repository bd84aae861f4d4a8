"""Detects network policies that match every pod or no pod at all."""

from __future__ import annotations

from typing import Any

from clusterlens.common import AnalysisContext, Analyzer, Failure, Result, Sensitive
from clusterlens.kube import GroupVersion, K8sApiReference
from clusterlens.metrics import ANALYZER_ERRORS
from clusterlens.util import get_pod_list_by_labels, mask_string

KIND = "NetworkPolicy"


class NetworkPolicyAnalyzer(Analyzer):
    """Reports policies that select all pods or apply to none."""

    def analyze(self, context: AnalysisContext) -> list[Result]:
        api_doc = K8sApiReference(
            api_version=GroupVersion("networking", "v1"),
            kind=KIND,
            openapi_schema=context.openapi_schema,
        )
        ANALYZER_ERRORS.delete_partial_match({"analyzer_name": KIND})
        client = context.client
        pre_analysis: dict[str, list[Failure]] = {}

        for policy in client.list(KIND, context.namespace):
            meta: dict[str, Any] = policy.get("metadata") or {}
            name = meta.get("name", "")
            namespace = meta.get("namespace", "")
            selector = (policy.get("spec") or {}).get("podSelector") or {}
            match_labels = selector.get("matchLabels") or {}
            sensitive = [Sensitive(name, mask_string(name))]
            failures = []

            if not match_labels:
                failures.append(
                    Failure(
                        text=f"Network policy allows traffic to all pods: {name}",
                        kubernetes_doc=api_doc.get_api_doc_v2("spec.podSelector.matchLabels"),
                        sensitive=sensitive,
                    )
                )
            elif not get_pod_list_by_labels(client, context.namespace, match_labels):
                failures.append(
                    Failure(
                        text=f"Network policy is not applied to any pods: {name}",
                        sensitive=sensitive,
                    )
                )

            if failures:
                pre_analysis[f"{namespace}/{name}"] = failures
                ANALYZER_ERRORS.set(len(failures), KIND, name, namespace)

        results = list(context.results)
        results.extend(
            Result(kind=KIND, name=key, error=failures) for key, failures in pre_analysis.items()
        )
        return results