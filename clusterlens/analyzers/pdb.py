"""Detects pod disruption budgets that currently forbid any disruption."""

from __future__ import annotations

from typing import Any

from clusterlens.common import AnalysisContext, Analyzer, Failure, Result, Sensitive
from clusterlens.kube import GroupVersion, K8sApiReference
from clusterlens.metrics import ANALYZER_ERRORS
from clusterlens.util import get_parent, mask_string

KIND = "PodDisruptionBudget"


class PdbAnalyzer(Analyzer):
    """Reports budgets whose first condition disallows disruption."""

    def analyze(self, context: AnalysisContext) -> list[Result]:
        api_doc = K8sApiReference(
            api_version=GroupVersion("policy", "v1"),
            kind=KIND,
            openapi_schema=context.openapi_schema,
        )
        ANALYZER_ERRORS.delete_partial_match({"analyzer_name": KIND})
        client = context.client
        pre_analysis: dict[str, tuple[dict[str, Any], list[Failure]]] = {}

        for pdb in client.list(KIND, context.namespace):
            meta: dict[str, Any] = pdb.get("metadata") or {}
            name = meta.get("name", "")
            namespace = meta.get("namespace", "")
            spec = pdb.get("spec") or {}
            conditions = (pdb.get("status") or {}).get("conditions") or []
            failures = []

            first = conditions[0] if conditions else {}
            if first.get("type") == "DisruptionAllowed" and first.get("status") == "False":
                doc = ""
                if spec.get("maxUnavailable") is not None:
                    doc = api_doc.get_api_doc_v2("spec.maxUnavailable")
                if spec.get("minAvailable") is not None:
                    doc = api_doc.get_api_doc_v2("spec.minAvailable")
                selector = spec.get("selector")
                match_labels = (selector or {}).get("matchLabels")
                if match_labels is not None:
                    reason = first.get("reason", "")
                    for key, value in match_labels.items():
                        failures.append(
                            Failure(
                                text=f"{reason}, expected pdb pod label {key}={value}",
                                kubernetes_doc=doc,
                                sensitive=[
                                    Sensitive(key, mask_string(key)),
                                    Sensitive(value, mask_string(value)),
                                ],
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