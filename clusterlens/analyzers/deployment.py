"""Detects deployments whose replica count differs from the desired one."""

from __future__ import annotations

from typing import Any

from clusterlens.common import AnalysisContext, Analyzer, Failure, Result, Sensitive
from clusterlens.kube import GroupVersion, K8sApiReference
from clusterlens.metrics import ANALYZER_ERRORS
from clusterlens.util import mask_string

KIND = "Deployment"


class DeploymentAnalyzer(Analyzer):
    """Reports deployments whose replicas do not match the spec."""

    def analyze(self, context: AnalysisContext) -> list[Result]:
        api_doc = K8sApiReference(
            api_version=GroupVersion("apps", "v1"),
            kind=KIND,
            openapi_schema=context.openapi_schema,
        )
        ANALYZER_ERRORS.delete_partial_match({"analyzer_name": KIND})

        pre_analysis: dict[str, list[Failure]] = {}
        for deployment in context.client.list(KIND, context.namespace):
            meta: dict[str, Any] = deployment.get("metadata") or {}
            name = meta.get("name", "")
            namespace = meta.get("namespace", "")
            spec_replicas = (deployment.get("spec") or {}).get("replicas", 1)
            status_replicas = (deployment.get("status") or {}).get("replicas", 0)

            failures = []
            if spec_replicas != status_replicas:
                failures.append(
                    Failure(
                        text=(
                            f"Deployment {namespace}/{name} has {spec_replicas} replicas "
                            f"but {status_replicas} are available"
                        ),
                        kubernetes_doc=api_doc.get_api_doc_v2("spec.replicas"),
                        sensitive=[
                            Sensitive(namespace, mask_string(namespace)),
                            Sensitive(name, mask_string(name)),
                        ],
                    )
                )
            if failures:
                pre_analysis[f"{namespace}/{name}"] = failures
                ANALYZER_ERRORS.set(len(failures), KIND, name, namespace)

        results = list(context.results)
        results.extend(
            Result(kind=KIND, name=key, error=failures)
            for key, failures in pre_analysis.items()
        )
        return results