"""Detects stateful sets that refer to missing services or storage classes."""

from __future__ import annotations

from typing import Any

from clusterlens.common import AnalysisContext, Analyzer, Failure, Result, Sensitive
from clusterlens.kube import GroupVersion, K8sApiReference, NotFoundError
from clusterlens.metrics import ANALYZER_ERRORS
from clusterlens.util import get_parent, mask_string

KIND = "StatefulSet"


class StatefulSetAnalyzer(Analyzer):
    """Reports stateful sets whose service or storage classes do not exist."""

    def analyze(self, context: AnalysisContext) -> list[Result]:
        api_doc = K8sApiReference(
            api_version=GroupVersion("apps", "v1"),
            kind=KIND,
            openapi_schema=context.openapi_schema,
        )
        ANALYZER_ERRORS.delete_partial_match({"analyzer_name": KIND})
        client = context.client
        pre_analysis: dict[str, tuple[dict[str, Any], list[Failure]]] = {}

        for statefulset in client.list(KIND, context.namespace):
            meta: dict[str, Any] = statefulset.get("metadata") or {}
            name = meta.get("name", "")
            namespace = meta.get("namespace", "")
            spec = statefulset.get("spec") or {}
            failures = []

            service_name = spec.get("serviceName", "") or ""
            try:
                client.get("Service", service_name, namespace)
            except NotFoundError:
                failures.append(
                    Failure(
                        text=(
                            f"StatefulSet uses the service {namespace}/{service_name} "
                            "which does not exist."
                        ),
                        kubernetes_doc=api_doc.get_api_doc_v2("spec.serviceName"),
                        sensitive=[
                            Sensitive(namespace, mask_string(namespace)),
                            Sensitive(service_name, mask_string(service_name)),
                        ],
                    )
                )

            for template in spec.get("volumeClaimTemplates") or ():
                storage_class = (template.get("spec") or {}).get("storageClassName")
                if storage_class is None:
                    continue
                try:
                    client.get("StorageClass", storage_class)
                except NotFoundError:
                    failures.append(
                        Failure(
                            text=(
                                f"StatefulSet uses the storage class {storage_class} "
                                "which does not exist."
                            ),
                            sensitive=[Sensitive(storage_class, mask_string(storage_class))],
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