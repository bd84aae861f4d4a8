"""Detects services without endpoints or with endpoints that are not ready."""

from __future__ import annotations

import sys
from typing import Any

from clusterlens.common import AnalysisContext, Analyzer, Failure, Result, Sensitive
from clusterlens.kube import GroupVersion, K8sApiReference, NotFoundError
from clusterlens.metrics import ANALYZER_ERRORS
from clusterlens.util import get_parent, mask_string

KIND = "Service"
LEADER_ELECTION_ANNOTATION = "control-plane.alpha.kubernetes.io/leader"


def _warn(message: str) -> None:
    if sys.stdout.isatty():
        message = f"\033[33m{message}\033[0m"
    print(message)


class ServiceAnalyzer(Analyzer):
    """Reports services whose endpoints are missing or not ready."""

    def analyze(self, context: AnalysisContext) -> list[Result]:
        api_doc = K8sApiReference(
            api_version=GroupVersion("", "v1"),
            kind=KIND,
            openapi_schema=context.openapi_schema,
        )
        ANALYZER_ERRORS.delete_partial_match({"analyzer_name": KIND})
        client = context.client
        pre_analysis: dict[str, tuple[dict[str, Any], list[Failure]]] = {}

        for endpoints in client.list("Endpoints", context.namespace):
            meta: dict[str, Any] = endpoints.get("metadata") or {}
            name = meta.get("name", "")
            namespace = meta.get("namespace", "")
            subsets = endpoints.get("subsets") or []
            failures = []

            if not subsets:
                if LEADER_ELECTION_ANNOTATION in (meta.get("annotations") or {}):
                    continue
                try:
                    service = client.get(KIND, name, namespace)
                except NotFoundError:
                    _warn(f"Service {namespace}/{name} does not exist")
                    continue
                selector = (service.get("spec") or {}).get("selector") or {}
                for key, value in selector.items():
                    failures.append(
                        Failure(
                            text=f"Service has no endpoints, expected label {key}={value}",
                            kubernetes_doc=api_doc.get_api_doc_v2("spec.selector"),
                            sensitive=[
                                Sensitive(key, mask_string(key)),
                                Sensitive(value, mask_string(value)),
                            ],
                        )
                    )
            else:
                count = 0
                pods: list[str] = []
                for subset in subsets:
                    api_doc.kind = "Endpoints"
                    not_ready = subset.get("notReadyAddresses") or []
                    if not not_ready:
                        continue
                    for address in not_ready:
                        count += 1
                        target = address.get("targetRef") or {}
                        pods.append(f"{target.get('kind', '')}/{target.get('name', '')}")
                    failures.append(
                        Failure(
                            text=(
                                f"Service has not ready endpoints, pods: [{' '.join(pods)}], "
                                f"expected {count}"
                            ),
                            kubernetes_doc=api_doc.get_api_doc_v2("subsets.notReadyAddresses"),
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