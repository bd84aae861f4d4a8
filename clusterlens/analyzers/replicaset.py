"""Detects replica sets that fail to create their pods."""

from __future__ import annotations

from typing import Any

from clusterlens.common import AnalysisContext, Analyzer, Failure, Result
from clusterlens.metrics import ANALYZER_ERRORS
from clusterlens.util import get_parent

KIND = "ReplicaSet"


class ReplicaSetAnalyzer(Analyzer):
    """Reports empty replica sets with a failed-create condition."""

    def analyze(self, context: AnalysisContext) -> list[Result]:
        ANALYZER_ERRORS.delete_partial_match({"analyzer_name": KIND})
        client = context.client
        pre_analysis: dict[str, tuple[dict[str, Any], list[Failure]]] = {}

        for replicaset in client.list(KIND, context.namespace):
            status = replicaset.get("status") or {}
            failures = []
            if status.get("replicas", 0) == 0:
                failures = [
                    Failure(text=condition.get("message", ""))
                    for condition in status.get("conditions") or ()
                    if condition.get("type") == "ReplicaFailure"
                    and condition.get("reason") == "FailedCreate"
                ]
            if failures:
                meta = replicaset.get("metadata") or {}
                name = meta.get("name", "")
                namespace = meta.get("namespace", "")
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