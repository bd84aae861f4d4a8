"""Detects persistent volume claims whose provisioning failed."""

from __future__ import annotations

from typing import Any

from clusterlens.common import AnalysisContext, Analyzer, Failure, Result
from clusterlens.events import fetch_latest_event
from clusterlens.metrics import ANALYZER_ERRORS
from clusterlens.util import get_parent

KIND = "PersistentVolumeClaim"


class PvcAnalyzer(Analyzer):
    """Reports pending claims whose latest event is a provisioning failure."""

    def analyze(self, context: AnalysisContext) -> list[Result]:
        ANALYZER_ERRORS.delete_partial_match({"analyzer_name": KIND})
        client = context.client
        pre_analysis: dict[str, tuple[dict[str, Any], list[Failure]]] = {}

        for claim in client.list(KIND, context.namespace):
            meta = claim.get("metadata") or {}
            name = meta.get("name", "")
            namespace = meta.get("namespace", "")
            if (claim.get("status") or {}).get("phase") != "Pending":
                continue
            try:
                event = fetch_latest_event(client, namespace, name)
            except (LookupError, ValueError):
                continue
            if event is None:
                continue
            if event.get("reason") == "ProvisioningFailed" and event.get("message"):
                failures = [Failure(text=event["message"])]
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