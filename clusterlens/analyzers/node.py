"""Detects nodes that report unhealthy conditions."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from clusterlens.common import AnalysisContext, Analyzer, Failure, Result, Sensitive
from clusterlens.metrics import ANALYZER_ERRORS
from clusterlens.util import get_parent, mask_string

KIND = "Node"


def _condition_failure(node_name: str, condition: dict[str, Any]) -> Failure:
    return Failure(
        text=(
            f"{node_name} has condition of type {condition.get('type', '')}, "
            f"reason {condition.get('reason', '')}: {condition.get('message', '')}"
        ),
        sensitive=[Sensitive(node_name, mask_string(node_name))],
    )


def _node_failures(node_name: str, conditions: list[dict[str, Any]]) -> Iterator[Failure]:
    for condition in conditions:
        status = condition.get("status", "")
        if condition.get("type") == "Ready":
            if status != "True":
                yield _condition_failure(node_name, condition)
        elif status != "False":
            yield _condition_failure(node_name, condition)


class NodeAnalyzer(Analyzer):
    """Reports nodes that are not ready or are under some pressure."""

    def analyze(self, context: AnalysisContext) -> list[Result]:
        ANALYZER_ERRORS.delete_partial_match({"analyzer_name": KIND})
        client = context.client
        pre_analysis: dict[str, tuple[dict[str, Any], list[Failure]]] = {}

        for node in client.list(KIND):
            meta: dict[str, Any] = node.get("metadata") or {}
            name = meta.get("name", "")
            conditions = (node.get("status") or {}).get("conditions") or []
            failures = list(_node_failures(name, conditions))
            if failures:
                pre_analysis[name] = (meta, failures)
                ANALYZER_ERRORS.set(len(failures), KIND, name, "")

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