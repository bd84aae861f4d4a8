"""Detects pods that cannot be scheduled, crash, or fail their probes."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from clusterlens.common import AnalysisContext, Analyzer, Failure, Result
from clusterlens.events import fetch_latest_event
from clusterlens.kube import Client
from clusterlens.metrics import ANALYZER_ERRORS
from clusterlens.util import get_parent

KIND = "Pod"

_BACKOFF_REASONS = frozenset({"CrashLoopBackOff", "ImagePullBackOff"})


def _latest_event(client: Client, namespace: str, name: str) -> dict[str, Any] | None:
    try:
        return fetch_latest_event(client, namespace, name)
    except (LookupError, ValueError):
        return None


def _pod_failures(client: Client, pod: dict[str, Any]) -> Iterator[Failure]:
    meta = pod.get("metadata") or {}
    status = pod.get("status") or {}
    phase = status.get("phase", "")
    namespace = meta.get("namespace", "")
    name = meta.get("name", "")

    if phase == "Pending":
        for condition in status.get("conditions") or ():
            if (
                condition.get("type") == "PodScheduled"
                and condition.get("reason") == "Unschedulable"
                and condition.get("message")
            ):
                yield Failure(text=condition["message"])

    for container in status.get("containerStatuses") or ():
        waiting = (container.get("state") or {}).get("waiting")
        if waiting is not None:
            reason = waiting.get("reason", "")
            if reason in _BACKOFF_REASONS and waiting.get("message"):
                yield Failure(text=waiting["message"])
            if reason == "ContainerCreating" and phase == "Pending":
                event = _latest_event(client, namespace, name)
                if event is None:
                    continue
                if event.get("reason") == "FailedCreatePodSandBox" and event.get("message"):
                    yield Failure(text=event["message"])
        elif not container.get("ready", False) and phase == "Running":
            event = _latest_event(client, namespace, name)
            if event is None:
                continue
            if event.get("reason") == "Unhealthy" and event.get("message"):
                yield Failure(text=event["message"])


class PodAnalyzer(Analyzer):
    """Reports pods that are unschedulable, crash-looping or not ready."""

    def analyze(self, context: AnalysisContext) -> list[Result]:
        ANALYZER_ERRORS.delete_partial_match({"analyzer_name": KIND})
        client = context.client
        pre_analysis: dict[str, tuple[dict[str, Any], list[Failure]]] = {}

        for pod in client.list(KIND, context.namespace):
            failures = list(_pod_failures(client, pod))
            if failures:
                meta = pod.get("metadata") or {}
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