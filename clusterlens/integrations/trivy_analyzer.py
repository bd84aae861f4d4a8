"""Turns vulnerability and config audit reports into analysis results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from clusterlens.common import AnalysisContext, Analyzer, Failure, Result, Sensitive
from clusterlens.util import get_parent, mask_string

_NAME_LABEL = "trivy-operator.resource.name"
_NAMESPACE_LABEL = "trivy-operator.resource.namespace"
_CONFIG_SEVERITIES = frozenset({"MEDIUM", "HIGH", "CRITICAL"})


def _report_key(labels: dict[str, str]) -> str:
    return f"{labels.get(_NAMESPACE_LABEL, '')}/{labels.get(_NAME_LABEL, '')}"


@dataclass
class TrivyAnalyzer(Analyzer):
    """Reports critical vulnerabilities or significant config audit findings."""

    vulnerability_report_analysis: bool = False
    config_audit_report_analysis: bool = False

    def analyze(self, context: AnalysisContext) -> list[Result]:
        if self.vulnerability_report_analysis:
            return list(self._analyze_vulnerability_reports(context))
        if self.config_audit_report_analysis:
            return list(self._analyze_config_audit_reports(context))
        return []

    def _collect(
        self,
        context: AnalysisContext,
        kind: str,
        failures_of: Any,
    ) -> list[Result]:
        client = context.client
        pre_analysis: dict[str, tuple[dict[str, Any], list[Failure]]] = {}
        for report in client.list(kind, context.namespace):
            meta: dict[str, Any] = report.get("metadata") or {}
            labels = meta.get("labels") or {}
            failures = failures_of(report.get("report") or {}, labels)
            if failures:
                pre_analysis[_report_key(labels)] = (meta, failures)

        results = list(context.results)
        for key, (meta, failures) in pre_analysis.items():
            results.append(
                Result(
                    kind=kind,
                    name=key,
                    error=failures,
                    parent_object=get_parent(client, meta),
                )
            )
        return results

    def _analyze_vulnerability_reports(self, context: AnalysisContext) -> list[Result]:
        def failures_of(report: dict[str, Any], labels: dict[str, str]) -> list[Failure]:
            return [
                Failure(
                    text=(
                        f"critical Vulnerability found ID: {vuln.get('vulnerabilityID', '')} "
                        f"(learn more at: {vuln.get('primaryLink', '')})"
                    )
                )
                for vuln in report.get("vulnerabilities") or ()
                if vuln.get("severity") == "CRITICAL"
            ]

        return self._collect(context, "VulnerabilityReport", failures_of)

    def _analyze_config_audit_reports(self, context: AnalysisContext) -> list[Result]:
        def failures_of(report: dict[str, Any], labels: dict[str, str]) -> list[Failure]:
            name = labels.get(_NAME_LABEL, "")
            namespace = labels.get(_NAMESPACE_LABEL, "")
            return [
                Failure(
                    text=(
                        f'Config issue with severity "{check.get("severity", "")}" found: '
                        f"{''.join(check.get('messages') or ())}"
                    ),
                    sensitive=[
                        Sensitive(name, mask_string(name)),
                        Sensitive(namespace, mask_string(namespace)),
                    ],
                )
                for check in report.get("checks") or ()
                if check.get("severity") in _CONFIG_SEVERITIES
            ]

        return self._collect(context, "ConfigAuditReport", failures_of)