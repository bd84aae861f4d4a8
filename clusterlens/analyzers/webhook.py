"""Detects admission webhooks whose receiving pods are missing or inactive."""

from __future__ import annotations

from typing import Any

from clusterlens.common import AnalysisContext, Analyzer, Failure, Result, Sensitive
from clusterlens.kube import GroupVersion, K8sApiReference, NotFoundError
from clusterlens.metrics import ANALYZER_ERRORS
from clusterlens.util import get_parent, map_to_string, mask_string


class _WebhookAnalyzer(Analyzer):
    """Shared checks for validating and mutating webhook configurations."""

    kind: str
    config_kind: str
    label: str

    def analyze(self, context: AnalysisContext) -> list[Result]:
        api_doc = K8sApiReference(
            api_version=GroupVersion("apps", "v1"),
            kind=self.kind,
            openapi_schema=context.openapi_schema,
        )
        ANALYZER_ERRORS.delete_partial_match({"analyzer_name": self.kind})
        client = context.client
        pre_analysis: dict[str, tuple[dict[str, Any], list[Failure]]] = {}

        for config in client.list(self.config_kind):
            config_meta: dict[str, Any] = config.get("metadata") or {}
            config_namespace = config_meta.get("namespace", "") or ""
            for webhook in config.get("webhooks") or ():
                failures = self._webhook_failures(client, api_doc, webhook, config_namespace)
                if failures is None or not failures:
                    continue
                webhook_name = webhook.get("name", "")
                pre_analysis[f"{config_namespace}/{webhook_name}"] = (config_meta, failures)
                ANALYZER_ERRORS.set(len(failures), self.kind, webhook_name, config_namespace)

        results = list(context.results)
        for key, (meta, failures) in pre_analysis.items():
            results.append(
                Result(
                    kind=self.kind,
                    name=key,
                    error=failures,
                    parent_object=get_parent(client, meta),
                )
            )
        return results

    def _webhook_failures(
        self,
        client: Any,
        api_doc: K8sApiReference,
        webhook: dict[str, Any],
        config_namespace: str,
    ) -> list[Failure] | None:
        """Return the failures of one webhook, or None when it is skipped."""
        service_ref = (webhook.get("clientConfig") or {}).get("service")
        if service_ref is None:
            return None
        service_name = service_ref.get("name", "") or ""
        service_namespace = service_ref.get("namespace", "") or ""
        webhook_name = webhook.get("name", "") or ""

        try:
            service = client.get("Service", service_name, service_namespace)
        except NotFoundError:
            # Without the service there are no pods to check; the webhook is skipped.
            return None

        selector = (service.get("spec") or {}).get("selector") or {}
        if not selector:
            # Services without selectors are left to the service analyzer.
            return None

        pods = client.list("Pod", service_namespace, label_selector=map_to_string(selector))
        failures: list[Failure] = []
        if not pods:
            failures.append(
                Failure(
                    text=(
                        f"No active pods found within service {service_name} "
                        f"as mapped to by {self.label} Webhook {webhook_name}"
                    ),
                    kubernetes_doc=api_doc.get_api_doc_v2("spec.webhook.clientConfig.service"),
                    sensitive=[Sensitive(config_namespace, mask_string(config_namespace))],
                )
            )
        for pod in pods:
            if (pod.get("status") or {}).get("phase") == "Running":
                continue
            pod_name = (pod.get("metadata") or {}).get("name", "") or ""
            failures.append(
                Failure(
                    text=(
                        f"{self.label} Webhook ({webhook_name}) is pointing to an "
                        f"inactive receiver pod ({pod_name})"
                    ),
                    kubernetes_doc=api_doc.get_api_doc_v2("spec.webhook"),
                    sensitive=[
                        Sensitive(config_namespace, mask_string(config_namespace)),
                        Sensitive(webhook_name, mask_string(webhook_name)),
                        Sensitive(pod_name, mask_string(pod_name)),
                    ],
                )
            )
        return failures


class ValidatingWebhookAnalyzer(_WebhookAnalyzer):
    """Reports validating webhooks whose receiver pods are missing or inactive."""

    kind = "ValidatingWebhookConfgiguration"
    config_kind = "ValidatingWebhookConfiguration"
    label = "Validating"

    def analyze(self, context: AnalysisContext) -> list[Result]:
        return super().analyze(context)


class MutatingWebhookAnalyzer(_WebhookAnalyzer):
    """Reports mutating webhooks whose receiver pods are missing or inactive."""

    kind = "MutatingWebhookConfiguration"
    config_kind = "MutatingWebhookConfiguration"
    label = "Mutating"

    def analyze(self, context: AnalysisContext) -> list[Result]:
        return super().analyze(context)