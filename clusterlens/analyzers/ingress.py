"""Detects ingresses that refer to missing classes, services or secrets."""

from __future__ import annotations

from typing import Any

from clusterlens.common import AnalysisContext, Analyzer, Failure, Result, Sensitive
from clusterlens.kube import GroupVersion, K8sApiReference, NotFoundError
from clusterlens.metrics import ANALYZER_ERRORS
from clusterlens.util import get_parent, mask_string

KIND = "Ingress"
INGRESS_CLASS_ANNOTATION = "kubernetes.io/ingress.class"


class IngressAnalyzer(Analyzer):
    """Reports ingresses whose class, backends or TLS secrets are missing."""

    def analyze(self, context: AnalysisContext) -> list[Result]:
        api_doc = K8sApiReference(
            api_version=GroupVersion("networking", "v1"),
            kind=KIND,
            openapi_schema=context.openapi_schema,
        )
        ANALYZER_ERRORS.delete_partial_match({"analyzer_name": KIND})
        client = context.client
        pre_analysis: dict[str, tuple[dict[str, Any], list[Failure]]] = {}

        def exists(kind: str, name: str, namespace: str | None = None) -> bool:
            try:
                client.get(kind, name, namespace)
            except NotFoundError:
                return False
            return True

        for ingress in client.list(KIND, context.namespace):
            meta: dict[str, Any] = ingress.get("metadata") or {}
            name = meta.get("name", "")
            namespace = meta.get("namespace", "")
            spec = ingress.get("spec") or {}
            failures = []

            class_name = spec.get("ingressClassName")
            if class_name is None:
                annotated = (meta.get("annotations") or {}).get(INGRESS_CLASS_ANNOTATION, "")
                if annotated:
                    class_name = annotated
                else:
                    failures.append(
                        Failure(
                            text=f"Ingress {namespace}/{name} does not specify an Ingress class.",
                            kubernetes_doc=api_doc.get_api_doc_v2("spec.ingressClassName"),
                            sensitive=[
                                Sensitive(namespace, mask_string(namespace)),
                                Sensitive(name, mask_string(name)),
                            ],
                        )
                    )

            if class_name is not None and not exists("IngressClass", class_name):
                failures.append(
                    Failure(
                        text=f"Ingress uses the ingress class {class_name} which does not exist.",
                        kubernetes_doc=api_doc.get_api_doc_v2("spec.ingressClassName"),
                        sensitive=[Sensitive(class_name, mask_string(class_name))],
                    )
                )

            for rule in spec.get("rules") or ():
                http = rule.get("http")
                if http is None:
                    continue
                for path in http.get("paths") or ():
                    service = (path.get("backend") or {}).get("service") or {}
                    service_name = service.get("name", "") or ""
                    if exists("Service", service_name, namespace):
                        continue
                    failures.append(
                        Failure(
                            text=(
                                f"Ingress uses the service {namespace}/{service_name} "
                                "which does not exist."
                            ),
                            kubernetes_doc=api_doc.get_api_doc_v2(
                                "spec.rules.http.paths.backend.service"
                            ),
                            sensitive=[
                                Sensitive(namespace, mask_string(namespace)),
                                Sensitive(service_name, mask_string(service_name)),
                            ],
                        )
                    )

            for tls in spec.get("tls") or ():
                secret_name = tls.get("secretName", "") or ""
                if exists("Secret", secret_name, namespace):
                    continue
                failures.append(
                    Failure(
                        text=(
                            f"Ingress uses the secret {namespace}/{secret_name} "
                            "as a TLS certificate which does not exist."
                        ),
                        kubernetes_doc=api_doc.get_api_doc_v2("spec.tls.secretName"),
                        sensitive=[
                            Sensitive(namespace, mask_string(namespace)),
                            Sensitive(secret_name, mask_string(secret_name)),
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