from clusterlens.analyzers.ingress import IngressAnalyzer
from clusterlens.common import AnalysisContext
from clusterlens.kube import Client


def _ingress(name="example", namespace="default", annotations=None, spec=None):
    return {
        "kind": "Ingress",
        "metadata": {"name": name, "namespace": namespace, "annotations": annotations or {}},
        "spec": spec or {},
    }


def _run(*objects, namespace="default"):
    context = AnalysisContext(client=Client(*objects), namespace=namespace)
    return IngressAnalyzer().analyze(context)


def _texts(results):
    return [failure.text for result in results for failure in result.error]


def test_ingress_without_class():
    results = _run(_ingress())
    assert len(results) == 1
    assert results[0].kind == "Ingress"


def test_multiple_ingresses():
    assert len(_run(_ingress(), _ingress(name="example-2"))) == 2


def test_ingress_without_class_annotation_message():
    texts = _texts(_run(_ingress()))
    assert any("does not specify an Ingress class" in text for text in texts)
    assert texts == ["Ingress default/example does not specify an Ingress class."]


def test_ingress_namespace_filtering():
    results = _run(_ingress(), _ingress(namespace="other-namespace"))
    assert len(results) == 1
    assert results[0].name == "default/example"


def test_annotated_class_that_does_not_exist():
    ingress = _ingress(annotations={"kubernetes.io/ingress.class": "nginx"})
    assert _texts(_run(ingress)) == [
        "Ingress uses the ingress class nginx which does not exist."
    ]


def test_missing_backend_service_and_tls_secret():
    spec = {
        "ingressClassName": "nginx",
        "rules": [
            {"host": "a.example.com"},
            {"http": {"paths": [{"backend": {"service": {"name": "web"}}}]}},
        ],
        "tls": [{"secretName": "web-tls"}],
    }
    ingress_class = {"kind": "IngressClass", "metadata": {"name": "nginx"}}
    texts = _texts(_run(_ingress(spec=spec), ingress_class))
    assert texts == [
        "Ingress uses the service default/web which does not exist.",
        "Ingress uses the secret default/web-tls as a TLS certificate which does not exist.",
    ]


def test_fully_configured_ingress_is_healthy():
    spec = {
        "ingressClassName": "nginx",
        "rules": [{"http": {"paths": [{"backend": {"service": {"name": "web"}}}]}}],
        "tls": [{"secretName": "web-tls"}],
    }
    objects = (
        _ingress(spec=spec),
        {"kind": "IngressClass", "metadata": {"name": "nginx"}},
        {"kind": "Service", "metadata": {"name": "web", "namespace": "default"}},
        {"kind": "Secret", "metadata": {"name": "web-tls", "namespace": "default"}},
    )
    assert _run(*objects) == []