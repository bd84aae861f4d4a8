import pytest

from clusterlens.common import AnalysisContext, Analyzer, Failure, Result, Sensitive


def test_result_to_dict_uses_wire_keys():
    failure = Failure(
        text="broken thing",
        kubernetes_doc="some doc",
        sensitive=[Sensitive(unmasked="web", masked="d2Vi")],
    )
    result = Result(kind="Pod", name="default/web", error=[failure], parent_object="web")
    data = result.to_dict()
    assert set(data) == {"kind", "name", "error", "details", "parentObject"}
    assert data["kind"] == "Pod"
    assert data["name"] == "default/web"
    assert data["parentObject"] == "web"
    assert data["error"][0]["Text"] == "broken thing"
    assert data["error"][0]["KubernetesDoc"] == "some doc"
    assert data["error"][0]["Sensitive"] == [{"Unmasked": "web", "Masked": "d2Vi"}]


def test_failure_defaults_are_empty():
    failure = Failure(text="x")
    assert failure.kubernetes_doc == ""
    assert failure.sensitive == []


def test_context_results_are_independent():
    first = AnalysisContext(client=None)
    second = AnalysisContext(client=None)
    first.results.append(Result(kind="Pod", name="a"))
    assert len(second.results) == 0
    assert first.namespace == ""


def test_analyzer_is_abstract():
    with pytest.raises(TypeError):
        Analyzer()


def test_analyzer_subclass_returns_results():
    class Fixed(Analyzer):
        def analyze(self, context):
            context.results.append(Result(kind="Node", name="n1"))
            return context.results

    context = AnalysisContext(client=None, namespace="default")
    results = Fixed().analyze(context)
    assert [r.name for r in results] == ["n1"]