from clusterlens.analyzers.node import NodeAnalyzer
from clusterlens.common import AnalysisContext
from clusterlens.kube import Client
from clusterlens.metrics import ANALYZER_ERRORS


def _node(*conditions, name="node1"):
    return {
        "kind": "Node",
        "metadata": {"name": name},
        "status": {"conditions": list(conditions)},
    }


def _run(*objects):
    return NodeAnalyzer().analyze(AnalysisContext(client=Client(*objects)))


def test_node_ready():
    node = _node(
        {
            "type": "Ready",
            "status": "True",
            "reason": "KubeletReady",
            "message": "kubelet is posting ready status",
        }
    )
    assert len(_run(node)) == 0


def test_node_disk_pressure():
    node = _node(
        {
            "type": "DiskPressure",
            "status": "True",
            "reason": "KubeletHasDiskPressure",
            "message": "kubelet has disk pressure",
        }
    )
    results = _run(node)
    assert len(results) == 1
    assert results[0].kind == "Node"
    assert results[0].name == "node1"
    assert results[0].error[0].text == (
        "node1 has condition of type DiskPressure, "
        "reason KubeletHasDiskPressure: kubelet has disk pressure"
    )


def test_node_unknown_type():
    node = _node(
        {
            "type": "UnknownNodeConditionType",
            "status": "CompletelyUnknown",
            "reason": "KubeletHasTheUnknown",
            "message": "kubelet has the unknown",
        }
    )
    assert len(_run(node)) == 1


def test_node_not_ready_and_pressure_counted():
    node = _node(
        {"type": "Ready", "status": "False", "reason": "r", "message": "m"},
        {"type": "MemoryPressure", "status": "True", "reason": "r", "message": "m"},
        {"type": "PIDPressure", "status": "False", "reason": "r", "message": "m"},
        name="worker",
    )
    results = _run(node)
    assert len(results) == 1
    assert len(results[0].error) == 2
    assert ANALYZER_ERRORS.get("Node", "worker", "") == 2.0
    assert results[0].error[0].sensitive[0].unmasked == "worker"