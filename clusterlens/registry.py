"""The built-in analyzers and those added by active integrations."""

from __future__ import annotations

from clusterlens.analyzers.cronjob import CronJobAnalyzer
from clusterlens.analyzers.deployment import DeploymentAnalyzer
from clusterlens.analyzers.hpa import HpaAnalyzer
from clusterlens.analyzers.ingress import IngressAnalyzer
from clusterlens.analyzers.netpol import NetworkPolicyAnalyzer
from clusterlens.analyzers.node import NodeAnalyzer
from clusterlens.analyzers.pdb import PdbAnalyzer
from clusterlens.analyzers.pod import PodAnalyzer
from clusterlens.analyzers.pvc import PvcAnalyzer
from clusterlens.analyzers.replicaset import ReplicaSetAnalyzer
from clusterlens.analyzers.service import ServiceAnalyzer
from clusterlens.analyzers.statefulset import StatefulSetAnalyzer
from clusterlens.analyzers.webhook import MutatingWebhookAnalyzer, ValidatingWebhookAnalyzer
from clusterlens.common import Analyzer
from clusterlens.integration import IntegrationRegistry

CORE_ANALYZERS: dict[str, Analyzer] = {
    "Pod": PodAnalyzer(),
    "Deployment": DeploymentAnalyzer(),
    "ReplicaSet": ReplicaSetAnalyzer(),
    "PersistentVolumeClaim": PvcAnalyzer(),
    "Service": ServiceAnalyzer(),
    "Ingress": IngressAnalyzer(),
    "StatefulSet": StatefulSetAnalyzer(),
    "CronJob": CronJobAnalyzer(),
    "Node": NodeAnalyzer(),
    "ValidatingWebhookConfiguration": ValidatingWebhookAnalyzer(),
    "MutatingWebhookConfiguration": MutatingWebhookAnalyzer(),
}

ADDITIONAL_ANALYZERS: dict[str, Analyzer] = {
    "HorizontalPodAutoScaler": HpaAnalyzer(),
    "PodDisruptionBudget": PdbAnalyzer(),
    "NetworkPolicy": NetworkPolicyAnalyzer(),
}


def list_filters(integrations: IntegrationRegistry) -> tuple[list[str], list[str], list[str]]:
    """Return the core, additional and integration-provided analyzer names."""
    integration_analyzers: list[str] = []
    for name in integrations.list():
        if integrations.is_activate(name):
            integration_analyzers.extend(integrations.get(name).get_analyzer_name())
    return list(CORE_ANALYZERS), list(ADDITIONAL_ANALYZERS), integration_analyzers


def get_analyzer_map(
    integrations: IntegrationRegistry,
) -> tuple[dict[str, Analyzer], dict[str, Analyzer]]:
    """Return the core analyzers and every analyzer available, keyed by name."""
    core = dict(CORE_ANALYZERS)
    merged = {**CORE_ANALYZERS, **ADDITIONAL_ANALYZERS}
    for name in integrations.list():
        if integrations.is_activate(name):
            integrations.get(name).add_analyzer(merged)
    return core, merged