"""The vulnerability scanner integration and the releases it installs."""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass

from clusterlens.common import Analyzer
from clusterlens.integrations.trivy_analyzer import TrivyAnalyzer

REPO = "https://aquasecurity.github.io/helm-charts/"
VERSION = "0.13.0"
CHART_NAME = "trivy-operator"
REPO_SHORT_NAME = "aqua"
RELEASE_NAME = "trivy-operator-k8sgpt"

ANALYZER_NAMES = ("VulnerabilityReport", "ConfigAuditReport")


@dataclass(frozen=True)
class Release:
    """An installed chart release."""

    name: str
    namespace: str
    chart: str = ""


class InMemoryReleaseManager:
    """Keeps track of installed releases."""

    def __init__(self) -> None:
        self._releases: dict[str, Release] = {}

    def install(self, name: str, namespace: str) -> Release:
        """Install or upgrade the release ``name`` in ``namespace``."""
        release = Release(name=name, namespace=namespace)
        self._releases[name] = release
        return release

    def uninstall(self, name: str, namespace: str) -> None:
        """Remove the release ``name`` from ``namespace``; raise KeyError if absent."""
        release = self._releases.get(name)
        if release is None or release.namespace != namespace:
            raise KeyError(f"release {name} not found in namespace {namespace}")
        del self._releases[name]

    def get(self, name: str) -> Release:
        """Return the release ``name``; raise KeyError if absent."""
        try:
            return self._releases[name]
        except KeyError:
            raise KeyError(f"release {name} not found") from None

    def list_deployed(self) -> list[Release]:
        """Return every installed release."""
        return list(self._releases.values())


class Trivy:
    """Installs the scanner operator and provides its analyzers."""

    def __init__(self, releases: InMemoryReleaseManager | None = None):
        self.releases = releases if releases is not None else InMemoryReleaseManager()

    def get_analyzer_name(self) -> list[str]:
        """Return the names of the analyzers this integration adds."""
        return list(ANALYZER_NAMES)

    def get_namespace(self) -> str:
        """Return the namespace the operator is installed in."""
        for release in self.releases.list_deployed():
            if release.name == RELEASE_NAME:
                return release.namespace
        raise LookupError("trivy release not found")

    def owns_analyzer(self, analyzer: str) -> bool:
        """Return whether ``analyzer`` belongs to this integration."""
        return analyzer in ANALYZER_NAMES

    def deploy(self, namespace: str) -> None:
        """Install the operator into ``namespace``."""
        self.releases.install(RELEASE_NAME, namespace)

    def undeploy(self, namespace: str) -> None:
        """Remove the operator from ``namespace``."""
        self.releases.uninstall(RELEASE_NAME, namespace)

    def is_activate(self) -> bool:
        """Return whether the operator is installed."""
        try:
            self.releases.get(RELEASE_NAME)
        except KeyError:
            return False
        return True

    def add_analyzer(self, analyzers: MutableMapping[str, Analyzer]) -> None:
        """Register this integration's analyzers in ``analyzers``."""
        analyzers["VulnerabilityReport"] = TrivyAnalyzer(vulnerability_report_analysis=True)
        analyzers["ConfigAuditReport"] = TrivyAnalyzer(config_audit_report_analysis=True)