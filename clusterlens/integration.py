"""The registry of optional integrations and their activation."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, MutableMapping
from typing import Protocol

from clusterlens.common import Analyzer
from clusterlens.config import Config
from clusterlens.integrations.trivy import Trivy
from clusterlens.util import remove_duplicates


class _Integration(Protocol):
    def deploy(self, namespace: str) -> None: ...

    def undeploy(self, namespace: str) -> None: ...

    def add_analyzer(self, analyzers: MutableMapping[str, Analyzer]) -> None: ...

    def get_analyzer_name(self) -> list[str]: ...

    def get_namespace(self) -> str: ...

    def owns_analyzer(self, analyzer: str) -> bool: ...

    def is_activate(self) -> bool: ...


class IntegrationNotFoundError(LookupError):
    """Raised when no integration matches a name."""


class IntegrationRegistry:
    """Looks up integrations and switches them on and off."""

    def __init__(
        self,
        config: Config,
        integrations: Mapping[str, _Integration] | None = None,
    ):
        self.config = config
        self._integrations: dict[str, _Integration] = (
            dict(integrations) if integrations is not None else {"trivy": Trivy()}
        )

    def list(self) -> list[str]:
        """Return the names of every known integration."""
        return list(self._integrations)

    def get(self, name: str) -> _Integration:
        """Return the integration called ``name``."""
        try:
            return self._integrations[name]
        except KeyError:
            raise IntegrationNotFoundError("integration not found") from None

    def analyzer_by_integration(self, analyzer: str) -> str:
        """Return the name of the integration that provides ``analyzer``."""
        for name, integration in self._integrations.items():
            if integration.owns_analyzer(analyzer):
                return name
        raise IntegrationNotFoundError("analyzerbyintegration: no matches found")

    def _write_filters(self, filters: list[str]) -> None:
        self.config.set("active_filters", filters)
        try:
            self.config.write()
        except (OSError, ValueError) as error:
            raise OSError(f"error writing config file: {error}") from error

    def activate(
        self,
        name: str,
        namespace: str,
        active_filters: Iterable[str],
        skip_install: bool,
    ) -> None:
        """Install the integration unless skipped and enable its analyzers."""
        integration = self.get(name)
        if not skip_install:
            integration.deploy(namespace)
        merged = [*active_filters, *integration.get_analyzer_name()]
        unique, _ = remove_duplicates(merged)
        self._write_filters(unique)

    def deactivate(self, name: str, namespace: str) -> None:
        """Disable the integration's analyzers and uninstall it."""
        integration = self.get(name)
        owned = set(integration.get_analyzer_name())
        remaining = [
            item for item in self.config.get_string_list("active_filters") if item not in owned
        ]
        integration.undeploy(namespace)
        self._write_filters(remaining)

    def is_activate(self, name: str) -> bool:
        """Return whether the integration called ``name`` is installed."""
        return self.get(name).is_activate()