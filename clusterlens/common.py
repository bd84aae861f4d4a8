"""Core data types shared by every analyzer."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Sensitive:
    """A value that may be anonymised before leaving the process."""

    unmasked: str
    masked: str


@dataclass
class Failure:
    """One problem found on an object."""

    text: str
    kubernetes_doc: str = ""
    sensitive: list[Sensitive] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "Text": self.text,
            "KubernetesDoc": self.kubernetes_doc,
            "Sensitive": [
                {"Unmasked": item.unmasked, "Masked": item.masked}
                for item in self.sensitive
            ],
        }


@dataclass
class Result:
    """The failures found on one object, as reported to the user."""

    kind: str
    name: str
    error: list[Failure] = field(default_factory=list)
    details: str = ""
    parent_object: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form of the result."""
        return {
            "kind": self.kind,
            "name": self.name,
            "error": [failure.to_dict() for failure in self.error],
            "details": self.details,
            "parentObject": self.parent_object,
        }


@dataclass
class AnalysisContext:
    """Everything an analyzer needs for one run."""

    client: Any
    namespace: str = ""
    ai_client: Any = None
    pre_analysis: dict[str, Any] = field(default_factory=dict)
    results: list[Result] = field(default_factory=list)
    openapi_schema: Any = None


class Analyzer(abc.ABC):
    """Base class of every analyzer."""

    @abc.abstractmethod
    def analyze(self, context: AnalysisContext) -> list[Result]:
        """Inspect the cluster described by ``context`` and return results."""