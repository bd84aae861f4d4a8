"""An in-memory store of Kubernetes objects and OpenAPI documentation lookup."""

from __future__ import annotations

import copy
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

CLUSTER_SCOPED_KINDS = frozenset(
    {
        "Node",
        "Namespace",
        "PersistentVolume",
        "IngressClass",
        "StorageClass",
        "ValidatingWebhookConfiguration",
        "MutatingWebhookConfiguration",
        "ClusterRole",
        "ClusterRoleBinding",
    }
)

_Requirement = Callable[[Mapping[str, str]], bool]
_SET_REQUIREMENT = re.compile(r"\s*([^\s!=,()]+)\s+(in|notin)\s+\((.*)\)\s*")
_TOP_LEVEL_COMMA = re.compile(r",(?![^()]*\))")


class NotFoundError(LookupError):
    """Raised when a requested object does not exist."""

    def __init__(self, kind: str, name: str, namespace: str | None = None):
        where = f"{namespace}/{name}" if namespace else name
        super().__init__(f'{kind} "{where}" not found')
        self.kind = kind
        self.name = name
        self.namespace = namespace


@dataclass(frozen=True)
class GroupVersion:
    """An API group and version, such as ``apps/v1``."""

    group: str = ""
    version: str = ""

    def __str__(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version


def _is_cluster_scoped(kind: str) -> bool:
    return kind in CLUSTER_SCOPED_KINDS


def _parse_label_selector(selector: str | Mapping[str, str] | None) -> list[_Requirement]:
    if selector is None:
        return []
    if isinstance(selector, Mapping):
        return [
            (lambda labels, k=key, v=str(value): labels.get(k) == v)
            for key, value in selector.items()
        ]
    requirements: list[_Requirement] = []
    for raw in _TOP_LEVEL_COMMA.split(selector):
        part = raw.strip()
        if not part:
            continue
        set_match = _SET_REQUIREMENT.fullmatch(part)
        if set_match:
            key, operator, values_text = set_match.groups()
            values = frozenset(v.strip() for v in values_text.split(",") if v.strip())
            if operator == "in":
                requirements.append(lambda labels, k=key, vs=values: labels.get(k) in vs)
            else:
                requirements.append(lambda labels, k=key, vs=values: labels.get(k) not in vs)
            continue
        if part.startswith("!"):
            key = part[1:].strip()
            _check_key(key, selector)
            requirements.append(lambda labels, k=key: k not in labels)
        elif "!=" in part:
            key, value = (s.strip() for s in part.split("!=", 1))
            _check_key(key, selector)
            requirements.append(lambda labels, k=key, v=value: labels.get(k) != v)
        elif "==" in part:
            key, value = (s.strip() for s in part.split("==", 1))
            _check_key(key, selector)
            requirements.append(lambda labels, k=key, v=value: labels.get(k) == v)
        elif "=" in part:
            key, value = (s.strip() for s in part.split("=", 1))
            _check_key(key, selector)
            requirements.append(lambda labels, k=key, v=value: labels.get(k) == v)
        else:
            _check_key(part, selector)
            requirements.append(lambda labels, k=part: k in labels)
    return requirements


def _check_key(key: str, selector: str) -> None:
    if not key or any(ch.isspace() for ch in key):
        raise ValueError(f"invalid label selector: {selector!r}")


def _field_value(obj: Mapping[str, Any], path: str) -> str:
    current: Any = obj
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return ""
        current = current[part]
    if current is None:
        return ""
    return current if isinstance(current, str) else str(current)


def _parse_field_selector(selector: str | None) -> list[Callable[[Mapping[str, Any]], bool]]:
    if not selector:
        return []
    requirements: list[Callable[[Mapping[str, Any]], bool]] = []
    for raw in selector.split(","):
        part = raw.strip()
        if not part:
            continue
        if "!=" in part:
            path, value = part.split("!=", 1)
            requirements.append(lambda obj, p=path.strip(), v=value.strip(): _field_value(obj, p) != v)
        elif "==" in part:
            path, value = part.split("==", 1)
            requirements.append(lambda obj, p=path.strip(), v=value.strip(): _field_value(obj, p) == v)
        elif "=" in part:
            path, value = part.split("=", 1)
            requirements.append(lambda obj, p=path.strip(), v=value.strip(): _field_value(obj, p) == v)
        else:
            raise ValueError(f"invalid field selector: {selector!r}")
    return requirements


class Client:
    """A store of cluster objects that answers list and get queries.

    Objects are plain mappings in the shape of Kubernetes manifests.
    Cluster-scoped kinds ignore any namespace given to them.
    """

    def __init__(self, *objects: Mapping[str, Any]):
        self._objects: dict[tuple[str, str, str], dict[str, Any]] = {}
        for obj in objects:
            self.add(obj)

    @staticmethod
    def _scope(kind: str, namespace: str | None) -> str:
        return "" if _is_cluster_scoped(kind) else (namespace or "")

    def add(self, obj: Mapping[str, Any]) -> None:
        """Store a copy of ``obj``; raise ValueError if it is malformed or present."""
        kind = obj.get("kind")
        if not kind:
            raise ValueError("object has no kind")
        metadata = obj.get("metadata") or {}
        name = metadata.get("name")
        if not name:
            raise ValueError(f"{kind} has no name")
        key = (kind, self._scope(kind, metadata.get("namespace")), name)
        if key in self._objects:
            raise ValueError(f'{kind} "{name}" already exists')
        self._objects[key] = copy.deepcopy(dict(obj))

    def list(
        self,
        kind: str,
        namespace: str | None = None,
        label_selector: str | Mapping[str, str] | None = None,
        field_selector: str | None = None,
    ) -> list[dict[str, Any]]:
        """Return copies of the objects of ``kind`` that match the filters.

        An empty or missing namespace lists across all namespaces.
        """
        labels_match = _parse_label_selector(label_selector)
        fields_match = _parse_field_selector(field_selector)
        wanted_namespace = None if _is_cluster_scoped(kind) else (namespace or None)
        found = []
        for (obj_kind, obj_namespace, _), obj in self._objects.items():
            if obj_kind != kind:
                continue
            if wanted_namespace is not None and obj_namespace != wanted_namespace:
                continue
            labels = (obj.get("metadata") or {}).get("labels") or {}
            if not all(requirement(labels) for requirement in labels_match):
                continue
            if not all(requirement(obj) for requirement in fields_match):
                continue
            found.append(copy.deepcopy(obj))
        return found

    def get(self, kind: str, name: str, namespace: str | None = None) -> dict[str, Any]:
        """Return a copy of one object; raise NotFoundError if it is absent."""
        key = (kind, self._scope(kind, namespace), name)
        try:
            return copy.deepcopy(self._objects[key])
        except KeyError:
            raise NotFoundError(kind, name, namespace) from None


def _item_schemas(prop: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    items = prop.get("items")
    if items is None:
        return []
    if isinstance(items, Mapping):
        return [items]
    return list(items)


def _is_string(prop: Mapping[str, Any]) -> bool:
    kind = prop.get("type")
    return kind == "string" or kind == ["string"]


@dataclass
class K8sApiReference:
    """Looks up field documentation in a Swagger 2.0 schema document."""

    api_version: GroupVersion
    kind: str
    openapi_schema: Mapping[str, Any] | None = None

    def _definitions(self) -> Mapping[str, Any]:
        if not self.openapi_schema:
            return {}
        return self.openapi_schema.get("definitions") or {}

    def get_api_doc_v2(self, field: str) -> str:
        """Return the description of a dotted field path, or an empty string."""
        paths = field.split(".")
        group = self.api_version.group.split(".")[0]
        definitions = self._definitions()
        suffix = f"{group}.{self.api_version.version}.{self.kind}"
        start = next((name for name in definitions if name.endswith(suffix)), "")
        return self._recurse_path(definitions, start, paths)

    def _recurse_path(self, definitions: Mapping[str, Any], leaf: str, paths: list[str]) -> str:
        schema = definitions.get(leaf)
        if schema is None:
            return ""
        prop = (schema.get("properties") or {}).get(paths[0])
        if prop is None:
            return ""
        if len(paths) == 1 or _is_string(prop):
            return prop.get("description", "") or ""
        description = ""
        ref = prop.get("$ref") or ""
        if ref:
            description = self._recurse_path(definitions, ref.split("/")[-1], paths[1:])
        items = _item_schemas(prop)
        if len(items) == 1:
            item_ref = items[0].get("$ref") or ""
            description = self._recurse_path(definitions, item_ref.split("/")[-1], paths[1:])
        return description