"""Helpers shared by the analyzers and the cache."""

from __future__ import annotations

import base64
import hashlib
import os
import re
import secrets
from collections.abc import Iterable, Mapping
from typing import Any

from clusterlens.kube import Client, NotFoundError

_ANONYMIZE_PATTERN = (
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789!@#$%^&*()-_=+[]{}|;':\",./<>?"
)

_PARENT_LABELS = {
    "ReplicaSet": "ReplicaSet",
    "Deployment": "Deployment",
    "StatefulSet": "StatefulSet",
    "DaemonSet": "DaemonSet",
    "Ingress": "Ingress",
    "MutatingWebhookConfiguration": "MutatingWebhook",
    "ValidatingWebhookConfiguration": "ValidatingWebhook",
}

_TEMPLATE_REFERENCE = re.compile(r"\$(?:(\$)|\{(\w+)\}|(\w+))")


def slice_contains_string(items: Iterable[str], value: str) -> bool:
    """Return whether ``value`` is one of ``items``."""
    return value in items


def get_parent(client: Client, meta: Mapping[str, Any]) -> str:
    """Follow owner references up to the top-most known owner.

    Returns ``Kind/name`` of the top owner, the object's own name when it has
    no known owner, or an empty string when an owner cannot be fetched.
    """
    namespace = meta.get("namespace") or ""
    for owner in meta.get("ownerReferences") or ():
        kind = owner.get("kind")
        label = _PARENT_LABELS.get(kind)
        if label is None:
            continue
        try:
            parent = client.get(kind, owner.get("name", ""), namespace)
        except NotFoundError:
            return ""
        parent_meta = parent.get("metadata") or {}
        if parent_meta.get("ownerReferences") is not None:
            return get_parent(client, parent_meta)
        return f"{label}/{parent_meta.get('name', '')}"
    return meta.get("name", "")


def remove_duplicates(items: Iterable[str]) -> tuple[list[str], list[str]]:
    """Return the unique items in first-seen order and the repeated ones."""
    seen: dict[str, None] = {}
    duplicates = []
    for item in items:
        if item in seen:
            duplicates.append(item)
        else:
            seen[item] = None
    return list(seen), duplicates


def slice_diff(source: Iterable[str], dest: Iterable[str]) -> list[str]:
    """Return the items of ``source`` that are not in ``dest``."""
    excluded = set(dest)
    return [item for item in source if item not in excluded]


def mask_string(text: str) -> str:
    """Return a random base64 mask as long as ``text`` in bytes."""
    key = secrets.token_bytes(len(text.encode("utf-8")))
    masked = "".join(_ANONYMIZE_PATTERN[byte % len(_ANONYMIZE_PATTERN)] for byte in key)
    return base64.b64encode(masked.encode("utf-8")).decode("ascii")


def _expand(template: str, match: re.Match[str]) -> str:
    def reference(ref: re.Match[str]) -> str:
        if ref.group(1):
            return "$"
        name = ref.group(2) or ref.group(3)
        try:
            value = match.group(int(name)) if name.isdigit() else match.group(name)
        except IndexError:
            return ""
        return value or ""

    return _TEMPLATE_REFERENCE.sub(reference, template)


def replace_if_match(text: str, pattern: str, replacement: str) -> str:
    """Replace whole-word occurrences of ``pattern`` in ``text``.

    ``$1`` and ``${name}`` in the replacement refer to groups of the pattern.
    """
    regex = re.compile(rf"{pattern}(\b)", re.ASCII)
    if not regex.search(text):
        return text
    return regex.sub(lambda match: _expand(replacement, match), text)


def get_cache_key(provider: str, language: str, encoded: str) -> str:
    """Return the hex SHA-256 key for a provider, language and payload."""
    data = f"{provider}-{language}-{encoded}"
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def get_pod_list_by_labels(
    client: Client, namespace: str, labels: Mapping[str, str]
) -> list[dict[str, Any]]:
    """Return the pods in ``namespace`` that carry all of ``labels``."""
    selector = ",".join(f"{key}={labels[key]}" for key in sorted(labels))
    return client.list("Pod", namespace, label_selector=selector)


def file_exists(path: str | os.PathLike[str]) -> bool:
    """Return whether ``path`` exists; other stat errors are raised."""
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    return True


def ensure_dir_exists(directory: str | os.PathLike[str]) -> None:
    """Create ``directory`` and its parents if they are missing."""
    os.makedirs(directory, mode=0o755, exist_ok=True)


def map_to_string(mapping: Mapping[str, str]) -> str:
    """Join a mapping as ``k=v`` pairs separated by commas."""
    if not mapping:
        raise ValueError("cannot format an empty mapping")
    return ",".join(f"{key}={value}" for key, value in mapping.items())