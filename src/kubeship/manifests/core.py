"""Namespace, Secret and ConfigMap manifests."""

from __future__ import annotations

import base64

from kubeship.manifests.types import Manifest


def build_namespace(name: str, labels: dict[str, str] | None = None) -> Manifest:
    """Build a Namespace manifest.

    Example:
        >>> build_namespace("prod", {"environment": "production"})["kind"]
        'Namespace'
    """
    metadata: dict[str, object] = {"name": name}
    if labels:
        metadata["labels"] = dict(labels)
    return {"apiVersion": "v1", "kind": "Namespace", "metadata": metadata}


def build_secret(
    name: str,
    namespace: str,
    data: dict[str, str],
    labels: dict[str, str] | None = None,
) -> Manifest:
    """Build an Opaque Secret manifest; values are base64-encoded."""
    metadata: dict[str, object] = {"name": name, "namespace": namespace}
    if labels:
        metadata["labels"] = dict(labels)
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "type": "Opaque",
        "metadata": metadata,
        "data": {
            key: base64.b64encode(value.encode("utf-8")).decode("ascii")
            for key, value in data.items()
        },
    }


def build_config_map(
    name: str,
    namespace: str,
    data: dict[str, str],
    labels: dict[str, str] | None = None,
) -> Manifest:
    """Build a ConfigMap manifest."""
    metadata: dict[str, object] = {"name": name, "namespace": namespace}
    if labels:
        metadata["labels"] = dict(labels)
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": metadata,
        "data": dict(data),
    }
