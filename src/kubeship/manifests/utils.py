"""Helpers shared by the manifest builders."""

from __future__ import annotations

from typing import Any

from kubeship.config.refs import ConfigMapRef, EnvSpec, SecretRef
from kubeship.manifests.types import Manifest


def drop_none(value: Any) -> Any:
    """Recursively remove ``None`` values from dicts (and dicts inside lists)."""
    if isinstance(value, dict):
        return {key: drop_none(item) for key, item in value.items() if item is not None}
    if isinstance(value, list):
        return [drop_none(item) for item in value]
    return value


def create_metadata(
    name: str,
    namespace: str,
    labels: dict[str, str],
    annotations: dict[str, str] | None = None,
) -> dict[str, Any]:
    metadata: dict[str, Any] = {"name": name, "namespace": namespace}
    if labels:
        metadata["labels"] = dict(labels)
    if annotations:
        metadata["annotations"] = dict(annotations)
    return metadata


def create_env_vars(env: EnvSpec) -> list[dict[str, Any]]:
    """Render an env mapping as container ``env`` entries.

    References without a key use the variable name as the key.
    """
    if isinstance(env, SecretRef | ConfigMapRef):
        return []

    entries: list[dict[str, Any]] = []
    for name, value in env.items():
        if isinstance(value, SecretRef):
            entries.append(
                {
                    "name": name,
                    "valueFrom": {
                        "secretKeyRef": {"name": value.secret_name, "key": value.key or name}
                    },
                }
            )
        elif isinstance(value, ConfigMapRef):
            entries.append(
                {
                    "name": name,
                    "valueFrom": {
                        "configMapKeyRef": {
                            "name": value.config_map_name,
                            "key": value.key or name,
                        }
                    },
                }
            )
        else:
            entries.append({"name": name, "value": str(value)})
    return entries


def create_env_from(env: EnvSpec) -> list[dict[str, Any]] | None:
    """Render a whole-object env reference as container ``envFrom``."""
    if isinstance(env, SecretRef):
        return [{"secretRef": {"name": env.secret_name}}]
    if isinstance(env, ConfigMapRef):
        return [{"configMapRef": {"name": env.config_map_name}}]
    return None


def manifest_kind(manifest: Manifest) -> str:
    return str(manifest.get("kind") or "Unknown")


def manifest_name(manifest: Manifest) -> str:
    return str((manifest.get("metadata") or {}).get("name") or "unnamed")


def manifest_ref(manifest: Manifest) -> str:
    """``Kind/name`` reference of a manifest."""
    return f"{manifest_kind(manifest)}/{manifest_name(manifest)}"
