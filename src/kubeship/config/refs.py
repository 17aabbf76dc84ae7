"""Secret and ConfigMap references used in app environments.

An app environment is either a mapping of variable names to values, where
a value is a literal string or a reference to one key of a Secret or
ConfigMap, or a single reference importing a whole Secret/ConfigMap
(rendered as ``envFrom``).

YAML configurations spell references as small mappings:

    env:
      DATABASE_URL: {secret: db, key: url}
      LOG_LEVEL: {configMap: settings}
    # or, to import everything:
    env: {fromSecret: db}
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

from kubeship.errors import ConfigurationError


@dataclass(frozen=True)
class SecretRef:
    """Reference to a Secret, or to a single key in it."""

    secret_name: str
    key: str | None = None


@dataclass(frozen=True)
class ConfigMapRef:
    """Reference to a ConfigMap, or to a single key in it."""

    config_map_name: str
    key: str | None = None


EnvValue: TypeAlias = str | SecretRef | ConfigMapRef
EnvSpec: TypeAlias = dict[str, EnvValue] | SecretRef | ConfigMapRef


def _ref_from_mapping(value: Mapping[str, Any]) -> SecretRef | ConfigMapRef | None:
    if "secret" in value:
        return SecretRef(str(value["secret"]), value.get("key"))
    if "configMap" in value:
        return ConfigMapRef(str(value["configMap"]), value.get("key"))
    return None


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def normalize_env(raw: Any) -> EnvSpec:
    """Normalize a resolved env definition into an EnvSpec.

    Args:
        raw: Output of the app's env definition (mapping, reference or None)

    Returns:
        A fresh mapping of env values, or a whole-object reference

    Raises:
        ConfigurationError: If a value cannot be interpreted
    """
    if raw is None:
        return {}
    if isinstance(raw, SecretRef | ConfigMapRef):
        return raw
    if not isinstance(raw, Mapping):
        raise ConfigurationError(
            f"Unsupported env definition of type {type(raw).__name__}"
        )

    if set(raw) == {"fromSecret"}:
        return SecretRef(str(raw["fromSecret"]))
    if set(raw) == {"fromConfigMap"}:
        return ConfigMapRef(str(raw["fromConfigMap"]))

    env: dict[str, EnvValue] = {}
    for name, value in raw.items():
        if isinstance(value, SecretRef | ConfigMapRef):
            env[name] = value
        elif isinstance(value, Mapping):
            ref = _ref_from_mapping(value)
            if ref is None:
                raise ConfigurationError(
                    f"Env variable {name} must be a string or a secret/configMap reference"
                )
            env[name] = ref
        elif value is None:
            env[name] = ""
        else:
            env[name] = _stringify(value)
    return env


def referenced_secrets(env: EnvSpec) -> list[str]:
    """Names of the Secrets an env spec refers to, in first-use order."""
    if isinstance(env, SecretRef):
        return [env.secret_name]
    if isinstance(env, ConfigMapRef):
        return []
    names: dict[str, None] = {}
    for value in env.values():
        if isinstance(value, SecretRef):
            names.setdefault(value.secret_name)
    return list(names)


def referenced_config_maps(env: EnvSpec) -> list[str]:
    """Names of the ConfigMaps an env spec refers to, in first-use order."""
    if isinstance(env, ConfigMapRef):
        return [env.config_map_name]
    if isinstance(env, SecretRef):
        return []
    names: dict[str, None] = {}
    for value in env.values():
        if isinstance(value, ConfigMapRef):
            names.setdefault(value.config_map_name)
    return list(names)
