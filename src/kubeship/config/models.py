"""Configuration models.

The configuration describes one project: its namespaces (each with free-form
variables), the clusters they live on, how images are named and tagged,
shared secrets/configmaps, and the applications to deploy.

Field names are snake_case in Python and accept the camelCase spelling
(``configMaps``, ``tagStrategy``, ``podAnnotations``...) so YAML files read
naturally.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from kubeship.config.context import RESERVED_CONTEXT_NAMES
from kubeship.config.variants import LiteralValue, Resolver, to_variant
from kubeship.errors import ConfigurationError


class ConfigModel(BaseModel):
    """Base model accepting both snake_case and camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )


# =============================================================================
# Images
# =============================================================================


class TagStrategy(ConfigModel):
    """Custom tag strategy; uses ``value`` or generates ``<kind>-<epoch ms>``."""

    kind: str
    value: str | None = None


class ImagesConfig(ConfigModel):
    """Image naming settings."""

    registry: str
    repository: str | None = None
    tag_strategy: str | TagStrategy | None = None
    include_project_in_name: bool = False


# =============================================================================
# Clusters
# =============================================================================


class ClusterConfig(ConfigModel):
    """A cluster and the namespaces deployed to it."""

    api_server: str = ""
    context: str = ""
    namespaces: list[str] = Field(default_factory=list)


# =============================================================================
# Applications
# =============================================================================


class DockerfileBuild(ConfigModel):
    """Build an image from a Dockerfile."""

    type: Literal["dockerfile"] = "dockerfile"
    context: str
    dockerfile: str
    platform: str | None = None
    args: dict[str, str] = Field(default_factory=dict)
    target: str | None = None


class DeployFilter(ConfigModel):
    """Include/exclude namespace filter for ``AppDefinition.deploy``."""

    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)


class ServicePort(ConfigModel):
    """A port exposed by the app container and its Service."""

    name: str
    port: int
    target_port: int | str | None = None
    protocol: str | None = None


class AppDefinition(ConfigModel):
    """One deployable application.

    ``env`` and ``network`` may be static values or callables receiving the
    HostContext of the namespace being planned.
    """

    image: str | None = None
    # Other build types are kept as raw mappings and skipped by the builder
    build: DockerfileBuild | dict[str, Any] | None = Field(
        default=None, union_mode="left_to_right"
    )
    env: LiteralValue | Resolver | None = None
    network: LiteralValue | Resolver | None = None
    deploy: Literal["all"] | list[str] | DeployFilter | None = None
    pod_annotations: dict[str, str] | None = None
    volumes: list[dict[str, Any]] | None = None
    volume_mounts: list[dict[str, Any]] | None = None
    args: list[str] | None = None
    ports: list[ServicePort] | None = None

    @field_validator("env", "network", mode="before")
    @classmethod
    def _wrap_variant(cls, value: Any) -> Any:
        return to_variant(value)

    @property
    def build_context(self) -> str | None:
        """Build context directory, when the build declares one."""
        if isinstance(self.build, DockerfileBuild):
            return self.build.context
        if isinstance(self.build, dict) and isinstance(self.build.get("context"), str):
            return self.build["context"]
        return None


# =============================================================================
# Root
# =============================================================================


class KubeshipConfig(ConfigModel):
    """Root configuration object."""

    project: str
    namespaces: dict[str, dict[str, Any]]
    clusters: dict[str, ClusterConfig] = Field(default_factory=dict)
    images: ImagesConfig
    secrets: dict[str, LiteralValue | Resolver] = Field(default_factory=dict)
    config_maps: dict[str, LiteralValue | Resolver] = Field(default_factory=dict)
    apps: dict[str, AppDefinition] = Field(default_factory=dict)

    @field_validator("namespaces", mode="before")
    @classmethod
    def _default_namespace_variables(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {name: variables or {} for name, variables in value.items()}
        return value

    @field_validator("namespaces")
    @classmethod
    def _reject_reserved_variables(
        cls, value: dict[str, dict[str, Any]]
    ) -> dict[str, dict[str, Any]]:
        for namespace, variables in value.items():
            clashes = sorted(set(variables) & RESERVED_CONTEXT_NAMES)
            if clashes:
                raise ValueError(
                    f"Namespace '{namespace}' uses reserved variable name(s): "
                    f"{', '.join(clashes)}"
                )
        return value

    @field_validator("secrets", "config_maps", mode="before")
    @classmethod
    def _wrap_payload_variants(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {name: to_variant(payload) for name, payload in value.items()}
        return value


def define_config(**fields: Any) -> KubeshipConfig:
    """Build and validate a configuration from keyword arguments.

    Intended for Python configuration files:

        config = define_config(
            project="shop",
            namespaces={"dev": {"domain": "dev.shop.localtest.me"}},
            images={"registry": "ghcr.io/acme"},
            apps={"api": {"network": lambda ctx: f"api.{ctx['domain']}"}},
        )

    Raises:
        ConfigurationError: If validation fails
    """
    try:
        return KubeshipConfig.model_validate(fields)
    except ValidationError as e:
        raise ConfigurationError("Invalid configuration", details=str(e)) from e
