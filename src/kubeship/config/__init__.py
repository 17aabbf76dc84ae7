"""Configuration models, loading and resolution.

Example:
    from kubeship.config import ConfigResolver, ProcessEnvironment, load_config

    config = load_config(resolve_config_path("kubeship.config"))
    resolver = ConfigResolver(config, ProcessEnvironment())
"""

from .context import ClusterMetadata, HostContext, ServiceDNSOptions
from .environment import (
    EnvironmentProvider,
    GitEnvironment,
    ProcessEnvironment,
    StaticEnvironment,
)
from .loader import load_config, resolve_config_path
from .models import (
    AppDefinition,
    ClusterConfig,
    DeployFilter,
    DockerfileBuild,
    ImagesConfig,
    KubeshipConfig,
    ServicePort,
    TagStrategy,
    define_config,
)
from .refs import ConfigMapRef, SecretRef
from .resolver import ConfigResolver

__all__ = [
    # Models
    "KubeshipConfig",
    "AppDefinition",
    "ClusterConfig",
    "DeployFilter",
    "DockerfileBuild",
    "ImagesConfig",
    "ServicePort",
    "TagStrategy",
    "define_config",
    # Loading
    "load_config",
    "resolve_config_path",
    # Context
    "HostContext",
    "ClusterMetadata",
    "ServiceDNSOptions",
    "SecretRef",
    "ConfigMapRef",
    # Environment
    "EnvironmentProvider",
    "ProcessEnvironment",
    "StaticEnvironment",
    "GitEnvironment",
    # Resolution
    "ConfigResolver",
]
