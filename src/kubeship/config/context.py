"""Host context passed to configuration callables.

A HostContext combines a fixed set of helpers (DNS names, labels, secret
and configmap references, environment access, string templates) with the
user-defined variables of one namespace. Variables are reached through
``ctx["name"]`` / ``ctx.get("name")`` and never shadow a helper; names that
would collide are rejected when the configuration is loaded.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from kubeship.config.environment import EnvironmentProvider
from kubeship.config.refs import ConfigMapRef, SecretRef

RESERVED_CONTEXT_NAMES: frozenset[str] = frozenset(
    {
        # Names reserved for built-in context fields
        "project",
        "namespace",
        "dns",
        "url",
        "serviceName",
        "service_name",
        "secret",
        "configMap",
        "config_map",
        "secretKey",
        "configMapKey",
        "service",
        # Helper names
        "app_name",
        "appName",
        "cluster",
        "service_dns",
        "serviceDNS",
        "label",
        "resource",
        "env",
        "template",
        "vars",
        "get",
    }
)

_TEMPLATE_PATTERN = re.compile(r"\{(\w+)\}")


@dataclass(frozen=True)
class ClusterMetadata:
    """Cluster a namespace is deployed to."""

    name: str = ""
    api_server: str = ""
    context: str = ""


@dataclass(frozen=True)
class ServiceDNSOptions:
    """Options for :meth:`HostContext.service_dns`."""

    port: int | None = None
    protocol: str | None = None
    headless: bool = False
    pod_index: int | None = None
    external: bool = False
    cluster_domain: str = "cluster.local"


class HostContext:
    """Helpers and namespace variables for one (namespace, app) pair."""

    def __init__(
        self,
        *,
        project: str,
        namespace: str,
        variables: Mapping[str, Any],
        environment: EnvironmentProvider,
        app_name: str = "",
        cluster: ClusterMetadata | None = None,
    ) -> None:
        self.project = project
        self.namespace = namespace
        self.app_name = app_name
        self.cluster = cluster or ClusterMetadata()
        self._variables = MappingProxyType(dict(variables))
        self._environment = environment

    def __repr__(self) -> str:
        return (
            f"HostContext(project={self.project!r}, namespace={self.namespace!r}, "
            f"app_name={self.app_name!r})"
        )

    # =========================================================================
    # Namespace variables
    # =========================================================================

    @property
    def vars(self) -> Mapping[str, Any]:
        """Read-only view of the namespace variables."""
        return self._variables

    def __getitem__(self, name: str) -> Any:
        try:
            return self._variables[name]
        except KeyError:
            raise KeyError(
                f"Namespace '{self.namespace}' has no variable '{name}'"
            ) from None

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def get(self, name: str, default: Any = None) -> Any:
        """Return a namespace variable, or ``default`` when undefined."""
        return self._variables.get(name, default)

    # =========================================================================
    # Generators
    # =========================================================================

    def service_dns(self, app: str, options: int | ServiceDNSOptions | None = None) -> str:
        """Build the in-cluster DNS name of a service.

        Args:
            app: Service name
            options: A port number, or ServiceDNSOptions for full control

        Returns:
            DNS name such as ``api.prod.svc.cluster.local:8080``

        Example:
            >>> ctx.service_dns("api", ServiceDNSOptions(port=80, protocol="http"))
            'http://api.prod.svc.cluster.local:80'
        """
        if isinstance(options, int):
            return f"{app}.{self.namespace}.svc.cluster.local:{options}"
        if options is None:
            return f"{app}.{self.namespace}.svc.cluster.local"

        domain = options.cluster_domain
        if options.external:
            dns = app
        elif options.headless and options.pod_index is not None:
            dns = f"{app}-{options.pod_index}.{app}.{self.namespace}.svc.{domain}"
        else:
            dns = f"{app}.{self.namespace}.svc.{domain}"

        if options.protocol:
            dns = f"{options.protocol}://{dns}"
        if options.port:
            dns = f"{dns}:{options.port}"
        return dns

    def label(self, key: str, value: str | None = None) -> str:
        """Build an ``app.kubernetes.io/<key>=<value>`` selector term."""
        return f"app.kubernetes.io/{key}={value or self.app_name}"

    def resource(self, kind: str, name: str) -> str:
        """Build a resource name scoped to the current app."""
        suffix = "" if kind in ("sa", "serviceaccount") else f"-{kind}"
        if self.app_name:
            return f"{self.app_name}-{name}{suffix}"
        return f"{name}{suffix}"

    # =========================================================================
    # Secrets & ConfigMaps
    # =========================================================================

    def secret(self, name: str, key: str | None = None) -> SecretRef:
        """Reference a Secret, or one of its keys."""
        return SecretRef(name, key)

    def config_map(self, name: str, key: str | None = None) -> ConfigMapRef:
        """Reference a ConfigMap, or one of its keys."""
        return ConfigMapRef(name, key)

    # =========================================================================
    # Utilities
    # =========================================================================

    def env(self, key: str, fallback: str | None = None) -> str:
        """Read an environment value, falling back to ``fallback`` or ``""``."""
        value = self._environment.get(key)
        if value is not None:
            return value
        return fallback if fallback is not None else ""

    def template(self, text: str, variables: Mapping[str, str]) -> str:
        """Replace ``{name}`` placeholders in ``text``; unknown names become ``""``."""
        return _TEMPLATE_PATTERN.sub(lambda m: variables.get(m.group(1)) or "", text)
