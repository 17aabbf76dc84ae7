"""Namespace selection and host context creation."""

from __future__ import annotations

from kubeship.config.context import ClusterMetadata, HostContext
from kubeship.config.environment import EnvironmentProvider
from kubeship.config.models import KubeshipConfig
from kubeship.errors import ConfigurationError


class NamespaceResolver:
    """Selects namespaces and builds the HostContext for each of them."""

    def __init__(self, config: KubeshipConfig, environment: EnvironmentProvider) -> None:
        self._config = config
        self._environment = environment

    def select(self, target: str | None = None) -> list[str]:
        """Namespaces to operate on, in declaration order.

        Raises:
            ConfigurationError: If ``target`` is not a configured namespace
        """
        if target:
            if target not in self._config.namespaces:
                raise ConfigurationError(f"Unknown namespace: {target}")
            return [target]
        return list(self._config.namespaces)

    def cluster_for(self, namespace: str) -> ClusterMetadata:
        """Cluster hosting ``namespace``, or empty metadata when none claims it."""
        for name, cluster in self._config.clusters.items():
            if namespace in cluster.namespaces:
                return ClusterMetadata(
                    name=name,
                    api_server=cluster.api_server,
                    context=cluster.context,
                )
        return ClusterMetadata()

    def create_host_context(self, namespace: str, app_name: str = "") -> HostContext:
        """Build the context handed to configuration callables.

        Raises:
            ConfigurationError: If ``namespace`` is not configured
        """
        if namespace not in self._config.namespaces:
            raise ConfigurationError(f"Unknown namespace: {namespace}")

        return HostContext(
            project=self._config.project,
            namespace=namespace,
            variables=self._config.namespaces[namespace],
            environment=self._environment,
            app_name=app_name,
            cluster=self.cluster_for(namespace),
        )
