"""Constants shared across kubeship.

This module centralizes label keys, sentinels and defaults used by the
planner, the deployer and the cluster adapters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field


@dataclass(frozen=True)
class KubeshipConstants:
    """Constants for planning and deploying.

    The label keys form the contract used to find resources created by
    earlier runs; changing them orphans everything already deployed.
    """

    # Resource labeling contract
    MANAGED_LABEL: str = "kubeship/managed"
    MANAGED_VALUE: str = "true"
    APP_LABEL: str = "kubeship/app"
    PROJECT_LABEL: str = "kubeship/project"

    # Standard Kubernetes recommended labels
    NAME_LABEL: str = "app.kubernetes.io/name"
    PART_OF_LABEL: str = "app.kubernetes.io/part-of"
    COMPONENT_LABEL: str = "app.kubernetes.io/component"

    # Kinds that are owned by a single app and swept for orphans
    MANAGED_KINDS: tuple[str, ...] = (
        "Deployment",
        "Service",
        "Ingress",
        "IngressRoute",
        "Certificate",
    )

    DEFAULT_HTTP_PORT: int = 80
    DRY_RUN_DIFF_SENTINEL: str = "(dry-run - diff not available)"

    # Apps matching these names keep a single replica
    STATEFUL_APP_MARKERS: tuple[str, ...] = ("grafana", "postgres", "mysql")
    PRODUCTION_REPLICAS: int = 3

    # Network defaults
    DEFAULT_CERT_ISSUER: str = "letsencrypt-prod"
    DEFAULT_INGRESS_CLASS: str = "traefik"
    LOCAL_DOMAIN_MARKERS: tuple[str, ...] = ("localtest.me", "localhost", ".local")

    # Config discovery
    DEFAULT_CONFIG_PATH: str = "kubeship.config"
    CONFIG_EXTENSION_ORDER: tuple[str, ...] = ("", ".py", ".yaml", ".yml", ".json")

    # Registry login defaults
    DEFAULT_DOCKER_REGISTRY: str = "docker.io"

    # Placeholder tokens that mark a secret value as not yet provided
    SUSPECT_SECRET_PATTERN: re.Pattern[str] = field(
        default=re.compile(r"change-me|replace-me|todo|fixme", re.IGNORECASE)
    )

    @property
    def managed_selector(self) -> str:
        """Label selector matching every resource created by kubeship."""
        return f"{self.MANAGED_LABEL}={self.MANAGED_VALUE}"

    def management_labels(self, app: str) -> dict[str, str]:
        """Labels attached to every resource owned by ``app``."""
        return {self.APP_LABEL: app, self.MANAGED_LABEL: self.MANAGED_VALUE}

    def namespace_labels(self, project: str) -> dict[str, str]:
        """Labels attached to namespaces created for ``project``."""
        return {self.MANAGED_LABEL: self.MANAGED_VALUE, self.PROJECT_LABEL: project}


DEFAULT_CONSTANTS = KubeshipConstants()
