"""Types consumed by the manifest builders."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from kubeship.config.models import ServicePort
    from kubeship.config.refs import EnvSpec

Manifest: TypeAlias = dict[str, Any]


# =============================================================================
# Resolved network configuration
# =============================================================================


@dataclass
class ResolvedIngress:
    """Ingress settings after defaults were applied."""

    path: str = "/"
    path_type: str = "Prefix"
    class_name: str | None = None
    annotations: dict[str, str] | None = None
    tls: list[dict[str, Any]] | None = None


@dataclass
class ResolvedRouteService:
    """Backend of a Traefik IngressRoute rule."""

    name: str
    port: int | str
    kind: str = "Service"
    namespace: str | None = None
    scheme: str | None = None
    native_lb: bool | None = None
    node_port_lb: bool | None = None
    pass_host_header: bool | None = None
    servers_transport: str | None = None


@dataclass
class ResolvedRoute:
    """One Traefik IngressRoute rule."""

    match: str
    services: list[ResolvedRouteService] = field(default_factory=list)
    priority: int | None = None
    middlewares: list[dict[str, Any]] | None = None


@dataclass
class ResolvedIngressRoute:
    """Traefik IngressRoute settings after defaults were applied."""

    routes: list[ResolvedRoute]
    entry_points: list[str] | None = None
    tls: dict[str, Any] | None = None


@dataclass
class ResolvedCertificate:
    """cert-manager Certificate settings after defaults were applied."""

    secret_name: str
    issuer_ref: dict[str, Any]
    dns_names: list[str]
    common_name: str
    duration: str | None = None
    renew_before: str | None = None
    is_ca: bool | None = None
    usages: list[str] | None = None
    private_key: dict[str, Any] | None = None


@dataclass
class ResolvedNetwork:
    """Network resources an app exposes. Each part is optional."""

    ingress: ResolvedIngress | None = None
    ingress_route: ResolvedIngressRoute | None = None
    certificate: ResolvedCertificate | None = None

    @property
    def is_empty(self) -> bool:
        return (
            self.ingress is None
            and self.ingress_route is None
            and self.certificate is None
        )


# =============================================================================
# Builder input/output
# =============================================================================


@dataclass
class ManifestContext:
    """Everything needed to render the manifests of one app in one namespace."""

    namespace: str
    service_name: str
    image: str
    env: EnvSpec
    host: str | None = None
    network: ResolvedNetwork | None = None
    pod_annotations: dict[str, str] | None = None
    volumes: list[dict[str, Any]] | None = None
    volume_mounts: list[dict[str, Any]] | None = None
    args: list[str] | None = None
    ports: list[ServicePort] | None = None


@dataclass
class ManifestSet:
    """Manifests of one app; network manifests are present only when configured."""

    deployment: Manifest
    service: Manifest
    ingress: Manifest | None = None
    ingress_route: Manifest | None = None
    certificate: Manifest | None = None

    def present(self) -> list[Manifest]:
        """Manifests that exist, in apply order."""
        candidates = (
            self.deployment,
            self.service,
            self.ingress,
            self.ingress_route,
            self.certificate,
        )
        return [manifest for manifest in candidates if manifest is not None]
