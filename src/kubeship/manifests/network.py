"""Ingress, Traefik IngressRoute and cert-manager Certificate manifests."""

from __future__ import annotations

from kubeship.constants import DEFAULT_CONSTANTS
from kubeship.errors import ConfigurationError
from kubeship.manifests.types import (
    Manifest,
    ManifestContext,
    ResolvedCertificate,
    ResolvedIngress,
    ResolvedIngressRoute,
)
from kubeship.manifests.utils import create_metadata, drop_none


def build_ingress(
    ctx: ManifestContext,
    labels: dict[str, str],
    config: ResolvedIngress,
) -> Manifest:
    """Build an Ingress routing the app host to the app Service.

    Raises:
        ConfigurationError: If the app has no host
    """
    if not ctx.host:
        raise ConfigurationError(
            f"Ingress for {ctx.service_name} requires a host. "
            "Configure a domain in the app network settings."
        )

    annotations = {
        "nginx.ingress.kubernetes.io/backend-protocol": "HTTP",
        **(config.annotations or {}),
    }
    path = {
        "path": config.path,
        "pathType": config.path_type,
        "backend": {
            "service": {
                "name": ctx.service_name,
                "port": {"number": DEFAULT_CONSTANTS.DEFAULT_HTTP_PORT},
            }
        },
    }

    return drop_none(
        {
            "apiVersion": "networking.k8s.io/v1",
            "kind": "Ingress",
            "metadata": create_metadata(
                f"{ctx.service_name}-ingress", ctx.namespace, labels, annotations
            ),
            "spec": {
                "ingressClassName": config.class_name,
                "rules": [{"host": ctx.host, "http": {"paths": [path]}}],
                "tls": config.tls or None,
            },
        }
    )


def build_ingress_route(
    ctx: ManifestContext,
    labels: dict[str, str],
    config: ResolvedIngressRoute,
) -> Manifest:
    """Build a Traefik IngressRoute."""
    routes = []
    for route in config.routes:
        routes.append(
            {
                "kind": "Rule",
                "match": route.match,
                "priority": route.priority,
                "middlewares": route.middlewares,
                "services": [
                    {
                        "kind": service.kind,
                        "name": service.name,
                        "namespace": service.namespace,
                        "scheme": service.scheme,
                        "port": service.port,
                        "nativeLB": service.native_lb,
                        "nodePortLB": service.node_port_lb,
                        "passHostHeader": service.pass_host_header,
                        "serversTransport": service.servers_transport,
                    }
                    for service in route.services
                ],
            }
        )

    return drop_none(
        {
            "apiVersion": "traefik.io/v1alpha1",
            "kind": "IngressRoute",
            "metadata": create_metadata(
                f"{ctx.service_name}-ingressroute", ctx.namespace, labels
            ),
            "spec": {
                "entryPoints": config.entry_points,
                "routes": routes,
                "tls": config.tls,
            },
        }
    )


def build_certificate(
    ctx: ManifestContext,
    labels: dict[str, str],
    config: ResolvedCertificate,
) -> Manifest:
    """Build a cert-manager Certificate named after its TLS secret."""
    return drop_none(
        {
            "apiVersion": "cert-manager.io/v1",
            "kind": "Certificate",
            "metadata": create_metadata(config.secret_name, ctx.namespace, labels),
            "spec": {
                "secretName": config.secret_name,
                "issuerRef": config.issuer_ref,
                "dnsNames": config.dns_names,
                "commonName": config.common_name,
                "duration": config.duration,
                "renewBefore": config.renew_before,
                "isCA": config.is_ca,
                "usages": config.usages,
                "privateKey": config.private_key,
            },
        }
    )
