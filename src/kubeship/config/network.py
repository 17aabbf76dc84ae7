"""Network configuration normalizers.

These functions turn user-provided network options (plain mappings using
the Kubernetes field spelling, e.g. ``className``, ``issuerRef``) into the
resolved dataclasses consumed by the manifest builders.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from kubeship.constants import DEFAULT_CONSTANTS
from kubeship.errors import ConfigurationError
from kubeship.manifests.types import (
    ResolvedCertificate,
    ResolvedIngress,
    ResolvedIngressRoute,
    ResolvedNetwork,
    ResolvedRoute,
    ResolvedRouteService,
)

_HOST_MATCH = re.compile(r"Host\(`([^`]+)`\)")


def create_default_network(host: str) -> ResolvedNetwork:
    """Network with a plain ingress for ``host``."""
    return ResolvedNetwork(ingress=normalize_ingress(host))


def is_local_domain(domain: str) -> bool:
    """Whether ``domain`` is a local development domain (served over HTTP)."""
    return any(marker in domain for marker in DEFAULT_CONSTANTS.LOCAL_DOMAIN_MARKERS)


def create_auto_https(
    domain: str,
    service_name: str,
    *,
    issuer: str | None = None,
    class_name: str | None = None,
) -> ResolvedNetwork:
    """Network for an app whose network config is just a domain name.

    Local development domains get plain HTTP so browsers do not warn about
    certificates; any other domain gets a TLS ingress annotated for Traefik
    and cert-manager.

    Args:
        domain: Public host name of the app
        service_name: Kubernetes Service name (used for the TLS secret name)
        issuer: cert-manager ClusterIssuer name
        class_name: Ingress class name

    Returns:
        Network config with a single ingress
    """
    class_name = class_name or DEFAULT_CONSTANTS.DEFAULT_INGRESS_CLASS

    if is_local_domain(domain):
        return ResolvedNetwork(
            ingress=normalize_ingress(domain, {"className": class_name})
        )

    annotations = {
        "traefik.ingress.kubernetes.io/router.entrypoints": "websecure",
        "traefik.ingress.kubernetes.io/router.tls": "true",
    }
    if issuer:
        annotations["cert-manager.io/cluster-issuer"] = issuer

    return ResolvedNetwork(
        ingress=normalize_ingress(
            domain,
            {
                "className": class_name,
                "annotations": annotations,
                "tls": [{"secretName": f"{service_name}-tls", "hosts": [domain]}],
            },
        )
    )


def extract_host_from_network(options: Mapping[str, Any]) -> str | None:
    """Infer the app host from network options.

    Looks at, in order: certificate ``dnsNames``, the first ingress TLS
    entry's ``hosts`` and the first IngressRoute ``Host(`...`)`` match.
    """
    certificate = options.get("certificate")
    if isinstance(certificate, Mapping):
        dns_names = certificate.get("dnsNames") or []
        if dns_names:
            return dns_names[0]

    ingress = options.get("ingress")
    if isinstance(ingress, Mapping):
        tls = ingress.get("tls") or []
        if tls and tls[0].get("hosts"):
            return tls[0]["hosts"][0]

    ingress_route = options.get("ingressRoute")
    if isinstance(ingress_route, Mapping):
        routes = ingress_route.get("routes") or []
        if routes and routes[0].get("match"):
            found = _HOST_MATCH.search(routes[0]["match"])
            if found:
                return found.group(1)

    return None


def normalize_ingress(
    host: str, options: Mapping[str, Any] | None = None
) -> ResolvedIngress:
    """Apply ingress defaults (path ``/``, pathType ``Prefix``)."""
    options = options or {}
    annotations = options.get("annotations")
    tls = options.get("tls")
    return ResolvedIngress(
        class_name=options.get("className"),
        annotations=dict(annotations) if annotations else None,
        path=options.get("path") or "/",
        path_type=options.get("pathType") or "Prefix",
        tls=[dict(item) for item in tls] if tls else None,
    )


def _route_match(host: str) -> str:
    return f"Host(`{host}`)"


def normalize_ingress_route(
    host: str | None,
    service_name: str,
    options: Mapping[str, Any],
) -> ResolvedIngressRoute:
    """Apply IngressRoute defaults.

    A route without ``match`` targets the app host; a route without services
    forwards to the app Service on port 80.

    Raises:
        ConfigurationError: If a route has no match and no host is known
    """
    default_port = DEFAULT_CONSTANTS.DEFAULT_HTTP_PORT
    route_options = options.get("routes") or [{}]

    routes: list[ResolvedRoute] = []
    for route in route_options:
        match = route.get("match") or (_route_match(host) if host else None)
        if not match:
            raise ConfigurationError(
                "IngressRoute route requires a match. Provide match or configure a host."
            )

        service_options = route.get("services") or [
            {"name": service_name, "port": default_port}
        ]
        services = [
            ResolvedRouteService(
                name=service.get("name") or service_name,
                port=service.get("port") or default_port,
                kind=service.get("kind") or "Service",
                namespace=service.get("namespace"),
                scheme=service.get("scheme"),
                native_lb=service.get("nativeLB"),
                node_port_lb=service.get("nodePortLB"),
                pass_host_header=service.get("passHostHeader"),
                servers_transport=service.get("serversTransport"),
            )
            for service in service_options
        ]

        routes.append(
            ResolvedRoute(
                match=match,
                services=services,
                priority=route.get("priority"),
                middlewares=route.get("middlewares") or options.get("middlewares"),
            )
        )

    tls = options.get("tls")
    entry_points = options.get("entryPoints")
    return ResolvedIngressRoute(
        routes=routes,
        entry_points=list(entry_points) if entry_points else None,
        tls=dict(tls) if tls else None,
    )


def normalize_certificate(
    host: str | None,
    service_name: str,
    options: Mapping[str, Any],
) -> ResolvedCertificate:
    """Apply certificate defaults.

    The secret defaults to ``<service>-tls``; DNS names default to the app
    host; the common name defaults to the first DNS name.

    Raises:
        ConfigurationError: If neither dnsNames nor a host is available
    """
    dns_names = list(options.get("dnsNames") or [])
    if not dns_names:
        if not host:
            raise ConfigurationError(
                "Certificate configuration requires dnsNames or an app host."
            )
        dns_names = [host]

    private_key = options.get("privateKey")
    return ResolvedCertificate(
        secret_name=options.get("secretName") or f"{service_name}-tls",
        issuer_ref=dict(options["issuerRef"]),
        dns_names=dns_names,
        common_name=options.get("commonName") or dns_names[0],
        duration=options.get("duration"),
        renew_before=options.get("renewBefore"),
        is_ca=options.get("isCA"),
        usages=options.get("usages"),
        private_key=dict(private_key) if private_key else None,
    )
