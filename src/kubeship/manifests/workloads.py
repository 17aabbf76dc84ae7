"""Deployment and Service manifests."""

from __future__ import annotations

from typing import Any

from kubeship.constants import DEFAULT_CONSTANTS
from kubeship.manifests.types import Manifest, ManifestContext
from kubeship.manifests.utils import (
    create_env_from,
    create_env_vars,
    create_metadata,
    drop_none,
)


def _container_ports(ctx: ManifestContext) -> list[dict[str, Any]]:
    if ctx.ports:
        return [
            {
                "containerPort": port.target_port
                if isinstance(port.target_port, int)
                else port.port,
                "name": port.name,
                "protocol": port.protocol or "TCP",
            }
            for port in ctx.ports
        ]

    container_port = DEFAULT_CONSTANTS.DEFAULT_HTTP_PORT
    if isinstance(ctx.env, dict):
        declared = ctx.env.get("PORT")
        if isinstance(declared, str) and declared.strip().isdigit():
            container_port = int(declared)
    return [{"containerPort": container_port, "name": "http", "protocol": "TCP"}]


def replica_count(app_name: str, namespace: str) -> int:
    """Replicas for an app: stateful apps get one, production namespaces three."""
    name = app_name.lower()
    if any(marker in name for marker in DEFAULT_CONSTANTS.STATEFUL_APP_MARKERS):
        return 1
    if "prod" in namespace.lower():
        return DEFAULT_CONSTANTS.PRODUCTION_REPLICAS
    return 1


def build_deployment(
    app_name: str,
    ctx: ManifestContext,
    selector_labels: dict[str, str],
    labels: dict[str, str],
) -> Manifest:
    """Build the Deployment running the app container.

    Args:
        app_name: App name (used as the container name)
        ctx: Resolved app context
        selector_labels: Labels identifying the app pods
        labels: Labels for the Deployment object itself
    """
    container = {
        "name": app_name,
        "image": ctx.image,
        "imagePullPolicy": "IfNotPresent",
        "ports": _container_ports(ctx),
        "env": create_env_vars(ctx.env),
        "envFrom": create_env_from(ctx.env),
        "resources": {},
        "volumeMounts": ctx.volume_mounts,
        "args": ctx.args,
    }

    return drop_none(
        {
            "apiVersion": "apps/v1",
            "kind": "Deployment",
            "metadata": create_metadata(ctx.service_name, ctx.namespace, labels),
            "spec": {
                "replicas": replica_count(app_name, ctx.namespace),
                "selector": {"matchLabels": dict(selector_labels)},
                "strategy": {},
                "template": {
                    "metadata": {
                        "labels": {
                            **selector_labels,
                            DEFAULT_CONSTANTS.COMPONENT_LABEL: app_name,
                        },
                        "annotations": ctx.pod_annotations,
                    },
                    "spec": {
                        "containers": [container],
                        "volumes": ctx.volumes,
                    },
                },
            },
        }
    )


def build_service(
    ctx: ManifestContext,
    selector_labels: dict[str, str],
    labels: dict[str, str],
) -> Manifest:
    """Build the Service in front of the app pods.

    Without explicit ports the Service maps port 80 to the container's
    ``http`` named port.
    """
    if ctx.ports:
        ports = [
            {
                "name": port.name,
                "port": port.port,
                "targetPort": port.target_port or port.name,
                "protocol": port.protocol or "TCP",
            }
            for port in ctx.ports
        ]
    else:
        ports = [
            {
                "name": "http",
                "port": DEFAULT_CONSTANTS.DEFAULT_HTTP_PORT,
                "targetPort": "http",
                "protocol": "TCP",
            }
        ]

    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": create_metadata(ctx.service_name, ctx.namespace, labels),
        "spec": {"selector": dict(selector_labels), "ports": ports},
    }
