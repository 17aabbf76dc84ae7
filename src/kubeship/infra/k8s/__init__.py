"""Kubernetes cluster abstraction layer.

Supports two backends: kubectl subprocess calls and kr8s-backed reads.

Example:
    from kubeship.infra.k8s import get_cluster_controller
    from kubeship.infra.utils import run_sync

    controller = get_cluster_controller("kubectl", dry_run=False)
    data = run_sync(controller.get_secret_data("db", "prod"))
"""

from .controller import ClusterController, CommandResult, Manifest
from .helpers import get_cluster_backend, get_cluster_controller
from .kubectl_controller import KubectlClusterController, serialize_manifests

__all__ = [
    # Controller classes
    "ClusterController",
    "KubectlClusterController",
    # Data classes
    "CommandResult",
    "Manifest",
    # Factories and helpers
    "get_cluster_backend",
    "get_cluster_controller",
    "serialize_manifests",
]
