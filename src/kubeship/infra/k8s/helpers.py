from __future__ import annotations

import os

from cachetools.func import lru_cache  # type: ignore

from kubeship.errors import ConfigurationError
from kubeship.infra.k8s.controller import ClusterController

CLUSTER_BACKEND_ENV = "KUBESHIP_CLUSTER_BACKEND"


def get_cluster_backend() -> str:
    """Get the cluster backend name from the environment (default: kubectl)."""
    return os.environ.get(CLUSTER_BACKEND_ENV, "kubectl").lower()


@lru_cache(maxsize=4)
def get_cluster_controller(backend: str = "kubectl", dry_run: bool = False) -> ClusterController:
    """Get an instance of the ClusterController.

    Args:
        backend: ``kubectl`` or ``kr8s``
        dry_run: Skip mutating cluster calls

    Returns:
        An instance of ClusterController

    Raises:
        ConfigurationError: If the backend is unknown
    """
    if backend == "kubectl":
        from kubeship.infra.k8s.kubectl_controller import KubectlClusterController

        return KubectlClusterController(dry_run=dry_run)

    if backend == "kr8s":
        from kubeship.infra.k8s.kr8s_controller import Kr8sClusterController

        return Kr8sClusterController(dry_run=dry_run)

    raise ConfigurationError(
        f"Unknown cluster backend: {backend}",
        details=f"Set {CLUSTER_BACKEND_ENV} to 'kubectl' or 'kr8s'.",
    )
