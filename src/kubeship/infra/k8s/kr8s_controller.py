"""Kr8s-backed implementation of ClusterController.

Reads of built-in kinds (get, list, secrets) go through the kr8s async API;
apply, validate, diff and delete, and reads of custom resources such as
IngressRoute and Certificate, are delegated to kubectl.
"""

from __future__ import annotations

from typing import Any

import kr8s
from kr8s.asyncio.objects import (
    ConfigMap,
    Deployment,
    Ingress,
    Namespace,
    Secret,
    Service,
)
from loguru import logger

from kubeship.errors import ClusterCommandError

from .controller import Manifest
from .kubectl_controller import KubectlClusterController

_NATIVE_KINDS: dict[str, Any] = {
    "configmap": ConfigMap,
    "deployment": Deployment,
    "ingress": Ingress,
    "namespace": Namespace,
    "secret": Secret,
    "service": Service,
}


class Kr8sClusterController(KubectlClusterController):
    """Cluster controller reading built-in resources with kr8s.

    Note: The kr8s API client is not cached because it is tied to the event
    loop that was running when it was created, and ``run_sync()`` creates a
    new loop per call.
    """

    async def _get_api(self) -> Any:  # Returns kr8s._api.Api
        """Create a kr8s API client for the current event loop."""
        return await kr8s.asyncio.api()

    @staticmethod
    def _native(kind: str) -> Any | None:
        return _NATIVE_KINDS.get(kind.lower())

    # =========================================================================
    # Read
    # =========================================================================

    async def get(self, kind: str, name: str, namespace: str) -> Manifest | None:
        """Fetch a resource; None when absent or on failure."""
        if self.dry_run:
            return None

        resource_cls = self._native(kind)
        if resource_cls is None:
            return await super().get(kind, name, namespace)

        try:
            api = await self._get_api()
            resource = await resource_cls.get(name, namespace=namespace, api=api)
            return dict(resource.raw)
        except kr8s.NotFoundError:
            return None
        except Exception as e:
            logger.debug(f"kr8s get {kind}/{name} in {namespace} failed: {e}")
            return None

    async def list(
        self, kind: str, namespace: str, label_selector: str | None = None
    ) -> list[Manifest]:
        """List resources of a kind."""
        if self.dry_run:
            return []

        resource_cls = self._native(kind)
        if resource_cls is None:
            return await super().list(kind, namespace, label_selector)

        filters: dict[str, Any] = {"namespace": namespace}
        if label_selector:
            filters["label_selector"] = label_selector

        items: list[Manifest] = []
        try:
            api = await self._get_api()
            async for resource in resource_cls.list(api=api, **filters):
                items.append(dict(resource.raw))
        except Exception as e:
            raise ClusterCommandError(
                f"Listing {kind} failed in namespace {namespace}", details=str(e)
            ) from e
        return items

    async def secret_exists(self, name: str, namespace: str) -> bool:
        """Check if a Secret exists."""
        if self.dry_run:
            return False
        try:
            api = await self._get_api()
            secret = await Secret.get(name, namespace=namespace, api=api)
            return secret is not None
        except kr8s.NotFoundError:
            return False
        except Exception as e:
            logger.debug(f"kr8s get secret/{name} in {namespace} failed: {e}")
            return False
