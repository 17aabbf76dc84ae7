"""Detection of managed resources that are no longer planned."""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from kubeship.constants import DEFAULT_CONSTANTS, KubeshipConstants
from kubeship.infra.k8s.controller import ClusterController

from .types import ManifestChange


class OrphanDetector:
    """Finds kubeship-managed resources whose owning app is not planned.

    Only the app-owned kinds (Deployment, Service, Ingress, IngressRoute,
    Certificate) are considered; namespaces, secrets and configmaps may be
    shared and are never reported.
    """

    def __init__(
        self,
        cluster: ClusterController,
        constants: KubeshipConstants = DEFAULT_CONSTANTS,
    ) -> None:
        self._cluster = cluster
        self._constants = constants

    async def detect(
        self,
        namespaces: Iterable[str],
        expected: dict[str, set[str]],
        app: str | None = None,
    ) -> list[ManifestChange]:
        """List orphaned resources.

        Args:
            namespaces: Namespaces to sweep
            expected: Planned apps per namespace
            app: When set, only report resources owned by this app

        Returns:
            One ``delete`` change per orphaned resource
        """
        orphans: list[ManifestChange] = []
        for namespace in namespaces:
            planned = expected.get(namespace, set())
            for kind in self._constants.MANAGED_KINDS:
                try:
                    items = await self._cluster.list(
                        kind, namespace, self._constants.managed_selector
                    )
                except Exception as e:
                    logger.warning(f"Could not list {kind} in {namespace}: {e}")
                    continue

                for item in items:
                    change = self._classify(item, kind, namespace, planned, app)
                    if change is not None:
                        orphans.append(change)
        return orphans

    def _classify(
        self,
        item: dict,
        kind: str,
        namespace: str,
        planned: set[str],
        app: str | None,
    ) -> ManifestChange | None:
        metadata = item.get("metadata") or {}
        owner = (metadata.get("labels") or {}).get(self._constants.APP_LABEL)
        if owner is None or owner in planned:
            return None
        if app is not None and owner != app:
            return None
        return ManifestChange(
            kind=item.get("kind") or kind,
            name=metadata.get("name", "unnamed"),
            namespace=namespace,
            action="delete",
            validated=True,
        )
