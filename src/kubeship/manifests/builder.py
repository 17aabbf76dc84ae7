"""App manifest builder."""

from __future__ import annotations

from kubeship.constants import DEFAULT_CONSTANTS, KubeshipConstants
from kubeship.manifests.network import (
    build_certificate,
    build_ingress,
    build_ingress_route,
)
from kubeship.manifests.types import ManifestContext, ManifestSet
from kubeship.manifests.workloads import build_deployment, build_service


class ManifestBuilder:
    """Renders the Deployment, Service and network manifests of one app.

    Every object carries the ``app.kubernetes.io/name`` and
    ``app.kubernetes.io/part-of`` labels plus the kubeship management labels
    used for orphan detection. Pod selectors use only the former.
    """

    def __init__(
        self,
        project: str,
        constants: KubeshipConstants = DEFAULT_CONSTANTS,
    ) -> None:
        self.project = project
        self.constants = constants

    def selector_labels(self, app_name: str) -> dict[str, str]:
        return {
            self.constants.NAME_LABEL: app_name,
            self.constants.PART_OF_LABEL: self.project,
        }

    def build(self, app_name: str, ctx: ManifestContext) -> ManifestSet:
        selector = self.selector_labels(app_name)
        labels = {**selector, **self.constants.management_labels(app_name)}
        network = ctx.network

        return ManifestSet(
            deployment=build_deployment(app_name, ctx, selector, labels),
            service=build_service(ctx, selector, labels),
            ingress=build_ingress(ctx, labels, network.ingress)
            if network and network.ingress
            else None,
            ingress_route=build_ingress_route(ctx, labels, network.ingress_route)
            if network and network.ingress_route
            else None,
            certificate=build_certificate(ctx, labels, network.certificate)
            if network and network.certificate
            else None,
        )
