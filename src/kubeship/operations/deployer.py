"""Deployment and change analysis.

``deploy`` applies a plan entry by entry, in four steps:

1. Ensure the namespace exists (failures are tolerated)
2. Validate and apply the entry's secrets as one batch
3. Apply the entry's configmaps as one batch
4. Apply the app resources (Deployment, Service and any Ingress,
   IngressRoute or Certificate) as one batch

Each batch is all-or-nothing; steps are not atomic with respect to each
other. Managed resources whose owning app is no longer planned are deleted
once every entry has been applied.

``plan_with_changes`` validates and diffs the same manifests without
mutating the cluster, checking resources shared between apps only once.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from kubeship.config.resolver import ConfigResolver
from kubeship.constants import DEFAULT_CONSTANTS, KubeshipConstants
from kubeship.errors import DeploymentAborted, DeploymentError
from kubeship.infra.k8s.controller import ClusterController, Manifest
from kubeship.manifests import (
    ManifestBuilder,
    ManifestContext,
    ManifestSet,
    build_config_map,
    build_namespace,
    build_secret,
    manifest_kind,
    manifest_name,
)

from .orphans import OrphanDetector
from .planner import Planner
from .secret_validator import SecretValidator
from .types import (
    AppResourceChanges,
    DeployedEntry,
    DeployResult,
    GlobalChanges,
    ManifestChange,
    PlanEntry,
    PlanFilter,
    PlanWithChangesResult,
)


@dataclass
class _SharedPayload:
    """A secret or configmap collected for analysis, with its first owner."""

    namespace: str
    name: str
    data: dict[str, str]
    app: str


class Deployer:
    """Applies plans to a cluster and previews their effect.

    Attributes:
        resolver: Configuration resolver
        planner: Planner producing the entries to deploy
        cluster: Cluster controller used for every cluster call
        manifests: Builder for app manifests
    """

    def __init__(
        self,
        resolver: ConfigResolver,
        planner: Planner,
        cluster: ClusterController,
        *,
        manifests: ManifestBuilder | None = None,
        constants: KubeshipConstants = DEFAULT_CONSTANTS,
    ) -> None:
        self.resolver = resolver
        self.planner = planner
        self.cluster = cluster
        self.constants = constants
        self.manifests = manifests or ManifestBuilder(resolver.project.name, constants)
        self._secrets = SecretValidator(cluster, constants)
        self._orphans = OrphanDetector(cluster, constants)

    # =========================================================================
    # Manifest helpers
    # =========================================================================

    def _namespace_manifest(self, namespace: str) -> Manifest:
        return build_namespace(
            namespace, self.constants.namespace_labels(self.resolver.project.name)
        )

    def _app_manifests(self, entry: PlanEntry) -> ManifestSet:
        context = ManifestContext(
            namespace=entry.namespace,
            service_name=self.resolver.project.service_name(entry.app),
            image=entry.image,
            env=entry.env,
            host=entry.host,
            network=entry.network,
            pod_annotations=entry.pod_annotations,
            volumes=entry.volumes,
            volume_mounts=entry.volume_mounts,
            args=entry.args,
            ports=entry.ports,
        )
        return self.manifests.build(entry.app, context)

    @staticmethod
    def _sweep_namespaces(entries: list[PlanEntry], plan_filter: PlanFilter) -> list[str]:
        if plan_filter.namespace:
            return [plan_filter.namespace]
        return list(dict.fromkeys(entry.namespace for entry in entries))

    # =========================================================================
    # Deploy
    # =========================================================================

    async def deploy(self, plan_filter: PlanFilter | None = None) -> DeployResult:
        """Apply the plan to the cluster.

        Args:
            plan_filter: Optional namespace, app or changed-files filter

        Returns:
            Applied refs per entry, and the refs of deleted orphans

        Raises:
            ConfigurationError: If planning fails (nothing has been applied)
            DeploymentAborted: If secret validation or a batch apply fails;
                ``completed`` holds the entries applied before the failure
        """
        plan_filter = plan_filter or PlanFilter()
        plan = self.planner.plan(plan_filter)
        result = DeployResult()
        ensured_namespaces: set[str] = set()

        for entry in plan.entries:
            try:
                applied = await self._deploy_entry(entry, ensured_namespaces)
            except DeploymentError as e:
                logger.error(f"Deploy of {entry.app} to {entry.namespace} failed: {e.message}")
                raise DeploymentAborted(e, list(result.entries)) from e
            result.entries.append(DeployedEntry(entry=entry, applied_manifests=applied))

        deleted = await self._delete_orphans(
            self._sweep_namespaces(plan.entries, plan_filter),
            self.planner.expected_apps(plan_filter),
            plan_filter.app,
        )
        if deleted:
            result.deleted_manifests = deleted
        return result

    async def _deploy_entry(self, entry: PlanEntry, ensured_namespaces: set[str]) -> list[str]:
        namespace = entry.namespace
        owner_labels = self.constants.management_labels(entry.app)
        applied: list[str] = []

        # 1. Namespace
        if namespace not in ensured_namespaces:
            try:
                applied.append(
                    await self.cluster.apply(self._namespace_manifest(namespace), namespace)
                )
            except DeploymentError as e:
                logger.warning(f"Could not apply namespace {namespace}: {e.message}")
            ensured_namespaces.add(namespace)

        # 2. Secrets
        secret_manifests: list[Manifest] = []
        for name, data in entry.secrets.items():
            await self._secrets.validate(name, data, namespace, entry.app)
            secret_manifests.append(build_secret(name, namespace, data, owner_labels))
        if secret_manifests:
            applied.extend(await self.cluster.apply_batch(secret_manifests, namespace))

        # 3. ConfigMaps
        config_map_manifests = [
            build_config_map(name, namespace, data, owner_labels)
            for name, data in entry.config_maps.items()
        ]
        if config_map_manifests:
            applied.extend(await self.cluster.apply_batch(config_map_manifests, namespace))

        # 4. App resources
        app_manifests = self._app_manifests(entry).present()
        if app_manifests:
            applied.extend(await self.cluster.apply_batch(app_manifests, namespace))

        for ref in applied:
            logger.info(f"Applied {ref} in {namespace}")
        return applied

    async def _delete_orphans(
        self,
        namespaces: list[str],
        expected: dict[str, set[str]],
        app: str | None,
    ) -> list[str]:
        deleted: list[str] = []
        for orphan in await self._orphans.detect(namespaces, expected, app):
            try:
                ref = await self.cluster.delete(orphan.kind, orphan.name, orphan.namespace)
            except Exception as e:
                logger.warning(
                    f"Failed to delete orphan {orphan.ref} in {orphan.namespace}: {e}"
                )
                continue
            logger.info(f"Deleted orphan {ref} in {orphan.namespace}")
            deleted.append(ref)
        return deleted

    # =========================================================================
    # Plan with changes
    # =========================================================================

    async def plan_with_changes(
        self, plan_filter: PlanFilter | None = None
    ) -> PlanWithChangesResult:
        """Validate and diff every planned resource without applying anything.

        Secrets and configmaps referenced by several apps in a namespace are
        analyzed once. Manifests in namespaces that do not exist yet are
        validated client-side only.

        Raises:
            ConfigurationError: If planning fails
        """
        plan_filter = plan_filter or PlanFilter()
        plan = self.planner.plan(plan_filter)

        namespaces: list[str] = []
        secrets: dict[str, _SharedPayload] = {}
        config_maps: dict[str, _SharedPayload] = {}
        for entry in plan.entries:
            if entry.namespace not in namespaces:
                namespaces.append(entry.namespace)
            for name, data in entry.secrets.items():
                secrets.setdefault(
                    f"{entry.namespace}/{name}",
                    _SharedPayload(entry.namespace, name, data, entry.app),
                )
            for name, data in entry.config_maps.items():
                config_maps.setdefault(
                    f"{entry.namespace}/{name}",
                    _SharedPayload(entry.namespace, name, data, entry.app),
                )

        result = PlanWithChangesResult(global_changes=GlobalChanges())
        existing_namespaces: set[str] = set()

        for namespace in namespaces:
            change = await self.analyze_manifest(
                self._namespace_manifest(namespace), namespace
            )
            result.global_changes.namespaces.append(change)
            if change.action in ("update", "unchanged"):
                existing_namespaces.add(namespace)

        for payload in secrets.values():
            manifest = build_secret(
                payload.name,
                payload.namespace,
                payload.data,
                self.constants.management_labels(payload.app),
            )
            result.global_changes.secrets.append(
                await self.analyze_manifest(
                    manifest,
                    payload.namespace,
                    client_side=payload.namespace not in existing_namespaces,
                )
            )

        for payload in config_maps.values():
            manifest = build_config_map(
                payload.name,
                payload.namespace,
                payload.data,
                self.constants.management_labels(payload.app),
            )
            result.global_changes.config_maps.append(
                await self.analyze_manifest(
                    manifest,
                    payload.namespace,
                    client_side=payload.namespace not in existing_namespaces,
                )
            )

        for entry in plan.entries:
            client_side = entry.namespace not in existing_namespaces
            app_changes = AppResourceChanges(
                app=entry.app,
                namespace=entry.namespace,
                image=entry.image,
                host=entry.host,
            )
            for manifest in self._app_manifests(entry).present():
                app_changes.changes.append(
                    await self.analyze_manifest(
                        manifest, entry.namespace, client_side=client_side
                    )
                )
            result.apps.append(app_changes)

        result.orphaned = await self._orphans.detect(
            self._sweep_namespaces(plan.entries, plan_filter),
            self.planner.expected_apps(plan_filter),
            plan_filter.app,
        )
        return result

    async def analyze_manifest(
        self, manifest: Manifest, namespace: str, client_side: bool = False
    ) -> ManifestChange:
        """Validate a manifest and classify the change applying it would make.

        Args:
            manifest: Manifest to analyze
            namespace: Target namespace
            client_side: Validate without the API server (namespace missing)

        Returns:
            ``unchanged`` with ``validation_error`` when invalid; otherwise
            ``create`` (not in cluster), ``unchanged`` (no diff) or
            ``update`` (with the diff)
        """
        change = ManifestChange(
            kind=manifest_kind(manifest),
            name=manifest_name(manifest),
            namespace=namespace,
            action="unchanged",
            validated=False,
        )

        try:
            await self.cluster.validate(manifest, namespace, client_side=client_side)
        except DeploymentError as e:
            change.validation_error = (
                f"{e.message}: {e.details}" if e.details else e.message
            )
            return change
        change.validated = True

        diff = await self.cluster.diff(manifest, namespace)
        if diff is None:
            change.action = "create"
        elif not diff.strip() or diff == self.constants.DRY_RUN_DIFF_SENTINEL:
            change.action = "unchanged"
        else:
            change.action = "update"
            change.diff = diff
        return change
