"""Deployment planning.

The planner turns the configuration into one PlanEntry per (namespace, app)
pair that should be deployed, with env, secrets, configmaps, image and
network already resolved for that namespace.
"""

from __future__ import annotations

from loguru import logger

from kubeship.config.models import AppDefinition
from kubeship.config.resolver import ConfigResolver

from .types import PlanEntry, PlanFilter, PlanResult


class Planner:
    """Resolves the configuration into a concrete deployment plan.

    Example:
        >>> planner = Planner(resolver)
        >>> plan = planner.plan(PlanFilter(namespace="prod", app="api"))
        >>> plan.entries[0].image
        'ghcr.io/acme/api:abc123def456'
    """

    def __init__(self, resolver: ConfigResolver) -> None:
        self.resolver = resolver

    def _select_apps(
        self, plan_filter: PlanFilter, *, by_changes: bool = True
    ) -> list[tuple[str, AppDefinition]]:
        # The app filter takes precedence over changed files
        if plan_filter.app:
            return self.resolver.apps.select(plan_filter.app)
        if by_changes and plan_filter.changed_files is not None:
            return self.resolver.apps.select_by_changed_files(plan_filter.changed_files)
        return self.resolver.apps.select()

    def expected_apps(self, plan_filter: PlanFilter | None = None) -> dict[str, set[str]]:
        """Apps that own resources in each namespace the filter covers.

        Used for orphan detection. Changed files only narrow what gets
        applied, so apps they leave out still count as expected.
        """
        plan_filter = plan_filter or PlanFilter()
        apps = self._select_apps(plan_filter, by_changes=False)

        expected: dict[str, set[str]] = {}
        for namespace in self.resolver.namespaces.select(plan_filter.namespace):
            expected[namespace] = {
                app_name
                for app_name, app in apps
                if self.resolver.apps.should_deploy(app, namespace)
            }
        return expected

    def plan(self, plan_filter: PlanFilter | None = None) -> PlanResult:
        """Create a deployment plan.

        Args:
            plan_filter: Optional namespace, app or changed-files filter

        Returns:
            Plan entries in namespace order, then app declaration order

        Raises:
            ConfigurationError: If a filter names an unknown namespace or app,
                or an app's network configuration is invalid
        """
        plan_filter = plan_filter or PlanFilter()
        namespaces = self.resolver.namespaces.select(plan_filter.namespace)
        apps = self._select_apps(plan_filter)

        entries: list[PlanEntry] = []
        for namespace in namespaces:
            for app_name, app in apps:
                if not self.resolver.apps.should_deploy(app, namespace):
                    logger.debug(f"Skipping {app_name} in {namespace}: not deployed there")
                    continue
                entries.append(self._plan_entry(namespace, app_name, app))

        logger.debug(f"Planned {len(entries)} entr{'y' if len(entries) == 1 else 'ies'}")
        return PlanResult(entries=entries)

    def _plan_entry(self, namespace: str, app_name: str, app: AppDefinition) -> PlanEntry:
        apps = self.resolver.apps
        context = self.resolver.namespaces.create_host_context(namespace, app_name)

        env = apps.resolve_env(app, context)
        secrets = apps.resolve_secrets(app, context, env)
        config_maps = apps.resolve_config_maps(app, context, env)
        image = app.image or self.resolver.images.build_ref(app_name)
        network, host = apps.resolve_network(app_name, app, context)

        return PlanEntry(
            namespace=namespace,
            app=app_name,
            image=image,
            host=host,
            env=env,
            secrets=secrets,
            config_maps=config_maps,
            network=network,
            pod_annotations=app.pod_annotations,
            volumes=app.volumes,
            volume_mounts=app.volume_mounts,
            args=app.args,
            ports=app.ports,
        )
