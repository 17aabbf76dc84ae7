"""Container image builds."""

from __future__ import annotations

from loguru import logger

from kubeship.config.models import AppDefinition, DockerfileBuild
from kubeship.config.resolver import ConfigResolver
from kubeship.infra.docker.controller import BuildController
from kubeship.session import Session

from .types import BuildResult, BuiltImage, PlanFilter


class Builder:
    """Builds and pushes the images of the selected apps."""

    def __init__(
        self,
        resolver: ConfigResolver,
        docker: BuildController,
        session: Session,
    ) -> None:
        self.resolver = resolver
        self.docker = docker
        self.session = session

    def _select_apps(self, plan_filter: PlanFilter) -> list[tuple[str, AppDefinition]]:
        if plan_filter.app:
            return self.resolver.apps.select(plan_filter.app)
        if plan_filter.changed_files is not None:
            return self.resolver.apps.select_by_changed_files(plan_filter.changed_files)
        return self.resolver.apps.select()

    async def build(self, plan_filter: PlanFilter | None = None) -> BuildResult:
        """Build images, then push them unless running dry.

        The registry login runs first and is skipped without credentials.
        Apps without a Dockerfile build are skipped with a warning.

        Raises:
            ConfigurationError: If the app filter names an unknown app
            BuildError: If login, a build or a push fails
        """
        plan_filter = plan_filter or PlanFilter()
        apps = self._select_apps(plan_filter)

        await self.docker.login()

        result = BuildResult()
        for app_name, app in apps:
            if app.build is None:
                logger.warning(f"No build configuration found for {app_name}, skipping")
                continue
            if not isinstance(app.build, DockerfileBuild):
                logger.warning(
                    f'Skipping unsupported build configuration for {app_name}. '
                    'Expected type "dockerfile".'
                )
                continue

            image_ref = self.resolver.images.build_ref(app_name)
            await self.docker.build(image_ref, app.build, self.session.root)

            pushed = False
            if not self.session.dry_run:
                await self.docker.push(image_ref)
                pushed = True

            result.images.append(BuiltImage(app=app_name, image=image_ref, pushed=pushed))

        return result
