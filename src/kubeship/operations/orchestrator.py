"""Facade wiring configuration, planner, deployer and builder together."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from kubeship.config.environment import (
    EnvironmentProvider,
    GitEnvironment,
    ProcessEnvironment,
)
from kubeship.config.loader import load_config, resolve_config_path
from kubeship.config.models import KubeshipConfig
from kubeship.config.resolver import ConfigResolver
from kubeship.infra.docker.controller import BuildController
from kubeship.infra.docker.docker_controller import DockerBuildController
from kubeship.infra.k8s.controller import ClusterController
from kubeship.infra.k8s.helpers import get_cluster_backend, get_cluster_controller
from kubeship.infra.shell.git import GitCommands
from kubeship.infra.shell.runner import CommandRunner
from kubeship.session import Session

from .builder import Builder
from .deployer import Deployer
from .planner import Planner
from .types import (
    BuildResult,
    DeployResult,
    PlanFilter,
    PlanResult,
    PlanWithChangesResult,
)


class KubeShip:
    """One configured project, ready to plan, build and deploy.

    Example:
        >>> ship = KubeShip.from_path("kubeship.config", dry_run=True)
        >>> result = run_sync(ship.plan_with_changes(ship.filter(namespace="dev")))
    """

    def __init__(
        self,
        config: KubeshipConfig,
        *,
        cluster: ClusterController,
        docker: BuildController | None = None,
        session: Session | None = None,
        environment: EnvironmentProvider | None = None,
        git: GitCommands | None = None,
    ) -> None:
        """Initialize the facade.

        Args:
            config: Validated configuration
            cluster: Cluster controller for plan/deploy
            docker: Build controller (docker CLI when omitted)
            session: Per-invocation state (fresh when omitted)
            environment: Source of environment values (process env when omitted)
            git: Git commands (run from ``session.root`` when omitted)
        """
        self.config = config
        self.session = session or Session()
        base_environment = environment or ProcessEnvironment()

        runner = CommandRunner(self.session.root)
        self.git = git or GitCommands(runner)
        self.environment = GitEnvironment(base_environment, self.git, self.session)

        self.resolver = ConfigResolver(config, self.environment, self.session)
        self.planner = Planner(self.resolver)
        self.deployer = Deployer(self.resolver, self.planner, cluster)
        self.builder = Builder(
            self.resolver,
            docker
            or DockerBuildController(
                self.session, runner=runner, environment=base_environment
            ),
            self.session,
        )

    @classmethod
    def from_path(
        cls,
        config_path: str | Path,
        *,
        dry_run: bool = False,
        backend: str | None = None,
    ) -> KubeShip:
        """Load a configuration file and wire the default adapters.

        Args:
            config_path: Configuration path, with or without extension
            dry_run: Skip mutating cluster and docker calls
            backend: Cluster backend name (``KUBESHIP_CLUSTER_BACKEND`` when omitted)

        Raises:
            ConfigurationError: If the file is missing or invalid, or the
                backend is unknown
        """
        path = resolve_config_path(config_path)
        config = load_config(path)
        session = Session(root=path.parent, dry_run=dry_run)
        cluster = get_cluster_controller(backend or get_cluster_backend(), dry_run)
        return cls(config, cluster=cluster, session=session)

    def filter(
        self,
        namespace: str | None = None,
        app: str | None = None,
        changed_since: str | None = None,
    ) -> PlanFilter:
        """Build a plan filter, resolving ``changed_since`` through git."""
        changed_files = None
        if changed_since:
            changed_files = self.git.changed_files(changed_since)
            logger.debug(f"{len(changed_files)} file(s) changed since {changed_since}")
        return PlanFilter(namespace=namespace, app=app, changed_files=changed_files)

    def plan(self, plan_filter: PlanFilter | None = None) -> PlanResult:
        return self.planner.plan(plan_filter)

    async def plan_with_changes(
        self, plan_filter: PlanFilter | None = None
    ) -> PlanWithChangesResult:
        return await self.deployer.plan_with_changes(plan_filter)

    async def deploy(self, plan_filter: PlanFilter | None = None) -> DeployResult:
        return await self.deployer.deploy(plan_filter)

    async def build(self, plan_filter: PlanFilter | None = None) -> BuildResult:
        return await self.builder.build(plan_filter)
