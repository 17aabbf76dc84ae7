"""Docker CLI implementation of BuildController."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from kubeship.config.environment import EnvironmentProvider, ProcessEnvironment
from kubeship.config.models import DockerfileBuild
from kubeship.errors import BuildError
from kubeship.infra.k8s.controller import CommandResult
from kubeship.infra.shell.runner import CommandRunner
from kubeship.session import Session

from .controller import BuildController, LoginOptions


def _relative(path: str, root: Path) -> str:
    candidate = Path(path)
    return str(candidate if candidate.is_absolute() else root / candidate)


class DockerBuildController(BuildController):
    """Build controller shelling out to ``docker``.

    Build paths are resolved against ``session.root``. Registry logins are
    remembered on the session so each registry is logged in to once. With
    ``session.dry_run`` set, commands are logged instead of executed.
    """

    def __init__(
        self,
        session: Session,
        *,
        runner: CommandRunner | None = None,
        environment: EnvironmentProvider | None = None,
        docker: str = "docker",
    ) -> None:
        self._session = session
        self._runner = runner or CommandRunner(session.root)
        self._environment = environment or ProcessEnvironment()
        self._docker = docker

    @property
    def dry_run(self) -> bool:
        return self._session.dry_run

    async def _run_docker(
        self, args: list[str], *, input_data: str | None = None
    ) -> CommandResult:
        return await self._runner.run_async(
            [self._docker, *args], cwd=self._session.root, input_data=input_data
        )

    @staticmethod
    def build_args(image_ref: str, build: DockerfileBuild, context: Path) -> list[str]:
        """Arguments for ``docker build``.

        Example:
            >>> DockerBuildController.build_args("r/api:1", build, Path("/repo"))
            ['build', '/repo/services/api', '--file', '/repo/services/api/Dockerfile',
             '--tag', 'r/api:1']
        """
        args = [
            "build",
            _relative(build.context, context),
            "--file",
            _relative(build.dockerfile, context),
            "--tag",
            image_ref,
        ]
        if build.platform:
            args.extend(["--platform", build.platform])
        for key, value in build.args.items():
            args.extend(["--build-arg", f"{key}={value}"])
        if build.target:
            args.extend(["--target", build.target])
        return args

    async def build(self, image_ref: str, build: DockerfileBuild, context: Path) -> None:
        args = self.build_args(image_ref, build, context)
        if self.dry_run:
            logger.info(f"[dry-run] docker {' '.join(args)}")
            return

        result = await self._run_docker(args)
        if not result.success:
            raise BuildError(f"Failed to build {image_ref}", details=result.stderr)
        logger.info(f"Built {image_ref}")

    async def push(self, image_ref: str) -> None:
        if self.dry_run:
            logger.info(f"[dry-run] docker push {image_ref}")
            return

        result = await self._run_docker(["push", image_ref])
        if not result.success:
            raise BuildError(f"Failed to push {image_ref}", details=result.stderr)
        logger.info(f"Pushed {image_ref}")

    async def image_exists(self, image_ref: str) -> bool:
        if self.dry_run:
            return False
        result = await self._run_docker(["manifest", "inspect", image_ref])
        return result.success

    async def login(self, options: LoginOptions | None = None) -> bool:
        if options is None:
            options = LoginOptions.from_environment(self._environment)
        if options is None:
            logger.debug("No registry credentials set, skipping docker login")
            return False

        if options.registry in self._session.logged_in_registries:
            logger.debug(f"Already logged in to {options.registry}")
            return True

        if not self.dry_run:
            result = await self._run_docker(
                [
                    "login",
                    options.registry,
                    "--username",
                    options.username,
                    "--password-stdin",
                ],
                input_data=options.password,
            )
            if not result.success:
                raise BuildError(
                    f"Failed to log in to {options.registry}", details=result.stderr
                )

        self._session.logged_in_registries.add(options.registry)
        logger.info(f"Logged in to {options.registry} as {options.username}")
        return True
