"""Tests for the command runner, git commands and the docker controller."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from kubeship.config import DockerfileBuild, StaticEnvironment
from kubeship.errors import BuildError
from kubeship.infra.docker import DockerBuildController, LoginOptions
from kubeship.infra.k8s import CommandResult
from kubeship.infra.shell import CommandRunner, GitCommands
from kubeship.session import Session


@pytest.fixture
def build() -> DockerfileBuild:
    """Dockerfile build for the api service."""
    return DockerfileBuild(
        context="services/api",
        dockerfile="services/api/Dockerfile",
        platform="linux/amd64",
        args={"VERSION": "1.0"},
        target="runtime",
    )


class TestCommandRunner:
    """Tests for CommandRunner."""

    def test_success(self, tmp_path: Path) -> None:
        """Output and return code are captured from the project root."""
        completed = subprocess.CompletedProcess(["git"], 0, stdout="abc\n", stderr="")
        with patch("kubeship.infra.shell.runner.subprocess.run", return_value=completed) as run:
            result = CommandRunner(tmp_path).run(["git", "status"])

        assert result == CommandResult(success=True, stdout="abc\n", stderr="", returncode=0)
        assert run.call_args.kwargs["cwd"] == tmp_path

    def test_missing_executable(self, tmp_path: Path) -> None:
        """A missing binary becomes a failed result with code 127."""
        with patch(
            "kubeship.infra.shell.runner.subprocess.run",
            side_effect=FileNotFoundError("docker"),
        ):
            result = CommandRunner(tmp_path).run(["docker", "version"])
        assert result.success is False
        assert result.returncode == 127

    @pytest.mark.asyncio
    async def test_run_async(self, tmp_path: Path) -> None:
        """The async variant delegates to run."""
        completed = subprocess.CompletedProcess(["x"], 2, stdout="", stderr="bad")
        with patch("kubeship.infra.shell.runner.subprocess.run", return_value=completed):
            result = await CommandRunner(tmp_path).run_async(["x"], input_data="in")
        assert result.success is False
        assert result.stderr == "bad"


class TestGitCommands:
    """Tests for GitCommands."""

    @pytest.fixture
    def runner(self) -> MagicMock:
        return MagicMock(spec=CommandRunner)

    def test_head_sha_full(self, runner: MagicMock) -> None:
        """The full SHA is returned."""
        runner.run.return_value = CommandResult(success=True, stdout="0123456789abcdef0123\n")
        assert GitCommands(runner).head_sha() == "0123456789abcdef0123"
        runner.run.assert_called_once_with(["git", "rev-parse", "HEAD"])

    def test_tag_falls_back_to_latest(self, runner: MagicMock) -> None:
        """Without an exact tag the nearest tag is used."""
        runner.run.side_effect = [
            CommandResult(success=False, stderr="no tag", returncode=128),
            CommandResult(success=True, stdout="v1.4.0\n"),
        ]
        assert GitCommands(runner).current_tag() == "v1.4.0"

    def test_failures_are_none(self, runner: MagicMock) -> None:
        """Lookups outside a repository return None."""
        runner.run.return_value = CommandResult(success=False, returncode=128)
        git = GitCommands(runner)
        assert git.current_branch() is None
        assert git.changed_files("origin/main") == []

    def test_changed_files(self, runner: MagicMock) -> None:
        """Blank lines are dropped."""
        runner.run.return_value = CommandResult(
            success=True, stdout="services/api/main.py\n\nREADME.md\n"
        )
        assert GitCommands(runner).changed_files("HEAD~1") == [
            "services/api/main.py",
            "README.md",
        ]


class TestLoginOptions:
    """Tests for credentials lookup."""

    def test_from_environment(self) -> None:
        """DOCKER_TOKEN stands in for the password; docker.io is the default."""
        env = StaticEnvironment({"DOCKER_USERNAME": "bot", "DOCKER_TOKEN": "t0k"})
        assert LoginOptions.from_environment(env) == LoginOptions("docker.io", "bot", "t0k")

    def test_missing_credentials(self) -> None:
        """No username means no login."""
        assert LoginOptions.from_environment(StaticEnvironment({"DOCKER_PASSWORD": "x"})) is None


class TestDockerBuildController:
    """Tests for the docker CLI build controller."""

    @pytest.fixture
    def runner(self) -> MagicMock:
        runner = MagicMock(spec=CommandRunner)
        runner.run_async = AsyncMock(return_value=CommandResult(success=True))
        return runner

    def test_build_args(self, build: DockerfileBuild) -> None:
        """Paths are resolved against the root; options are appended."""
        args = DockerBuildController.build_args("ghcr.io/acme/api:1", build, Path("/repo"))
        assert args == [
            "build",
            "/repo/services/api",
            "--file",
            "/repo/services/api/Dockerfile",
            "--tag",
            "ghcr.io/acme/api:1",
            "--platform",
            "linux/amd64",
            "--build-arg",
            "VERSION=1.0",
            "--target",
            "runtime",
        ]

    @pytest.mark.asyncio
    async def test_build_and_push(
        self, runner: MagicMock, build: DockerfileBuild, tmp_path: Path
    ) -> None:
        """Build then push run docker from the session root."""
        controller = DockerBuildController(Session(root=tmp_path), runner=runner)

        await controller.build("r/api:1", build, tmp_path)
        await controller.push("r/api:1")

        calls = runner.run_async.await_args_list
        assert calls[0].args[0][:2] == ["docker", "build"]
        assert calls[1].args[0] == ["docker", "push", "r/api:1"]
        assert calls[1].kwargs["cwd"] == tmp_path

    @pytest.mark.asyncio
    async def test_build_failure(
        self, runner: MagicMock, build: DockerfileBuild, tmp_path: Path
    ) -> None:
        """Failed builds raise BuildError."""
        runner.run_async.return_value = CommandResult(success=False, stderr="no Dockerfile")
        controller = DockerBuildController(Session(root=tmp_path), runner=runner)
        with pytest.raises(BuildError, match="Failed to build r/api:1"):
            await controller.build("r/api:1", build, tmp_path)

    @pytest.mark.asyncio
    async def test_dry_run_skips_commands(
        self, runner: MagicMock, build: DockerfileBuild, tmp_path: Path
    ) -> None:
        """Dry-run logs instead of running docker."""
        controller = DockerBuildController(Session(root=tmp_path, dry_run=True), runner=runner)

        await controller.build("r/api:1", build, tmp_path)
        await controller.push("r/api:1")

        assert await controller.image_exists("r/api:1") is False
        runner.run_async.assert_not_called()

    @pytest.mark.asyncio
    async def test_login_once_per_registry(self, runner: MagicMock, tmp_path: Path) -> None:
        """Logins are cached on the session; the password goes to stdin."""
        session = Session(root=tmp_path)
        controller = DockerBuildController(session, runner=runner)
        options = LoginOptions("ghcr.io", "bot", "s3cret")

        assert await controller.login(options) is True
        assert await controller.login(options) is True

        runner.run_async.assert_awaited_once()
        assert runner.run_async.await_args.kwargs["input_data"] == "s3cret"
        assert "s3cret" not in runner.run_async.await_args.args[0]
        assert session.logged_in_registries == {"ghcr.io"}

    @pytest.mark.asyncio
    async def test_login_without_credentials(self, runner: MagicMock, tmp_path: Path) -> None:
        """Without credentials no login is attempted."""
        controller = DockerBuildController(
            Session(root=tmp_path), runner=runner, environment=StaticEnvironment()
        )
        assert await controller.login() is False
        runner.run_async.assert_not_called()

    @pytest.mark.asyncio
    async def test_login_rejected(self, runner: MagicMock, tmp_path: Path) -> None:
        """Rejected credentials raise and are not cached."""
        runner.run_async.return_value = CommandResult(success=False, stderr="denied")
        session = Session(root=tmp_path)
        controller = DockerBuildController(session, runner=runner)
        with pytest.raises(BuildError):
            await controller.login(LoginOptions("ghcr.io", "bot", "bad"))
        assert session.logged_in_registries == set()
