"""Tests for image builds and the KubeShip facade."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from kubeship.config import StaticEnvironment
from kubeship.errors import BuildError, ConfigurationError
from kubeship.operations import BuiltImage, KubeShip, PlanFilter
from kubeship.session import Session
from tests.conftest import make_config
from tests.fakes import FakeBuildController, FakeClusterController


class TestBuilder:
    """Tests for Builder.build."""

    @pytest.mark.asyncio
    async def test_builds_and_pushes_dockerfile_apps(
        self, ship: KubeShip, docker: FakeBuildController, session: Session
    ) -> None:
        """Only apps with a Dockerfile build are built; images are pushed."""
        result = await ship.build()

        assert result.images == [
            BuiltImage(app="api", image="ghcr.io/acme/api:0123456789ab", pushed=True)
        ]
        image_ref, build, context = docker.built[0]
        assert image_ref == "ghcr.io/acme/api:0123456789ab"
        assert build.context == "services/api"
        assert context == session.root
        assert docker.pushed == ["ghcr.io/acme/api:0123456789ab"]
        assert docker.logins == [None]

    @pytest.mark.asyncio
    async def test_dry_run_does_not_push(
        self, ship: KubeShip, docker: FakeBuildController, session: Session
    ) -> None:
        """Dry-run builds are reported as not pushed."""
        session.dry_run = True
        result = await ship.build()
        assert result.images[0].pushed is False
        assert docker.pushed == []

    @pytest.mark.asyncio
    async def test_unsupported_build_type_skipped(
        self, cluster: FakeClusterController, docker: FakeBuildController, tmp_path: Path
    ) -> None:
        """Non-Dockerfile builds are skipped with a warning."""
        config = make_config(
            apps={"docs": {"build": {"type": "buildpack", "context": "docs"}}}
        )
        ship = KubeShip(config, cluster=cluster, docker=docker, session=Session(root=tmp_path))

        result = await ship.build()

        assert result.images == []
        assert docker.built == []

    @pytest.mark.asyncio
    async def test_changed_files_filter(self, ship: KubeShip, docker: FakeBuildController) -> None:
        """Only apps with changes in their build context are built."""
        result = await ship.build(PlanFilter(changed_files=["README.md"]))
        assert result.images == []
        assert docker.built == []

    @pytest.mark.asyncio
    async def test_build_failure_propagates(
        self, ship: KubeShip, docker: FakeBuildController
    ) -> None:
        """Build errors stop the run."""
        docker.fail_build = {"ghcr.io/acme/api:0123456789ab"}
        with pytest.raises(BuildError):
            await ship.build()
        assert docker.pushed == []

    @pytest.mark.asyncio
    async def test_unknown_app(self, ship: KubeShip) -> None:
        """Unknown app filters are configuration errors."""
        with pytest.raises(ConfigurationError, match="Unknown app: web"):
            await ship.build(PlanFilter(app="web"))


class TestKubeShip:
    """Tests for the facade."""

    def test_filter_resolves_changed_files(self, ship: KubeShip, git: MagicMock) -> None:
        """changed_since is turned into a changed-files list through git."""
        git.changed_files.return_value = ["services/api/main.py"]

        plan_filter = ship.filter(namespace="dev", changed_since="origin/main")

        git.changed_files.assert_called_once_with("origin/main")
        assert plan_filter == PlanFilter(
            namespace="dev", changed_files=["services/api/main.py"]
        )

    def test_filter_without_changed_since(self, ship: KubeShip, git: MagicMock) -> None:
        """Without a ref the change filter is off."""
        assert ship.filter(app="api") == PlanFilter(app="api")
        git.changed_files.assert_not_called()

    def test_git_sha_from_repository(
        self, cluster: FakeClusterController, git: MagicMock, tmp_path: Path
    ) -> None:
        """Without GIT_SHA in the environment the image tag comes from git."""
        git.head_sha.return_value = "feedfacecafebeef0000"
        ship = KubeShip(
            make_config(),
            cluster=cluster,
            docker=FakeBuildController(),
            session=Session(root=tmp_path),
            environment=StaticEnvironment(),
            git=git,
        )
        assert ship.plan().entries[0].image == "ghcr.io/acme/api:feedfacecafe"

    def test_from_path(self, tmp_path: Path) -> None:
        """Loading from a path roots the session at the config directory."""
        (tmp_path / "kubeship.yaml").write_text(
            "project: shop\nnamespaces:\n  dev: {}\nimages:\n  registry: ghcr.io/acme\n"
        )
        with patch(
            "kubeship.operations.orchestrator.get_cluster_controller",
            return_value=FakeClusterController(dry_run=True),
        ) as factory:
            ship = KubeShip.from_path(tmp_path / "kubeship", dry_run=True, backend="kubectl")

        factory.assert_called_once_with("kubectl", True)
        assert ship.config.project == "shop"
        assert ship.session.root == tmp_path.resolve()
        assert ship.session.dry_run is True
