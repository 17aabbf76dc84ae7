"""Shared fixtures for the kubeship test suite."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from kubeship.config import KubeshipConfig, StaticEnvironment, define_config
from kubeship.infra.k8s.helpers import get_cluster_controller
from kubeship.infra.shell.git import GitCommands
from kubeship.operations import KubeShip
from kubeship.session import Session
from tests.fakes import FakeBuildController, FakeClusterController


def make_config(**overrides: object) -> KubeshipConfig:
    """A two-namespace project with an API, a worker and a shared secret."""
    fields: dict[str, object] = {
        "project": "demo",
        "namespaces": {
            "dev": {"domain": "dev.demo.localtest.me"},
            "prod": {"domain": "demo.example.com"},
        },
        "images": {"registry": "ghcr.io/acme", "tagStrategy": "git-sha"},
        "secrets": {"token-secrets": {"PROJECT": "demo"}},
        "config_maps": {"settings": {"LOG_LEVEL": "info"}},
        "apps": {
            "api": {
                "build": {
                    "type": "dockerfile",
                    "context": "services/api",
                    "dockerfile": "services/api/Dockerfile",
                },
                "env": lambda ctx: {
                    "TOKEN": ctx.secret("token-secrets", "PROJECT"),
                    "LOG_LEVEL": ctx.config_map("settings", "LOG_LEVEL"),
                    "NAMESPACE": ctx.namespace,
                },
                "network": lambda ctx: f"api.{ctx['domain']}",
            },
            "worker": {
                "image": "ghcr.io/acme/worker:1.0.0",
                "env": {"TOKEN": {"secret": "token-secrets", "key": "PROJECT"}},
                "deploy": {"exclude": ["dev"]},
            },
        },
    }
    fields.update(overrides)
    return define_config(**fields)


@pytest.fixture
def config() -> KubeshipConfig:
    """Default test configuration."""
    return make_config()


@pytest.fixture
def environment() -> StaticEnvironment:
    """Environment with a fixed git SHA."""
    return StaticEnvironment({"GIT_SHA": "0123456789abcdef0123"})


@pytest.fixture
def session(tmp_path: Path) -> Session:
    """Session rooted at a temporary directory."""
    return Session(root=tmp_path)


@pytest.fixture
def git() -> MagicMock:
    """Git commands that never touch a repository."""
    git = MagicMock(spec=GitCommands)
    git.head_sha.return_value = None
    git.current_tag.return_value = None
    git.current_branch.return_value = None
    git.changed_files.return_value = []
    return git


@pytest.fixture
def cluster() -> FakeClusterController:
    """Empty in-memory cluster."""
    return FakeClusterController()


@pytest.fixture
def docker() -> FakeBuildController:
    """Recording build controller."""
    return FakeBuildController()


@pytest.fixture
def ship(
    config: KubeshipConfig,
    cluster: FakeClusterController,
    docker: FakeBuildController,
    session: Session,
    environment: StaticEnvironment,
    git: MagicMock,
) -> KubeShip:
    """Facade wired to the fakes."""
    return KubeShip(
        config,
        cluster=cluster,
        docker=docker,
        session=session,
        environment=environment,
        git=git,
    )


@pytest.fixture(autouse=True)
def _clear_controller_cache():
    """Controllers are cached per process; start every test fresh."""
    get_cluster_controller.cache_clear()
    yield
    get_cluster_controller.cache_clear()
