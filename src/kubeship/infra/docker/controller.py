"""Abstract image build controller interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from kubeship.config.environment import EnvironmentProvider
from kubeship.config.models import DockerfileBuild
from kubeship.constants import DEFAULT_CONSTANTS


@dataclass(frozen=True)
class LoginOptions:
    """Registry credentials."""

    registry: str
    username: str
    password: str

    @classmethod
    def from_environment(cls, environment: EnvironmentProvider) -> LoginOptions | None:
        """Read credentials from DOCKER_REGISTRY/DOCKER_USERNAME/DOCKER_PASSWORD.

        DOCKER_TOKEN is accepted in place of DOCKER_PASSWORD.

        Returns:
            Login options, or None when no username or secret is set
        """
        username = environment.get("DOCKER_USERNAME")
        password = environment.get("DOCKER_PASSWORD") or environment.get("DOCKER_TOKEN")
        if not username or not password:
            return None
        return cls(
            registry=environment.get("DOCKER_REGISTRY")
            or DEFAULT_CONSTANTS.DEFAULT_DOCKER_REGISTRY,
            username=username,
            password=password,
        )


class BuildController(ABC):
    """Abstract base class for image build operations.

    All methods are async. Use ``run_sync()`` to call from synchronous code.
    """

    @abstractmethod
    async def build(self, image_ref: str, build: DockerfileBuild, context: Path) -> None:
        """Build an image.

        Args:
            image_ref: Tag to give the built image
            build: Dockerfile build settings
            context: Directory build paths are relative to

        Raises:
            BuildError: If the build fails
        """
        ...

    @abstractmethod
    async def push(self, image_ref: str) -> None:
        """Push an image to its registry.

        Raises:
            BuildError: If the push fails
        """
        ...

    @abstractmethod
    async def image_exists(self, image_ref: str) -> bool:
        """Check whether the registry already has ``image_ref``."""
        ...

    @abstractmethod
    async def login(self, options: LoginOptions | None = None) -> bool:
        """Log in to a registry.

        Args:
            options: Credentials; read from the environment when omitted

        Returns:
            True if logged in (now or earlier in the session), False when
            no credentials are available

        Raises:
            BuildError: If the registry rejects the credentials
        """
        ...
