"""Container image reference resolution."""

from __future__ import annotations

import time
from datetime import UTC, datetime

from kubeship.config.environment import EnvironmentProvider
from kubeship.config.models import ImagesConfig, TagStrategy
from kubeship.config.project import ProjectResolver
from kubeship.session import Session


def trim_trailing_slash(value: str) -> str:
    return value[:-1] if value.endswith("/") else value


class ImagesResolver:
    """Builds ``repository/name:tag`` references from the images settings.

    Tag strategies:
    - ``git-sha``: GIT_SHA truncated to 12 characters, else ``dev``
    - ``git-tag``: GIT_TAG, else ``latest``
    - ``timestamp``: current UTC time as ``YYYYMMDDHHMMSS``
    - any other string: used verbatim
    - TagStrategy: its ``value``, else ``<kind>-<epoch ms>``
    - unset: ``latest``

    The tag is computed once per session, so every app in a plan and the
    images pushed by ``build`` share it.
    """

    def __init__(
        self,
        images: ImagesConfig,
        project: ProjectResolver,
        environment: EnvironmentProvider,
        session: Session | None = None,
    ) -> None:
        self._images = images
        self._project = project
        self._environment = environment
        self._session = session or Session()

    def repository(self, app_name: str) -> str:
        base = self._images.repository or self._images.registry
        slug = (
            f"{self._project.name}-{app_name}"
            if self._images.include_project_in_name
            else app_name
        )
        return f"{trim_trailing_slash(base)}/{slug}"

    def tag(self) -> str:
        if self._session.image_tag is None:
            self._session.image_tag = self._compute_tag()
        return self._session.image_tag

    def _compute_tag(self) -> str:
        strategy = self._images.tag_strategy

        if isinstance(strategy, str):
            if strategy == "git-sha":
                sha = self._environment.get("GIT_SHA")
                return sha[:12] if sha else "dev"
            if strategy == "git-tag":
                return self._environment.get("GIT_TAG") or "latest"
            if strategy == "timestamp":
                return datetime.now(UTC).strftime("%Y%m%d%H%M%S")
            return strategy

        if isinstance(strategy, TagStrategy):
            if strategy.value:
                return strategy.value
            return f"{strategy.kind}-{int(time.time() * 1000)}"

        return "latest"

    def build_ref(self, app_name: str) -> str:
        """Full image reference for an app, e.g. ``ghcr.io/acme/api:abc123``."""
        return f"{self.repository(app_name)}:{self.tag()}"
