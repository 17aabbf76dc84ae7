"""Environment variable providers.

Config helpers (``ctx.env(...)``) and the image tag strategies read
environment values through a provider so tests can inject fixed values
and the CLI can layer git metadata on top of the process environment.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from kubeship.infra.shell.git import GitCommands
    from kubeship.session import Session


class EnvironmentProvider(ABC):
    """Read-only source of environment values."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value for ``key``, or None when unset."""
        ...


class ProcessEnvironment(EnvironmentProvider):
    """Provider backed by ``os.environ``."""

    def get(self, key: str) -> str | None:
        return os.environ.get(key)


class StaticEnvironment(EnvironmentProvider):
    """Provider backed by a fixed mapping."""

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values = dict(values or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)


class GitEnvironment(EnvironmentProvider):
    """Provider adding GIT_SHA, GIT_TAG and GIT_BRANCH from the repository.

    Values already present in the wrapped provider win. Git lookups run at
    most once per session; failures are cached as None.
    """

    def __init__(
        self,
        base: EnvironmentProvider,
        git: GitCommands,
        session: Session,
    ) -> None:
        self._base = base
        self._git = git
        self._session = session

    def get(self, key: str) -> str | None:
        value = self._base.get(key)
        if value is not None:
            return value

        lookups = {
            "GIT_SHA": self._git.head_sha,
            "GIT_TAG": self._git.current_tag,
            "GIT_BRANCH": self._git.current_branch,
        }
        lookup = lookups.get(key)
        if lookup is None:
            return None

        cache = self._session.git_metadata
        if key not in cache:
            cache[key] = lookup()
            logger.debug(f"Resolved {key} from git: {cache[key]}")
        return cache[key]
