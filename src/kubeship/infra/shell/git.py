"""Git command abstractions.

This module provides the repository metadata used for image tags and
changed-file filtering.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .runner import CommandRunner


class GitCommands:
    """Git-related shell commands.

    Every lookup returns None (or an empty list) instead of raising when
    git is unavailable or the directory is not a repository.
    """

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize Git commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    def _output(self, *args: str) -> str | None:
        result = self._runner.run(["git", *args])
        if not result.success:
            return None
        return result.stdout.strip() or None

    def head_sha(self) -> str | None:
        """Full commit SHA of HEAD."""
        return self._output("rev-parse", "HEAD")

    def current_tag(self) -> str | None:
        """Tag pointing at HEAD, else the most recent reachable tag."""
        return self._output("describe", "--tags", "--exact-match") or self._output(
            "describe", "--tags", "--abbrev=0"
        )

    def current_branch(self) -> str | None:
        """Name of the checked-out branch."""
        return self._output("rev-parse", "--abbrev-ref", "HEAD")

    def changed_files(self, base: str) -> list[str]:
        """Files changed between ``base`` and the working tree.

        Args:
            base: Git ref to compare against (e.g. ``origin/main``)

        Returns:
            Repository-relative paths; empty when the diff cannot be computed

        Example:
            >>> git.changed_files("HEAD~1")
            ['services/api/main.py']
        """
        result = self._runner.run(["git", "diff", "--name-only", base])
        if not result.success:
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]
