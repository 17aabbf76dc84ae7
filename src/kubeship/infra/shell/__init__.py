"""Shell command helpers."""

from .git import GitCommands
from .runner import CommandRunner

__all__ = ["CommandRunner", "GitCommands"]
