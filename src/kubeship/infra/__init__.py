"""Adapters for external tools (kubectl, kr8s, docker, git)."""

from .utils import run_sync

__all__ = ["run_sync"]
