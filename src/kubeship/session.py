"""Per-invocation session state.

A Session carries everything that must be remembered for the length of
one CLI invocation (dry-run mode, git metadata, registries already logged
in to) and nothing longer. Components receive it by reference so tests
can create a fresh one per case.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class Session:
    """Mutable state scoped to a single plan/build/deploy invocation.

    Attributes:
        root: Directory the configuration was loaded from; build contexts
            and changed-file paths are resolved relative to it
        dry_run: Skip mutating external commands
        git_metadata: Cache of git lookups keyed by metadata name
        logged_in_registries: Registries already authenticated this run
        image_tag: Image tag computed for this run, shared by build and deploy
    """

    root: Path = field(default_factory=Path.cwd)
    dry_run: bool = False
    git_metadata: dict[str, str | None] = field(default_factory=dict)
    logged_in_registries: set[str] = field(default_factory=set)
    image_tag: str | None = None
