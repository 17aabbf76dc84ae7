"""CLI context and dependency container."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias
from dataclasses import dataclass
from pathlib import Path

import click
import typer

from kubeship.cli.console import CLIConsole, console
from kubeship.infra.k8s.helpers import get_cluster_backend
from kubeship.operations.orchestrator import KubeShip

ShipFactory: TypeAlias = Callable[..., KubeShip]


@dataclass(frozen=True)
class CLIContext:
    """Runtime dependencies for CLI commands.

    Attributes:
        console: Output console
        backend: Cluster backend name
        ship_factory: Callable ``(config_path, *, dry_run, backend) -> KubeShip``
    """

    console: CLIConsole
    backend: str
    ship_factory: ShipFactory = KubeShip.from_path

    def open_ship(self, config_path: str | Path, *, dry_run: bool) -> KubeShip:
        return self.ship_factory(config_path, dry_run=dry_run, backend=self.backend)


def build_cli_context() -> CLIContext:
    """Build a fresh CLIContext."""
    return CLIContext(console=console, backend=get_cluster_backend())


def get_cli_context(ctx: typer.Context | None = None) -> CLIContext:
    """Return the CLIContext from Typer, falling back to a new instance."""
    context = ctx or click.get_current_context(silent=True)
    if context and isinstance(context.obj, CLIContext):
        return context.obj
    return build_cli_context()
