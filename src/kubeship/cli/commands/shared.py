"""Options and helpers shared by the plan, build and deploy commands."""

from typing import Annotated

import typer

from kubeship.cli.context import CLIContext
from kubeship.constants import DEFAULT_CONSTANTS
from kubeship.log import configure_logging
from kubeship.operations import KubeShip, PlanFilter

NamespaceOption = Annotated[
    str | None,
    typer.Option("--namespace", "-n", help="Only operate on this namespace"),
]
AppOption = Annotated[
    str | None,
    typer.Option("--app", help="Only operate on this app"),
]
ConfigOption = Annotated[
    str,
    typer.Option(
        "--config",
        "-c",
        help="Configuration file (extension optional: .py, .yaml, .yml, .json)",
    ),
]
DryRunOption = Annotated[
    bool,
    typer.Option("--dry-run", help="Show what would happen without changing anything"),
]
ChangedSinceOption = Annotated[
    str | None,
    typer.Option(
        "--changed-since",
        help="Only apps whose build context changed since this git ref",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable debug logging"),
]

DEFAULT_CONFIG = DEFAULT_CONSTANTS.DEFAULT_CONFIG_PATH


def prepare(
    cli_ctx: CLIContext,
    *,
    config: str,
    dry_run: bool,
    verbose: bool,
    namespace: str | None,
    app: str | None,
    changed_since: str | None,
) -> tuple[KubeShip, PlanFilter]:
    """Configure logging, load the configuration and build the plan filter.

    Raises:
        ConfigurationError: If the configuration cannot be loaded
    """
    configure_logging(verbose)
    ship = cli_ctx.open_ship(config, dry_run=dry_run)
    return ship, ship.filter(namespace=namespace, app=app, changed_since=changed_since)
