"""The ``build`` command: build and push app images."""

import typer
from rich.table import Table

from kubeship.cli.console import with_error_handling
from kubeship.cli.context import get_cli_context
from kubeship.infra.utils import run_sync

from .shared import (
    DEFAULT_CONFIG,
    AppOption,
    ChangedSinceOption,
    ConfigOption,
    DryRunOption,
    NamespaceOption,
    VerboseOption,
    prepare,
)


@with_error_handling
def build(
    ctx: typer.Context,
    namespace: NamespaceOption = None,
    app: AppOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    dry_run: DryRunOption = False,
    changed_since: ChangedSinceOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Build and push images for apps with a Dockerfile build.

    Logs in to the registry first when DOCKER_USERNAME and DOCKER_PASSWORD
    (or DOCKER_TOKEN) are set. With --dry-run nothing is built or pushed.

    Examples:
        kubeship build
        kubeship build --app api
        kubeship build --changed-since HEAD~1
    """
    cli_ctx = get_cli_context(ctx)
    console = cli_ctx.console
    ship, plan_filter = prepare(
        cli_ctx,
        config=config,
        dry_run=dry_run,
        verbose=verbose,
        namespace=namespace,
        app=app,
        changed_since=changed_since,
    )

    console.header(f"Building images for {ship.config.project}")
    result = run_sync(ship.build(plan_filter))

    if not result.images:
        console.info("No images built")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("App", style="cyan")
    table.add_column("Image")
    table.add_column("Pushed")
    for image in result.images:
        table.add_row(image.app, image.image, "yes" if image.pushed else "no")
    console.print(table)
    console.ok(f"Built {len(result.images)} image(s)")
