"""The ``deploy`` command: apply the plan to the cluster."""

import typer

from kubeship.cli.console import CLIConsole, with_error_handling
from kubeship.cli.context import get_cli_context
from kubeship.errors import DeploymentAborted
from kubeship.infra.utils import run_sync
from kubeship.operations import DeployedEntry

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


def _print_entries(console: CLIConsole, entries: list[DeployedEntry]) -> None:
    for deployed in entries:
        console.ok(f"{deployed.app} → {deployed.namespace}")
        for ref in deployed.applied_manifests:
            console.print(f"    [dim]{ref}[/dim]")


@with_error_handling
def deploy(
    ctx: typer.Context,
    namespace: NamespaceOption = None,
    app: AppOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    dry_run: DryRunOption = False,
    changed_since: ChangedSinceOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Apply namespaces, secrets, configmaps and app resources.

    Managed resources of apps no longer in the configuration are deleted
    afterwards. Stops at the first secret validation or apply failure.

    Examples:
        kubeship deploy -n prod
        kubeship deploy --app api --dry-run
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

    title = f"Deploying {ship.config.project}"
    console.header(title, dry_run=dry_run)

    try:
        result = run_sync(ship.deploy(plan_filter))
    except DeploymentAborted as e:
        if e.completed:
            console.section("Completed before failure")
            _print_entries(console, e.completed)
        raise

    if not result.entries and not result.deleted_manifests:
        console.info("Nothing to deploy")
        return

    _print_entries(console, result.entries)

    if result.deleted_manifests:
        console.section("Deleted orphans")
        for ref in result.deleted_manifests:
            console.print(f"  [red]- {ref}[/red]")

    console.ok(f"Deployed {len(result.entries)} app instance(s)")
