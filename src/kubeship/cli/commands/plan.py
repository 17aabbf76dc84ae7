"""The ``plan`` command: validate and diff without changing the cluster."""

import typer
from rich.panel import Panel
from rich.syntax import Syntax

from kubeship.cli.console import CLIConsole, with_error_handling
from kubeship.cli.context import get_cli_context
from kubeship.infra.utils import run_sync
from kubeship.operations import ManifestChange, PlanWithChangesResult

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


def _print_section(
    console: CLIConsole, title: str, changes: list[ManifestChange]
) -> None:
    if not changes:
        return
    console.section(title)
    for change in changes:
        console.change(change)


def render_plan(console: CLIConsole, result: PlanWithChangesResult) -> None:
    """Print global resources, per-app changes and orphans."""
    _print_section(console, "Namespaces", result.global_changes.namespaces)
    _print_section(console, "Secrets", result.global_changes.secrets)
    _print_section(console, "ConfigMaps", result.global_changes.config_maps)

    for app in result.apps:
        title = f"{app.app} → {app.namespace}"
        console.section(title)
        console.print(f"  [dim]image:[/dim] {app.image}")
        if app.host:
            console.print(f"  [dim]host:[/dim]  {app.host}")
        for change in app.changes:
            console.change(change)
            if change.action == "update" and change.diff:
                console.print(
                    Panel(
                        Syntax(change.diff, "diff", theme="ansi_dark"),
                        title=change.ref,
                        border_style="yellow",
                    )
                )

    if result.orphaned:
        console.section("Will be deleted")
        for change in result.orphaned:
            console.change(change, suffix=f" [dim]in {change.namespace}[/dim]")


@with_error_handling
def plan(
    ctx: typer.Context,
    namespace: NamespaceOption = None,
    app: AppOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    dry_run: DryRunOption = False,
    changed_since: ChangedSinceOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show what deploy would change.

    Validates every manifest (client-side for namespaces that do not exist
    yet) and diffs it against the cluster. Exits with code 1 if any resource
    fails validation.

    Examples:
        kubeship plan
        kubeship plan -n prod --app api
        kubeship plan --changed-since origin/main
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

    console.header(f"Plan for {ship.config.project}")
    with console.status("Validating manifests..."):
        result = run_sync(ship.plan_with_changes(plan_filter))

    if not result.apps and not result.orphaned:
        console.info("Nothing to deploy")
        return

    render_plan(console, result)

    if result.has_errors:
        console.error("Some resources failed validation")
        raise typer.Exit(1)
    if result.has_changes:
        console.ok("Plan is valid")
    else:
        console.ok("Everything is up to date")
