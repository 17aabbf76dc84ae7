"""Main CLI application module.

Commands:
- plan: validate and diff the configuration against the cluster
- build: build and push app images
- deploy: apply the configuration and delete orphaned resources
"""

import typer

from .commands import build, deploy, plan

# Create the main CLI application
app = typer.Typer(
    help="kubeship - declarative Kubernetes deployments",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command(name="plan")(plan)
app.command(name="build")(build)
app.command(name="deploy")(deploy)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
