#!/usr/bin/env python3
"""glfast CLI - GitLab project scaffolding from template projects."""

import typer
from rich.console import Console

from glfast import __version__
from glfast.cli_template_commands import register_template_commands

app = typer.Typer(
    name="glfast",
    help="""glfast - GitLab project scaffold initialization.

Pick a template project, name the new project, get a ready repository
with CI variables, runners and a dev branch.

Quick start:
  glfast list                                    # Browse templates
  glfast use backend-go -n billing-svc -p 8080 -g team1/backend
  glfast render template.tar.gz -n billing-svc   # Preview offline
""",
    add_completion=False,
)

console = Console()


def _version_callback(value: bool):
    if value:
        console.print(f"glfast {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """GitLab project scaffold initialization."""


register_template_commands(app, console)

if __name__ == "__main__":
    app()
