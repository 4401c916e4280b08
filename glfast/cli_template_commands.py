"""Template CLI commands - list, use, render."""
import base64
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from glfast.cli_support import (
    handle_cli_error,
    load_settings_or_exit,
    print_error,
    print_info,
    print_success,
    print_warning,
    setup_logging,
)
from glfast.models.config import GlfastSettings
from glfast.models.template import NO_PORT, TemplateParameters
from glfast.scaffold import FileEncoding, Manifest, Materializer, ScaffoldError
from glfast.services import GitLabClient, GitLabError, ProjectExistsError, ProjectProvisioner

# Module-level console instance (will be set by register function)
console: Console = Console()

ConfigOption = typer.Option(None, "--config", "-c", help="Config file (default: ./config.yaml)")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Show debug output")
LogFileOption = typer.Option(None, "--log-file", help="Also write logs to this file")


def _provisioner(settings: GlfastSettings) -> ProjectProvisioner:
    if not settings.gitlab.token:
        print_error(console, "A GitLab token is required: set gitlab.token in the config or GL_TOKEN")
        raise typer.Exit(1)
    try:
        client = GitLabClient.from_settings(settings.gitlab)
    except GitLabError as e:
        handle_cli_error(e, console)
    return ProjectProvisioner(client, settings.template)


def list_templates(
    as_json: bool = typer.Option(False, "--json", help="Print the raw name/description mapping"),
    config: Optional[str] = ConfigOption,
    verbose: bool = VerboseOption,
):
    """List available scaffold templates.

    Templates are the projects of the configured template group.

    Examples:
        glfast list
        glfast list --json
    """
    setup_logging(verbose=verbose)
    settings = load_settings_or_exit(config, console)
    provisioner = _provisioner(settings)

    try:
        templates = provisioner.list_templates()
    except GitLabError as e:
        handle_cli_error(e, console, verbose)

    if as_json:
        console.print_json(json.dumps(templates))
        return

    if not templates:
        print_info(console, f"No templates found in group '{settings.template.namespace}'")
        return

    table = Table(title=f"Templates in {settings.template.namespace}")
    table.add_column("Template", style="cyan")
    table.add_column("Description")
    for name in sorted(templates):
        table.add_row(name, templates[name])
    console.print(table)


def use(
    template: str = typer.Argument(..., help="Template project name"),
    name: str = typer.Option(..., "--name", "-n", help="Name of the new project"),
    group: str = typer.Option(..., "--group", "-g", help="Group of the new project"),
    port: int = typer.Option(NO_PORT, "--port", "-p", help="Port for the application (optional)"),
    description: Optional[str] = typer.Option(None, "--desc", "-d", help="Project description"),
    config: Optional[str] = ConfigOption,
    verbose: bool = VerboseOption,
    log_file: Optional[str] = LogFileOption,
):
    """Use a scaffold template to create a new project.

    Creates GROUP/NAME, copies CI variables and runners from the template
    project, commits the rendered template and creates the dev branch.
    Frontend templates do not need a port.

    Examples:
        glfast use backend-java-service -n tope-test -p 8955 -g team1/backend
        glfast use frontend-vue -n tope-web -g team1/frontend
    """
    setup_logging(log_file=log_file, verbose=verbose)
    settings = load_settings_or_exit(config, console)
    provisioner = _provisioner(settings)

    try:
        result = provisioner.provision(template, name, group, port=port, description=description)
    except ProjectExistsError as e:
        handle_cli_error(e, console)
    except (GitLabError, ScaffoldError, ValueError) as e:
        handle_cli_error(e, console, verbose)

    print_success(console, f"Created {result.project_path} from {result.template_path}")
    console.print(
        f"[dim]{result.files} files committed, {result.variables} variables copied, "
        f"{result.runners} runners enabled, default branch '{result.default_branch}'[/dim]"
    )


def _write_manifest(manifest: Manifest, output: Path) -> None:
    for path, file in manifest.items():
        target = output / path
        target.parent.mkdir(parents=True, exist_ok=True)
        if file.encoding is FileEncoding.BASE64:
            target.write_bytes(base64.b64decode(file.content))
        else:
            target.write_text(file.content, encoding="utf-8", newline="")


def render(
    archive: Path = typer.Argument(..., exists=True, dir_okay=False, help="Template archive (.tar.gz)"),
    name: str = typer.Option(..., "--name", "-n", help="Name of the new project"),
    port: int = typer.Option(NO_PORT, "--port", "-p", help="Port for the application (optional)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the rendered files here"),
    config: Optional[str] = ConfigOption,
    verbose: bool = VerboseOption,
):
    """Materialize a local template archive without touching GitLab.

    Prints the resulting files, or writes them below --output.

    Examples:
        glfast render backend.tar.gz -n billing-svc -p 8080
        glfast render backend.tar.gz -n billing-svc -o ./billing-svc
    """
    setup_logging(verbose=verbose)
    settings = load_settings_or_exit(config, console)

    try:
        parameters = TemplateParameters(name=name, port=port)
        manifest = Materializer(settings.template).materialize_archive(archive.read_bytes(), parameters)
    except (ScaffoldError, ValueError, OSError) as e:
        handle_cli_error(e, console, verbose)

    if not manifest:
        print_warning(console, "Template archive produced no files")

    if output is not None:
        _write_manifest(manifest, output)
        print_success(console, f"Wrote {len(manifest)} files to {output}")
        return

    table = Table(title=f"{len(manifest)} files for {name}")
    table.add_column("Path", style="cyan")
    table.add_column("Encoding")
    table.add_column("Size", justify="right")
    for path, file in manifest.items():
        table.add_row(path, file.encoding.value, str(len(file.content)))
    console.print(table)


def register_template_commands(app: typer.Typer, shared_console: Console):
    """Register template commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command("list")(list_templates)
    app.command()(use)
    app.command()(render)
