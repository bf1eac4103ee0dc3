#!/usr/bin/env python3
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "typer",
#     "rich",
#     "platformdirs",
#     "readchar",
#     "httpx",
#     "truststore",
#     "jinja2",
# ]
# ///
"""
Scaffold CLI - create or clone projects interactively

Usage:
    scaffold create
    scaffold clone https://github.com/my-org/my-repo.git
    scaffold check

Or install globally:
    uv tool install --from . scaffold-cli
    scaffold create --output-dir ~/projects
"""

import asyncio
import shutil
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.align import Align
from rich.panel import Panel
from typer.core import TyperGroup

from .config import DEFAULT_ACCOUNT_COMMAND, Mode, build_config, load_user_defaults
from .errors import ScaffoldError
from .generator import ProjectGenerator
from .interview import RichPrompter
from .log import configure_logging, get_logger
from .templates import TemplateSource
from .ui import ConsoleReporter, StepTracker, console, show_banner


class BannerGroup(TyperGroup):
    """Custom group that shows banner before help."""

    def format_help(self, ctx, formatter):
        # Show banner before help
        show_banner()
        super().format_help(ctx, formatter)


app = typer.Typer(
    name="scaffold",
    help="Create new projects from a template or clone existing ones, with guided setup",
    add_completion=False,
    invoke_without_command=True,
    cls=BannerGroup,
)


@app.callback()
def callback(ctx: typer.Context):
    """Show banner when no subcommand is provided."""
    # Show banner only when no subcommand and no help flag
    # (help is handled by BannerGroup)
    if ctx.invoked_subcommand is None and "--help" not in sys.argv and "-h" not in sys.argv:
        show_banner()
        console.print(Align.center("[dim]Run 'scaffold --help' for usage information[/dim]"))
        console.print()


def _config_error_panel(error: ScaffoldError):
    console.print()
    console.print(Panel(
        error.message,
        title=f"[red]{error.title}[/red]",
        border_style="red",
        padding=(1, 2),
    ))


def run_generator(generator: ProjectGenerator, reporter: ConsoleReporter) -> int:
    """Run the generator to the end and print the final status report."""
    status = asyncio.run(generator.run())
    reporter.print_status_messages(status.messages)
    return status.exit_code


def _launch(mode: Mode, command_name: str, debug: bool, **options) -> int:
    logger = configure_logging(debug, console)
    try:
        config = build_config(mode, command_name, debug=debug, user_defaults=load_user_defaults(), **options)
    except ScaffoldError as e:
        logger.debug("invalid configuration: %r", e)
        _config_error_panel(e)
        return 1
    reporter = ConsoleReporter(console)
    generator = ProjectGenerator(
        config,
        prompter=RichPrompter(console),
        reporter=reporter,
        logger=get_logger("generator"),
    )
    return run_generator(generator, reporter)


@app.command()
def create(
    output_dir: Optional[str] = typer.Option(None, "--output-dir", "-o", help="Directory the new project folder is created in (defaults to the current directory)"),
    template_dir: Optional[Path] = typer.Option(None, "--template-dir", help="Use a local template directory instead of the bundled one"),
    template_repo: Optional[str] = typer.Option(None, "--template-repo", help="Download the template from the latest release of a GitHub repo (OWNER/NAME)"),
    github_token: Optional[str] = typer.Option(None, "--github-token", help="GitHub token to use for API requests (or set GH_TOKEN or GITHUB_TOKEN environment variable)"),
    skip_tls: bool = typer.Option(False, "--skip-tls", help="Skip SSL/TLS verification (not recommended)"),
    debug: bool = typer.Option(False, "--debug", help="Show verbose diagnostic output"),
):
    """
    Create a new project from a template.

    This command will:
    1. Check that git is installed and that a hub account is connected
    2. Ask you about the project (you can review and restart before anything is written)
    3. Render the template into a new project directory
    4. Initialize a git repository and make the initial commit (if you asked for it)

    Examples:
        scaffold create
        scaffold create --output-dir ~/projects
        scaffold create --template-dir ./my-template
        scaffold create --template-repo my-org/project-template
    """
    if template_dir and template_repo:
        console.print("[red]Error:[/red] Cannot specify both --template-dir and --template-repo")
        raise typer.Exit(1)

    template = None
    try:
        if template_dir:
            template = TemplateSource(path=template_dir.expanduser().resolve())
        elif template_repo:
            template = TemplateSource(repo=template_repo, github_token=github_token, verify_tls=not skip_tls)
    except ScaffoldError as e:
        _config_error_panel(e)
        raise typer.Exit(1)

    code = _launch(Mode.CREATE, "scaffold create", debug, output_dir=output_dir, template=template)
    raise typer.Exit(code)


@app.command()
def clone(
    git_remote_uri: str = typer.Argument(..., help="URI of the Git remote to clone"),
    output_dir: Optional[str] = typer.Option(None, "--output-dir", "-o", help="Directory the repository is cloned into (defaults to the current directory)"),
    dir_name: Optional[str] = typer.Option(None, "--dir-name", "-n", help="Name of the local directory (defaults to the repo name)"),
    debug: bool = typer.Option(False, "--debug", help="Show verbose diagnostic output"),
):
    """
    Clone an existing project and prepare it for local work.

    This command will:
    1. Check that git is installed and that the remote exists and has commits
    2. Ask where to clone to and which hub account to use
    3. Clone the repository
    4. Render the project's local config template, when it has one

    Examples:
        scaffold clone https://github.com/my-org/my-repo.git
        scaffold clone git@github.com:my-org/my-repo.git --output-dir ~/work
    """
    code = _launch(
        Mode.CLONE,
        "scaffold clone",
        debug,
        output_dir=output_dir,
        git_remote_uri=git_remote_uri,
        clone_dir_name=dir_name,
    )
    raise typer.Exit(code)


def check_tool_for_tracker(tool: str, tracker: StepTracker) -> bool:
    """Check if a tool is installed and update tracker."""
    if shutil.which(tool):
        tracker.complete(tool, "available")
        return True
    else:
        tracker.error(tool, "not found")
        return False


@app.command()
def check():
    """Check that all required tools are installed."""
    show_banner()
    console.print("[bold]Checking for installed tools...[/bold]\n")

    try:
        accounts_section = load_user_defaults().get("accounts", {})
    except ScaffoldError as e:
        _config_error_panel(e)
        raise typer.Exit(1)
    account_command = accounts_section.get("command", DEFAULT_ACCOUNT_COMMAND)
    account_tool = account_command.split()[0] if isinstance(account_command, str) else account_command[0]

    tracker = StepTracker("Check Available Tools")
    tracker.add("git", "Git version control")
    tracker.add(account_tool, "Account CLI")

    git_ok = check_tool_for_tracker("git", tracker)
    accounts_ok = check_tool_for_tracker(account_tool, tracker)

    console.print(tracker.render())

    if git_ok and accounts_ok:
        console.print("\n[bold green]Scaffold CLI is ready to use![/bold green]")
        return

    if not git_ok:
        console.print("[dim]Tip: Install git, it is required by both create and clone[/dim]")
    if not accounts_ok:
        console.print(f"[dim]Tip: Install '{account_tool}' and authenticate to a hub account[/dim]")
    raise typer.Exit(1)


def main():
    app()


if __name__ == "__main__":
    main()
