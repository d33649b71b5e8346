#!/usr/bin/env python3
"""hostdeploy CLI - Main entry point"""

import functools
import os
import sys
from pathlib import Path

# Rich-Click: CLI help with colors
import rich_click as click
from rich.console import Console

from hostdeploy import __version__
from hostdeploy.commands import DeployCommand, DeployOptions
from hostdeploy.constants import ENV_PREFIX, EXIT_FAILURE, EXIT_INTERRUPTED

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.USE_MARKDOWN = False
click.rich_click.MAX_WIDTH = 100

click.rich_click.STYLE_COMMAND = "bold cyan"
click.rich_click.STYLE_OPTION = "bold magenta"
click.rich_click.STYLE_SWITCH = "bold green"
click.rich_click.STYLE_HEADER_TEXT = "bold cyan"
click.rich_click.STYLE_USAGE = "bold yellow"
click.rich_click.STYLE_USAGE_COMMAND = "bold cyan"
click.rich_click.STYLE_HELPTEXT_FIRST_LINE = "bold white"
click.rich_click.STYLE_METAVAR = "bold yellow"
click.rich_click.STYLE_OPTION_DEFAULT = "dim cyan"
click.rich_click.STYLE_OPTIONS_PANEL_BORDER = "cyan"
click.rich_click.ALIGN_OPTIONS_PANEL = "left"
click.rich_click.ALIGN_ERRORS_PANEL = "left"
click.rich_click.ERRORS_EPILOGUE = ""

console = Console()

TOKEN_ENVVAR = f"{ENV_PREFIX}TOKEN"


def handle_cli_errors(func):
    """Decorator to handle CLI errors gracefully."""
    from click.exceptions import ClickException, UsageError

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except UsageError as e:
            console.print(f"\n[bold red]✗ Error:[/bold red] {e.format_message()}\n")
            console.print(
                "[dim]Run[/dim] [cyan]hostdeploy --help[/cyan] [dim]for usage information[/dim]\n"
            )
            sys.exit(EXIT_FAILURE)
        except ClickException as e:
            e.show()
            sys.exit(e.exit_code)
        except KeyboardInterrupt:
            console.print("\n\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            sys.exit(EXIT_INTERRUPTED)
        except Exception as e:
            console.print(f"\n[bold red]✗ Unexpected error:[/bold red] {e}\n")

            # Show traceback if DEBUG env var is set
            if os.environ.get("DEBUG"):
                import traceback

                console.print("[dim]Traceback:[/dim]")
                traceback.print_exc()
            sys.exit(EXIT_FAILURE)

    return wrapper


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--cleanup", is_flag=True, help="Remove a previous deployment instead of deploying")
@click.option("-v", "--verbose", is_flag=True, help="Show every log line and command output")
@click.option("--repo-url", envvar=f"{ENV_PREFIX}REPO_URL", help="Git repository URL")
@click.option("--branch", envvar=f"{ENV_PREFIX}BRANCH", help="Branch to deploy (default: main)")
@click.option("--ssh-user", envvar=f"{ENV_PREFIX}SSH_USER", help="SSH username on the host")
@click.option("--server", "server_ip", envvar=f"{ENV_PREFIX}SERVER_IP", help="Server IP address or hostname")
@click.option("--ssh-key", "ssh_key_path", envvar=f"{ENV_PREFIX}SSH_KEY", help="Path to the SSH private key")
@click.option("--app-port", envvar=f"{ENV_PREFIX}APP_PORT", help="Port the application listens on")
@click.option(
    "--workdir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Where the repository is cloned (default: current directory)",
)
@click.version_option(__version__, prog_name="hostdeploy")
@handle_cli_errors
def cli(cleanup, verbose, repo_url, branch, ssh_user, server_ip, ssh_key_path, app_port, workdir):
    """
    Deploy a Dockerized Git repository to a remote Linux host

    Clones the repository, prepares Docker and nginx on the host over SSH,
    runs the application and puts nginx in front of it on port 80.

    The access token is read from $HOSTDEPLOY_TOKEN or prompted for (hidden).

    Examples:
        hostdeploy                       # interactive
        hostdeploy --server 203.0.113.7 --ssh-user ubuntu
        hostdeploy --cleanup             # tear down a previous deployment
    """
    options = DeployOptions(
        repo_url=repo_url,
        access_token=os.environ.get(TOKEN_ENVVAR),
        branch=branch,
        ssh_user=ssh_user,
        server_ip=server_ip,
        ssh_key_path=ssh_key_path,
        app_port=app_port,
        cleanup=cleanup,
        workdir=workdir,
    )
    cmd = DeployCommand(options, verbose=verbose)
    cmd.run()


def main():
    """Main entry point"""
    cli()


if __name__ == "__main__":
    main()
