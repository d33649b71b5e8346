"""
hostdeploy - UI Components
Standardized headers and summary tables
"""

from typing import Optional

from rich.console import Console
from rich.table import Table

LOGO = "hostdeploy"

BRAND_COLOR = "cyan"


def show_header(
    title: str,
    subtitle: Optional[str] = None,
    details: Optional[dict] = None,
    console: Optional[Console] = None,
):
    """
    Display a standardized hostdeploy command header.

    Args:
        title: Main title (e.g., "Deploy Application")
        subtitle: Optional subtitle line
        details: Additional key-value pairs to display
        console: Rich Console instance (creates new if None)
    """
    if console is None:
        console = Console()

    console.print(
        f" [bold color(214)]{LOGO}[/bold color(214)] [dim]›[/dim] [bold white]{title}[/bold white]"
    )

    if subtitle:
        console.print(
            f" [bold color(214)]{LOGO}[/bold color(214)] [dim]›[/dim] [dim]{subtitle}[/dim]"
        )

    if details:
        for key, value in details.items():
            console.print(
                f" [bold color(214)]{LOGO}[/bold color(214)] [dim]›[/dim] {key}: [cyan]{value}[/cyan]"
            )

    console.print()


def show_summary(values: dict, console: Optional[Console] = None, title: str = "Summary of Inputs"):
    """Print a two-column table of inputs."""
    if console is None:
        console = Console()

    table = Table(title=title, show_header=False, title_style="bold", box=None)
    table.add_column("Field", style="dim")
    table.add_column("Value", style=BRAND_COLOR)
    for key, value in values.items():
        table.add_row(key, value)

    console.print(table)
    console.print()
