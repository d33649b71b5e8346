"""
Base Command Class

Abstract base for hostdeploy CLI commands.
Provides common functionality and structure.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional

from rich.console import Console

from hostdeploy.constants import EXIT_FAILURE, EXIT_INTERRUPTED
from hostdeploy.exceptions import HostDeployError
from hostdeploy.logger import DeployLogger
from hostdeploy.ui_components import show_header


class BaseCommand(ABC):
    """
    Abstract base command class.

    Provides:
    - Logger initialization
    - Header display
    - Error handling with exit codes
    """

    def __init__(self, verbose: bool = False, log_dir: Optional[Path] = None):
        self.verbose = verbose
        self.log_dir = log_dir
        self.console = Console()
        self.logger: Optional[DeployLogger] = None

    def init_logger(self, operation: str, secrets: Iterable[str] = ()) -> DeployLogger:
        """
        Initialize the session logger.

        Args:
            operation: Operation name written to the log header
            secrets: Values masked in all output

        Returns:
            DeployLogger instance
        """
        self.logger = DeployLogger(
            log_dir=self.log_dir,
            verbose=self.verbose,
            secrets=secrets,
            operation=operation,
        )
        return self.logger

    def show_header(
        self,
        title: str,
        subtitle: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Show command header (skip in verbose mode)."""
        if not self.verbose:
            show_header(
                title=title, subtitle=subtitle, details=details, console=self.console
            )

    def print_error(self, message: str) -> None:
        self.console.print(f"[red]✗ {message}[/red]")

    def print_dim(self, message: str) -> None:
        self.console.print(f"[dim]{message}[/dim]")

    def handle_error(self, error: Exception, context: Optional[str] = None) -> None:
        """
        Handle error with consistent formatting.

        Args:
            error: Exception object
            context: Optional context message
        """
        if isinstance(error, HostDeployError):
            message = error.message
            context = context or error.context
        else:
            message = str(error)

        if self.logger:
            self.logger.log_error(message, context=context)
        else:
            self.print_error(message)
            if context:
                self.print_dim(f"Context: {context}")

    def _show_log_path(self) -> None:
        if self.logger:
            self.console.print(f"\n[dim]Logs saved to:[/dim] {self.logger.log_path}\n")

    @abstractmethod
    def execute(self, **kwargs) -> None:
        """
        Execute command logic.

        Must be implemented by subclasses.
        """
        pass

    def run(self, **kwargs) -> None:
        """
        Run command with error handling.

        Raises:
            SystemExit: 1 on any failure, 130 when interrupted
        """
        try:
            self.execute(**kwargs)
        except KeyboardInterrupt:
            self.console.print("\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            if self.logger:
                self.logger.log("Operation cancelled by user", "WARNING")
            self._show_log_path()
            raise SystemExit(EXIT_INTERRUPTED)
        except SystemExit:
            raise
        except HostDeployError as e:
            self.handle_error(e)
            self._show_log_path()
            raise SystemExit(EXIT_FAILURE)
        except Exception as e:
            error_type = type(e).__name__
            self.console.print(f"\n[bold red]✗ {error_type}:[/bold red] {e}\n")
            if self.logger:
                self.logger.log_error(f"{error_type}: {e}")
            self._show_log_path()
            raise SystemExit(EXIT_FAILURE)
        finally:
            if self.logger:
                self.logger.close()
