"""
Logging system for hostdeploy
Provides real-time logging to a session file with clean console output
"""

import re
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, TextIO

from rich.console import Console
from rich.live import Live
from rich.padding import Padding
from rich.spinner import Spinner
from rich.text import Text

from hostdeploy.constants import (
    LOG_DATETIME_FORMAT,
    LOG_FILE_PATTERN,
    LOG_FILENAME_TIMESTAMP_FORMAT,
    SECRET_MASK,
)
from hostdeploy.models.results import ExecutionResult

console = Console()

ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


class DeployLogger:
    """
    Manages logging for a deployment run
    - Writes every line to deploy_<timestamp>.log with a timestamp
    - Shows clean progress UI in console (unless verbose)
    - Masks registered secrets everywhere
    """

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        verbose: bool = False,
        secrets: Iterable[str] = (),
        operation: str = "deploy",
    ):
        """
        Initialize logger

        Args:
            log_dir: Directory for the session log (default: working directory)
            verbose: If True, show all output in console
            secrets: Values that must never appear in output
            operation: Operation name written to the header ('deploy', 'cleanup')
        """
        self.verbose = verbose
        self.operation = operation
        self.log_file: Optional[TextIO] = None
        self.current_step = ""
        self.has_errors = False
        self._secrets: list[str] = []
        for secret in secrets:
            self.add_secret(secret)

        log_dir = Path(log_dir) if log_dir else Path.cwd()
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime(LOG_FILENAME_TIMESTAMP_FORMAT)
        self.log_path = log_dir / LOG_FILE_PATTERN.format(timestamp=timestamp)

        # Line buffered for real-time tailing
        self.log_file = open(self.log_path, "a", buffering=1)

        self._write_log_header()

    def add_secret(self, secret: Optional[str]) -> None:
        """Register a value to be masked in all output."""
        if secret and secret not in self._secrets:
            self._secrets.append(secret)

    def redact(self, text: str) -> str:
        """Replace registered secrets with a mask."""
        for secret in self._secrets:
            text = text.replace(secret, SECRET_MASK)
        return text

    def _timestamp(self) -> str:
        return datetime.now().strftime(LOG_DATETIME_FORMAT)

    def _write(self, line: str) -> None:
        if self.log_file:
            self.log_file.write(self.redact(line))
            self.log_file.flush()

    def _write_log_header(self):
        """Write log file header"""
        header = f"""
{"=" * 80}
hostdeploy Deployment Log
{"=" * 80}
Operation: {self.operation}
Started: {datetime.now().isoformat()}
{"=" * 80}

"""
        self._write(header)

    def log(self, message: str, level: str = "INFO"):
        """
        Log a message to file and optionally console

        Args:
            message: Message to log
            level: Log level (INFO, WARNING, ERROR, DEBUG)
        """
        self._write(f"{self._timestamp()} [{level}] {message}\n")

        if self.verbose:
            message = self.redact(message)
            if level == "ERROR":
                console.print(f"[red]{message}[/red]", highlight=False)
            elif level == "WARNING":
                console.print(f"[yellow]{message}[/yellow]", highlight=False)
            elif level == "DEBUG":
                console.print(f"[dim]{message}[/dim]", highlight=False)
            else:
                console.print(message, highlight=False)

    def log_command(self, command: str):
        """Log a command being executed"""
        self.log(f"Executing: {command}", "DEBUG")

    def log_output(self, output: str, stream: str = "stdout"):
        """
        Log command output

        Always written to the log file; shown in console only if verbose.

        Args:
            output: Command output (single line or multiline)
            stream: Stream name (stdout, stderr)
        """
        if not output:
            return

        clean_output = ANSI_ESCAPE.sub("", output)
        timestamp = self._timestamp()
        for line in clean_output.splitlines():
            self._write(f"{timestamp}   [{stream}] {line}\n")

        if self.verbose:
            console.print(self.redact(output), markup=False, highlight=False)

    def log_error(self, error: str, context: Optional[str] = None):
        """
        Log an error with context

        Args:
            error: Error message
            context: Additional context (e.g., failing step)
        """
        self.has_errors = True

        error_block = f"""
{"!" * 80}
{self._timestamp()} ERROR: {error}
"""
        if context:
            error_block += f"Context: {context}\n"

        error_block += f"{'!' * 80}\n\n"
        self._write(error_block)

        if not self.verbose:
            console.print()

        console.print(f"[bold red]✗ {self.redact(error)}[/bold red]", highlight=False)
        if context:
            console.print(
                f"  [color(208)]{self.redact(context)}[/color(208)]", highlight=False
            )

    def step(self, step_name: str):
        """
        Start a new step

        Args:
            step_name: Name of the step
        """
        if self.current_step and not self.verbose:
            console.print()

        self.current_step = step_name
        self.log(f"Step: {step_name}", "INFO")

        if not self.verbose:
            console.print(f"[color(214)]▶[/color(214)] [white]{step_name}[/white]")

    def success(self, message: str):
        """Log a success message"""
        self.log(message, "INFO")

        if not self.verbose:
            console.print(f"  [dim]✓ {self.redact(message)}[/dim]", highlight=False)

    def warning(self, message: str):
        """Log a warning message"""
        self.log(message, "WARNING")

        if not self.verbose:
            console.print(
                f"  [yellow]⚠[/yellow] [dim]{self.redact(message)}[/dim]",
                highlight=False,
            )

    def close(self):
        """Close log file"""
        if self.log_file:
            footer = f"""
{"=" * 80}
Completed: {datetime.now().isoformat()}
Status: {"FAILED" if self.has_errors else "SUCCESS"}
{"=" * 80}
"""
            self._write(footer)
            self.log_file.close()
            self.log_file = None


def run_with_progress(
    logger: DeployLogger,
    command: list[str],
    description: str,
    cwd: Optional[Path] = None,
) -> ExecutionResult:
    """
    Run a local command with a progress indicator

    Args:
        logger: DeployLogger instance
        command: Command argv (may contain secrets; they are masked in logs)
        description: Description for progress indicator
        cwd: Working directory

    Returns:
        ExecutionResult with redacted stdout/stderr
    """
    display = logger.redact(" ".join(command))
    logger.log_command(display)

    if logger.verbose:
        result = subprocess.run(command, cwd=cwd, capture_output=True, text=True)
    else:
        spinner = Spinner("dots", text=f"[cyan]{description}...[/cyan]")
        with Live(
            Padding(spinner, (0, 0, 0, 2)), console=console, refresh_per_second=10
        ) as live:
            result = subprocess.run(command, cwd=cwd, capture_output=True, text=True)

            if result.returncode == 0:
                mark = Text("  ✓ ", style="dim")
            else:
                mark = Text("  ✗ ", style="red")
            mark.append(description, style="dim")
            live.update(mark)

    stdout = logger.redact(result.stdout or "")
    stderr = logger.redact(result.stderr or "")
    logger.log_output(stdout, "stdout")
    logger.log_output(stderr, "stderr")

    return ExecutionResult(
        returncode=result.returncode, stdout=stdout, stderr=stderr, command=display
    )
