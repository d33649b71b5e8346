"""
hostdeploy Exception Hierarchy

Every fatal condition of a deployment run is a HostDeployError subclass.
"""

from typing import Optional


class HostDeployError(Exception):
    """Base exception for all hostdeploy errors."""

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message


class InputValidationError(HostDeployError):
    """Raised when a required input is empty or invalid."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message, context=f"Input: {field}")


class RepositoryError(HostDeployError):
    """Raised when cloning or updating the repository fails."""

    pass


class NoArtifactError(HostDeployError):
    """Raised when the repository has neither a Dockerfile nor a compose file."""

    def __init__(self, repo_path: str, reason: Optional[str] = None):
        self.repo_path = repo_path
        message = reason or "No Dockerfile or docker-compose.yml found in the repository"
        super().__init__(message, context=f"Repository: {repo_path}")


class UnreachableHostError(HostDeployError):
    """Raised when the SSH connectivity probe fails."""

    def __init__(self, connection_string: str, details: Optional[str] = None):
        self.connection_string = connection_string
        message = f"SSH connection to {connection_string} failed"
        context = details or "Check username, server address and key"
        super().__init__(message, context)


class RemoteCommandError(HostDeployError):
    """Raised when a remote command exits non-zero and failure is not tolerated."""

    def __init__(
        self, description: str, command: str, returncode: int, stderr: str = ""
    ):
        self.description = description
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"{description} failed (exit code {returncode})"
        context = f"Command: {command}"
        if stderr.strip():
            context += f"\n{stderr.strip()[-1000:]}"
        super().__init__(message, context)


class ToleratedAbsenceError(HostDeployError):
    """
    Raised for a failing remote command whose failure means "already absent".

    Never surfaced to the user: RemoteExecutor catches it and logs at DEBUG.
    """

    def __init__(self, description: str, returncode: int):
        self.description = description
        self.returncode = returncode
        super().__init__(f"{description} skipped (exit code {returncode})")
