"""
hostdeploy Services Layer

One service per deployment concern; the orchestrator wires them together.
"""

from .artifact_service import detect_artifact
from .bootstrap_service import BootstrapService
from .container_service import ContainerService
from .git_service import GitService
from .nginx_service import NginxService
from .remote import RemoteExecutor, RemoteOperation
from .ssh_service import SSHService
from .validation_service import ValidationService

__all__ = [
    "detect_artifact",
    "BootstrapService",
    "ContainerService",
    "GitService",
    "NginxService",
    "RemoteExecutor",
    "RemoteOperation",
    "SSHService",
    "ValidationService",
]
