"""
hostdeploy Domain Models

Dataclass-based models for type-safe data handling.
"""

from .config import (
    ArtifactKind,
    DeployedUnit,
    DeploymentConfig,
    RepositoryCheckout,
    derive_unit_name,
    repo_basename,
)
from .results import (
    ExecutionResult,
    ResultStatus,
    SSHResult,
    ValidationResult,
)
from .ssh import RemoteTarget

__all__ = [
    # Config
    "ArtifactKind",
    "DeployedUnit",
    "DeploymentConfig",
    "RepositoryCheckout",
    "derive_unit_name",
    "repo_basename",
    # Results
    "ExecutionResult",
    "ResultStatus",
    "SSHResult",
    "ValidationResult",
    # SSH
    "RemoteTarget",
]
