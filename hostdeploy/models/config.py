"""
Deployment Configuration Models

Immutable inputs of a run and the identifiers derived from them.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from hostdeploy.constants import (
    DEFAULT_BRANCH,
    DEFAULT_SSH_PORT,
    NGINX_SITES_AVAILABLE,
    NGINX_SITES_ENABLED,
    SECRET_MASK,
)
from hostdeploy.exceptions import InputValidationError

# Container names, image tags, nginx file names and the remote directory
SAFE_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9_.-]*$")
# docker-compose drops these characters from project names
COMPOSE_PROJECT_UNSAFE_RE = re.compile(r"[^-_a-z0-9]")


class ArtifactKind(Enum):
    """Build unit declared by the repository."""

    DOCKERFILE = "dockerfile"
    COMPOSE = "compose"

    @property
    def label(self) -> str:
        return "Dockerfile" if self is ArtifactKind.DOCKERFILE else "docker-compose"


def repo_basename(repo_url: str) -> str:
    """
    Return the repository basename with a trailing ``.git`` removed.

    Handles https URLs as well as scp-like ``git@host:org/repo.git`` remotes.
    Case is preserved (this is the directory ``git clone`` creates).
    """
    path = repo_url.strip().rstrip("/")
    basename = re.split(r"[/:]", path)[-1]
    if basename.endswith(".git"):
        basename = basename[: -len(".git")]
    return basename


def derive_unit_name(repo_url: str) -> str:
    """
    Derive the container/image/proxy name from a repository URL.

    Raises:
        InputValidationError: If the derived name is unsafe for remote use
    """
    name = repo_basename(repo_url).lower()
    if not name or ".." in name or not SAFE_NAME_RE.match(name):
        raise InputValidationError(
            "repo_url",
            f"Cannot derive a safe project name from repository URL: {repo_url!r}",
        )
    return name


@dataclass(frozen=True)
class DeploymentConfig:
    """All inputs of a deployment run. Built once, never mutated."""

    repo_url: str
    access_token: str = field(repr=False)
    ssh_user: str
    server_ip: str
    ssh_key_path: Path
    app_port: int
    branch: str = DEFAULT_BRANCH
    ssh_port: int = DEFAULT_SSH_PORT

    @property
    def repo_dir_name(self) -> str:
        """Local clone directory name."""
        return repo_basename(self.repo_url)

    @property
    def unit(self) -> "DeployedUnit":
        return DeployedUnit.from_repo_url(self.repo_url)

    def summary(self) -> dict:
        """Inputs for display, token masked."""
        return {
            "Repository": self.repo_url,
            "Branch": self.branch,
            "SSH User": self.ssh_user,
            "Server": self.server_ip,
            "SSH Key": str(self.ssh_key_path),
            "App Port": str(self.app_port),
            "Token": SECRET_MASK,
        }


@dataclass(frozen=True)
class DeployedUnit:
    """Identifiers of everything the tool creates on the host."""

    name: str

    def __post_init__(self):
        if ".." in self.name or not SAFE_NAME_RE.match(self.name):
            raise InputValidationError("repo_url", f"Unsafe deployment name: {self.name!r}")

    @classmethod
    def from_repo_url(cls, repo_url: str) -> "DeployedUnit":
        return cls(derive_unit_name(repo_url))

    @property
    def container_name(self) -> str:
        return self.name

    @property
    def image_name(self) -> str:
        return self.name

    @property
    def compose_project(self) -> str:
        """Project name as docker-compose normalizes it (no dots)."""
        return COMPOSE_PROJECT_UNSAFE_RE.sub("", self.name)

    @property
    def remote_dir(self) -> str:
        """Project directory relative to the SSH user's home directory."""
        return self.name

    @property
    def remote_dir_display(self) -> str:
        return f"~/{self.name}"

    @property
    def nginx_conf_path(self) -> str:
        return f"{NGINX_SITES_AVAILABLE}/{self.name}"

    @property
    def nginx_enabled_path(self) -> str:
        return f"{NGINX_SITES_ENABLED}/{self.name}"


@dataclass(frozen=True)
class RepositoryCheckout:
    """Local clone after repository sync and artifact detection."""

    path: Path
    artifact: ArtifactKind
    compose_file: Optional[Path] = None
    services: tuple = ()
