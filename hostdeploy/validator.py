"""
Input validation.

Turns raw prompt/option values into a DeploymentConfig, failing fast on the
first empty or unsafe field.
"""

import re
from pathlib import Path
from typing import Optional

from hostdeploy.constants import DEFAULT_BRANCH
from hostdeploy.exceptions import InputValidationError
from hostdeploy.models.config import DeploymentConfig, derive_unit_name

# Same character rules as useradd(8)
SSH_USER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.-]*\$?$")
# Hostnames, IPv4 and IPv6 literals
HOST_RE = re.compile(r"^[A-Za-z0-9.:_-]+$")
BRANCH_RE = re.compile(r"^[A-Za-z0-9._/-]+$")

FIELD_LABELS = {
    "repo_url": "Git Repository URL",
    "access_token": "Personal Access Token",
    "branch": "Branch name",
    "ssh_user": "SSH Username",
    "server_ip": "Server IP Address",
    "ssh_key_path": "SSH Key Path",
    "app_port": "Application Port",
}


def require(field: str, value: Optional[str]) -> str:
    """Return the stripped value or raise if empty."""
    value = (value or "").strip()
    if not value:
        raise InputValidationError(field, f"{FIELD_LABELS[field]} cannot be empty")
    return value


def validate_branch(branch: Optional[str]) -> str:
    branch = (branch or "").strip() or DEFAULT_BRANCH
    if (
        not BRANCH_RE.match(branch)
        or ".." in branch
        or branch.startswith(("-", "/"))
        or branch.endswith(("/", ".lock"))
    ):
        raise InputValidationError("branch", f"Invalid branch name: {branch!r}")
    return branch


def validate_ssh_user(user: Optional[str]) -> str:
    user = require("ssh_user", user)
    if not SSH_USER_RE.match(user):
        raise InputValidationError("ssh_user", f"Invalid SSH username: {user!r}")
    return user


def validate_host(host: Optional[str]) -> str:
    host = require("server_ip", host)
    if host.startswith("-") or not HOST_RE.match(host):
        raise InputValidationError("server_ip", f"Invalid server address: {host!r}")
    return host


def validate_ssh_key(path: Optional[str]) -> Path:
    key_path = Path(require("ssh_key_path", path)).expanduser()
    if not key_path.is_file():
        raise InputValidationError(
            "ssh_key_path", f"SSH key file not found at {key_path}"
        )
    return key_path


def validate_port(port) -> int:
    raw = require("app_port", None if port is None else str(port))
    try:
        value = int(raw)
    except ValueError:
        raise InputValidationError("app_port", f"Application Port must be a number, got {raw!r}")
    if not 1 <= value <= 65535:
        raise InputValidationError("app_port", f"Application Port out of range: {value}")
    return value


def build_config(
    repo_url: Optional[str],
    access_token: Optional[str],
    branch: Optional[str],
    ssh_user: Optional[str],
    server_ip: Optional[str],
    ssh_key_path: Optional[str],
    app_port,
) -> DeploymentConfig:
    """
    Validate raw inputs in prompt order and build the run configuration.

    Raises:
        InputValidationError: On the first invalid field
    """
    repo_url = require("repo_url", repo_url)
    # Fails here, before any network call, if the URL has no usable name
    derive_unit_name(repo_url)

    return DeploymentConfig(
        repo_url=repo_url,
        access_token=require("access_token", access_token),
        branch=validate_branch(branch),
        ssh_user=validate_ssh_user(ssh_user),
        server_ip=validate_host(server_ip),
        ssh_key_path=validate_ssh_key(ssh_key_path),
        app_port=validate_port(app_port),
    )
