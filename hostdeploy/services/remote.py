"""
Remote Operations

Typed, individually testable remote commands and the executor that runs them.
Every argument is either a validated identifier or passed through shlex.quote.
"""

import shlex
from dataclasses import dataclass
from typing import Optional

from hostdeploy.constants import (
    COMPOSE_BINARY,
    COMPOSE_FILE_NAMES,
    SSH_TRANSPORT_FAILURE,
)
from hostdeploy.exceptions import RemoteCommandError, ToleratedAbsenceError
from hostdeploy.logger import DeployLogger
from hostdeploy.models.results import SSHResult
from hostdeploy.services.ssh_service import SSHService

q = shlex.quote


@dataclass(frozen=True)
class RemoteOperation:
    """One remote command with its failure policy."""

    description: str
    command: str
    sudo: bool = False
    tolerate_failure: bool = False
    stdin: Optional[str] = None

    def render(self) -> str:
        """Command line sent to the remote shell."""
        if self.sudo:
            return f"sudo {self.command}"
        return self.command


# =============================================================================
# Package and service management
# =============================================================================


def command_exists(executable: str) -> RemoteOperation:
    return RemoteOperation(
        f"Check {executable}",
        f"command -v {q(executable)} >/dev/null 2>&1",
        tolerate_failure=True,
    )


def apt_update() -> RemoteOperation:
    return RemoteOperation("Update package index", "apt-get update -y", sudo=True)


def apt_install(package: str) -> RemoteOperation:
    return RemoteOperation(
        f"Install {package}",
        f"DEBIAN_FRONTEND=noninteractive apt-get install -y {q(package)}",
        sudo=True,
    )


def enable_service(service: str) -> RemoteOperation:
    return RemoteOperation(
        f"Enable {service}", f"systemctl enable --now {q(service)}", sudo=True
    )


def service_active(service: str) -> RemoteOperation:
    return RemoteOperation(
        f"Check {service} service",
        f"systemctl is-active --quiet {q(service)}",
        tolerate_failure=True,
    )


def reload_service(service: str) -> RemoteOperation:
    return RemoteOperation(
        f"Reload {service}", f"systemctl reload {q(service)}", sudo=True
    )


def add_user_to_group(group: str) -> RemoteOperation:
    # $USER is expanded by the remote shell
    return RemoteOperation(
        f"Add user to {group} group",
        f'usermod -aG {q(group)} "$USER"',
        sudo=True,
        tolerate_failure=True,
    )


def tool_version(command: str) -> RemoteOperation:
    return RemoteOperation(
        f"Report {command.split()[0]} version",
        f"{command} 2>&1",
        tolerate_failure=True,
    )


# =============================================================================
# Docker
# =============================================================================


def container_running(name: str) -> RemoteOperation:
    return RemoteOperation(
        f"Check container {name}",
        f"docker ps --format '{{{{.Names}}}}' | grep -Fxq {q(name)}",
        tolerate_failure=True,
    )


def list_containers() -> RemoteOperation:
    return RemoteOperation(
        "List running containers", "docker ps", tolerate_failure=True
    )


def stop_container(name: str, tolerate_absence: bool = True) -> RemoteOperation:
    return RemoteOperation(
        f"Stop container {name}",
        f"docker stop {q(name)}",
        tolerate_failure=tolerate_absence,
    )


def remove_container(name: str, tolerate_absence: bool = True) -> RemoteOperation:
    return RemoteOperation(
        f"Remove container {name}",
        f"docker rm {q(name)}",
        tolerate_failure=tolerate_absence,
    )


def remove_image(name: str) -> RemoteOperation:
    return RemoteOperation(
        f"Remove image {name}", f"docker rmi {q(name)}", tolerate_failure=True
    )


def build_image(name: str, directory: str) -> RemoteOperation:
    return RemoteOperation(
        f"Build image {name}", f"cd {q(directory)} && docker build -t {q(name)} ."
    )


def run_container(name: str, port: int) -> RemoteOperation:
    port = int(port)
    return RemoteOperation(
        f"Run container {name}",
        f"docker run -d -p {port}:{port} --name {q(name)} {q(name)}",
    )


def container_health(name: str) -> RemoteOperation:
    return RemoteOperation(
        f"Inspect health of {name}",
        f"docker inspect --format '{{{{.State.Health.Status}}}}' {q(name)}",
        tolerate_failure=True,
    )


def compose_file_present(directory: str) -> RemoteOperation:
    checks = " || ".join(f"test -f {q(name)}" for name in COMPOSE_FILE_NAMES)
    return RemoteOperation(
        f"Check compose file in {directory}",
        f"cd {q(directory)} && ( {checks} )",
        tolerate_failure=True,
    )


def compose_down(project: str, directory: str) -> RemoteOperation:
    return RemoteOperation(
        f"Stop compose project {project}",
        f"cd {q(directory)} && {COMPOSE_BINARY} -p {q(project)} down",
        tolerate_failure=True,
    )


def compose_up(project: str, directory: str) -> RemoteOperation:
    return RemoteOperation(
        f"Start compose project {project}",
        f"cd {q(directory)} && {COMPOSE_BINARY} -p {q(project)} up -d --build",
    )


def compose_running(project: str) -> RemoteOperation:
    label = f"label=com.docker.compose.project={project}"
    return RemoteOperation(
        f"List containers of {project}",
        f"docker ps --filter {q(label)} --format '{{{{.Names}}}}'",
        tolerate_failure=True,
    )


# =============================================================================
# Files and nginx
# =============================================================================


def write_file(path: str, content: str, sudo: bool = True) -> RemoteOperation:
    return RemoteOperation(
        f"Write {path}", f"tee {q(path)} > /dev/null", sudo=sudo, stdin=content
    )


def symlink(source: str, link_name: str) -> RemoteOperation:
    return RemoteOperation(
        f"Link {link_name}", f"ln -sf {q(source)} {q(link_name)}", sudo=True
    )


def is_symlink(path: str) -> RemoteOperation:
    return RemoteOperation(
        f"Check symlink {path}", f"test -L {q(path)}", tolerate_failure=True
    )


def remove_path(path: str, sudo: bool = False, recursive: bool = False) -> RemoteOperation:
    flags = "-rf" if recursive else "-f"
    return RemoteOperation(f"Remove {path}", f"rm {flags} {q(path)}", sudo=sudo)


def nginx_config_test() -> RemoteOperation:
    return RemoteOperation("Validate nginx configuration", "nginx -t", sudo=True)


def nginx_signal_reload() -> RemoteOperation:
    return RemoteOperation(
        "Reload nginx", "nginx -s reload", sudo=True, tolerate_failure=True
    )


def http_status(url: str) -> RemoteOperation:
    return RemoteOperation(
        f"Probe {url}",
        f"curl -s -o /dev/null -w '%{{http_code}}' {q(url)}",
        tolerate_failure=True,
    )


# =============================================================================
# Executor
# =============================================================================


class RemoteExecutor:
    """Runs RemoteOperations over SSH, logging each one."""

    def __init__(self, ssh_service: SSHService, logger: DeployLogger):
        self.ssh_service = ssh_service
        self.logger = logger

    def run(self, operation: RemoteOperation) -> SSHResult:
        """
        Run one operation in a new SSH session.

        Raises:
            RemoteCommandError: If the command fails and failure is not tolerated
        """
        rendered = operation.render()
        self.logger.log_command(rendered)

        result = self.ssh_service.execute_command(rendered, input_text=operation.stdin)
        self.logger.log_output(result.stdout, "stdout")
        self.logger.log_output(result.stderr, "stderr")

        try:
            self._check(operation, result)
        except ToleratedAbsenceError as e:
            self.logger.log(e.message, "DEBUG")
            result.tolerated = True

        return result

    @staticmethod
    def _check(operation: RemoteOperation, result: SSHResult) -> None:
        if result.is_success:
            return
        # 255 is ssh itself failing, never the remote command
        if operation.tolerate_failure and result.returncode != SSH_TRANSPORT_FAILURE:
            raise ToleratedAbsenceError(operation.description, result.returncode)
        raise RemoteCommandError(
            operation.description,
            operation.render(),
            result.returncode,
            result.stderr,
        )
