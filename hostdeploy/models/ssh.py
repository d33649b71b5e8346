"""
SSH Target Model

Connection details shared by every ssh and rsync invocation.
"""

import shlex
from dataclasses import dataclass
from pathlib import Path

from hostdeploy.constants import DEFAULT_SSH_PORT, SSH_CONNECTION_TIMEOUT


@dataclass(frozen=True)
class RemoteTarget:
    """SSH connection details for the deployment host."""

    host: str
    user: str
    key_path: Path
    port: int = DEFAULT_SSH_PORT

    @classmethod
    def from_config(cls, config) -> "RemoteTarget":
        """Build the target from a DeploymentConfig."""
        return cls(
            host=config.server_ip,
            user=config.ssh_user,
            key_path=Path(config.ssh_key_path),
            port=config.ssh_port,
        )

    @property
    def key_path_expanded(self) -> Path:
        """Get expanded key path (resolves ~)."""
        return self.key_path.expanduser()

    @property
    def connection_string(self) -> str:
        """Get SSH connection string (user@host)."""
        return f"{self.user}@{self.host}"

    @property
    def ssh_options(self) -> list[str]:
        """Options shared by ssh and the rsync remote shell."""
        return [
            "-i",
            str(self.key_path_expanded),
            "-p",
            str(self.port),
            "-o",
            "StrictHostKeyChecking=accept-new",
        ]

    @property
    def ssh_command_prefix(self) -> list[str]:
        """Get SSH command prefix for subprocess."""
        return ["ssh", *self.ssh_options, self.connection_string]

    def build_command(self, remote_command: str) -> list[str]:
        """Build full SSH command with remote command."""
        return self.ssh_command_prefix + [remote_command]

    def build_probe_command(self) -> list[str]:
        """Non-interactive no-op with a bounded connect timeout."""
        return [
            "ssh",
            *self.ssh_options,
            "-o",
            "BatchMode=yes",
            "-o",
            f"ConnectTimeout={SSH_CONNECTION_TIMEOUT}",
            self.connection_string,
            "echo ok",
        ]

    def rsync_shell(self) -> str:
        """Value for rsync's -e option."""
        return shlex.join(["ssh", *self.ssh_options])

    def rsync_destination(self, remote_dir: str) -> str:
        """rsync target for a directory; IPv6 literals need brackets."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.user}@{host}:{remote_dir}/"

    def __repr__(self) -> str:
        return f"RemoteTarget(host={self.host}, user={self.user}, port={self.port})"
