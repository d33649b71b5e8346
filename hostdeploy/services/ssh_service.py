"""SSH service for executing commands on the deployment host."""

import subprocess
import time
from pathlib import Path
from typing import Optional

from hostdeploy.constants import (
    PING_COUNT,
    RSYNC_EXCLUDES,
    SSH_CONNECTION_TIMEOUT,
    SSH_TRANSPORT_FAILURE,
)
from hostdeploy.exceptions import HostDeployError, RemoteCommandError
from hostdeploy.logger import DeployLogger, run_with_progress
from hostdeploy.models.results import ExecutionResult, SSHResult
from hostdeploy.models.ssh import RemoteTarget


class SSHService:
    """Service for SSH, ping and rsync operations against one target."""

    def __init__(self, target: RemoteTarget):
        """
        Initialize SSH service.

        Args:
            target: Host, user and key to connect with
        """
        self.target = target

    def execute_command(
        self,
        command: str,
        timeout: Optional[int] = None,
        input_text: Optional[str] = None,
    ) -> SSHResult:
        """
        Execute command on the host over a new SSH session.

        Args:
            command: Command to execute (interpreted by the remote shell)
            timeout: Command timeout in seconds (None waits indefinitely)
            input_text: Data written to the remote command's stdin

        Returns:
            SSHResult with execution details
        """
        ssh_cmd = self.target.build_command(command)
        stdin_kwargs = (
            {"input": input_text} if input_text is not None else {"stdin": subprocess.DEVNULL}
        )

        start_time = time.time()
        try:
            result = subprocess.run(
                ssh_cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
                **stdin_kwargs,
            )
        except subprocess.TimeoutExpired:
            raise RemoteCommandError(
                f"SSH command timed out after {timeout}s", command, returncode=-1
            )
        except FileNotFoundError:
            raise HostDeployError(
                "ssh client not found", context="Install OpenSSH on this machine"
            )

        return SSHResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            host=self.target.host,
            command=command,
            duration_seconds=time.time() - start_time,
        )

    def check_connectivity(self) -> ExecutionResult:
        """
        Run a credentialed no-op with a bounded connect timeout.

        Returns:
            ExecutionResult of the probe (returncode 0 when reachable)
        """
        probe = self.target.build_probe_command()
        try:
            result = subprocess.run(
                probe,
                capture_output=True,
                text=True,
                stdin=subprocess.DEVNULL,
                timeout=SSH_CONNECTION_TIMEOUT * 3,
            )
        except subprocess.TimeoutExpired:
            return ExecutionResult(
                returncode=SSH_TRANSPORT_FAILURE,
                stderr="connection timed out",
                command=" ".join(probe),
            )
        return ExecutionResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            command=" ".join(probe),
        )

    def ping(self) -> bool:
        """ICMP ping the host. Many hosts drop ICMP, so callers only warn."""
        try:
            result = subprocess.run(
                ["ping", "-c", str(PING_COUNT), self.target.host],
                capture_output=True,
                text=True,
                stdin=subprocess.DEVNULL,
                timeout=PING_COUNT * 5,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return False
        return result.returncode == 0

    def sync_directory(
        self, logger: DeployLogger, local_dir: Path, remote_dir: str
    ) -> ExecutionResult:
        """
        Delta-transfer a local directory to the host with rsync.

        Args:
            logger: Session logger
            local_dir: Directory whose contents are copied
            remote_dir: Destination relative to the SSH user's home

        Returns:
            ExecutionResult of rsync
        """
        rsync_cmd = ["rsync", "-az"]
        for pattern in RSYNC_EXCLUDES:
            rsync_cmd.append(f"--exclude={pattern}")
        rsync_cmd.extend(
            [
                "-e",
                self.target.rsync_shell(),
                f"{Path(local_dir)}/",
                self.target.rsync_destination(remote_dir),
            ]
        )
        return run_with_progress(logger, rsync_cmd, "Transferring project files")
