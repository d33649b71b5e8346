"""
Deployment Orchestrator

Runs the deployment as a strictly linear sequence of named steps. Any
HostDeployError aborts the whole run; warnings are logged and the run
continues. There are no retries: every step is safe to run again.
"""

from pathlib import Path
from typing import Optional

from hostdeploy.constants import EXIT_FAILURE, EXIT_SUCCESS
from hostdeploy.exceptions import HostDeployError, UnreachableHostError
from hostdeploy.logger import DeployLogger
from hostdeploy.models.config import DeploymentConfig, RepositoryCheckout
from hostdeploy.models.ssh import RemoteTarget
from hostdeploy.services import (
    BootstrapService,
    ContainerService,
    GitService,
    NginxService,
    RemoteExecutor,
    SSHService,
    ValidationService,
    detect_artifact,
)

STEP_REPOSITORY = "Cloning Repository"
STEP_ARTIFACT = "Detecting Build Artifact"
STEP_CONNECTIVITY = "Checking SSH Connectivity"
STEP_BOOTSTRAP = "Preparing Remote Environment"
STEP_IDEMPOTENCY = "Ensuring Idempotency"
STEP_DEPLOY = "Deploying Dockerized Application"
STEP_PROXY = "Configuring Nginx Reverse Proxy"
STEP_VALIDATE = "Validating Deployment"
STEP_CLEANUP = "Cleaning Up Deployment"


class DeploymentOrchestrator:
    """Coordinates one deployment (or cleanup) against one host."""

    def __init__(
        self,
        config: DeploymentConfig,
        logger: DeployLogger,
        workdir: Optional[Path] = None,
        ssh_service: Optional[SSHService] = None,
    ):
        """
        Args:
            config: Validated run configuration
            logger: Session logger
            workdir: Where the repository is cloned (default: working directory)
            ssh_service: Override for the SSH transport
        """
        self.config = config
        self.logger = logger
        self.workdir = Path(workdir) if workdir else Path.cwd()
        self.unit = config.unit
        self.target = RemoteTarget.from_config(config)

        self.ssh_service = ssh_service or SSHService(self.target)
        self.executor = RemoteExecutor(self.ssh_service, logger)
        self.git_service = GitService(config, logger, self.workdir)
        self.bootstrap_service = BootstrapService(self.executor, logger)
        self.container_service = ContainerService(self.ssh_service, self.executor, logger)
        self.nginx_service = NginxService(self.executor, logger)
        self.validation_service = ValidationService(self.executor, logger)

    def run(self, cleanup: bool = False) -> int:
        """
        Execute the deployment, or the teardown when cleanup is set.

        Returns:
            Process exit status (0 success, 1 failure)
        """
        try:
            if cleanup:
                self._run_cleanup()
            else:
                self._run_deploy()
        except HostDeployError as e:
            context = f"Step: {self.logger.current_step}"
            if e.context:
                context += f"\n{e.context}"
            self.logger.log_error(e.message, context=context)
            return EXIT_FAILURE

        return EXIT_SUCCESS

    def _run_deploy(self) -> None:
        checkout = self.sync_repository()
        self.check_connectivity()
        self.prepare_environment()
        self.ensure_idempotency()
        self.deploy_application(checkout)
        self.configure_proxy()
        self.validate_deployment(checkout)
        self.logger.success(f"Deployment of {self.unit.name} completed")

    def _run_cleanup(self) -> None:
        self.check_connectivity()
        self.cleanup()

    # =========================================================================
    # Steps
    # =========================================================================

    def sync_repository(self) -> RepositoryCheckout:
        self.logger.step(STEP_REPOSITORY)
        repo_path = self.git_service.sync()

        self.logger.step(STEP_ARTIFACT)
        checkout = detect_artifact(repo_path)
        self.logger.success(f"Found {checkout.artifact.label}")
        if checkout.services:
            self.logger.log(f"Compose services: {', '.join(checkout.services)}")
        return checkout

    def check_connectivity(self) -> None:
        self.logger.step(STEP_CONNECTIVITY)
        host = self.target.host

        if self.ssh_service.ping():
            self.logger.log(f"Ping successful to {host}")
        else:
            self.logger.warning(f"Cannot ping {host}, continuing to SSH test")

        probe = self.ssh_service.check_connectivity()
        if probe.is_failure:
            raise UnreachableHostError(
                self.target.connection_string,
                details=probe.stderr.strip() or None,
            )
        self.logger.success(f"SSH connection to {self.target.connection_string} successful")

    def prepare_environment(self) -> None:
        self.logger.step(STEP_BOOTSTRAP)
        self.bootstrap_service.prepare()
        self.logger.success("Remote environment ready")

    def ensure_idempotency(self) -> None:
        self.logger.step(STEP_IDEMPOTENCY)
        if self.container_service.stop_previous(self.unit):
            self.logger.success(f"Previous container {self.unit.container_name} removed")
        if self.nginx_service.remove_stale_link(self.unit):
            self.logger.success("Stale nginx symlink removed")
        self.logger.success("Idempotency checks completed")

    def deploy_application(self, checkout: RepositoryCheckout) -> None:
        self.logger.step(STEP_DEPLOY)
        self.container_service.transfer(checkout, self.unit)
        self.container_service.deploy(checkout, self.unit, self.config.app_port)

    def configure_proxy(self) -> None:
        self.logger.step(STEP_PROXY)
        self.nginx_service.configure(self.unit, self.config.app_port)

    def validate_deployment(self, checkout: RepositoryCheckout) -> None:
        self.logger.step(STEP_VALIDATE)
        result = self.validation_service.validate(
            self.unit, checkout.artifact, server=self.target.host
        )
        if result.has_errors:
            raise HostDeployError(
                "Deployment validation failed", context="; ".join(result.errors)
            )
        self.logger.success("Deployment validation completed")

    def cleanup(self) -> None:
        self.logger.step(STEP_CLEANUP)
        self.container_service.teardown(self.unit)
        self.nginx_service.remove_site(self.unit)
        self.container_service.remove_project_dir(self.unit)
        self.logger.success(f"Cleanup of {self.unit.name} completed")
