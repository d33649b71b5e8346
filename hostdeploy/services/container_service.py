"""Container lifecycle on the host: transfer, build, run and teardown."""

from hostdeploy.exceptions import RemoteCommandError
from hostdeploy.logger import DeployLogger
from hostdeploy.models.config import ArtifactKind, DeployedUnit, RepositoryCheckout
from hostdeploy.services import remote
from hostdeploy.services.remote import RemoteExecutor
from hostdeploy.services.ssh_service import SSHService


class ContainerService:
    """Builds and runs the application from a Dockerfile or compose file."""

    def __init__(
        self, ssh_service: SSHService, executor: RemoteExecutor, logger: DeployLogger
    ):
        self.ssh_service = ssh_service
        self.executor = executor
        self.logger = logger

    def transfer(self, checkout: RepositoryCheckout, unit: DeployedUnit) -> None:
        """
        Synchronize the local clone to the remote project directory.

        Raises:
            RemoteCommandError: If rsync fails
        """
        result = self.ssh_service.sync_directory(
            self.logger, checkout.path, unit.remote_dir
        )
        if result.is_failure:
            raise RemoteCommandError(
                "File transfer", result.command, result.returncode, result.stderr
            )
        self.logger.success(f"Project files synced to {unit.remote_dir_display}")

    def deploy(
        self, checkout: RepositoryCheckout, unit: DeployedUnit, app_port: int
    ) -> None:
        """Build and start the application on the host."""
        if checkout.artifact is ArtifactKind.COMPOSE:
            self.logger.log("Found docker-compose file, deploying containers")
            self.executor.run(remote.compose_down(unit.compose_project, unit.remote_dir))
            self.executor.run(remote.compose_up(unit.compose_project, unit.remote_dir))
            self.logger.success(f"Compose project {unit.compose_project} is up")
        else:
            self.logger.log("Found Dockerfile, building and running container")
            self.remove_container(unit)
            self.executor.run(remote.build_image(unit.image_name, unit.remote_dir))
            self.logger.success(f"Image {unit.image_name} built")
            self.executor.run(remote.run_container(unit.container_name, app_port))
            self.logger.success(
                f"Container {unit.container_name} publishing port {app_port}"
            )

        containers = self.executor.run(remote.list_containers())
        if containers.is_success:
            self.logger.log_output(containers.stdout, "docker ps")

    def stop_previous(self, unit: DeployedUnit) -> bool:
        """
        Stop and remove a running container left by an earlier run.

        Returns:
            True if a running container was replaced
        """
        if not self.executor.run(remote.container_running(unit.container_name)).is_success:
            return False
        self.logger.log(f"Stopping old container {unit.container_name}")
        self.executor.run(remote.stop_container(unit.container_name, tolerate_absence=False))
        self.executor.run(remote.remove_container(unit.container_name, tolerate_absence=False))
        return True

    def remove_container(self, unit: DeployedUnit) -> None:
        """Stop and remove the container; absence is fine."""
        self.executor.run(remote.stop_container(unit.container_name))
        self.executor.run(remote.remove_container(unit.container_name))

    def teardown(self, unit: DeployedUnit) -> None:
        """Remove everything container-related for cleanup mode."""
        if self.executor.run(remote.compose_file_present(unit.remote_dir)).is_success:
            self.executor.run(remote.compose_down(unit.compose_project, unit.remote_dir))
        self.remove_container(unit)
        self.executor.run(remote.remove_image(unit.image_name))
        self.logger.log(f"Removed container and image {unit.name}")

    def remove_project_dir(self, unit: DeployedUnit) -> None:
        self.executor.run(remote.remove_path(unit.remote_dir, recursive=True))
        self.logger.log(f"Removed {unit.remote_dir_display}")
