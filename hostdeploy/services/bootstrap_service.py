"""Remote environment bootstrap: Docker, Compose and Nginx."""

from hostdeploy.constants import DOCKER_GROUP, REMOTE_PACKAGES, REMOTE_SERVICES
from hostdeploy.logger import DeployLogger
from hostdeploy.services import remote
from hostdeploy.services.remote import RemoteExecutor

VERSION_COMMANDS = (
    "docker --version",
    "docker-compose --version",
    "nginx -v",
)


class BootstrapService:
    """
    Installs the container runtime and proxy on the host.

    Idempotent: a tool whose executable is already on PATH is left untouched.
    """

    def __init__(self, executor: RemoteExecutor, logger: DeployLogger):
        self.executor = executor
        self.logger = logger

    def prepare(self) -> dict[str, bool]:
        """
        Bring the host to a deployable state.

        Returns:
            Mapping of executable -> True if it was installed during this run
        """
        self.logger.log("Updating system packages")
        self.executor.run(remote.apt_update())

        installed = {}
        for executable, package in REMOTE_PACKAGES.items():
            installed[executable] = self.install_if_missing(executable, package)

        result = self.executor.run(remote.add_user_to_group(DOCKER_GROUP))
        if result.is_success:
            self.logger.log(f"User added to {DOCKER_GROUP} group")

        self.report_versions()
        return installed

    def install_if_missing(self, executable: str, package: str) -> bool:
        """Install package unless executable is present. Returns True if installed."""
        if self.executor.run(remote.command_exists(executable)).is_success:
            self.logger.success(f"{executable} already installed")
            return False

        self.logger.log(f"Installing {package}")
        self.executor.run(remote.apt_install(package))

        service = REMOTE_SERVICES.get(executable)
        if service:
            self.executor.run(remote.enable_service(service))

        self.logger.success(f"{executable} installed")
        return True

    def report_versions(self) -> None:
        for command in VERSION_COMMANDS:
            result = self.executor.run(remote.tool_version(command))
            if result.is_success and result.stdout.strip():
                self.logger.log(result.stdout.strip())
