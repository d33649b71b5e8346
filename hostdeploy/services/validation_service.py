"""Post-deployment validation service."""

import requests

from hostdeploy.constants import (
    EXPECTED_HTTP_STATUS,
    HTTP_PROBE_TIMEOUT,
    HTTP_PROBE_URL,
    NGINX_LISTEN_PORT,
)
from hostdeploy.logger import DeployLogger
from hostdeploy.models.config import ArtifactKind, DeployedUnit
from hostdeploy.models.results import ValidationResult
from hostdeploy.services import remote
from hostdeploy.services.remote import RemoteExecutor


class ValidationService:
    """
    Confirms the deployment is serving.

    Docker not running or the container missing are errors; a failing HTTP
    probe is only a warning.
    """

    def __init__(self, executor: RemoteExecutor, logger: DeployLogger):
        self.executor = executor
        self.logger = logger

    def validate(
        self, unit: DeployedUnit, artifact: ArtifactKind, server: str = ""
    ) -> ValidationResult:
        """
        Run all checks.

        Args:
            unit: Deployed unit
            artifact: Build unit used for this deployment
            server: Public address for the external probe (skipped if empty)

        Returns:
            ValidationResult with errors and warnings collected
        """
        result = ValidationResult()

        if self.executor.run(remote.service_active("docker")).is_success:
            self.logger.success("Docker service is running")
        else:
            result.add_error("Docker service is not running")
            return result

        if artifact is ArtifactKind.COMPOSE:
            self._check_compose(unit, result)
        else:
            self._check_container(unit, result)

        self._probe_local(result)
        if server:
            self._probe_external(server, result)

        return result

    def _check_container(self, unit: DeployedUnit, result: ValidationResult) -> None:
        if not self.executor.run(remote.container_running(unit.container_name)).is_success:
            result.add_error(f"Container '{unit.container_name}' is not running")
            return
        self.logger.success(f"Container '{unit.container_name}' is running")

        health = self.executor.run(remote.container_health(unit.container_name))
        status = health.stdout.strip()
        # Images without a HEALTHCHECK report an empty status
        if health.is_success and status and status != "<no value>":
            result.health_status = status
            self.logger.log(f"Container health status: {status}")
            if status == "unhealthy":
                result.add_warning(f"Container '{unit.container_name}' is unhealthy")

    def _check_compose(self, unit: DeployedUnit, result: ValidationResult) -> None:
        listing = self.executor.run(remote.compose_running(unit.compose_project))
        names = [n for n in listing.stdout.split() if n] if listing.is_success else []
        if not names:
            result.add_error(f"No containers running for compose project '{unit.compose_project}'")
            return
        self.logger.success(f"Compose containers running: {', '.join(names)}")

    def _probe_local(self, result: ValidationResult) -> None:
        probe = self.executor.run(remote.http_status(HTTP_PROBE_URL))
        code = probe.stdout.strip()
        if code == str(EXPECTED_HTTP_STATUS):
            self.logger.success("Nginx is proxying requests successfully")
        else:
            message = f"Nginx may not be proxying correctly (HTTP {code or 'no response'})"
            result.add_warning(message)
            self.logger.warning(message)

    def _probe_external(self, server: str, result: ValidationResult) -> None:
        url = f"http://{server}:{NGINX_LISTEN_PORT}/"
        try:
            response = requests.get(url, timeout=HTTP_PROBE_TIMEOUT)
        except requests.RequestException as e:
            message = f"{url} not reachable from this machine: {e.__class__.__name__}"
            result.add_warning(message)
            self.logger.warning(message)
            return

        if response.status_code == EXPECTED_HTTP_STATUS:
            self.logger.success(f"{url} answered {response.status_code}")
        else:
            message = f"{url} answered {response.status_code}"
            result.add_warning(message)
            self.logger.warning(message)
