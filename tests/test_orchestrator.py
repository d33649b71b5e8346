"""End-to-end tests of the deployment sequence against a scripted host."""

from dataclasses import replace
from unittest.mock import MagicMock, patch

import pytest

from hostdeploy.orchestrator import DeploymentOrchestrator
from tests.conftest import FakeSSHService


@pytest.fixture(autouse=True)
def external_probe():
    with patch("hostdeploy.services.validation_service.requests.get") as mock_get:
        mock_get.return_value = MagicMock(status_code=200)
        yield mock_get


@pytest.fixture
def host():
    return FakeSSHService(responses={"curl": (0, "200")})


def make_orchestrator(config, logger, host, repo):
    orchestrator = DeploymentOrchestrator(
        config, logger, workdir=repo.parent, ssh_service=host
    )
    orchestrator.git_service.sync = MagicMock(return_value=repo)
    return orchestrator


class TestDeploy:
    def test_full_dockerfile_deployment(self, config, logger, host, dockerfile_repo):
        orchestrator = make_orchestrator(config, logger, host, dockerfile_repo)

        assert orchestrator.run() == 0

        assert host.synced == [(dockerfile_repo, "shop-app")]
        assert host.index_of("apt-get update") < host.index_of("docker build")
        assert host.index_of("docker build") < host.index_of("tee /etc/nginx")
        assert host.index_of("rm -f /etc/nginx/sites-enabled/default") < host.index_of("nginx -t")
        assert host.index_of("nginx -t") < host.index_of("systemctl reload nginx")
        block = host.inputs[host.index_of("tee /etc/nginx/sites-available/shop-app")]
        assert "server_name _;" in block
        assert "proxy_pass http://localhost:8080;" in block

    def test_compose_deployment(self, config, logger, host, compose_repo):
        host.responses["com.docker.compose.project"] = (0, "shop-app_web_1\n")
        orchestrator = make_orchestrator(config, logger, host, compose_repo)

        assert orchestrator.run() == 0
        assert host.ran("docker-compose -p shop-app up -d --build")
        assert not host.ran("docker build")

    def test_compose_deployment_with_dotted_name(self, config, logger, host, compose_repo):
        config = replace(config, repo_url="https://github.com/acme/acme.github.io.git")
        host.responses["com.docker.compose.project=acmegithubio"] = (0, "acmegithubio_web_1\n")
        orchestrator = make_orchestrator(config, logger, host, compose_repo)

        assert orchestrator.run() == 0
        assert host.ran("docker-compose -p acmegithubio up -d --build")
        assert host.ran("docker-compose -p acmegithubio down")
        assert host.ran("tee /etc/nginx/sites-available/acme.github.io")

    def test_redeploy_replaces_previous_container(self, config, logger, host, dockerfile_repo):
        orchestrator = make_orchestrator(config, logger, host, dockerfile_repo)

        assert orchestrator.run() == 0

        assert host.index_of("docker stop shop-app") < host.index_of("docker build")
        assert host.index_of("rm -f /etc/nginx/sites-enabled/shop-app") < host.index_of(
            "ln -sf"
        )

    def test_no_artifact_aborts_before_ssh(self, config, logger, host, tmp_path):
        empty = tmp_path / "work" / "Shop-App"
        empty.mkdir(parents=True)
        orchestrator = make_orchestrator(config, logger, host, empty)

        assert orchestrator.run() == 1

        assert host.commands == []
        assert not host.pinged and not host.probed
        text = logger.log_path.read_text()
        assert "No Dockerfile or docker-compose.yml found" in text
        assert "Step: Detecting Build Artifact" in text

    def test_unreachable_host(self, config, logger, dockerfile_repo):
        host = FakeSSHService(reachable=False, pingable=False)
        orchestrator = make_orchestrator(config, logger, host, dockerfile_repo)

        assert orchestrator.run() == 1

        assert host.commands == []
        assert "SSH connection to ubuntu@203.0.113.7 failed" in logger.log_path.read_text()

    def test_failed_ping_only_warns(self, config, logger, host, dockerfile_repo):
        host.pingable = False
        orchestrator = make_orchestrator(config, logger, host, dockerfile_repo)

        assert orchestrator.run() == 0
        assert "[WARNING] Cannot ping 203.0.113.7" in logger.log_path.read_text()

    def test_build_failure_names_the_step(self, config, logger, host, dockerfile_repo):
        host.responses["docker build"] = (1, "")
        orchestrator = make_orchestrator(config, logger, host, dockerfile_repo)

        assert orchestrator.run() == 1

        assert not host.ran("tee /etc/nginx")
        text = logger.log_path.read_text()
        assert "Build image shop-app failed (exit code 1)" in text
        assert "Step: Deploying Dockerized Application" in text

    def test_validation_error_fails_run(self, config, logger, host, dockerfile_repo):
        host.responses["systemctl is-active"] = (3, "")
        orchestrator = make_orchestrator(config, logger, host, dockerfile_repo)

        assert orchestrator.run() == 1
        assert "Deployment validation failed" in logger.log_path.read_text()


class TestCleanup:
    def test_cleanup_removes_everything(self, config, logger, host, tmp_path):
        orchestrator = make_orchestrator(config, logger, host, tmp_path)

        assert orchestrator.run(cleanup=True) == 0

        orchestrator.git_service.sync.assert_not_called()
        for fragment in (
            "docker stop shop-app",
            "docker rm shop-app",
            "docker rmi shop-app",
            "rm -f /etc/nginx/sites-available/shop-app",
            "rm -f /etc/nginx/sites-enabled/shop-app",
            "nginx -s reload",
            "rm -rf shop-app",
        ):
            assert host.ran(fragment), fragment

    def test_cleanup_never_builds_or_writes(self, config, logger, host, tmp_path):
        orchestrator = make_orchestrator(config, logger, host, tmp_path)

        orchestrator.run(cleanup=True)

        assert not host.ran("docker build")
        assert not host.ran("up -d")
        assert not host.ran("tee ")
        assert not host.ran("apt-get")
        assert host.synced == []

    def test_lost_connection_during_cleanup_fails(self, config, logger, host, tmp_path):
        host.responses["docker rmi"] = (255, "")
        orchestrator = make_orchestrator(config, logger, host, tmp_path)

        assert orchestrator.run(cleanup=True) == 1
        assert not host.ran("rm -rf shop-app")
        assert "Remove image shop-app failed (exit code 255)" in logger.log_path.read_text()

    def test_cleanup_of_absent_deployment(self, config, logger, host, tmp_path):
        for fragment in ("test -f", "docker stop", "docker rm ", "docker rmi", "nginx -s"):
            host.responses[fragment] = (1, "")
        orchestrator = make_orchestrator(config, logger, host, tmp_path)

        assert orchestrator.run(cleanup=True) == 0
