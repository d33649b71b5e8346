"""Tests for remote environment bootstrap."""

import pytest

from hostdeploy.services.bootstrap_service import BootstrapService
from hostdeploy.services.remote import RemoteExecutor


@pytest.fixture
def bootstrap(fake_ssh, logger):
    return BootstrapService(RemoteExecutor(fake_ssh, logger), logger)


class TestBootstrapService:
    def test_everything_present(self, bootstrap, fake_ssh):
        installed = bootstrap.prepare()

        assert installed == {"docker": False, "docker-compose": False, "nginx": False}
        assert fake_ssh.commands[0] == "sudo apt-get update -y"
        assert not fake_ssh.ran("apt-get install")
        assert fake_ssh.ran('usermod -aG docker "$USER"')

    def test_missing_docker_is_installed_and_enabled(self, bootstrap, fake_ssh):
        fake_ssh.responses["command -v docker >"] = (1, "")

        installed = bootstrap.prepare()

        assert installed["docker"] is True
        assert installed["nginx"] is False
        assert fake_ssh.ran("apt-get install -y docker.io")
        assert fake_ssh.index_of("install -y docker.io") < fake_ssh.index_of(
            "systemctl enable --now docker"
        )

    def test_compose_has_no_service(self, bootstrap, fake_ssh):
        fake_ssh.responses["command -v docker-compose"] = (1, "")

        assert bootstrap.install_if_missing("docker-compose", "docker-compose") is True
        assert not fake_ssh.ran("systemctl enable")

    def test_group_membership_failure_tolerated(self, bootstrap, fake_ssh):
        fake_ssh.responses["usermod"] = (6, "")

        bootstrap.prepare()

        assert fake_ssh.ran("nginx -v")
