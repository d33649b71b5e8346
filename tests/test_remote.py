"""Tests for remote operations and the executor."""

import pytest

from hostdeploy.exceptions import RemoteCommandError
from hostdeploy.services import remote
from hostdeploy.services.remote import RemoteExecutor, RemoteOperation


class TestRemoteOperation:
    def test_render_with_sudo(self):
        op = RemoteOperation("Reload nginx", "systemctl reload nginx", sudo=True)

        assert op.render() == "sudo systemctl reload nginx"

    def test_render_without_sudo(self):
        assert remote.list_containers().render() == "docker ps"

    def test_arguments_are_quoted(self):
        op = remote.stop_container("app; rm -rf /")

        assert op.command == "docker stop 'app; rm -rf /'"

    def test_run_container_publishes_same_port(self):
        op = remote.run_container("shop-app", 8080)

        assert op.command == "docker run -d -p 8080:8080 --name shop-app shop-app"
        assert not op.tolerate_failure

    def test_build_runs_in_project_dir(self):
        assert remote.build_image("shop-app", "shop-app").command == (
            "cd shop-app && docker build -t shop-app ."
        )

    def test_write_file_sends_content_on_stdin(self):
        op = remote.write_file("/etc/nginx/sites-available/shop-app", "server {}\n")

        assert op.render() == "sudo tee /etc/nginx/sites-available/shop-app > /dev/null"
        assert op.stdin == "server {}\n"

    def test_compose_commands_use_project_name(self):
        assert remote.compose_up("shop-app", "shop-app").command == (
            "cd shop-app && docker-compose -p shop-app up -d --build"
        )
        assert remote.compose_down("shop-app", "shop-app").tolerate_failure

    def test_absence_tolerant_teardown(self):
        assert remote.stop_container("x").tolerate_failure
        assert remote.remove_container("x").tolerate_failure
        assert remote.remove_image("x").tolerate_failure
        assert not remote.stop_container("x", tolerate_absence=False).tolerate_failure

    def test_remove_path_flags(self):
        assert remote.remove_path("shop-app", recursive=True).render() == "rm -rf shop-app"
        assert remote.remove_path("/etc/x", sudo=True).render() == "sudo rm -f /etc/x"


class TestRemoteExecutor:
    def test_success(self, fake_ssh, logger):
        executor = RemoteExecutor(fake_ssh, logger)

        result = executor.run(remote.list_containers())

        assert result.is_success
        assert not result.tolerated
        assert fake_ssh.commands == ["docker ps"]

    def test_tolerated_failure_is_logged_not_raised(self, fake_ssh, logger):
        fake_ssh.responses["docker rm"] = (1, "")
        executor = RemoteExecutor(fake_ssh, logger)

        result = executor.run(remote.remove_container("shop-app"))

        assert result.returncode == 1
        assert result.tolerated
        log_text = logger.log_path.read_text()
        assert "[DEBUG] Remove container shop-app skipped (exit code 1)" in log_text

    def test_fatal_failure_raises(self, fake_ssh, logger):
        fake_ssh.responses["docker build"] = (2, "")
        executor = RemoteExecutor(fake_ssh, logger)

        with pytest.raises(RemoteCommandError) as exc_info:
            executor.run(remote.build_image("shop-app", "shop-app"))

        error = exc_info.value
        assert error.returncode == 2
        assert error.command == "cd shop-app && docker build -t shop-app ."
        assert error.message == "Build image shop-app failed (exit code 2)"

    def test_stdin_is_forwarded(self, fake_ssh, logger):
        executor = RemoteExecutor(fake_ssh, logger)

        executor.run(remote.write_file("/tmp/x", "hello\n", sudo=False))

        assert fake_ssh.inputs == ["hello\n"]

    def test_lost_connection_is_fatal_even_when_tolerated(self, fake_ssh, logger):
        fake_ssh.responses["docker rm"] = (255, "")
        executor = RemoteExecutor(fake_ssh, logger)

        with pytest.raises(RemoteCommandError) as exc_info:
            executor.run(remote.remove_container("shop-app"))

        assert exc_info.value.returncode == 255

    def test_lost_connection_during_check_is_fatal(self, fake_ssh, logger):
        fake_ssh.responses["test -L"] = (255, "")
        executor = RemoteExecutor(fake_ssh, logger)

        with pytest.raises(RemoteCommandError):
            executor.run(remote.is_symlink("/etc/nginx/sites-enabled/shop-app"))
