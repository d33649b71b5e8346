"""Nginx reverse proxy configuration."""

from jinja2 import Template

from hostdeploy.constants import NGINX_DEFAULT_SITE, NGINX_LISTEN_PORT
from hostdeploy.logger import DeployLogger
from hostdeploy.models.config import DeployedUnit
from hostdeploy.services import remote
from hostdeploy.services.remote import RemoteExecutor

SERVER_BLOCK_TEMPLATE = Template(
    """server {
    listen {{ listen_port }};

    server_name _;

    location / {
        proxy_pass http://localhost:{{ app_port }};
        proxy_set_header Host $host;
        proxy_set_header X-Real-IP $remote_addr;
        proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
        proxy_set_header X-Forwarded-Proto $scheme;
    }
}
""",
    keep_trailing_newline=True,
)


def render_server_block(app_port: int, listen_port: int = NGINX_LISTEN_PORT) -> str:
    """Render the server block routing all HTTP traffic to the app port."""
    return SERVER_BLOCK_TEMPLATE.render(
        app_port=int(app_port), listen_port=int(listen_port)
    )


class NginxService:
    """Writes, enables, validates and reloads the site config."""

    def __init__(self, executor: RemoteExecutor, logger: DeployLogger):
        self.executor = executor
        self.logger = logger

    def configure(self, unit: DeployedUnit, app_port: int) -> str:
        """
        Install the reverse proxy for a deployed unit.

        The reload only happens after `nginx -t` succeeds; a RemoteCommandError
        from the syntax check aborts before it.

        Returns:
            The rendered server block
        """
        server_block = render_server_block(app_port)

        self.executor.run(remote.write_file(unit.nginx_conf_path, server_block))
        self.logger.log(f"Wrote {unit.nginx_conf_path}")

        # ln -sf replaces a prior link of the same name
        self.executor.run(remote.symlink(unit.nginx_conf_path, unit.nginx_enabled_path))
        self.logger.log(f"Enabled {unit.nginx_enabled_path}")

        # The stock site holds default_server on port 80
        if unit.nginx_enabled_path != NGINX_DEFAULT_SITE:
            self.executor.run(remote.remove_path(NGINX_DEFAULT_SITE, sudo=True))

        self.executor.run(remote.nginx_config_test())
        self.logger.success("Nginx configuration is valid")

        self.executor.run(remote.reload_service("nginx"))
        self.logger.success(
            f"Nginx forwarding port {NGINX_LISTEN_PORT} to localhost:{app_port}"
        )
        return server_block

    def remove_stale_link(self, unit: DeployedUnit) -> bool:
        """Remove a leftover enabled symlink. Returns True if one was removed."""
        if not self.executor.run(remote.is_symlink(unit.nginx_enabled_path)).is_success:
            return False
        self.executor.run(remote.remove_path(unit.nginx_enabled_path, sudo=True))
        self.logger.log(f"Removed stale symlink {unit.nginx_enabled_path}")
        return True

    def remove_site(self, unit: DeployedUnit) -> None:
        """Delete config and symlink, then reload. Absent files are fine."""
        self.executor.run(remote.remove_path(unit.nginx_conf_path, sudo=True))
        self.executor.run(remote.remove_path(unit.nginx_enabled_path, sudo=True))
        self.executor.run(remote.nginx_signal_reload())
        self.logger.log(f"Removed nginx site {unit.name}")
