"""Git service: clone or update the application repository locally."""

from pathlib import Path
from urllib.parse import quote, urlsplit, urlunsplit

from hostdeploy.constants import GIT_TOKEN_USERNAME
from hostdeploy.exceptions import RepositoryError
from hostdeploy.logger import DeployLogger, run_with_progress
from hostdeploy.models.config import DeploymentConfig


def authenticated_url(repo_url: str, token: str) -> str:
    """
    Embed the access token in an http(s) repository URL.

    Non-http remotes (ssh, scp-like, local paths) are returned unchanged.
    Existing credentials in the URL are replaced.
    """
    parts = urlsplit(repo_url)
    if parts.scheme not in ("http", "https") or not token:
        return repo_url

    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    netloc = f"{GIT_TOKEN_USERNAME}:{quote(token, safe='')}@{host}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


class GitService:
    """Clones or fast-forwards the repository into a working directory."""

    def __init__(self, config: DeploymentConfig, logger: DeployLogger, workdir: Path):
        """
        Initialize git service.

        Args:
            config: Deployment configuration
            logger: Session logger (the token is registered as a secret)
            workdir: Directory the clone lives in
        """
        self.config = config
        self.logger = logger
        self.workdir = Path(workdir)
        self.logger.add_secret(config.access_token)
        self.logger.add_secret(quote(config.access_token, safe=""))

    @property
    def repo_path(self) -> Path:
        return self.workdir / self.config.repo_dir_name

    def sync(self) -> Path:
        """
        Clone the repository or update an existing clone.

        Returns:
            Path to the local clone

        Raises:
            RepositoryError: If any git command fails
        """
        if (self.repo_path / ".git").is_dir():
            self.logger.log("Repository already exists locally, pulling latest changes")
            self._update()
            self.logger.success(f"Repository updated ({self.config.branch})")
        else:
            self.logger.log(f"Cloning repository from {self.config.repo_url}")
            self._clone()
            self.logger.success(f"Repository cloned ({self.config.branch})")
        return self.repo_path

    def _clone(self) -> None:
        self.workdir.mkdir(parents=True, exist_ok=True)
        auth_url = authenticated_url(self.config.repo_url, self.config.access_token)
        self._git(
            ["clone", "--branch", self.config.branch, auth_url, str(self.repo_path)],
            "Cloning repository",
            cwd=self.workdir,
        )
        # git stores the clone URL in .git/config; keep the token out of it
        self._git(
            ["remote", "set-url", "origin", self.config.repo_url],
            "Resetting origin URL",
        )

    def _update(self) -> None:
        auth_url = authenticated_url(self.config.repo_url, self.config.access_token)
        branch = self.config.branch
        # Update origin/<branch> so checkout can create a tracking branch
        refspec = f"+refs/heads/{branch}:refs/remotes/origin/{branch}"
        self._git(["fetch", auth_url, refspec], f"Fetching {branch}")
        self._git(["checkout", branch], f"Checking out {branch}")
        self._git(["pull", auth_url, branch], f"Pulling {branch}")

    def _git(self, args: list[str], description: str, cwd: Path = None) -> None:
        try:
            result = run_with_progress(
                self.logger, ["git", *args], description, cwd=cwd or self.repo_path
            )
        except FileNotFoundError:
            raise RepositoryError("git not found", context="Install git on this machine")

        if result.is_failure:
            raise RepositoryError(
                f"{description} failed (exit code {result.returncode})",
                context=result.stderr.strip() or result.command,
            )
