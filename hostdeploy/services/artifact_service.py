"""Artifact detection: which build unit does the repository declare?"""

from pathlib import Path
from typing import Optional

import yaml

from hostdeploy.constants import COMPOSE_FILE_NAMES, DOCKERFILE_NAME
from hostdeploy.exceptions import NoArtifactError
from hostdeploy.models.config import ArtifactKind, RepositoryCheckout


def find_compose_file(repo_path: Path) -> Optional[Path]:
    """Return the first compose file at the repository root, if any."""
    for name in COMPOSE_FILE_NAMES:
        candidate = Path(repo_path) / name
        if candidate.is_file():
            return candidate
    return None


def compose_services(compose_file: Path) -> tuple:
    """
    List service names declared in a compose file.

    Raises:
        NoArtifactError: If the file is not a compose mapping with services
    """
    try:
        with open(compose_file, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise NoArtifactError(
            str(compose_file.parent), reason=f"Invalid compose file {compose_file.name}: {e}"
        )

    if not isinstance(data, dict) or not isinstance(data.get("services"), dict):
        raise NoArtifactError(
            str(compose_file.parent),
            reason=f"Compose file {compose_file.name} declares no services",
        )
    return tuple(data["services"].keys())


def detect_artifact(repo_path: Path) -> RepositoryCheckout:
    """
    Probe the repository root for a Dockerfile or a compose file.

    Args:
        repo_path: Local clone

    Returns:
        RepositoryCheckout describing the build unit

    Raises:
        NoArtifactError: If neither a Dockerfile nor a compose file exists
    """
    repo_path = Path(repo_path)

    # Compose takes precedence when both exist
    compose_file = find_compose_file(repo_path)
    if compose_file is not None:
        return RepositoryCheckout(
            path=repo_path,
            artifact=ArtifactKind.COMPOSE,
            compose_file=compose_file,
            services=compose_services(compose_file),
        )

    if (repo_path / DOCKERFILE_NAME).is_file():
        return RepositoryCheckout(path=repo_path, artifact=ArtifactKind.DOCKERFILE)

    raise NoArtifactError(str(repo_path))
