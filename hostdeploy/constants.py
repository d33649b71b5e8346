"""
hostdeploy Constants

Centralized constants for magic values, defaults, and configuration.
"""

# Input defaults
DEFAULT_BRANCH = "main"
DEFAULT_SSH_PORT = 22

# Environment variables consulted before prompting
ENV_PREFIX = "HOSTDEPLOY_"

# SSH Timeout Configuration
SSH_CONNECTION_TIMEOUT = 5
# Exit status ssh reports when the connection itself fails
SSH_TRANSPORT_FAILURE = 255
PING_COUNT = 2

# Git authentication (token-as-password convention for https remotes)
GIT_TOKEN_USERNAME = "x-access-token"

# Artifact detection
DOCKERFILE_NAME = "Dockerfile"
COMPOSE_FILE_NAMES = ("docker-compose.yml", "docker-compose.yaml")

# Files never synced to the host
RSYNC_EXCLUDES = (".git",)

# Remote tooling: executable -> apt package
REMOTE_PACKAGES = {
    "docker": "docker.io",
    "docker-compose": "docker-compose",
    "nginx": "nginx",
}

# Services enabled and started right after a fresh install
REMOTE_SERVICES = {
    "docker": "docker",
    "nginx": "nginx",
}

COMPOSE_BINARY = "docker-compose"
DOCKER_GROUP = "docker"

# Nginx Configuration
NGINX_SITES_AVAILABLE = "/etc/nginx/sites-available"
NGINX_SITES_ENABLED = "/etc/nginx/sites-enabled"
# Stock site shipped by the Debian/Ubuntu package; it owns default_server on port 80
NGINX_DEFAULT_SITE = f"{NGINX_SITES_ENABLED}/default"
NGINX_LISTEN_PORT = 80

# Validation probes
HTTP_PROBE_URL = "http://localhost/"
HTTP_PROBE_TIMEOUT = 5
EXPECTED_HTTP_STATUS = 200

# Log Configuration
LOG_FILE_PATTERN = "deploy_{timestamp}.log"
LOG_FILENAME_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
LOG_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Replacement for secrets in logs and console output
SECRET_MASK = "****"

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130
