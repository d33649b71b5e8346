"""
Deploy Command

Collects inputs, validates them, and runs the deployment (or cleanup).
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import quote

from rich.prompt import Prompt

from hostdeploy.base import BaseCommand
from hostdeploy.constants import DEFAULT_BRANCH, EXIT_SUCCESS
from hostdeploy.orchestrator import DeploymentOrchestrator
from hostdeploy.ui_components import show_summary
from hostdeploy.validator import FIELD_LABELS, build_config

# Prompt order
PROMPT_FIELDS = (
    "repo_url",
    "access_token",
    "branch",
    "ssh_user",
    "server_ip",
    "ssh_key_path",
    "app_port",
)


@dataclass
class DeployOptions:
    """Raw values from options/env; None means ask interactively."""

    repo_url: Optional[str] = None
    access_token: Optional[str] = None
    branch: Optional[str] = None
    ssh_user: Optional[str] = None
    server_ip: Optional[str] = None
    ssh_key_path: Optional[str] = None
    app_port: Optional[str] = None
    cleanup: bool = False
    workdir: Optional[Path] = None


class DeployCommand(BaseCommand):
    """Deploy a Dockerized repository to a remote host, or tear it down."""

    def __init__(
        self,
        options: DeployOptions,
        verbose: bool = False,
        log_dir: Optional[Path] = None,
        ask: Callable[..., str] = Prompt.ask,
    ):
        super().__init__(verbose=verbose, log_dir=log_dir)
        self.options = options
        self.ask = ask

    def collect_inputs(self) -> dict:
        """Return every input, prompting for the ones not already given."""
        inputs = {}
        for name in PROMPT_FIELDS:
            value = getattr(self.options, name)
            if value is None or value == "":
                label = FIELD_LABELS[name]
                if name == "access_token":
                    value = self.ask(label, password=True)
                elif name == "branch":
                    value = self.ask(label, default=DEFAULT_BRANCH)
                else:
                    value = self.ask(label)
            inputs[name] = value
        return inputs

    def execute(self, **kwargs) -> None:
        cleanup = self.options.cleanup
        operation = "cleanup" if cleanup else "deploy"

        self.show_header(
            title="Cleanup Deployment" if cleanup else "Deploy Application",
            subtitle="Dockerized app behind nginx on a remote host",
        )

        inputs = self.collect_inputs()
        token = inputs.get("access_token") or ""
        logger = self.init_logger(operation, secrets=(token, quote(token, safe="")))

        config = build_config(**inputs)
        summary = config.summary()
        summary["Mode"] = operation
        show_summary(summary, console=self.console)
        logger.log(f"Inputs: {config.summary()}")

        orchestrator = DeploymentOrchestrator(config, logger, workdir=self.options.workdir)
        code = orchestrator.run(cleanup=cleanup)

        self._show_log_path()
        if code != EXIT_SUCCESS:
            raise SystemExit(code)
