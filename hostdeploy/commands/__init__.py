"""hostdeploy commands"""

from .deploy import DeployCommand, DeployOptions

__all__ = ["DeployCommand", "DeployOptions"]
