"""hostdeploy - deploy a Dockerized Git repository to a remote host behind nginx"""

__version__ = "1.0.0"
