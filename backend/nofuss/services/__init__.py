"""
Services module for NoFuss.
"""
from .build_environment import BuildEnvironment, LocalBuildEnvironment, get_build_environment
from .project_store import ProjectStore
from .deploy_catalog import get_deployment_options, get_deployment_instructions
from .deploy_helper import DeployHelper

__all__ = [
    "BuildEnvironment",
    "LocalBuildEnvironment",
    "get_build_environment",
    "ProjectStore",
    "get_deployment_options",
    "get_deployment_instructions",
    "DeployHelper",
]
