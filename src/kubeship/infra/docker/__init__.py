"""Container image build layer."""

from .controller import BuildController, LoginOptions
from .docker_controller import DockerBuildController

__all__ = ["BuildController", "DockerBuildController", "LoginOptions"]
