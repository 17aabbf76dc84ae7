"""Exception hierarchy for kubeship.

Every error carries a short ``message`` and optional multi-line ``details``
so the CLI can render a headline plus a details panel.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kubeship.operations.types import DeployedEntry


class DeploymentError(Exception):
    """Raised when a deployment operation fails."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ConfigurationError(DeploymentError):
    """Raised when the configuration is invalid or references unknown names.

    Configuration errors are raised before any external command runs.
    """


class SecretValidationError(DeploymentError):
    """Raised when a secret holds placeholder or missing values."""


class ClusterCommandError(DeploymentError):
    """Raised when a cluster-control command fails."""


class BuildError(DeploymentError):
    """Raised when an image build, push or registry login fails."""


class DeploymentAborted(DeploymentError):
    """Raised when ``deploy`` stops on a fatal error.

    Attributes:
        completed: Entries that were fully applied before the failure
        cause: The underlying error that aborted the run
    """

    def __init__(
        self,
        cause: DeploymentError,
        completed: list[DeployedEntry],
    ):
        self.cause = cause
        self.completed = completed
        super().__init__(cause.message, cause.details)
