"""Abstract cluster controller interface.

Defines the contract kubeship needs from a Kubernetes cluster. Implemented
by a kubectl subprocess backend and a kr8s-backed variant.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, TypeAlias

# =============================================================================
# Data Types
# =============================================================================


@dataclass
class CommandResult:
    """Result of a command execution."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


Manifest: TypeAlias = dict[str, Any]


# =============================================================================
# Abstract Controller
# =============================================================================


class ClusterController(ABC):
    """Abstract base class for cluster operations.

    All methods are async. Use ``run_sync()`` to call from synchronous code.

    When ``dry_run`` is set, mutating calls return ``"Kind/name (dry-run)"``
    without touching the cluster, reads behave as "not found" and ``diff``
    returns the "diff not available" sentinel.

    Example:
        from kubeship.infra.k8s import KubectlClusterController
        from kubeship.infra.utils import run_sync

        controller = KubectlClusterController(dry_run=True)
        ref = run_sync(controller.apply(manifest, "dev"))
    """

    def __init__(self, *, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    # =========================================================================
    # Apply
    # =========================================================================

    @abstractmethod
    async def apply(self, manifest: Manifest, namespace: str) -> str:
        """Create or update one resource.

        Args:
            manifest: Manifest to apply
            namespace: Target namespace

        Returns:
            ``Kind/name`` reference of the applied resource

        Raises:
            ClusterCommandError: If the cluster rejects the manifest
        """
        ...

    @abstractmethod
    async def apply_batch(self, manifests: list[Manifest], namespace: str) -> list[str]:
        """Create or update several resources as a single unit.

        Either every manifest is accepted or the call fails.

        Args:
            manifests: Manifests to apply together
            namespace: Target namespace

        Returns:
            ``Kind/name`` references, in input order

        Raises:
            ClusterCommandError: If the cluster rejects the batch
        """
        ...

    # =========================================================================
    # Analysis
    # =========================================================================

    @abstractmethod
    async def validate(
        self, manifest: Manifest, namespace: str, client_side: bool = False
    ) -> bool:
        """Dry-run validate a manifest.

        Args:
            manifest: Manifest to validate
            namespace: Target namespace
            client_side: Validate structure only, without the API server

        Returns:
            True when the manifest is valid

        Raises:
            ClusterCommandError: With the tool's message when invalid
        """
        ...

    @abstractmethod
    async def diff(self, manifest: Manifest, namespace: str) -> str | None:
        """Diff a manifest against live state.

        Returns:
            None if the resource does not exist, an empty string if it is
            identical, otherwise the diff text
        """
        ...

    # =========================================================================
    # Read
    # =========================================================================

    @abstractmethod
    async def get(self, kind: str, name: str, namespace: str) -> Manifest | None:
        """Fetch a live resource, or None when absent."""
        ...

    @abstractmethod
    async def list(
        self, kind: str, namespace: str, label_selector: str | None = None
    ) -> list[Manifest]:
        """List live resources of a kind, optionally filtered by labels.

        Raises:
            ClusterCommandError: If the listing fails
        """
        ...

    @abstractmethod
    async def secret_exists(self, name: str, namespace: str) -> bool:
        """Check if a Secret exists."""
        ...

    @abstractmethod
    async def get_secret_data(self, name: str, namespace: str) -> dict[str, str] | None:
        """Decoded data of a Secret, or None when it does not exist."""
        ...

    # =========================================================================
    # Delete
    # =========================================================================

    @abstractmethod
    async def delete(self, kind: str, name: str, namespace: str) -> str:
        """Delete a resource.

        Returns:
            ``Kind/name`` reference of the deleted resource

        Raises:
            ClusterCommandError: If the deletion fails
        """
        ...
