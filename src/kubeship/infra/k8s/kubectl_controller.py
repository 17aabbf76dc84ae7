"""Kubectl-based implementation of ClusterController.

Uses subprocess calls to kubectl for all operations. Manifests are fed to
kubectl on stdin as JSON documents.
"""

from __future__ import annotations

import asyncio
import base64
import json
import subprocess

from loguru import logger

from kubeship.constants import DEFAULT_CONSTANTS
from kubeship.errors import ClusterCommandError
from kubeship.manifests.utils import manifest_kind, manifest_name, manifest_ref

from .controller import ClusterController, CommandResult, Manifest


def serialize_manifests(manifests: list[Manifest]) -> str:
    """Join manifests into one multi-document stream for ``kubectl -f -``."""
    return "\n---\n".join(json.dumps(manifest) for manifest in manifests) + "\n"


class KubectlClusterController(ClusterController):
    """Cluster controller using kubectl subprocess calls.

    All methods are async but internally use asyncio.to_thread()
    to run blocking subprocess calls without blocking the event loop.
    """

    def __init__(self, *, dry_run: bool = False, kubectl: str = "kubectl") -> None:
        super().__init__(dry_run=dry_run)
        self._kubectl = kubectl

    async def _run_kubectl(
        self,
        args: list[str],
        *,
        input_data: str | None = None,
    ) -> CommandResult:
        """Run a kubectl command asynchronously.

        Args:
            args: Command arguments (without 'kubectl' prefix)
            input_data: Optional input to send to stdin

        Returns:
            CommandResult with execution results
        """
        cmd = [self._kubectl, *args]
        logger.debug(f"Running: {' '.join(cmd)}")

        def _run() -> CommandResult:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                input=input_data,
            )
            return CommandResult(
                success=result.returncode == 0,
                stdout=result.stdout or "",
                stderr=result.stderr or "",
                returncode=result.returncode,
            )

        return await asyncio.to_thread(_run)

    # =========================================================================
    # Apply
    # =========================================================================

    async def apply(self, manifest: Manifest, namespace: str) -> str:
        """Apply one manifest with ``kubectl apply -f -``."""
        ref = manifest_ref(manifest)
        if self.dry_run:
            logger.debug(f"Dry run enabled, skipping kubectl apply of {ref} in {namespace}")
            return f"{ref} (dry-run)"

        result = await self._run_kubectl(
            ["apply", "-f", "-"], input_data=serialize_manifests([manifest])
        )
        if not result.success:
            raise ClusterCommandError(
                f"kubectl apply failed for {ref}", details=result.stderr.strip()
            )
        return ref

    async def apply_batch(self, manifests: list[Manifest], namespace: str) -> list[str]:
        """Apply manifests in one ``kubectl apply`` call so they fail together."""
        refs = [manifest_ref(manifest) for manifest in manifests]
        if not manifests:
            return []
        if self.dry_run:
            logger.debug(f"Dry run enabled, skipping kubectl apply of {refs} in {namespace}")
            return [f"{ref} (dry-run)" for ref in refs]

        result = await self._run_kubectl(
            ["apply", "-f", "-"], input_data=serialize_manifests(manifests)
        )
        if not result.success:
            raise ClusterCommandError(
                f"kubectl apply failed for {', '.join(refs)}",
                details=result.stderr.strip(),
            )
        return refs

    # =========================================================================
    # Analysis
    # =========================================================================

    async def validate(
        self, manifest: Manifest, namespace: str, client_side: bool = False
    ) -> bool:
        """Validate with ``kubectl apply --dry-run=client|server``."""
        mode = "client" if client_side else "server"
        args = ["apply", f"--dry-run={mode}", "-f", "-"]
        if manifest_kind(manifest) != "Namespace":
            args.extend(["-n", namespace])

        result = await self._run_kubectl(args, input_data=serialize_manifests([manifest]))
        if not result.success:
            raise ClusterCommandError(
                f"Validation failed for {manifest_ref(manifest)}",
                details=result.stderr.strip() or result.stdout.strip(),
            )
        return True

    async def diff(self, manifest: Manifest, namespace: str) -> str | None:
        """Diff with ``kubectl diff``; None when the resource does not exist.

        ``kubectl diff`` exits with 1 when differences exist; any other
        failure is reported as "no diff".
        """
        if self.dry_run:
            return DEFAULT_CONSTANTS.DRY_RUN_DIFF_SENTINEL

        kind = manifest_kind(manifest)
        namespace_args = [] if kind == "Namespace" else ["-n", namespace]

        existing = await self._run_kubectl(
            ["get", kind, manifest_name(manifest), *namespace_args, "--ignore-not-found"]
        )
        if existing.success and not existing.stdout.strip():
            return None

        result = await self._run_kubectl(
            ["diff", "-f", "-", *namespace_args],
            input_data=serialize_manifests([manifest]),
        )
        if result.returncode in (0, 1):
            return result.stdout
        logger.debug(f"kubectl diff failed for {manifest_ref(manifest)}: {result.stderr.strip()}")
        return ""

    # =========================================================================
    # Read
    # =========================================================================

    async def get(self, kind: str, name: str, namespace: str) -> Manifest | None:
        """Fetch a resource as JSON; None when absent or on failure."""
        if self.dry_run:
            return None

        result = await self._run_kubectl(["get", kind, name, "-n", namespace, "-o", "json"])
        if not result.success or not result.stdout.strip():
            return None
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError:
            return None

    async def list(
        self, kind: str, namespace: str, label_selector: str | None = None
    ) -> list[Manifest]:
        """List resources as JSON."""
        if self.dry_run:
            return []

        args = ["get", kind, "-n", namespace, "-o", "json"]
        if label_selector:
            args.extend(["-l", label_selector])

        result = await self._run_kubectl(args)
        if not result.success:
            raise ClusterCommandError(
                f"kubectl get {kind} failed in namespace {namespace}",
                details=result.stderr.strip(),
            )
        try:
            payload = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise ClusterCommandError(
                f"kubectl get {kind} returned invalid JSON", details=str(e)
            ) from e
        return list(payload.get("items") or [])

    async def secret_exists(self, name: str, namespace: str) -> bool:
        """Check if a Secret exists."""
        if self.dry_run:
            return False
        result = await self._run_kubectl(["get", "secret", name, "-n", namespace])
        return result.success

    async def get_secret_data(self, name: str, namespace: str) -> dict[str, str] | None:
        """Fetch and base64-decode a Secret's data."""
        secret = await self.get("secret", name, namespace)
        if secret is None:
            return None

        decoded: dict[str, str] = {}
        for key, value in (secret.get("data") or {}).items():
            try:
                decoded[key] = base64.b64decode(value).decode("utf-8")
            except (ValueError, UnicodeDecodeError):
                logger.warning(f"Secret {namespace}/{name} key {key} is not valid UTF-8 base64")
        return decoded

    # =========================================================================
    # Delete
    # =========================================================================

    async def delete(self, kind: str, name: str, namespace: str) -> str:
        """Delete a resource with ``kubectl delete``."""
        ref = f"{kind}/{name}"
        if self.dry_run:
            logger.debug(f"Dry run enabled, skipping kubectl delete of {ref} in {namespace}")
            return f"{ref} (dry-run)"

        result = await self._run_kubectl(["delete", kind, name, "-n", namespace])
        if not result.success:
            raise ClusterCommandError(
                f"kubectl delete failed for {ref}", details=result.stderr.strip()
            )
        return ref
