"""Value objects exchanged by the planner, deployer and builder."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, TypeAlias

from kubeship.config.models import ServicePort
from kubeship.config.refs import EnvSpec
from kubeship.manifests.types import ResolvedNetwork

ChangeAction: TypeAlias = Literal["create", "update", "unchanged", "delete"]


# =============================================================================
# Planning
# =============================================================================


@dataclass(frozen=True)
class PlanFilter:
    """Narrows a plan to one namespace, one app, or apps with changed files.

    ``changed_files`` of None means "no change filter"; an empty list
    selects nothing.
    """

    namespace: str | None = None
    app: str | None = None
    changed_files: list[str] | None = None


@dataclass(frozen=True)
class PlanEntry:
    """Everything needed to deploy one app to one namespace."""

    namespace: str
    app: str
    image: str
    host: str | None = None
    env: EnvSpec = field(default_factory=dict)
    secrets: dict[str, dict[str, str]] = field(default_factory=dict)
    config_maps: dict[str, dict[str, str]] = field(default_factory=dict)
    network: ResolvedNetwork | None = None
    pod_annotations: dict[str, str] | None = None
    volumes: list[dict[str, Any]] | None = None
    volume_mounts: list[dict[str, Any]] | None = None
    args: list[str] | None = None
    ports: list[ServicePort] | None = None


@dataclass
class PlanResult:
    entries: list[PlanEntry] = field(default_factory=list)


# =============================================================================
# Change analysis
# =============================================================================


@dataclass
class ManifestChange:
    """Outcome of validating and diffing one manifest.

    ``validation_error`` is set only when ``validated`` is False (and the
    action is then ``unchanged``); ``diff`` is set only for updates.
    """

    kind: str
    name: str
    namespace: str
    action: ChangeAction
    validated: bool
    validation_error: str | None = None
    diff: str | None = None

    @property
    def ref(self) -> str:
        return f"{self.kind}/{self.name}"


@dataclass
class AppResourceChanges:
    app: str
    namespace: str
    image: str
    host: str | None = None
    changes: list[ManifestChange] = field(default_factory=list)


@dataclass
class GlobalChanges:
    """Changes to resources shared between apps."""

    namespaces: list[ManifestChange] = field(default_factory=list)
    secrets: list[ManifestChange] = field(default_factory=list)
    config_maps: list[ManifestChange] = field(default_factory=list)

    def all(self) -> list[ManifestChange]:
        return [*self.namespaces, *self.secrets, *self.config_maps]


@dataclass
class PlanWithChangesResult:
    """Read-only preview of what ``deploy`` would do."""

    global_changes: GlobalChanges = field(default_factory=GlobalChanges)
    apps: list[AppResourceChanges] = field(default_factory=list)
    orphaned: list[ManifestChange] = field(default_factory=list)

    def _all_changes(self) -> list[ManifestChange]:
        changes = self.global_changes.all()
        for app in self.apps:
            changes.extend(app.changes)
        return changes

    @property
    def has_errors(self) -> bool:
        """True if any global or app resource failed validation."""
        return any(not change.validated for change in self._all_changes())

    @property
    def has_changes(self) -> bool:
        """True if deploying would create, update or delete anything."""
        if self.orphaned:
            return True
        return any(
            change.action in ("create", "update") for change in self._all_changes()
        )


# =============================================================================
# Deploy and build
# =============================================================================


@dataclass
class DeployedEntry:
    """A plan entry and the ``Kind/name`` refs applied for it."""

    entry: PlanEntry
    applied_manifests: list[str] = field(default_factory=list)

    @property
    def namespace(self) -> str:
        return self.entry.namespace

    @property
    def app(self) -> str:
        return self.entry.app


@dataclass
class DeployResult:
    entries: list[DeployedEntry] = field(default_factory=list)
    deleted_manifests: list[str] | None = None


@dataclass(frozen=True)
class BuiltImage:
    app: str
    image: str
    pushed: bool = False


@dataclass
class BuildResult:
    images: list[BuiltImage] = field(default_factory=list)
