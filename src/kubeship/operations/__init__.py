"""Planning, deployment and build operations."""

from .builder import Builder
from .deployer import Deployer
from .orchestrator import KubeShip
from .orphans import OrphanDetector
from .planner import Planner
from .secret_validator import SecretValidator
from .types import (
    AppResourceChanges,
    BuildResult,
    BuiltImage,
    DeployedEntry,
    DeployResult,
    GlobalChanges,
    ManifestChange,
    PlanEntry,
    PlanFilter,
    PlanResult,
    PlanWithChangesResult,
)

__all__ = [
    # Components
    "KubeShip",
    "Planner",
    "Deployer",
    "Builder",
    "SecretValidator",
    "OrphanDetector",
    # Value objects
    "PlanFilter",
    "PlanEntry",
    "PlanResult",
    "ManifestChange",
    "AppResourceChanges",
    "GlobalChanges",
    "PlanWithChangesResult",
    "DeployedEntry",
    "DeployResult",
    "BuiltImage",
    "BuildResult",
]
