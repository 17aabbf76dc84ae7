"""Kubernetes manifest builders.

Manifests are plain dicts ready to be serialized as JSON for kubectl.
"""

from .builder import ManifestBuilder
from .core import build_config_map, build_namespace, build_secret
from .types import Manifest, ManifestContext, ManifestSet, ResolvedNetwork
from .utils import manifest_kind, manifest_name, manifest_ref

__all__ = [
    "ManifestBuilder",
    "ManifestContext",
    "ManifestSet",
    "Manifest",
    "ResolvedNetwork",
    "build_namespace",
    "build_secret",
    "build_config_map",
    "manifest_kind",
    "manifest_name",
    "manifest_ref",
]
