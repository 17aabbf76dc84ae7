"""CLI command implementations."""

from .build import build
from .deploy import deploy
from .plan import plan

__all__ = ["plan", "build", "deploy"]
