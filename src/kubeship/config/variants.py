"""Function-or-literal configuration values.

Fields such as ``env``, ``network`` and secret/configmap payloads may be
written either as a static value or as a callable receiving the
HostContext. Both are normalized at load time into a tagged variant and
resolved through :func:`resolve`.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from kubeship.config.context import HostContext


@dataclass(frozen=True)
class LiteralValue:
    """A value written directly in the configuration."""

    value: Any


@dataclass(frozen=True)
class Resolver:
    """A callable computing the value from a HostContext."""

    fn: Callable[[Any], Any]


Variant: TypeAlias = LiteralValue | Resolver


def to_variant(value: Any) -> Variant | None:
    """Wrap a raw configuration value into a variant.

    ``None`` stays ``None`` so that "not configured" remains distinguishable
    from a configured falsy value such as ``False``.
    """
    if value is None or isinstance(value, LiteralValue | Resolver):
        return value
    if callable(value):
        return Resolver(value)
    return LiteralValue(value)


def resolve(variant: Variant | None, context: HostContext) -> Any:
    """Resolve a variant for one (namespace, app) context.

    Literal values are deep-copied so callers may mutate the result without
    touching the configuration.
    """
    if variant is None:
        return None
    if isinstance(variant, Resolver):
        return variant.fn(context)
    return copy.deepcopy(variant.value)
