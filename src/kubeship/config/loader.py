"""Configuration file discovery and loading.

Supports Python files exposing a ``config`` attribute and YAML/JSON files
with ``${VAR}`` environment substitution. A ``.env`` file next to the
configuration is loaded first without overriding existing variables.
"""

from __future__ import annotations

import importlib.util
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from loguru import logger
from pydantic import ValidationError

from kubeship.config.models import KubeshipConfig
from kubeship.constants import DEFAULT_CONSTANTS
from kubeship.errors import ConfigurationError


def resolve_config_path(
    raw: str | Path,
    extensions: tuple[str, ...] = DEFAULT_CONSTANTS.CONFIG_EXTENSION_ORDER,
) -> Path:
    """Find the configuration file for a user-supplied path.

    The path is tried as given first, then with each known extension
    appended, in order.

    Args:
        raw: Path from the command line (with or without extension)
        extensions: Suffixes to try, in order

    Returns:
        Absolute path of the first existing candidate

    Raises:
        ConfigurationError: If no candidate exists
    """
    candidates = [Path(f"{raw}{ext}") for ext in extensions]
    for candidate in candidates:
        if candidate.is_file():
            return candidate.resolve()

    tried = "\n".join(f"  - {candidate}" for candidate in candidates)
    raise ConfigurationError(
        f"Configuration file not found: {raw}",
        details=f"Tried:\n{tried}",
    )


# ${NAME}, ${NAME:-fallback} or ${NAME:?hint}
_ENV_REFERENCE = re.compile(
    r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?:(?P<op>:[-?])(?P<arg>[^}]*))?\}"
)


def expand_env_references(text: str) -> str:
    """Replace ``${NAME}`` references with values from the environment.

    ``${NAME:-fallback}`` uses ``fallback`` when ``NAME`` is unset.
    ``${NAME}`` and ``${NAME:?hint}`` require the variable.

    Raises:
        ConfigurationError: If a required variable is unset
    """
    missing: list[str] = []

    def expand(match: re.Match[str]) -> str:
        name, op, arg = match.group("name", "op", "arg")
        value = os.environ.get(name)
        if value is not None:
            return value
        if op == ":-":
            return arg
        missing.append(f"{name}: {arg}" if op == ":?" and arg else name)
        return match.group(0)

    expanded = _ENV_REFERENCE.sub(expand, text)
    if missing:
        listed = "\n".join(f"  - {entry}" for entry in missing)
        raise ConfigurationError(
            "Invalid configuration", details=f"Unset environment variables:\n{listed}"
        )
    return expanded


def _load_python_config(path: Path) -> Any:
    module_name = "kubeship_user_config_" + path.stem.replace(".", "_")
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ConfigurationError(f"Cannot import configuration module: {path}")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"Error executing configuration module: {path}", details=str(e)
        ) from e

    if not hasattr(module, "config"):
        raise ConfigurationError(
            f"Configuration module {path} does not define 'config'"
        )
    return module.config


def _load_text_config(path: Path) -> Any:
    content = expand_env_references(path.read_text(encoding="utf-8"))

    try:
        loaded = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigurationError("Error parsing configuration", details=str(e)) from e

    if not loaded:
        raise ConfigurationError(f"Configuration file is empty: {path}")
    return loaded


def load_config(path: Path) -> KubeshipConfig:
    """Load and validate a configuration file.

    Args:
        path: Existing configuration file (see :func:`resolve_config_path`)

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If the file cannot be read or fails validation
    """
    env_file = path.parent / ".env"
    if env_file.is_file():
        load_dotenv(env_file, override=False)
        logger.debug(f"Loaded environment from {env_file}")

    logger.info(f"Loading configuration from {path}")
    if path.suffix == ".py":
        loaded = _load_python_config(path)
    else:
        loaded = _load_text_config(path)

    if isinstance(loaded, KubeshipConfig):
        config = loaded
    elif isinstance(loaded, Mapping):
        try:
            config = KubeshipConfig.model_validate(dict(loaded))
        except ValidationError as e:
            raise ConfigurationError("Invalid configuration", details=str(e)) from e
    else:
        raise ConfigurationError(
            f"Configuration in {path} must be a mapping, got {type(loaded).__name__}"
        )

    logger.debug(
        f"Configuration for project '{config.project}': "
        f"{len(config.namespaces)} namespace(s), {len(config.apps)} app(s)"
    )
    return config
