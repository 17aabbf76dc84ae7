"""Tests for configuration discovery and loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from kubeship.config import KubeshipConfig, load_config, resolve_config_path
from kubeship.config.variants import Resolver
from kubeship.errors import ConfigurationError

YAML_CONFIG = """\
project: shop
namespaces:
  dev:
    domain: dev.shop.localtest.me
images:
  registry: ${REGISTRY:-ghcr.io/acme}
apps:
  api:
    env:
      TOKEN: {secret: api-secrets, key: token}
"""

PY_CONFIG = """\
from kubeship.config import define_config

config = define_config(
    project="shop",
    namespaces={"dev": {"domain": "dev.shop.localtest.me"}},
    images={"registry": "ghcr.io/acme"},
    apps={"api": {"network": lambda ctx: "api." + ctx["domain"]}},
)
"""


class TestResolveConfigPath:
    """Tests for resolve_config_path."""

    def test_exact_path_wins(self, tmp_path: Path) -> None:
        """A path that exists as given is used directly."""
        path = tmp_path / "kubeship.yaml"
        path.write_text(YAML_CONFIG)
        assert resolve_config_path(path) == path.resolve()

    def test_extensions_tried_in_order(self, tmp_path: Path) -> None:
        """.py is preferred over .yaml when both exist."""
        (tmp_path / "kubeship.config.yaml").write_text(YAML_CONFIG)
        (tmp_path / "kubeship.config.py").write_text(PY_CONFIG)
        resolved = resolve_config_path(tmp_path / "kubeship.config")
        assert resolved.name == "kubeship.config.py"

    def test_missing_lists_candidates(self, tmp_path: Path) -> None:
        """The error details list every path that was tried."""
        with pytest.raises(ConfigurationError) as excinfo:
            resolve_config_path(tmp_path / "nope")
        assert "nope.yml" in (excinfo.value.details or "")
        assert "nope.json" in (excinfo.value.details or "")


class TestLoadConfig:
    """Tests for load_config."""

    def test_yaml_with_env_substitution(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """${VAR:-default} placeholders are expanded before parsing."""
        monkeypatch.setenv("REGISTRY", "registry.example.com/shop")
        path = tmp_path / "kubeship.yaml"
        path.write_text(YAML_CONFIG)

        config = load_config(path)

        assert isinstance(config, KubeshipConfig)
        assert config.images.registry == "registry.example.com/shop"
        assert config.namespaces["dev"]["domain"] == "dev.shop.localtest.me"

    def test_missing_required_variable(self, tmp_path: Path) -> None:
        """A required placeholder without a value is a configuration error."""
        path = tmp_path / "kubeship.yaml"
        path.write_text("project: ${KUBESHIP_TEST_UNSET_VARIABLE}\n")
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(path)

    def test_required_variable_hint_in_details(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """${VAR:?hint} reports every unset variable with its hint."""
        monkeypatch.delenv("KUBESHIP_TEST_TOKEN", raising=False)
        path = tmp_path / "kubeship.yaml"
        path.write_text("project: ${KUBESHIP_TEST_TOKEN:?set the deploy token}\n")

        with pytest.raises(ConfigurationError) as excinfo:
            load_config(path)

        assert "KUBESHIP_TEST_TOKEN: set the deploy token" in (excinfo.value.details or "")

    def test_json_config(self, tmp_path: Path) -> None:
        """JSON files are accepted."""
        path = tmp_path / "kubeship.json"
        path.write_text(
            json.dumps(
                {
                    "project": "shop",
                    "namespaces": {"dev": {}},
                    "images": {"registry": "ghcr.io/acme"},
                }
            )
        )
        assert load_config(path).project == "shop"

    def test_python_config_keeps_callables(self, tmp_path: Path) -> None:
        """Python configs may use callables for dynamic values."""
        path = tmp_path / "kubeship.config.py"
        path.write_text(PY_CONFIG)

        config = load_config(path)

        assert isinstance(config.apps["api"].network, Resolver)

    def test_python_config_without_config_attribute(self, tmp_path: Path) -> None:
        """A module must expose ``config``."""
        path = tmp_path / "kubeship.config.py"
        path.write_text("settings = {}\n")
        with pytest.raises(ConfigurationError, match="does not define 'config'"):
            load_config(path)

    def test_dotenv_loaded_without_override(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A .env next to the config fills unset variables only."""
        monkeypatch.delenv("REGISTRY", raising=False)
        monkeypatch.setenv("KUBESHIP_TEST_PROJECT", "from-shell")
        (tmp_path / ".env").write_text(
            "REGISTRY=dotenv.example.com\nKUBESHIP_TEST_PROJECT=from-dotenv\n"
        )
        path = tmp_path / "kubeship.yaml"
        path.write_text(YAML_CONFIG.replace("project: shop", "project: ${KUBESHIP_TEST_PROJECT}"))

        config = load_config(path)

        assert config.project == "from-shell"
        assert config.images.registry == "dotenv.example.com"

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty file is rejected."""
        path = tmp_path / "kubeship.yaml"
        path.write_text("")
        with pytest.raises(ConfigurationError, match="empty"):
            load_config(path)

    def test_validation_errors_are_wrapped(self, tmp_path: Path) -> None:
        """Pydantic errors surface as ConfigurationError with details."""
        path = tmp_path / "kubeship.yaml"
        path.write_text("project: shop\nnamespaces: {}\n")
        with pytest.raises(ConfigurationError) as excinfo:
            load_config(path)
        assert "images" in (excinfo.value.details or "")
