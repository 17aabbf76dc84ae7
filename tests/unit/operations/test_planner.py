"""Tests for the planner."""

from __future__ import annotations

import pytest

from kubeship.config.refs import SecretRef
from kubeship.errors import ConfigurationError
from kubeship.operations import KubeShip, PlanFilter


def _pairs(ship: KubeShip, plan_filter: PlanFilter | None = None) -> list[tuple[str, str]]:
    return [(entry.namespace, entry.app) for entry in ship.plan(plan_filter).entries]


class TestPlanner:
    """Tests for Planner.plan."""

    def test_namespace_then_app_order(self, ship: KubeShip) -> None:
        """Entries follow namespace order, then app order, honoring exclusions."""
        assert _pairs(ship) == [("dev", "api"), ("prod", "api"), ("prod", "worker")]

    def test_filters(self, ship: KubeShip) -> None:
        """Namespace and app filters narrow the plan."""
        assert _pairs(ship, PlanFilter(namespace="prod")) == [("prod", "api"), ("prod", "worker")]
        assert _pairs(ship, PlanFilter(app="worker")) == [("prod", "worker")]
        assert _pairs(ship, PlanFilter(namespace="dev", app="worker")) == []

    def test_unknown_filters(self, ship: KubeShip) -> None:
        """Unknown names fail before anything is planned."""
        with pytest.raises(ConfigurationError, match="Unknown namespace: qa"):
            ship.plan(PlanFilter(namespace="qa"))
        with pytest.raises(ConfigurationError, match="Unknown app: web"):
            ship.plan(PlanFilter(app="web"))

    def test_changed_files(self, ship: KubeShip) -> None:
        """Changed files select apps by build context; an empty list selects none."""
        assert _pairs(ship, PlanFilter(changed_files=["services/api/app.py"])) == [
            ("dev", "api"),
            ("prod", "api"),
        ]
        assert _pairs(ship, PlanFilter(changed_files=[])) == []

    def test_app_filter_wins_over_changed_files(self, ship: KubeShip) -> None:
        """An explicit app ignores the changed-files filter."""
        assert _pairs(ship, PlanFilter(app="worker", changed_files=[])) == [("prod", "worker")]

    def test_entry_contents(self, ship: KubeShip) -> None:
        """Entries carry the resolved image, host, env and payloads."""
        dev_api, prod_api, worker = ship.plan().entries

        assert dev_api.image == "ghcr.io/acme/api:0123456789ab"
        assert dev_api.host == "api.dev.demo.localtest.me"
        assert dev_api.env["TOKEN"] == SecretRef("token-secrets", "PROJECT")  # type: ignore[index]
        assert dev_api.env["NAMESPACE"] == "dev"  # type: ignore[index]
        assert dev_api.secrets == {"token-secrets": {"PROJECT": "demo"}}
        assert dev_api.config_maps == {"settings": {"LOG_LEVEL": "info"}}
        assert dev_api.network is not None and dev_api.network.ingress is not None
        assert dev_api.network.ingress.tls is None

        assert prod_api.host == "api.demo.example.com"
        assert prod_api.network is not None and prod_api.network.ingress is not None
        assert prod_api.network.ingress.tls is not None

        assert worker.image == "ghcr.io/acme/worker:1.0.0"
        assert worker.host is None
        assert worker.network is None
        assert worker.secrets == {"token-secrets": {"PROJECT": "demo"}}
        assert worker.config_maps == {}

    def test_plans_are_fresh(self, ship: KubeShip) -> None:
        """Each call resolves the configuration again."""
        first = ship.plan().entries[0]
        second = ship.plan().entries[0]
        assert first == second
        assert first.secrets is not second.secrets


class TestExpectedApps:
    """Tests for Planner.expected_apps."""

    def test_all_eligible_apps(self, ship: KubeShip) -> None:
        """Eligible apps are grouped per namespace, honoring exclusions."""
        assert ship.planner.expected_apps() == {"dev": {"api"}, "prod": {"api", "worker"}}

    def test_changed_files_do_not_narrow(self, ship: KubeShip) -> None:
        """Apps without changes still own their resources."""
        assert ship.planner.expected_apps(PlanFilter(namespace="prod", changed_files=[])) == {
            "prod": {"api", "worker"}
        }

    def test_app_filter_narrows(self, ship: KubeShip) -> None:
        """The app filter limits expectations to that app."""
        assert ship.planner.expected_apps(PlanFilter(app="worker")) == {
            "dev": set(),
            "prod": {"worker"},
        }
