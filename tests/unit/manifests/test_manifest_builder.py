"""Tests for manifest rendering."""

from __future__ import annotations

import base64

import pytest

from kubeship.config import ServicePort
from kubeship.config.network import create_auto_https, normalize_certificate, normalize_ingress_route
from kubeship.config.refs import ConfigMapRef, SecretRef
from kubeship.errors import ConfigurationError
from kubeship.manifests import (
    ManifestBuilder,
    ManifestContext,
    ResolvedNetwork,
    build_config_map,
    build_namespace,
    build_secret,
    manifest_ref,
)
from kubeship.manifests.types import ResolvedIngress
from kubeship.manifests.workloads import replica_count


@pytest.fixture
def builder() -> ManifestBuilder:
    """Builder for the shop project."""
    return ManifestBuilder("shop")


def _context(**overrides: object) -> ManifestContext:
    fields: dict[str, object] = {
        "namespace": "prod",
        "service_name": "shop-api",
        "image": "ghcr.io/acme/api:abc",
        "env": {"PORT": "8080", "DB_URL": SecretRef("db", "url")},
    }
    fields.update(overrides)
    return ManifestContext(**fields)  # type: ignore[arg-type]


class TestCoreManifests:
    """Tests for namespace, secret and configmap manifests."""

    def test_namespace_labels(self) -> None:
        """Labels are attached only when given."""
        assert "labels" not in build_namespace("dev")["metadata"]
        assert build_namespace("dev", {"a": "b"})["metadata"]["labels"] == {"a": "b"}

    def test_secret_is_base64_encoded(self) -> None:
        """Secret values are base64-encoded UTF-8."""
        secret = build_secret("db", "prod", {"PASSWORD": "s3cr3t", "EMPTY": ""})
        assert secret["type"] == "Opaque"
        assert base64.b64decode(secret["data"]["PASSWORD"]).decode() == "s3cr3t"
        assert secret["data"]["EMPTY"] == ""

    def test_config_map_data_copied(self) -> None:
        """ConfigMap data is stored verbatim."""
        data = {"LOG_LEVEL": "info"}
        config_map = build_config_map("settings", "prod", data)
        assert config_map["data"] == data
        assert config_map["data"] is not data


class TestManifestBuilder:
    """Tests for app manifests."""

    def test_labels_and_selectors(self, builder: ManifestBuilder) -> None:
        """Objects carry management labels; selectors only the app labels."""
        manifests = builder.build("api", _context())
        deployment = manifests.deployment

        assert deployment["metadata"]["labels"] == {
            "app.kubernetes.io/name": "api",
            "app.kubernetes.io/part-of": "shop",
            "kubeship/app": "api",
            "kubeship/managed": "true",
        }
        assert deployment["spec"]["selector"]["matchLabels"] == {
            "app.kubernetes.io/name": "api",
            "app.kubernetes.io/part-of": "shop",
        }
        assert manifests.service["spec"]["selector"] == deployment["spec"]["selector"]["matchLabels"]
        assert deployment["spec"]["template"]["metadata"]["labels"]["app.kubernetes.io/component"] == "api"

    def test_container(self, builder: ManifestBuilder) -> None:
        """The container uses the image, PORT and env references."""
        container = builder.build("api", _context()).deployment["spec"]["template"]["spec"][
            "containers"
        ][0]

        assert container["image"] == "ghcr.io/acme/api:abc"
        assert container["ports"] == [{"containerPort": 8080, "name": "http", "protocol": "TCP"}]
        assert container["env"] == [
            {"name": "PORT", "value": "8080"},
            {"name": "DB_URL", "valueFrom": {"secretKeyRef": {"name": "db", "key": "url"}}},
        ]
        assert "envFrom" not in container
        assert "args" not in container

    def test_env_from_whole_configmap(self, builder: ManifestBuilder) -> None:
        """A whole-object reference becomes envFrom."""
        container = builder.build("api", _context(env=ConfigMapRef("settings"))).deployment[
            "spec"
        ]["template"]["spec"]["containers"][0]
        assert container["env"] == []
        assert container["envFrom"] == [{"configMapRef": {"name": "settings"}}]

    def test_explicit_ports(self, builder: ManifestBuilder) -> None:
        """Declared ports drive both the container and the Service."""
        ports = [ServicePort(name="grpc", port=9000, target_port=9001)]
        manifests = builder.build("api", _context(ports=ports))
        container = manifests.deployment["spec"]["template"]["spec"]["containers"][0]

        assert container["ports"] == [{"containerPort": 9001, "name": "grpc", "protocol": "TCP"}]
        assert manifests.service["spec"]["ports"] == [
            {"name": "grpc", "port": 9000, "targetPort": 9001, "protocol": "TCP"}
        ]

    def test_without_network(self, builder: ManifestBuilder) -> None:
        """Only the Deployment and Service are rendered."""
        manifests = builder.build("api", _context())
        assert [manifest_ref(m) for m in manifests.present()] == [
            "Deployment/shop-api",
            "Service/shop-api",
        ]

    def test_full_network(self, builder: ManifestBuilder) -> None:
        """Ingress, IngressRoute and Certificate are rendered in order."""
        host = "api.shop.example.com"
        network = create_auto_https(host, "shop-api", issuer="letsencrypt-prod")
        network.ingress_route = normalize_ingress_route(host, "shop-api", {})
        network.certificate = normalize_certificate(
            host, "shop-api", {"issuerRef": {"name": "letsencrypt-prod", "kind": "ClusterIssuer"}}
        )

        manifests = builder.build("api", _context(host=host, network=network))

        assert [manifest_ref(m) for m in manifests.present()] == [
            "Deployment/shop-api",
            "Service/shop-api",
            "Ingress/shop-api-ingress",
            "IngressRoute/shop-api-ingressroute",
            "Certificate/shop-api-tls",
        ]
        assert manifests.ingress is not None
        assert manifests.ingress["spec"]["rules"][0]["host"] == host
        assert manifests.ingress["spec"]["tls"] == [{"secretName": "shop-api-tls", "hosts": [host]}]
        assert manifests.ingress_route is not None
        assert manifests.ingress_route["spec"]["routes"][0] == {
            "kind": "Rule",
            "match": f"Host(`{host}`)",
            "services": [{"kind": "Service", "name": "shop-api", "port": 80}],
        }
        assert manifests.certificate is not None
        assert manifests.certificate["spec"]["commonName"] == host

    def test_ingress_requires_host(self, builder: ManifestBuilder) -> None:
        """An ingress without a host cannot be rendered."""
        network = ResolvedNetwork(ingress=ResolvedIngress())
        with pytest.raises(ConfigurationError, match="requires a host"):
            builder.build("api", _context(network=network))


class TestReplicaCount:
    """Tests for replica heuristics."""

    @pytest.mark.parametrize(
        ("app", "namespace", "expected"),
        [
            ("api", "dev", 1),
            ("api", "prod", 3),
            ("api", "production", 3),
            ("grafana", "prod", 1),
            ("app-postgres", "prod", 1),
        ],
    )
    def test_replicas(self, app: str, namespace: str, expected: int) -> None:
        """Stateful apps get one replica; prod namespaces three."""
        assert replica_count(app, namespace) == expected
