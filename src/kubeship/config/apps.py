"""Per-application resolution: selection, eligibility, env, secrets, network."""

from __future__ import annotations

import posixpath
from collections.abc import Mapping
from typing import Any, TypeAlias

from kubeship.config.context import HostContext
from kubeship.config.models import AppDefinition, DeployFilter, KubeshipConfig
from kubeship.config.network import (
    create_auto_https,
    create_default_network,
    extract_host_from_network,
    normalize_certificate,
    normalize_ingress,
    normalize_ingress_route,
)
from kubeship.config.project import ProjectResolver
from kubeship.config.refs import (
    EnvSpec,
    normalize_env,
    referenced_config_maps,
    referenced_secrets,
)
from kubeship.config.variants import LiteralValue, Resolver, resolve
from kubeship.constants import DEFAULT_CONSTANTS
from kubeship.errors import ConfigurationError
from kubeship.manifests.types import ResolvedNetwork

AppEntry: TypeAlias = tuple[str, AppDefinition]


def _normalize_path(path: str) -> str:
    normalized = posixpath.normpath(path.replace("\\", "/"))
    return normalized[2:] if normalized.startswith("./") else normalized


def _contains(directory: str, path: str) -> bool:
    if directory == ".":
        return True
    return path == directory or path.startswith(f"{directory}/")


class AppsResolver:
    """Resolves app definitions against a namespace context."""

    def __init__(self, config: KubeshipConfig, project: ProjectResolver) -> None:
        self._config = config
        self._project = project

    # =========================================================================
    # Selection
    # =========================================================================

    def select(self, target: str | None = None) -> list[AppEntry]:
        """Apps to operate on, in declaration order.

        Raises:
            ConfigurationError: If ``target`` is not a configured app
        """
        if target:
            if target not in self._config.apps:
                raise ConfigurationError(f"Unknown app: {target}")
            return [(target, self._config.apps[target])]
        return list(self._config.apps.items())

    def select_by_changed_files(self, changed_files: list[str]) -> list[AppEntry]:
        """Apps whose build context contains at least one changed file.

        Paths are compared after normalization; apps without a build context
        never match.
        """
        paths = [_normalize_path(path) for path in changed_files]
        selected: list[AppEntry] = []
        for name, app in self._config.apps.items():
            context = app.build_context
            if context is None:
                continue
            directory = _normalize_path(context)
            if any(_contains(directory, path) for path in paths):
                selected.append((name, app))
        return selected

    def should_deploy(self, app: AppDefinition, namespace: str) -> bool:
        """Whether ``app`` is deployed to ``namespace``.

        Rules:
        - unset or ``"all"``: every namespace
        - list: only the listed namespaces
        - filter with ``include``: included and not excluded namespaces
        - filter with only ``exclude``: every namespace but the excluded ones

        Example:
            >>> resolver.should_deploy(AppDefinition(deploy={"exclude": ["dev"]}), "dev")
            False
        """
        deploy = app.deploy
        if deploy is None or deploy == "all":
            return True
        if isinstance(deploy, list):
            return namespace in deploy
        if isinstance(deploy, DeployFilter):
            if deploy.include:
                return namespace in deploy.include and namespace not in deploy.exclude
            if deploy.exclude:
                return namespace not in deploy.exclude
        return True

    # =========================================================================
    # Env, secrets, configmaps
    # =========================================================================

    def resolve_env(self, app: AppDefinition, context: HostContext) -> EnvSpec:
        """Resolve the app environment for a namespace."""
        return normalize_env(resolve(app.env, context))

    def _resolve_payloads(
        self,
        names: list[str],
        definitions: Mapping[str, LiteralValue | Resolver],
        context: HostContext,
    ) -> dict[str, dict[str, str]]:
        payloads: dict[str, dict[str, str]] = {}
        for name in names:
            definition = definitions.get(name)
            if definition is None:
                continue
            data = resolve(definition, context) or {}
            payloads[name] = {key: "" if value is None else str(value) for key, value in data.items()}
        return payloads

    def resolve_secrets(
        self,
        app: AppDefinition,
        context: HostContext,
        env: EnvSpec | None = None,
    ) -> dict[str, dict[str, str]]:
        """Payloads of the configured secrets the app env refers to.

        Secrets referenced but not defined in the configuration are assumed
        to be managed outside kubeship and are skipped.
        """
        if env is None:
            env = self.resolve_env(app, context)
        return self._resolve_payloads(
            referenced_secrets(env), self._config.secrets, context
        )

    def resolve_config_maps(
        self,
        app: AppDefinition,
        context: HostContext,
        env: EnvSpec | None = None,
    ) -> dict[str, dict[str, str]]:
        """Payloads of the configured configmaps the app env refers to."""
        if env is None:
            env = self.resolve_env(app, context)
        return self._resolve_payloads(
            referenced_config_maps(env), self._config.config_maps, context
        )

    # =========================================================================
    # Network
    # =========================================================================

    def resolve_network(
        self,
        app_name: str,
        app: AppDefinition,
        context: HostContext,
        host: str | None = None,
    ) -> tuple[ResolvedNetwork | None, str | None]:
        """Resolve network resources and the effective host.

        A network given as a domain string becomes the app host.

        Returns:
            Tuple of (network config or None, host or None)

        Raises:
            ConfigurationError: If network helpers are enabled without a host,
                or a certificate lacks an issuerRef
        """
        resolved = resolve(app.network, context)
        if resolved is None:
            return (create_default_network(host) if host else None), host

        service_name = self._project.service_name(app_name)

        if isinstance(resolved, str):
            network = create_auto_https(
                resolved,
                service_name,
                issuer=context.env("CERT_ISSUER", DEFAULT_CONSTANTS.DEFAULT_CERT_ISSUER),
                class_name=context.env(
                    "INGRESS_CLASS", DEFAULT_CONSTANTS.DEFAULT_INGRESS_CLASS
                ),
            )
            return network, resolved

        if isinstance(resolved, bool):
            if not resolved:
                return None, host
            if not host:
                raise ConfigurationError(
                    f'App "{app_name}" enabled network helpers, but no host is configured.'
                )
            return create_default_network(host), host

        if not isinstance(resolved, Mapping):
            return None, host

        return self._build_network(app_name, resolved, host, service_name), host

    def _build_network(
        self,
        app_name: str,
        options: Mapping[str, Any],
        host: str | None,
        service_name: str,
    ) -> ResolvedNetwork | None:
        network = ResolvedNetwork()
        effective_host = host or extract_host_from_network(options)

        ingress = options.get("ingress")
        if ingress is None:
            if effective_host:
                network.ingress = normalize_ingress(effective_host)
        elif ingress:
            if not effective_host:
                raise ConfigurationError(
                    f'App "{app_name}" ingress requires a host to be configured '
                    "or inferrable from network config."
                )
            network.ingress = normalize_ingress(
                effective_host, ingress if isinstance(ingress, Mapping) else None
            )

        ingress_route = options.get("ingressRoute")
        if ingress_route is not None and ingress_route is not False:
            network.ingress_route = normalize_ingress_route(
                effective_host,
                service_name,
                ingress_route if isinstance(ingress_route, Mapping) else {},
            )

        certificate = options.get("certificate")
        if certificate is not None and certificate is not False:
            if not isinstance(certificate, Mapping) or not certificate.get("issuerRef"):
                raise ConfigurationError(
                    f'App "{app_name}" certificate configuration requires issuerRef.'
                )
            network.certificate = normalize_certificate(
                effective_host, service_name, certificate
            )

        return None if network.is_empty else network
