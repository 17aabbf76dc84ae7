"""Configuration resolver facade."""

from __future__ import annotations

from kubeship.config.apps import AppsResolver
from kubeship.config.environment import EnvironmentProvider
from kubeship.config.images import ImagesResolver
from kubeship.config.models import KubeshipConfig
from kubeship.config.namespaces import NamespaceResolver
from kubeship.config.project import ProjectResolver
from kubeship.session import Session


class ConfigResolver:
    """Groups the project, namespace, image and app resolvers of one config.

    Attributes:
        config: The validated configuration
        project: Project naming
        namespaces: Namespace selection and host contexts
        images: Image references
        apps: App selection and per-namespace resolution
    """

    def __init__(
        self,
        config: KubeshipConfig,
        environment: EnvironmentProvider,
        session: Session | None = None,
    ) -> None:
        self.config = config
        self.environment = environment
        self.project = ProjectResolver(config.project)
        self.namespaces = NamespaceResolver(config, environment)
        self.images = ImagesResolver(config.images, self.project, environment, session)
        self.apps = AppsResolver(config, self.project)
