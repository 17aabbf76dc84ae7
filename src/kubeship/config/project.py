"""Project-level naming."""

from __future__ import annotations


class ProjectResolver:
    """Derives resource names from the project name."""

    def __init__(self, name: str) -> None:
        self.name = name

    def service_name(self, app_name: str) -> str:
        """Kubernetes Service name for an app.

        Apps already prefixed with the project name keep their name.

        Example:
            >>> ProjectResolver("shop").service_name("api")
            'shop-api'
            >>> ProjectResolver("shop").service_name("shop-web")
            'shop-web'
        """
        if app_name.startswith(f"{self.name}-"):
            return app_name
        return f"{self.name}-{app_name}"
