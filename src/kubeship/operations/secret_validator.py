"""Secret-value validation run before secrets are applied.

A secret value is *flagged* when it is blank or looks like a placeholder
(an unexpanded ``process.env``/``$VAR`` reference, or one of the tokens
``change-me``, ``replace-me``, ``todo``, ``fixme``). Flagged values are only
accepted when the cluster already holds the secret with those keys; the
cluster copy is then trusted.
"""

from __future__ import annotations

from loguru import logger

from kubeship.constants import DEFAULT_CONSTANTS, KubeshipConstants
from kubeship.errors import SecretValidationError
from kubeship.infra.k8s.controller import ClusterController


def is_placeholder(value: str, constants: KubeshipConstants = DEFAULT_CONSTANTS) -> bool:
    """Whether ``value`` looks like a reference or placeholder, not a real secret."""
    return (
        "process.env" in value
        or "$" in value
        or constants.SUSPECT_SECRET_PATTERN.search(value) is not None
    )


def flagged_keys(
    data: dict[str, str], constants: KubeshipConstants = DEFAULT_CONSTANTS
) -> list[str]:
    """Keys whose values are blank or placeholders, in payload order."""
    return [
        key
        for key, value in data.items()
        if not value or not value.strip() or is_placeholder(value, constants)
    ]


class SecretValidator:
    """Checks secret payloads against the cluster before they are applied."""

    def __init__(
        self,
        cluster: ClusterController,
        constants: KubeshipConstants = DEFAULT_CONSTANTS,
    ) -> None:
        self._cluster = cluster
        self._constants = constants

    async def validate(
        self, secret_name: str, data: dict[str, str], namespace: str, app: str
    ) -> None:
        """Validate one secret payload.

        Payloads where every value is concrete pass without a cluster lookup.

        Raises:
            SecretValidationError: If flagged keys are not backed by an
                existing cluster secret
        """
        flagged = flagged_keys(data, self._constants)
        if not flagged:
            return

        logger.warning(
            f'Secret "{secret_name}" for app "{app}" in {namespace} contains '
            f"placeholder or missing values: {', '.join(flagged)}"
        )

        existing = await self._cluster.get_secret_data(secret_name, namespace)
        if existing is None:
            raise SecretValidationError(
                self._missing_message(secret_name, app, namespace, flagged, data)
            )

        missing = [key for key in flagged if not existing.get(key)]
        if missing:
            raise SecretValidationError(
                self._incomplete_message(secret_name, app, namespace, missing)
            )

        logger.warning(
            f'Trusting existing cluster secret "{secret_name}" in {namespace} '
            f"for keys: {', '.join(flagged)}"
        )

    @staticmethod
    def _missing_message(
        secret_name: str,
        app: str,
        namespace: str,
        keys: list[str],
        data: dict[str, str],
    ) -> str:
        lines = "\n  ".join(f'- {key} = "{data[key]}"' for key in keys)
        return (
            f'Secret "{secret_name}" for app "{app}" contains missing or placeholder values.\n\n'
            f"Missing/placeholder keys:\n  {lines}\n\n"
            f'Secret does not exist in cluster (namespace: "{namespace}").\n\n'
            "Please provide actual values by:\n"
            "  1. Setting environment variables before deployment\n"
            "  2. Updating your kubeship configuration with real values\n"
            "  3. Creating the secret manually in the cluster first"
        )

    @staticmethod
    def _incomplete_message(
        secret_name: str, app: str, namespace: str, keys: list[str]
    ) -> str:
        lines = "\n  ".join(f"- {key}" for key in keys)
        return (
            f'Secret "{secret_name}" for app "{app}" is incomplete.\n\n'
            f"The following keys are missing or have placeholder values:\n  {lines}\n\n"
            "These keys are not set in the environment and not found in the "
            "existing cluster secret.\n\n"
            "Please either:\n"
            "  1. Set these values in the environment before deployment\n"
            f'  2. Ensure they exist in the cluster secret "{secret_name}" '
            f'in namespace "{namespace}"\n'
            "  3. Update your kubeship configuration to provide actual values"
        )
