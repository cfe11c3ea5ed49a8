"""
Per-token event log provisioning.
"""

from collections.abc import Callable, Iterable
from typing import Any

from tracker.core.exceptions import ResourceProvisioningException
from tracker.core.logging import get_logger

logger = get_logger(__name__)

ResourceFactory = Callable[..., Any]

RESOURCE_PREFIX = "event-"


def resource_name(token: str) -> str:
    return RESOURCE_PREFIX + token


def _release(resources: dict[str, Any]) -> None:
    for token, resource in resources.items():
        try:
            resource.close()
        except Exception as e:
            logger.error(
                "Failed to release resource after provisioning error",
                resource=resource_name(token),
                error=str(e),
            )


def provision_resources(
    tokens: Iterable[str],
    factory: ResourceFactory,
    *,
    directory: str,
    rotation_min: int,
    server_name: str = "",
    max_backups: int = 0,
) -> dict[str, Any]:
    """
    Create one output resource per token.

    Tokens are handled in sorted order. The first factory failure stops
    provisioning; resources created up to that point are closed before the
    error is raised. Nothing is retried.

    Args:
        tokens: Authorized tokens
        factory: Called as ``factory(name, directory, rotation_min,
            server_name=..., max_backups=...)``
        directory: Directory shared by all resources
        rotation_min: Rotation interval in minutes

    Returns:
        dict: token -> resource, one entry per token

    Raises:
        ResourceProvisioningException: the factory failed for a token
    """
    resources: dict[str, Any] = {}
    for token in sorted(tokens):
        name = resource_name(token)
        try:
            resources[token] = factory(
                name,
                directory,
                rotation_min,
                server_name=server_name,
                max_backups=max_backups,
            )
        except Exception as e:
            logger.error(
                "Resource provisioning failed",
                resource=name,
                created=len(resources),
                error=str(e),
            )
            _release(resources)
            raise ResourceProvisioningException(name, str(e)) from e

    logger.info(
        "Event resources provisioned",
        count=len(resources),
        directory=directory,
        rotation_min=rotation_min,
    )
    return resources
