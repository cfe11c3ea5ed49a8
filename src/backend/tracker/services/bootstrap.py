"""
Process bootstrap.

Builds the AppConfig composition root from settings:
- server identity and bind address
- process logger
- optional geo resolver
- authorized tokens and one event log per token
- shutdown registry for everything that holds a file or a thread
"""

import socket
import sys
from collections.abc import Callable
from dataclasses import dataclass, field

from tracker.core.config import Settings, get_settings
from tracker.core.exceptions import GeoResolverException, LoggingInitException
from tracker.core.lifecycle import Closable, LifecycleRegistry
from tracker.core.logging import get_logger, setup_logging
from tracker.events.consumer import Consumer, MultipleAsyncLogger
from tracker.events.writer import create_rotating_writer
from tracker.geo.resolver import MaxMindResolver, create_resolver
from tracker.services.provisioner import ResourceFactory, provision_resources
from tracker.services.token_table import TokenTable, build_token_table

logger = get_logger(__name__)

UNNAMED_SERVER = "unnamed-server"


@dataclass
class AppConfig:
    """
    Everything request handling needs from startup.

    Built once by ``init_app_config`` and handed to consumers explicitly.
    Only the registry changes after startup, through ``schedule_closing``.
    """

    server_name: str
    authority: str
    authorized_tokens: TokenTable
    events_consumer: Consumer
    geo_resolver: MaxMindResolver | None = None
    registry: LifecycleRegistry = field(default_factory=LifecycleRegistry)

    def is_authorized(self, token: str) -> bool:
        return self.authorized_tokens.is_authorized(token)

    def schedule_closing(self, resource: Closable) -> None:
        self.registry.register(resource)

    def close(self) -> None:
        self.registry.close_all()


def resolve_server_name(hostname_resolver: Callable[[], str] = socket.gethostname) -> str:
    try:
        return hostname_resolver()
    except OSError as e:
        # Logger is not configured yet
        print(f"Unable to get os hostname: {e}", file=sys.stderr)
        return UNNAMED_SERVER


def _release_all(resources: list[Closable | None]) -> None:
    for resource in resources:
        if resource is None:
            continue
        try:
            resource.close()
        except Exception as e:
            logger.error(
                "Failed to release resource after startup error",
                resource=repr(resource),
                error=str(e),
            )


def init_app_config(
    settings: Settings | None = None,
    *,
    writer_factory: ResourceFactory = create_rotating_writer,
    consumer_factory: Callable[..., Consumer] = MultipleAsyncLogger,
    resolver_factory: Callable[[str], MaxMindResolver] = create_resolver,
    hostname_resolver: Callable[[], str] = socket.gethostname,
    logging_setup: Callable[[Settings, str], None] = setup_logging,
) -> AppConfig:
    """
    Run the startup sequence and return the process AppConfig.

    Hostname and geo database failures degrade the process; logger and
    event log failures stop it.

    Raises:
        SystemExit: the process logger could not be set up
        ResourceProvisioningException: an event log could not be created
    """
    if settings is None:
        settings = get_settings()

    server_name = resolve_server_name(hostname_resolver)

    try:
        logging_setup(settings, server_name)
    except LoggingInitException as e:
        print(f"Unable to initialize logging: {e.message}", file=sys.stderr)
        raise SystemExit(1) from e

    logger.info(" *** Creating new AppConfig *** ")
    logger.info("Server name", server_name=server_name)
    if settings.server.public_url:
        logger.info("Server public url", public_url=settings.server.public_url)
    else:
        logger.info("Server public url: will be taken from Host header")

    authority = settings.authority

    geo_resolver: MaxMindResolver | None = None
    try:
        geo_resolver = resolver_factory(settings.geo.maxmind_path)
    except GeoResolverException as e:
        logger.warning("Run without geo resolver", path=e.path, error=e.message)

    authorized_tokens = build_token_table(settings.server.auth)

    writers: dict = {}
    try:
        writers = provision_resources(
            authorized_tokens,
            writer_factory,
            directory=settings.log.path,
            rotation_min=settings.log.rotation_min,
            server_name=server_name,
        )
        events_consumer = consumer_factory(writers)
    except Exception:
        # provision_resources already released its own partial writers
        _release_all([*writers.values(), geo_resolver])
        raise

    app_config = AppConfig(
        server_name=server_name,
        authority=authority,
        authorized_tokens=authorized_tokens,
        events_consumer=events_consumer,
        geo_resolver=geo_resolver,
    )
    app_config.schedule_closing(events_consumer)
    if geo_resolver is not None:
        app_config.schedule_closing(geo_resolver)

    logger.info(
        "AppConfig created",
        authority=authority,
        tokens=len(authorized_tokens),
        geo_enabled=geo_resolver is not None,
    )
    return app_config
