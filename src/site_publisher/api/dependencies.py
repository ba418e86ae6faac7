"""Dependency injection configuration for the dev server.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - One command queue per app; every gateway user receives that instance
"""

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Annotated

import structlog
from fastapi import Depends, FastAPI, Request

from site_publisher.config import Settings
from site_publisher.handlers import DevPageHandler, EnrichmentHandler, GatewayHandler
from site_publisher.protocols import AssetInjector, CommandGateway, KeyValueStorage
from site_publisher.repositories import McpGatewayClient, RedisKeyValueStorage
from site_publisher.services import (
    DevReconciler,
    EnrichmentCache,
    EnrichmentService,
    GatewayService,
    RateLimitedCommandQueue,
)

logger = structlog.get_logger()


def _from_state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not initialized. Check lifespan setup.")
    return value


def get_gateway_handler(request: Request) -> GatewayHandler:
    """Dependency injection for GatewayHandler from app.state."""
    return _from_state(request, "gateway_handler")


def get_enrichment_handler(request: Request) -> EnrichmentHandler:
    """Dependency injection for EnrichmentHandler from app.state."""
    return _from_state(request, "enrichment_handler")


def get_dev_page_handler(request: Request) -> DevPageHandler:
    """Dependency injection for DevPageHandler from app.state."""
    return _from_state(request, "dev_page_handler")


def build_lifespan(
    app_settings: Settings,
    gateway: CommandGateway | None = None,
    storage: KeyValueStorage | None = None,
    injector: AssetInjector | None = None,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Create the lifespan context manager for the dev server.

    Args:
        app_settings: Settings the app runs with
        gateway: Gateway override (tests pass a fake)
        storage: Enrichment cache storage override
        injector: Asset-injection step override

    Returns:
        A lifespan callable for ``FastAPI(lifespan=...)``
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        command_gateway = gateway or McpGatewayClient.create(
            gateway_url=app_settings.mesh_gateway_url,
            api_key=app_settings.mesh_api_key,
            timeout=app_settings.gateway_timeout,
        )
        queue = RateLimitedCommandQueue(
            gateway=command_gateway,
            min_delay_ms=app_settings.gateway_min_delay_ms,
            timeout=app_settings.gateway_timeout,
        )
        gateway_service = GatewayService(queue=queue, sql_tool=app_settings.gateway_sql_tool)

        cache = EnrichmentCache(
            storage=storage or RedisKeyValueStorage.create(),
            storage_key=app_settings.enrichment_cache_key,
            version=app_settings.enrichment_cache_version,
            ttl=app_settings.enrichment_cache_ttl,
        )
        enrichment_service = EnrichmentService(gateway=gateway_service, cache=cache)

        app.state.queue = queue
        app.state.gateway_service = gateway_service
        app.state.gateway_handler = GatewayHandler(
            gateway_service=gateway_service,
            gateway_configured=gateway is not None or app_settings.gateway_configured,
        )
        app.state.enrichment_handler = EnrichmentHandler(enrichment_service=enrichment_service)

        if not app_settings.production:
            reconciler = DevReconciler(
                build_dir=app_settings.resolve(app_settings.build_dir),
                shell_path=app_settings.resolve("index.html"),
                injector=injector,
            )
            app.state.dev_page_handler = DevPageHandler(reconciler=reconciler)

        logger.info(
            "dev_server_started",
            gateway_configured=app_settings.gateway_configured,
            min_delay_ms=queue.min_delay_ms,
            production=app_settings.production,
        )

        yield

        await queue.close()
        await command_gateway.close()
        for name in (
            "dev_page_handler",
            "enrichment_handler",
            "gateway_handler",
            "gateway_service",
            "queue",
        ):
            if hasattr(app.state, name):
                delattr(app.state, name)
        logger.info("dev_server_stopped")

    return lifespan


# Type aliases for cleaner dependency injection
GatewayHandlerDep = Annotated[GatewayHandler, Depends(get_gateway_handler)]
EnrichmentHandlerDep = Annotated[EnrichmentHandler, Depends(get_enrichment_handler)]
DevPageHandlerDep = Annotated[DevPageHandler, Depends(get_dev_page_handler)]
