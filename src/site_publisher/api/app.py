"""Development server.

Serves reconciled content pages, proxies gateway calls through the shared
command queue and exposes cache-first enrichment reads. Content routes are
only mounted outside production.
"""

from typing import Any

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from site_publisher.api.dependencies import (
    DevPageHandlerDep,
    EnrichmentHandlerDep,
    GatewayHandlerDep,
    build_lifespan,
)
from site_publisher.config import Settings, settings
from site_publisher.dto import (
    CacheClearResponse,
    EnrichmentResponse,
    GatewayCallRequest,
    GatewayCallResponse,
    HealthCheckResponse,
)
from site_publisher.protocols import AssetInjector, CommandGateway, KeyValueStorage


def create_app(
    app_settings: Settings | None = None,
    gateway: CommandGateway | None = None,
    storage: KeyValueStorage | None = None,
    injector: AssetInjector | None = None,
) -> FastAPI:
    """Build the dev server application.

    Args:
        app_settings: Settings to run with. Defaults to the global settings.
        gateway: Command gateway override.
        storage: Enrichment cache storage override.
        injector: Asset-injection step override.

    Returns:
        The configured FastAPI app
    """
    app_settings = app_settings or settings
    app = FastAPI(
        title="Site Publisher Dev Server",
        description="Dev server for the cache-coherent publishing pipeline",
        version="0.1.0",
        lifespan=build_lifespan(app_settings, gateway=gateway, storage=storage, injector=injector),
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with server information."""
        endpoints = {
            "health": "/health",
            "gateway": "/api/mesh/call",
            "enrichment": "/api/enrichment",
            "docs": "/docs",
        }
        if not app_settings.production:
            endpoints["articles"] = "/article/{slug}"
            endpoints["context"] = "/context/{path}"
        return {"name": "Site Publisher Dev Server", "version": "0.1.0", "endpoints": endpoints}

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: GatewayHandlerDep) -> HealthCheckResponse:
        return await handler.health_check()

    @app.post("/api/mesh/call", response_model=GatewayCallResponse)
    async def call_gateway(
        request: GatewayCallRequest,
        handler: GatewayHandlerDep,
    ) -> GatewayCallResponse:
        """Proxy one gateway tool call through the command queue."""
        return await handler.call_tool(request)

    @app.get("/api/enrichment", response_model=EnrichmentResponse)
    async def get_enrichment(
        handler: EnrichmentHandlerDep,
        url: str = Query(..., description="Resource URL"),
    ) -> EnrichmentResponse:
        return await handler.get_enrichment(url)

    @app.delete("/api/enrichment/cache", response_model=CacheClearResponse)
    async def clear_enrichment_cache(handler: EnrichmentHandlerDep) -> CacheClearResponse:
        return await handler.clear_cache()

    if not app_settings.production:

        @app.get("/article/{slug:path}", response_class=HTMLResponse)
        async def article_page(request: Request, handler: DevPageHandlerDep) -> HTMLResponse:
            return await handler.serve(request.url.path)

        @app.get("/context/{path:path}", response_class=HTMLResponse)
        async def context_page(request: Request, handler: DevPageHandlerDep) -> HTMLResponse:
            return await handler.serve(request.url.path)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    from site_publisher.logging_config import configure_logging

    configure_logging()
    uvicorn.run(
        "site_publisher.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
