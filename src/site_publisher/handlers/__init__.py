"""Handler layer for HTTP endpoints.

Handlers depend on services (pipeline logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Pipeline) -> (Gateway / Storage)
"""

from .dev_page_handler import DevPageHandler
from .enrichment_handler import EnrichmentHandler
from .gateway_handler import GatewayHandler

__all__ = [
    "DevPageHandler",
    "EnrichmentHandler",
    "GatewayHandler",
]
