"""HTTP handlers for gateway calls.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes and error responses.
"""

from fastapi import HTTPException, status

from site_publisher.dto import GatewayCallRequest, GatewayCallResponse, HealthCheckResponse
from site_publisher.errors import (
    GatewayError,
    GatewayNotConfiguredError,
    GatewayTimeoutError,
    QueueClosedError,
)
from site_publisher.services import GatewayService


def gateway_http_error(error: Exception) -> HTTPException:
    """Map a gateway failure to an HTTP error."""
    if isinstance(error, GatewayNotConfiguredError):
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    elif isinstance(error, GatewayTimeoutError):
        code = status.HTTP_504_GATEWAY_TIMEOUT
    elif isinstance(error, QueueClosedError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_502_BAD_GATEWAY
    return HTTPException(status_code=code, detail=str(error))


class GatewayHandler:
    """HTTP handlers for proxied gateway calls.

    Every call goes through the service's queue, so proxied calls share
    the rate limit with every other gateway user in the process.
    """

    def __init__(self, gateway_service: GatewayService, gateway_configured: bool) -> None:
        """Initialize the gateway handler.

        Args:
            gateway_service: The gateway service (required).
            gateway_configured: Whether URL and API key are set.
        """
        self._gateway = gateway_service
        self._configured = gateway_configured

    async def call_tool(self, request: GatewayCallRequest) -> GatewayCallResponse:
        """Handle POST /api/mesh/call requests.

        Raises:
            HTTPException: If the gateway call failed
        """
        try:
            result = await self._gateway.call_tool(request.tool_name, request.args)
        except (GatewayError, QueueClosedError) as e:
            raise gateway_http_error(e) from e
        return GatewayCallResponse(result=result)

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        queue = self._gateway.queue
        return HealthCheckResponse(
            status="healthy" if self._configured and not queue.closed else "degraded",
            queue_state=queue.state,
            pending_commands=queue.pending_count,
            gateway_configured=self._configured,
        )
