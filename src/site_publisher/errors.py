"""Exception types raised by the publishing pipeline."""


class GatewayError(RuntimeError):
    """The command gateway could not be reached or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GatewayNotConfiguredError(GatewayError):
    """MESH_GATEWAY_URL or MESH_API_KEY is missing."""


class GatewayTimeoutError(GatewayError):
    """A gateway call exceeded the configured timeout."""


class GatewayProtocolError(GatewayError):
    """The gateway replied with a JSON-RPC ``error`` member."""


class QueueClosedError(RuntimeError):
    """A command was submitted after the queue was closed."""


class StorageError(RuntimeError):
    """The key-value storage backing a cache is unavailable."""


class StorageQuotaExceededError(StorageError):
    """A write would exceed the storage quota."""


class ManifestConflictError(RuntimeError):
    """Two logical assets map to the same addressed name, or one key appears twice."""
