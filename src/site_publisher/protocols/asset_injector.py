"""Asset injector protocol."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class AssetInjector(Protocol):
    """Protocol for the dev server's HTML asset-injection step.

    Runs over every reconciled document before it is sent, so hot-reload
    wiring is preserved.
    """

    async def transform(self, url: str, html: str) -> str:
        """Return ``html`` with dev assets injected for ``url``."""
        ...
