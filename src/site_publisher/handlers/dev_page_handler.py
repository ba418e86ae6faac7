"""HTTP handler for dev-time content pages."""

from fastapi import HTTPException, status
from fastapi.responses import HTMLResponse

from site_publisher.services import DevReconciler


class DevPageHandler:
    """Serves reconciled article and context pages on the dev server.

    Missing artifacts produce a 200 placeholder page, never an error.
    """

    def __init__(self, reconciler: DevReconciler) -> None:
        self._reconciler = reconciler

    async def serve(self, path: str) -> HTMLResponse:
        """Handle GET /article/{id} and /context/{path} requests.

        Raises:
            HTTPException: 404 if the path is not a valid content route
        """
        page = await self._reconciler.reconcile(path)
        if page is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not a content route")

        headers = {"Cache-Control": "no-store"}
        if page.placeholder:
            headers["X-Rebuild-Required"] = "1"
        return HTMLResponse(content=page.html, status_code=page.status_code, headers=headers)
