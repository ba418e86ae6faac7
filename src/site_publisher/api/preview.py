"""Production preview server.

Serves the dist tree the way a static host would: exact file, then the
directory's ``index.html``, then the SPA entry document. Every response
carries the Cache-Control value its path is published with. Nothing is
reconciled here; what is served is exactly what was built.
"""

from pathlib import Path

import structlog
from fastapi import FastAPI, HTTPException, status
from fastapi.responses import FileResponse

from site_publisher.config import settings
from site_publisher.services.cache_headers import cache_control_for

logger = structlog.get_logger()


def resolve_static(dist_dir: Path, url_path: str) -> Path | None:
    """Map a URL path to a file inside ``dist_dir``.

    Returns:
        The file to serve, or None if nothing (not even the entry) exists
    """
    root = dist_dir.resolve()
    relative = url_path.lstrip("/")
    candidate = (root / relative).resolve()

    # Paths escaping the dist root fall through to the entry document.
    if candidate == root or root in candidate.parents:
        if candidate.is_file():
            return candidate
        index = candidate / "index.html"
        if index.is_file():
            return index

    entry = root / "index.html"
    return entry if entry.is_file() else None


def create_preview_app(dist_dir: Path | None = None) -> FastAPI:
    """Build the preview app for a dist directory.

    Args:
        dist_dir: Directory to serve. Defaults to the configured dist dir.
    """
    root = dist_dir or settings.resolve(settings.dist_dir)
    app = FastAPI(title="Site Publisher Preview", version="0.1.0", docs_url=None, redoc_url=None)

    @app.get("/{path:path}")
    async def serve(path: str) -> FileResponse:
        target = resolve_static(root, path)
        if target is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Nothing to serve for /{path}. Run the finalize step first.",
            )
        served = "/" + target.relative_to(root.resolve()).as_posix()
        return FileResponse(target, headers={"Cache-Control": cache_control_for(served)})

    logger.info("preview_app_created", dist_dir=str(root))
    return app


if __name__ == "__main__":
    import uvicorn

    from site_publisher.logging_config import configure_logging

    configure_logging()
    uvicorn.run(create_preview_app(), host=settings.api_host, port=settings.api_port + 1)
