"""Dev-time reconciliation of materialized pages.

During development the production bundle step has not run, so the dev
server rebuilds each page from two parts: the embedded data script of the
materialized document and the unbuilt dev shell. The spliced result goes
through the asset injector before it is served. Only for development; the
production server serves build artifacts directly.
"""

import re
from pathlib import Path

import structlog

from site_publisher.entities import ReconciledPage
from site_publisher.protocols import AssetInjector
from site_publisher.services.materializer import (
    DATA_SCRIPT_IDS,
    DATA_SCRIPT_PATTERN,
    DEV_SCRIPTS,
    DEV_SCRIPTS_PATTERN,
    escape_html,
    extract_data_script,
)

logger = structlog.get_logger()

ROUTE_PATTERN = re.compile(r"^/(?P<category>article|context)/(?P<id>.+?)/?$")

DEFAULT_SHELL = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  </head>
  <body>
    <div id="root"></div>
  </body>
</html>
"""


def parse_route(path: str) -> tuple[str, str] | None:
    """Split a request path into ``(category, id)``.

    Returns:
        The route parts, or None for paths that are not content routes or
        that try to leave the build directory
    """
    clean = path.split("?", 1)[0].split("#", 1)[0]
    match = ROUTE_PATTERN.match(clean)
    if not match:
        return None
    item_id = match.group("id")
    if any(part in ("", ".", "..") or part.startswith(".") for part in item_id.split("/")):
        return None
    return match.group("category"), item_id


def splice_data_script(shell: str, script: str) -> str:
    """Put a data script into the shell, replacing any existing one."""
    shell = DATA_SCRIPT_PATTERN.sub("", shell)
    if "</body>" in shell:
        return shell.replace("</body>", f"  {script}\n  </body>", 1)
    return shell + script


def placeholder_document(category: str, item_id: str) -> str:
    """Transient page shown while a materialized document is missing."""
    safe_id = escape_html(item_id)
    return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <title>Rebuilding {safe_id}</title>
  </head>
  <body>
    <h1>This page is being rebuilt</h1>
    <p>No pre-built {category} document exists yet for <code>{safe_id}</code>.</p>
    <p>Run <code>python scripts/build.py --mode generate</code> and reload this page.</p>
  </body>
</html>
"""


class DevAssetInjector:
    """Default dev asset injection: make sure the dev client scripts are present."""

    def __init__(self, scripts: str = DEV_SCRIPTS) -> None:
        self._scripts = scripts

    async def transform(self, url: str, html: str) -> str:
        if DEV_SCRIPTS_PATTERN.search(html) or self._scripts in html:
            return html
        if "</head>" in html:
            return html.replace("</head>", f"  {self._scripts}\n  </head>", 1)
        return self._scripts + html


class DevReconciler:
    """Rebuilds content pages for the dev server from materialized artifacts.

    Example:
        ```python
        reconciler = DevReconciler(build_dir=Path(".build"), shell_path=Path("index.html"))
        page = await reconciler.reconcile("/article/hello-world")
        ```
    """

    def __init__(
        self,
        build_dir: Path,
        shell_path: Path | None = None,
        injector: AssetInjector | None = None,
    ) -> None:
        """Initialize the reconciler.

        Args:
            build_dir: Directory holding materialized documents (required).
            shell_path: Dev shell document. A minimal shell is used if absent.
            injector: Asset-injection step. Defaults to ``DevAssetInjector``.
        """
        self._build_dir = build_dir
        self._shell_path = shell_path
        self._injector = injector or DevAssetInjector()

    def _read_shell(self) -> str:
        if self._shell_path is not None and self._shell_path.is_file():
            return self._shell_path.read_text(encoding="utf-8")
        return DEFAULT_SHELL

    def _placeholder(self, category: str, item_id: str, reason: str) -> ReconciledPage:
        logger.warning("dev_placeholder_served", category=category, id=item_id, reason=reason)
        return ReconciledPage(html=placeholder_document(category, item_id), placeholder=True)

    async def reconcile(self, path: str) -> ReconciledPage | None:
        """Build the dev response for a request path.

        Args:
            path: Request path, e.g. ``/article/hello-world``

        Returns:
            The page, a placeholder page if no artifact exists yet, or None
            if the path is not a content route
        """
        route = parse_route(path)
        if route is None:
            return None
        category, item_id = route

        document_path = self._build_dir / category / item_id / "index.html"
        if not document_path.is_file():
            return self._placeholder(category, item_id, "missing_document")

        try:
            document = document_path.read_text(encoding="utf-8")
        except OSError as e:
            # Rebuilds rewrite documents in place; a read can race with them.
            return self._placeholder(category, item_id, f"unreadable: {e}")

        script = extract_data_script(document)
        if script is None or f'id="{DATA_SCRIPT_IDS[category]}"' not in script:
            return self._placeholder(category, item_id, "missing_data_script")

        html = splice_data_script(self._read_shell(), script)
        html = await self._injector.transform(path, html)
        return ReconciledPage(html=html)
