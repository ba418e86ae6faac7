"""Build-time page materialization.

Each content item is rendered ahead of request time into a complete HTML
document carrying its data as a ``<script type="application/json">``
payload with a stable id, so the client app hydrates without a fetch.
Rendering is pure: unchanged input gives byte-identical output.
"""

import html
import json
import re
from collections.abc import Iterable
from pathlib import Path

import structlog

from site_publisher.config import settings
from site_publisher.entities import ContentItem
from site_publisher.entities.content_item import ARTICLE, CONTEXT

logger = structlog.get_logger()

DATA_SCRIPT_IDS = {
    ARTICLE: "article-data",
    CONTEXT: "context-data",
}

DEV_SCRIPTS = (
    '<script type="module" src="/@vite/client"></script>\n'
    '    <script type="module" src="/src/main.tsx"></script>'
)
DEV_SCRIPTS_PATTERN = re.compile(
    r'<script type="module" src="/@vite/client"></script>\s*'
    r'<script type="module" src="/src/main\.tsx"></script>'
)

DATA_SCRIPT_PATTERN = re.compile(
    r'<script id="(?:article-data|context-data)" type="application/json">[\s\S]*?</script>'
)

DEFAULT_DESCRIPTION = "Notes on technology and building things."


def escape_script_json(payload: object) -> str:
    """Serialize a payload for embedding inside a script element."""
    text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return re.sub(r"</script>", r"<\\/script>", text, flags=re.IGNORECASE)


def escape_html(value: str) -> str:
    return html.escape(value, quote=True)


def data_script(item: ContentItem) -> str:
    """The embedded data element for one item."""
    script_id = DATA_SCRIPT_IDS[item.category]
    return (
        f'<script id="{script_id}" type="application/json">'
        f"{escape_script_json(item.to_payload())}</script>"
    )


def extract_data_script(document: str) -> str | None:
    """Find the embedded data element in a materialized document."""
    match = DATA_SCRIPT_PATTERN.search(document)
    return match.group(0) if match else None


def extract_description(content: str, max_length: int = 160) -> str:
    """First prose paragraph of a markdown body, stripped of formatting."""
    without_title = re.sub(r"^#\s+.+\n+", "", content)
    paragraph = ""
    for line in without_title.split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", "-", "*", ">", "|")):
            if paragraph:
                break
            continue
        paragraph += (" " if paragraph else "") + stripped
        if len(paragraph) > max_length:
            break

    paragraph = re.sub(r"\*\*([^*]+)\*\*", r"\1", paragraph)
    paragraph = re.sub(r"\*([^*]+)\*", r"\1", paragraph)
    paragraph = re.sub(r"`([^`]+)`", r"\1", paragraph)
    paragraph = re.sub(r"\[([^\]]+)\]\([^)]+\)", r"\1", paragraph)

    if len(paragraph) > max_length:
        paragraph = re.sub(r"\s+\S*$", "", paragraph[: max_length - 3]) + "..."
    return paragraph


class PageMaterializer:
    """Renders content items into pre-built page documents.

    Documents are written to ``<build_dir>/<category>/<slug>/index.html``
    and reference the dev entry scripts; the production build swaps those
    for fingerprinted asset tags.
    """

    def __init__(
        self,
        build_dir: Path | None = None,
        base_url: str | None = None,
        site_name: str | None = None,
    ) -> None:
        self._build_dir = build_dir or settings.resolve(settings.build_dir)
        self._base_url = (base_url or settings.site_base_url).rstrip("/")
        self._site_name = site_name or settings.site_name

    @property
    def build_dir(self) -> Path:
        return self._build_dir

    def document_path(self, category: str, slug: str) -> Path:
        return self._build_dir / category / slug / "index.html"

    def render(self, item: ContentItem) -> str:
        """Render one item into a complete HTML document."""
        if item.category not in DATA_SCRIPT_IDS:
            raise ValueError(f"Unknown content category: {item.category!r}")

        url = f"{self._base_url}/{item.category}/{item.slug}"
        if item.category == CONTEXT:
            description = extract_description(item.content) or f"Notes on {item.title}"
        else:
            description = item.description or DEFAULT_DESCRIPTION

        meta = [
            '<meta property="og:type" content="article" />',
            f'<meta property="og:title" content="{escape_html(item.title)}" />',
            f'<meta property="og:description" content="{escape_html(description)}" />',
            f'<meta property="og:url" content="{url}" />',
            f'<meta property="og:site_name" content="{escape_html(self._site_name)}" />',
        ]
        if item.cover_image:
            meta.append(f'<meta property="og:image" content="{escape_html(item.cover_image)}" />')
        if item.category == ARTICLE and item.date:
            meta.append(f'<meta property="article:published_time" content="{item.date}" />')
        meta_block = "\n    ".join(meta)

        return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{escape_html(item.title)} | {escape_html(self._site_name)}</title>
    <meta name="description" content="{escape_html(description)}" />
    <link rel="canonical" href="{url}" />
    {meta_block}
    {DEV_SCRIPTS}
  </head>
  <body>
    <div id="root"></div>
    {data_script(item)}
  </body>
</html>
"""

    def materialize(self, item: ContentItem) -> Path:
        """Render and write one item, returning the document path."""
        path = self.document_path(item.category, item.slug)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(item), encoding="utf-8")
        return path

    def materialize_all(self, items: Iterable[ContentItem]) -> int:
        count = 0
        for item in items:
            self.materialize(item)
            count += 1
        logger.info("pages_materialized", count=count, build_dir=str(self._build_dir))
        return count
