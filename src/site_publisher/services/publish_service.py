"""Build orchestration.

``generate`` reads content and materializes pages into the build
directory. ``finalize`` fingerprints bundler outputs and content payloads,
writes the manifest, embeds it into the entry document and produces the
dist tree. Finalize only reads the build and bundle directories, so it
runs without gateway access.
"""

import json
import re
import shutil
import time
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

import structlog

from site_publisher.config import settings
from site_publisher.entities import ContentItem, Manifest
from site_publisher.entities.content_item import CONTEXT
from site_publisher.protocols import ContentSource
from site_publisher.services.cache_headers import render_headers_file
from site_publisher.services.fingerprint import (
    ManifestBuilder,
    collect_outputs,
    content_payload_outputs,
)
from site_publisher.services.materializer import (
    DATA_SCRIPT_IDS,
    DEV_SCRIPTS_PATTERN,
    PageMaterializer,
    escape_script_json,
)

logger = structlog.get_logger()

MANIFEST_SCRIPT_ID = "manifest-data"
MANIFEST_SCRIPT_PATTERN = re.compile(
    r'\s*<script id="manifest-data" type="application/json">[\s\S]*?</script>'
)
ROOT_DIV = '<div id="root"></div>'

SCRIPT_TAG_PATTERN = re.compile(r'<script[^>]*src="[^"]*"[^>]*></script>')
STYLE_TAG_PATTERN = re.compile(r'<link[^>]*stylesheet[^>]*href="/assets/[^"]*"[^>]*>')
PRELOAD_TAG_PATTERN = re.compile(r"<link[^>]*modulepreload[^>]*>")


@dataclass(frozen=True)
class GenerateResult:
    published: int
    drafts: int
    context: int
    elapsed_ms: float


@dataclass(frozen=True)
class FinalizeResult:
    manifest: Manifest
    pages: int
    skipped: int
    elapsed_ms: float


def embed_manifest(document: str, manifest: Manifest) -> str:
    """Embed the manifest into the entry document, replacing any earlier embed."""
    document = MANIFEST_SCRIPT_PATTERN.sub("", document)
    tag = (
        f'<script id="{MANIFEST_SCRIPT_ID}" type="application/json">'
        f"{escape_script_json(manifest.to_dict())}</script>"
    )
    if ROOT_DIV in document:
        return document.replace(ROOT_DIV, f"{ROOT_DIV}\n    {tag}", 1)
    if "</body>" in document:
        return document.replace("</body>", f"  {tag}\n  </body>", 1)
    return document + tag


def rewrite_asset_references(document: str, manifest: Manifest) -> str:
    """Point absolute references to logical asset names at addressed paths."""
    for entry in manifest.entries:
        document = document.replace(f'"/{entry.key}"', f'"/{entry.path}"')
    return document


def extract_asset_tags(document: str) -> str:
    """Script, stylesheet and preload tags of the built entry document."""
    styles = PRELOAD_TAG_PATTERN.findall(document) + STYLE_TAG_PATTERN.findall(document)
    scripts = SCRIPT_TAG_PATTERN.findall(document)
    return "\n    ".join(styles + scripts)


class PublishService:
    """Runs the generate and finalize build steps.

    Example:
        ```python
        service = PublishService(sources=[articles, context_docs])
        await service.generate()
        service.finalize()
        ```
    """

    def __init__(
        self,
        sources: Iterable[ContentSource],
        materializer: PageMaterializer | None = None,
        manifest_builder: ManifestBuilder | None = None,
        build_dir: Path | None = None,
        bundle_dir: Path | None = None,
        dist_dir: Path | None = None,
        production: bool | None = None,
    ) -> None:
        self._sources = list(sources)
        self._build_dir = build_dir or settings.resolve(settings.build_dir)
        self._bundle_dir = bundle_dir or settings.resolve(settings.bundle_dir)
        self._dist_dir = dist_dir or settings.resolve(settings.dist_dir)
        self._materializer = materializer or PageMaterializer(build_dir=self._build_dir)
        self._builder = manifest_builder or ManifestBuilder()
        self._production = settings.production if production is None else production

    @property
    def items_index_path(self) -> Path:
        return self._build_dir / "content" / "items.json"

    async def generate(self) -> GenerateResult:
        """Read every source and materialize publishable items."""
        start = time.perf_counter()
        items: list[ContentItem] = []
        for source in self._sources:
            items.extend(await source.list_items())

        drafts = sum(1 for item in items if item.category != CONTEXT and not item.is_published)
        if self._production:
            items = [item for item in items if item.category == CONTEXT or item.is_published]

        self._materializer.materialize_all(items)

        self.items_index_path.parent.mkdir(parents=True, exist_ok=True)
        self.items_index_path.write_text(
            json.dumps({"items": [item.to_dict() for item in items]}, ensure_ascii=False),
            encoding="utf-8",
        )

        context = sum(1 for item in items if item.category == CONTEXT)
        result = GenerateResult(
            published=sum(1 for item in items if item.category != CONTEXT and item.is_published),
            drafts=0 if self._production else drafts,
            context=context,
            elapsed_ms=(time.perf_counter() - start) * 1000,
        )
        logger.info(
            "content_generated",
            published=result.published,
            drafts=result.drafts,
            drafts_hidden=drafts if self._production else 0,
            context=result.context,
            elapsed_ms=round(result.elapsed_ms),
        )
        return result

    def load_items(self) -> list[ContentItem]:
        """Read the item index written by ``generate``."""
        if not self.items_index_path.is_file():
            raise FileNotFoundError(
                f"{self.items_index_path} not found. Run the generate step first."
            )
        data = json.loads(self.items_index_path.read_text(encoding="utf-8"))
        return [ContentItem.from_dict(entry) for entry in data.get("items", [])]

    def render_pages(self) -> int:
        """Re-materialize pages from the saved item index, without reading sources."""
        return self._materializer.materialize_all(self.load_items())

    def finalize(self) -> FinalizeResult:
        """Produce the dist tree for the current build.

        Raises:
            FileNotFoundError: If generate or the bundler has not run
            ManifestConflictError: If the manifest would be inconsistent
        """
        start = time.perf_counter()
        items = self.load_items()

        entry_path = self._bundle_dir / "index.html"
        if not entry_path.is_file():
            raise FileNotFoundError(f"{entry_path} not found. Run the bundler first.")

        outputs = collect_outputs(self._bundle_dir) + content_payload_outputs(items)
        # Built before anything in dist is touched, so a conflict leaves the last build intact.
        manifest, files = self._builder.build(outputs, items)
        skipped = sum(1 for output in files if manifest.get(output.logical_key) is None)

        for stale in ("assets", "content"):
            shutil.rmtree(self._dist_dir / stale, ignore_errors=True)
        self._builder.write(files, manifest, self._dist_dir)

        entry = entry_path.read_text(encoding="utf-8")
        entry = embed_manifest(rewrite_asset_references(entry, manifest), manifest)
        (self._dist_dir / "index.html").write_text(entry, encoding="utf-8")

        asset_tags = extract_asset_tags(entry)
        pages = sum(self._finalize_pages(category, asset_tags) for category in DATA_SCRIPT_IDS)

        (self._dist_dir / "_headers").write_text(render_headers_file(), encoding="utf-8")

        result = FinalizeResult(
            manifest=manifest,
            pages=pages,
            skipped=skipped,
            elapsed_ms=(time.perf_counter() - start) * 1000,
        )
        logger.info(
            "build_finalized",
            assets=len(manifest.entries),
            pages=pages,
            skipped=skipped,
            elapsed_ms=round(result.elapsed_ms),
        )
        return result

    def _finalize_pages(self, category: str, asset_tags: str) -> int:
        src_dir = self._build_dir / category
        dest_dir = self._dist_dir / category
        shutil.rmtree(dest_dir, ignore_errors=True)
        if not src_dir.is_dir():
            return 0

        count = 0
        for src in sorted(src_dir.rglob("index.html")):
            document = src.read_text(encoding="utf-8")
            document = DEV_SCRIPTS_PATTERN.sub(lambda _: asset_tags, document, count=1)
            dest = dest_dir / src.relative_to(src_dir)
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_text(document, encoding="utf-8")
            count += 1
        return count
