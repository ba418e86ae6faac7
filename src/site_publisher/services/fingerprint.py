"""Content-addressed asset naming and manifest construction.

An asset's addressed name embeds a hex digest of its bytes, so the name
only changes when the content does. That is what makes it safe to serve
fingerprinted assets with an immutable cache directive.
"""

import hashlib
import json
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

import structlog

from site_publisher.config import settings
from site_publisher.entities import AssetManifestEntry, BuildOutput, ContentItem, Manifest
from site_publisher.errors import ManifestConflictError

logger = structlog.get_logger()

FINGERPRINTABLE_SUFFIXES = frozenset(
    {
        ".js",
        ".mjs",
        ".css",
        ".json",
        ".woff",
        ".woff2",
        ".ttf",
        ".svg",
        ".png",
        ".jpg",
        ".jpeg",
        ".gif",
        ".webp",
        ".avif",
        ".ico",
    }
)


def content_hash(data: bytes, length: int | None = None) -> str:
    """Return the hex fingerprint of ``data``.

    Args:
        data: Asset bytes
        length: Number of hex characters to keep. Defaults to settings.
    """
    length = settings.fingerprint_length if length is None else length
    return hashlib.sha256(data).hexdigest()[:length]


def fingerprint_name(name: str, digest: str) -> str | None:
    """Insert a digest before the suffix: ``assets/main.js -> assets/main.<digest>.js``.

    Returns:
        The addressed name, or None if the file type cannot be fingerprinted
    """
    path = PurePosixPath(name)
    suffix = path.suffix.lower()
    if not path.stem or suffix not in FINGERPRINTABLE_SUFFIXES:
        return None
    return str(path.with_name(f"{path.stem}.{digest}{path.suffix}"))


def canonical_json(payload: object) -> bytes:
    """Serialize a payload deterministically."""
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":")).encode(
        "utf-8"
    )


def content_payload_outputs(items: Iterable[ContentItem]) -> list[BuildOutput]:
    """One JSON output per content item, keyed by ``<category>/<slug>``."""
    return [
        BuildOutput(
            name=f"content/{item.category}/{item.slug}.json",
            content=canonical_json(item.to_payload()),
            key=item.key,
        )
        for item in items
    ]


def collect_outputs(root: Path, exclude: Iterable[str] = ("index.html",)) -> list[BuildOutput]:
    """Read every file below ``root`` as a build output, sorted by name."""
    excluded = set(exclude)
    outputs = []
    if not root.is_dir():
        return outputs
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        name = path.relative_to(root).as_posix()
        if name in excluded:
            continue
        outputs.append(BuildOutput(name=name, content=path.read_bytes()))
    return outputs


class ManifestBuilder:
    """Fingerprints build outputs and assembles the manifest.

    Example:
        ```python
        builder = ManifestBuilder()
        manifest, files = builder.build(outputs, items)
        builder.write(files, manifest, Path("dist"))
        ```
    """

    def __init__(self, hash_length: int | None = None) -> None:
        """Initialize the builder.

        Args:
            hash_length: Hex characters per fingerprint. Defaults to settings.
        """
        self._hash_length = settings.fingerprint_length if hash_length is None else hash_length
        if self._hash_length < 8:
            raise ValueError("Fingerprints need at least 8 hex characters")

    def fingerprint(self, output: BuildOutput) -> AssetManifestEntry | None:
        """Compute the manifest entry for one output, or None if skipped."""
        digest = content_hash(output.content, self._hash_length)
        addressed = fingerprint_name(output.name, digest)
        if addressed is None:
            return None
        return AssetManifestEntry(key=output.logical_key, path=addressed, content_hash=digest)

    def build(
        self,
        outputs: Iterable[BuildOutput],
        items: Iterable[ContentItem] = (),
    ) -> tuple[Manifest, list[BuildOutput]]:
        """Build the manifest and the renamed output set.

        Outputs that cannot be fingerprinted are kept under their original
        name and left out of the manifest.

        Args:
            outputs: Build outputs in a stable order
            items: Content items listed in the manifest

        Returns:
            Tuple (manifest, files to write)

        Raises:
            ManifestConflictError: If a key repeats or two keys share a path
        """
        manifest = Manifest()
        files: list[BuildOutput] = []
        keys: set[str] = set()
        paths: dict[str, str] = {}

        for output in outputs:
            entry = self.fingerprint(output)
            if entry is None:
                logger.info("fingerprint_skipped", name=output.name)
                files.append(output)
                continue

            if entry.key in keys:
                raise ManifestConflictError(f"Asset key {entry.key!r} appears twice in one build")
            owner = paths.get(entry.path)
            if owner is not None:
                raise ManifestConflictError(
                    f"Assets {owner!r} and {entry.key!r} both map to {entry.path!r}"
                )

            keys.add(entry.key)
            paths[entry.path] = entry.key
            manifest.entries.append(entry)
            files.append(BuildOutput(name=entry.path, content=output.content, key=entry.key))

        for item in items:
            summary = item.to_summary()
            summary["category"] = item.category
            entry = manifest.get(item.key)
            if entry is not None:
                summary["data"] = entry.to_dict()
            manifest.items.append(summary)

        return manifest, files

    def write(self, files: Iterable[BuildOutput], manifest: Manifest, out_dir: Path) -> Path:
        """Write files and ``content/manifest.json`` below ``out_dir``.

        Returns:
            Path of the written manifest document
        """
        for output in files:
            target = out_dir / output.name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(output.content)

        manifest_path = out_dir / "content" / "manifest.json"
        manifest_path.parent.mkdir(parents=True, exist_ok=True)
        manifest_path.write_bytes(canonical_json(manifest.to_dict()))
        return manifest_path
