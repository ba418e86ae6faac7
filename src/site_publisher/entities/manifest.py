"""Asset manifest domain entities."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class BuildOutput:
    """A file produced by the bundling step or by content generation.

    Attributes:
        name: Output path relative to the dist root (POSIX separators)
        content: Raw bytes
        key: Logical asset key; defaults to ``name``
    """

    name: str
    content: bytes
    key: str | None = None

    @property
    def logical_key(self) -> str:
        return self.key or self.name


@dataclass(frozen=True)
class AssetManifestEntry:
    """Maps a logical asset key to its content-addressed location.

    Attributes:
        key: Logical key (e.g. ``assets/main.js`` or ``article/hello``)
        path: Addressed path relative to the dist root
        content_hash: Hex fingerprint embedded in ``path``
    """

    key: str
    path: str
    content_hash: str

    def to_dict(self) -> dict[str, str]:
        return {"path": f"/{self.path}", "contentHash": self.content_hash}


@dataclass
class Manifest:
    """The complete manifest for one build.

    Regenerated wholly on every build; ``entries`` keeps insertion order.
    """

    entries: list[AssetManifestEntry] = field(default_factory=list)
    items: list[dict[str, Any]] = field(default_factory=list)

    def get(self, key: str) -> AssetManifestEntry | None:
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None

    @property
    def paths(self) -> list[str]:
        return [entry.path for entry in self.entries]

    def to_dict(self) -> dict[str, Any]:
        return {
            "assets": {entry.key: entry.to_dict() for entry in self.entries},
            "items": self.items,
        }
