"""Content item domain entity."""

from dataclasses import asdict, dataclass, fields
from typing import Any

ARTICLE = "article"
CONTEXT = "context"


@dataclass(frozen=True)
class ContentItem:
    """A logical unit of published content.

    Content items are owned by the content store; the pipeline only reads
    them.

    Attributes:
        slug: Stable identifier. For context documents this is the relative
            path without the ``.md`` suffix.
        title: Display title
        content: Markdown body
        category: ``article`` or ``context``
        description: Optional summary used for SEO tags
        date: Publication date (ISO format)
        status: ``draft`` or ``published``
        tags: Tag names
        cover_image: Optional cover image URL
        updated_at: Last-modified marker from the store
    """

    slug: str
    title: str
    content: str
    category: str = ARTICLE
    description: str | None = None
    date: str = ""
    status: str = "draft"
    tags: tuple[str, ...] = ()
    cover_image: str | None = None
    updated_at: str | None = None

    @property
    def is_published(self) -> bool:
        return self.status == "published"

    @property
    def key(self) -> str:
        """Logical key used for routes and manifest entries."""
        return f"{self.category}/{self.slug}"

    def to_payload(self) -> dict[str, Any]:
        """Canonical JSON representation embedded in materialized pages."""
        if self.category == CONTEXT:
            return {"path": self.slug, "title": self.title, "content": self.content}
        return {
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "content": self.content,
            "date": self.date,
            "status": self.status,
            "tags": list(self.tags),
        }

    def to_summary(self) -> dict[str, Any]:
        """Metadata listed in the manifest (no body)."""
        if self.category == CONTEXT:
            return {"path": self.slug, "title": self.title}
        return {
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "date": self.date,
            "status": self.status,
            "tags": list(self.tags),
        }

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["tags"] = list(self.tags)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContentItem":
        """Inverse of ``to_dict``; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        values["tags"] = tuple(values.get("tags") or ())
        return cls(**values)
