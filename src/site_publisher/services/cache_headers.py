"""Cache-Control contract for published files.

The entry document gets a short max-age with stale windows; fingerprinted
assets are immutable. The two directives only work as a pair.
"""

import re

ENTRY_CACHE_CONTROL = "max-age=30, stale-while-revalidate=3600, stale-if-error=10800"
IMMUTABLE_CACHE_CONTROL = "max-age=31536000, immutable"

FINGERPRINTED_PATTERN = re.compile(r"\.[0-9a-f]{8,64}\.[A-Za-z0-9]+$")

IMMUTABLE_PREFIXES = ("/assets/", "/content/")


def is_fingerprinted(path: str) -> bool:
    """Check whether a URL path names a content-addressed file."""
    return bool(FINGERPRINTED_PATTERN.search(path.split("?", 1)[0]))


def cache_control_for(path: str) -> str:
    """Pick the Cache-Control value for a served URL path."""
    clean = path.split("?", 1)[0]
    if clean.startswith(IMMUTABLE_PREFIXES) and is_fingerprinted(clean):
        return IMMUTABLE_CACHE_CONTROL
    return ENTRY_CACHE_CONTROL


def render_headers_file() -> str:
    """Render a ``_headers`` rules file for static hosts.

    Rule paths do not overlap, since hosts merge headers of every
    matching rule.
    """
    rules = [
        ("/", ENTRY_CACHE_CONTROL),
        ("/index.html", ENTRY_CACHE_CONTROL),
        ("/article/*", ENTRY_CACHE_CONTROL),
        ("/context/*", ENTRY_CACHE_CONTROL),
        ("/assets/*", IMMUTABLE_CACHE_CONTROL),
        ("/content/article/*", IMMUTABLE_CACHE_CONTROL),
        ("/content/context/*", IMMUTABLE_CACHE_CONTROL),
    ]
    blocks = [f"{path}\n  Cache-Control: {value}" for path, value in rules]
    return "\n".join(blocks) + "\n"
