"""Slug generation for page paths and heading anchors"""

import re


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug."""
    text = text.lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[\s_]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')


def unique_slug(text: str, seen: dict[str, int], fallback: str = "section") -> str:
    """Slugify text, suffixing -1, -2, ... until the slug has not been handed out yet.

    seen maps every issued slug (suffixed ones included) to the next suffix to try.
    """
    base = slugify(text) or fallback
    candidate = base
    count = seen.get(base, 0)
    while candidate in seen:
        count += 1
        candidate = f"{base}-{count}"
    seen[base] = count
    seen.setdefault(candidate, 0)
    return candidate
