import re
import unicodedata
from typing import Iterable, List, Set


def slugify(text: str) -> str:
    """
    Converts arbitrary text to a kebab-case slug usable as a file stem.
    Returns an empty string when nothing usable remains.
    """
    if not text:
        return ""
    normalized = unicodedata.normalize("NFKD", str(text))
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")
    # camelCase -> camel-case before lowercasing
    ascii_text = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", ascii_text)
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_text.lower())
    return slug.strip("-")


def unique_slug(base: str, taken: Set[str]) -> str:
    """Appends -2, -3, ... until the slug is not in `taken`."""
    if base not in taken:
        return base
    n = 2
    while f"{base}-{n}" in taken:
        n += 1
    return f"{base}-{n}"


def truncate(text: str, limit: int) -> str:
    """Truncates text for prompt context, marking the cut."""
    if text is None:
        return ""
    if limit <= 0 or len(text) <= limit:
        return text
    return text[:limit] + "\n... (truncated)"


def as_string_list(value) -> List[str]:
    """
    Coerces model output into a list of non-empty strings.
    Accepts a list, a single string, or None.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, Iterable) and not isinstance(value, dict):
        items = []
        for item in value:
            if item is None:
                continue
            text = item if isinstance(item, str) else str(item)
            if text.strip():
                items.append(text.strip())
        return items
    return [str(value)]
