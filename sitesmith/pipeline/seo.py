"""
SEO assets and meta-tag injection.
==================================
Pure text operations; no model calls.
"""
import re
from typing import Iterable, List, Optional, Set, Tuple
from xml.sax.saxutils import escape

from bs4 import BeautifulSoup

_HEAD_CLOSE = re.compile(r"</head\s*>", re.IGNORECASE)
_HEAD_BLOCK = re.compile(r"<head\b[^>]*>([\s\S]*?)</head\s*>", re.IGNORECASE)


def _tag_key(tag) -> Optional[Tuple[str, str]]:
    for attr in ("property", "name", "rel"):
        value = tag.get(attr)
        if value:
            if isinstance(value, list):
                value = " ".join(value)
            return attr, value.strip().lower()
    return None


def _existing_keys(head_html: str) -> Set[Tuple[str, str]]:
    soup = BeautifulSoup(head_html, "html.parser")
    keys = set()
    for tag in soup.find_all(["meta", "link"]):
        key = _tag_key(tag)
        if key:
            keys.add(key)
    return keys


def inject_meta_tags(html: str, tags: Iterable[str]) -> str:
    """
    Splices tags in front of the first </head>.

    A tag is skipped when it already appears verbatim in the document or
    when the head already has a tag with the same property/name/rel.
    Documents without </head> are returned unchanged.
    """
    match = _HEAD_CLOSE.search(html or "")
    if not match:
        return html

    head = _HEAD_BLOCK.search(html)
    keys = _existing_keys(head.group(1) if head else html[:match.start()])

    additions: List[str] = []
    for tag in tags:
        tag = (tag or "").strip()
        if not tag or tag in html or tag in additions:
            continue
        parsed = BeautifulSoup(tag, "html.parser").find(["meta", "link"])
        key = _tag_key(parsed) if parsed is not None else None
        if key is not None:
            if key in keys:
                continue
            keys.add(key)
        additions.append(tag)

    if not additions:
        return html
    block = "".join(f"  {tag}\n" for tag in additions)
    return html[:match.start()] + block + html[match.start():]


def page_url(base_url: str, page_id: str) -> str:
    return f"{base_url.rstrip('/')}/{page_id}.html"


def build_sitemap(page_ids: Iterable[str], base_url: str) -> str:
    """Minimal sitemaps.org urlset listing every page."""
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
    ]
    for page_id in page_ids:
        lines.append(f"  <url><loc>{escape(page_url(base_url, page_id))}</loc></url>")
    lines.append("</urlset>")
    return "\n".join(lines) + "\n"


def build_robots(base_url: str) -> str:
    return f"User-agent: *\nAllow: /\nSitemap: {base_url.rstrip('/')}/sitemap.xml\n"


def sitemap_covers(sitemap: str, page_ids: Iterable[str]) -> bool:
    """True when every page file is referenced by the sitemap text."""
    return all(f"{page_id}.html" in (sitemap or "") for page_id in page_ids)
