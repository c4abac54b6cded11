"""
Cross-page link checking.
=========================
Finds internal .html links that point at pages the site does not have.
"""
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set

from bs4 import BeautifulSoup

from ...domain import BuiltPage

_SCHEME = re.compile(r"^[a-z][a-z0-9+.\-]*:", re.IGNORECASE)


@dataclass(frozen=True)
class BrokenLink:
    href: str
    link_text: str


def normalize_href(href: str) -> Optional[str]:
    """
    Normalizes an internal href to a bare file path.

    Returns None for links that are not internal page references:
    absolute URLs, protocol-relative URLs, mailto:/tel:/javascript:,
    fragment-only and empty links.
    """
    value = (href or "").strip()
    if not value or value.startswith("#") or value.startswith("//"):
        return None
    if _SCHEME.match(value):
        return None
    value = value.split("#", 1)[0].split("?", 1)[0]
    while value.startswith("./"):
        value = value[2:]
    # the export is a flat directory, so /about.html and about.html are the same file
    value = value.lstrip("/")
    return value or None


class CrossPageLinkChecker:
    """Maps page id -> broken internal links. Pages without broken links are absent."""

    def valid_targets(self, pages: Iterable[BuiltPage]) -> Set[str]:
        return {f"{page.id}.html" for page in pages}

    def check(self, pages: List[BuiltPage]) -> Dict[str, List[BrokenLink]]:
        targets = self.valid_targets(pages)
        broken: Dict[str, List[BrokenLink]] = {}
        for page in pages:
            page_broken = self.check_page(page.html, targets)
            if page_broken:
                broken[page.id] = page_broken
        return broken

    def check_page(self, html: str, targets: Set[str]) -> List[BrokenLink]:
        soup = BeautifulSoup(html or "", "html.parser")
        found = []
        for anchor in soup.find_all("a", href=True):
            href = anchor.get("href", "")
            path = normalize_href(href)
            if path is None or not path.lower().endswith(".html"):
                continue
            if path not in targets:
                found.append(BrokenLink(href=href, link_text=anchor.get_text(" ", strip=True)))
        return found
