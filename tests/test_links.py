import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from sitesmith.domain import BuiltPage
from sitesmith.pipeline.validators.links import BrokenLink, CrossPageLinkChecker, normalize_href


def make_page(page_id: str, links: str) -> BuiltPage:
    return BuiltPage(id=page_id, title=page_id.title(), html=f"<html><body><nav>{links}</nav></body></html>")


@pytest.fixture
def pages():
    return [
        make_page("home", '<a href="about.html">About</a>'
                          '<a href="./contact.html">Contact</a>'
                          '<a href="/about.html?ref=nav#team">Team</a>'
                          '<a href="https://example.org/missing.html">Ext</a>'
                          '<a href="//cdn.example.org/x.html">Cdn</a>'
                          '<a href="mailto:hi@example.com">Mail</a>'
                          '<a href="tel:+123">Call</a>'
                          '<a href="#top">Top</a>'
                          '<a href="styles.css">CSS</a>'),
        make_page("about", '<a href="home.html">Home</a><a href="contactt.html">Contact us</a>'),
        make_page("contact", '<a href="index.html">Home</a><a href="HOME.html">Caps</a>'),
    ]


@pytest.mark.parametrize("href,expected", [
    ("about.html", "about.html"),
    ("./about.html", "about.html"),
    ("././about.html", "about.html"),
    ("/about.html", "about.html"),
    ("about.html?x=1#y", "about.html"),
    ("#section", None),
    ("", None),
    ("https://example.org/a.html", None),
    ("//cdn.example.org/a.html", None),
    ("mailto:a@b.c", None),
    ("tel:+1", None),
    ("javascript:void(0)", None),
])
def test_normalize_href(href, expected):
    assert normalize_href(href) == expected


def test_broken_links_per_page(pages):
    broken = CrossPageLinkChecker().check(pages)
    assert set(broken) == {"about", "contact"}
    assert broken["about"] == [BrokenLink(href="contactt.html", link_text="Contact us")]
    assert [link.href for link in broken["contact"]] == ["index.html", "HOME.html"]


def test_clean_pages_are_absent_not_empty(pages):
    broken = CrossPageLinkChecker().check(pages)
    assert "home" not in broken


def test_link_check_symmetry(pages):
    checker = CrossPageLinkChecker()
    targets = checker.valid_targets(pages)
    broken = checker.check(pages)
    for page in pages:
        hrefs = [a for a in page.html.split('href="')[1:]]
        internal = [normalize_href(h.split('"', 1)[0]) for h in hrefs]
        internal = [h for h in internal if h and h.endswith(".html")]
        if page.id not in broken:
            assert all(h in targets for h in internal)
        else:
            for link in broken[page.id]:
                assert normalize_href(link.href) not in targets


def test_fixed_page_drops_out(pages):
    checker = CrossPageLinkChecker()
    pages[1].html = pages[1].html.replace("contactt.html", "contact.html")
    pages[2].html = '<a href="home.html">Home</a>'
    assert checker.check(pages) == {}
