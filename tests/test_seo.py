import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import unittest

from sitesmith.pipeline.seo import inject_meta_tags, build_sitemap, build_robots, sitemap_covers


PAGE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<meta property="og:title" content="Existing">
<title>Home</title>
</head>
<body><main></main></body>
</html>"""

TAGS = [
    '<meta property="og:title" content="Home | Crumb">',
    '<meta property="og:description" content="Fresh bread">',
    '<meta name="twitter:card" content="summary">',
    '<link rel="canonical" href="https://example.com/home.html">',
]


class TestInjectMetaTags(unittest.TestCase):

    def test_tags_spliced_before_head_close(self):
        result = inject_meta_tags(PAGE, TAGS)
        head, body = result.split("</head>", 1)
        self.assertIn('<meta property="og:description" content="Fresh bread">', head)
        self.assertIn('<meta name="twitter:card" content="summary">', head)
        self.assertIn('<link rel="canonical" href="https://example.com/home.html">', head)
        self.assertNotIn("og:description", body)

    def test_existing_key_is_not_duplicated(self):
        result = inject_meta_tags(PAGE, TAGS)
        self.assertEqual(result.count('property="og:title"'), 1)
        self.assertIn('content="Existing"', result)

    def test_injection_is_idempotent(self):
        once = inject_meta_tags(PAGE, TAGS)
        twice = inject_meta_tags(once, TAGS)
        self.assertEqual(once, twice)

    def test_duplicate_tags_in_input_added_once(self):
        tag = '<meta name="description" content="Bakery">'
        result = inject_meta_tags(PAGE, [tag, tag])
        self.assertEqual(result.count(tag), 1)

    def test_document_without_head_is_unchanged(self):
        fragment = "<main><p>No head here</p></main>"
        self.assertEqual(inject_meta_tags(fragment, TAGS), fragment)

    def test_uppercase_head_close(self):
        html = "<HTML><HEAD><TITLE>x</TITLE></HEAD><BODY></BODY></HTML>"
        result = inject_meta_tags(html, ['<meta name="description" content="d">'])
        self.assertLess(result.index('name="description"'), result.index("</HEAD>"))


class TestSeoFiles(unittest.TestCase):

    def test_sitemap_lists_every_page(self):
        sitemap = build_sitemap(["home", "about"], "https://crumb.example/")
        self.assertIn("<loc>https://crumb.example/home.html</loc>", sitemap)
        self.assertIn("<loc>https://crumb.example/about.html</loc>", sitemap)
        self.assertTrue(sitemap.startswith('<?xml version="1.0" encoding="UTF-8"?>'))
        self.assertTrue(sitemap_covers(sitemap, ["home", "about"]))
        self.assertFalse(sitemap_covers(sitemap, ["home", "menu"]))

    def test_robots_points_at_sitemap(self):
        robots = build_robots("https://crumb.example")
        self.assertIn("User-agent: *", robots)
        self.assertIn("Sitemap: https://crumb.example/sitemap.xml", robots)


if __name__ == '__main__':
    unittest.main()
