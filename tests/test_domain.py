import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json
import unittest
import zipfile
import tempfile

import pytest

from sitesmith.domain import (
    SiteBrief, SitePlan, DesignTokens, DEFAULT_DESIGN_TOKENS, SharedChrome, PagePlan, PageEntry,
    SeoArtifacts, BuildResult, BuiltPage, RunStatus, ExportFile, normalize_meta_tag,
)
from sitesmith.errors import BriefError, ExportError
from sitesmith.pipeline.artifacts import ZipExportPackager, build_export_files, normalize_export_path
from sitesmith.pipeline.config import Limits, PipelineConfig, RetryPolicy
from sitesmith.utils import slugify, unique_slug, truncate


class TestSiteBrief(unittest.TestCase):

    def test_valid_brief(self):
        SiteBrief("bakery", 2, "llama3").validate()

    def test_invalid_briefs(self):
        for brief in (SiteBrief("  ", 1, "llama3"), SiteBrief("bakery", 0, "llama3"), SiteBrief("bakery", 1, "")):
            with self.assertRaises(BriefError):
                brief.validate()

    def test_brief_error_is_value_error(self):
        with self.assertRaises(ValueError):
            SiteBrief("", 1, "m").validate()

    def test_from_dict_accepts_camel_case(self):
        brief = SiteBrief.from_dict({"topic": "bakery", "pageCount": 3, "modelId": "qwen"})
        self.assertEqual((brief.page_count, brief.model_id), (3, "qwen"))


class TestSitePlan(unittest.TestCase):

    def test_ids_are_slugified_and_unique(self):
        data = {
            "site_title": "Crumb",
            "pages": [
                {"id": "Home Page", "title": "Home"},
                {"id": "home-page", "title": "Duplicate"},
                {"title": "Our Story"},
                {"id": "", "title": ""},
                {"id": "extra", "title": "Extra"},
            ],
        }
        plan = SitePlan.from_model_output(data, page_count=3)
        self.assertEqual(plan.page_ids, ["home-page", "home-page-2", "our-story"])
        self.assertEqual(plan.site_title, "Crumb")
        self.assertEqual(plan.get("our-story").title, "Our Story")

    def test_missing_pages_gives_empty_plan(self):
        plan = SitePlan.from_model_output({"pages": "nope"}, page_count=2, fallback_title="Bakery")
        self.assertEqual(plan.pages, [])
        self.assertEqual(plan.site_title, "Bakery")

    def test_id_title_map(self):
        plan = SitePlan("S", [PageEntry("home", "Home"), PageEntry("menu", "Menu")])
        self.assertEqual(plan.id_title_map(), {"home": "Home", "menu": "Menu"})
        self.assertEqual(plan.pages[1].filename, "menu.html")


class TestModelOutputParsing(unittest.TestCase):

    def test_design_tokens_flatten_and_defaults(self):
        tokens = DesignTokens.from_model_output({"colors": {"primary": "#fff"}, "spacing": 8, "flag": True})
        self.assertEqual(tokens.values, {"colors_primary": "#fff", "spacing": "8"})
        merged = tokens.with_defaults()
        self.assertEqual(merged.values["spacing"], "8")
        self.assertEqual(merged.values["color_text"], DEFAULT_DESIGN_TOKENS["color_text"])
        self.assertEqual(json.loads(merged.to_json())["colors_primary"], "#fff")

    def test_shared_chrome_completeness(self):
        self.assertTrue(SharedChrome.from_model_output({"header": "<header/>", "footer": "<footer/>"}).is_complete)
        self.assertFalse(SharedChrome.from_model_output({"header": "<header/>", "footer": "  "}).is_complete)
        self.assertFalse(SharedChrome.from_model_output({"header": ["x"], "footer": "<footer/>"}).is_complete)

    def test_page_plan_coerces_lists(self):
        entry = PageEntry("menu", "Menu", "What we bake")
        plan = PagePlan.from_model_output({"outline": "Hero", "copyPoints": ["a", None, " "], "seo": "desc"}, entry)
        self.assertEqual(plan.outline, ["Hero"])
        self.assertEqual(plan.copy_points, ["a"])
        self.assertEqual(plan.seo, {"description": "desc"})
        self.assertEqual(plan.title, "Menu")
        self.assertEqual(PagePlan.fallback(entry).copy_points, ["What we bake"])

    def test_normalize_meta_tag(self):
        self.assertEqual(normalize_meta_tag({"property": "og:title", "content": 'A "B"'}),
                         '<meta property="og:title" content="A &quot;B&quot;">')
        self.assertEqual(normalize_meta_tag('<meta name="x" content="y">'), '<meta name="x" content="y">')
        self.assertIsNone(normalize_meta_tag("og:title"))
        self.assertEqual(normalize_meta_tag({"rel": "canonical", "href": "/a.html"}),
                         '<link rel="canonical" href="/a.html">')

    def test_seo_artifacts_from_model_output(self):
        seo = SeoArtifacts.from_model_output({
            "sitemap": " <urlset/> ",
            "pages": [
                {"page_id": "home", "open_graph": {"og:title": "Home"}, "twitter": [{"name": "twitter:card", "content": "summary"}]},
                {"open_graph": []},
            ],
        })
        self.assertEqual(seo.sitemap, "<urlset/>")
        self.assertEqual(seo.robots, "")
        self.assertEqual(len(seo.pages), 1)
        self.assertEqual(seo.tags_for("home").open_graph, ['<meta property="og:title" content="Home">'])
        self.assertEqual(len(seo.tags_for("home").all_tags), 2)
        self.assertIsNone(seo.tags_for("about"))


class TestBuildResult(unittest.TestCase):

    def test_summary(self):
        result = BuildResult(
            status=RunStatus.COMPLETED,
            pages=[BuiltPage("home", "Home", "<html></html>", valid=True), BuiltPage("about", "About")],
        )
        self.assertTrue(result.succeeded)
        self.assertFalse(result.all_valid)
        self.assertEqual(result.invalid_pages, ["about"])
        self.assertEqual(result.summary()["valid_pages"], 1)
        self.assertEqual(result.summary()["status"], "completed")

    def test_export_files_order(self):
        result = BuildResult(
            status=RunStatus.COMPLETED,
            pages=[BuiltPage("home", "Home", "<html>h</html>"), BuiltPage("menu", "Menu", "<html>m</html>")],
            tokens=DesignTokens({"color_text": "#000"}),
            seo=SeoArtifacts(sitemap="<urlset/>", robots="User-agent: *"),
        )
        files = build_export_files(result)
        self.assertEqual([f.path for f in files],
                         ["home.html", "menu.html", "sitemap.xml", "robots.txt", "design-tokens.json"])


class TestZipExportPackager(unittest.TestCase):

    def test_package_writes_zip(self):
        with tempfile.TemporaryDirectory() as tmp:
            files = [ExportFile("/home.html", "<html></html>"), ExportFile("./robots.txt", "User-agent: *")]
            path = ZipExportPackager(tmp).package("Golden Crumb", files)
            self.assertTrue(path.endswith("golden-crumb.zip"))
            with zipfile.ZipFile(path) as archive:
                self.assertEqual(sorted(archive.namelist()), ["home.html", "robots.txt"])
                self.assertEqual(archive.read("home.html").decode(), "<html></html>")

    def test_package_rejects_bad_input(self):
        with tempfile.TemporaryDirectory() as tmp:
            packager = ZipExportPackager(tmp)
            with self.assertRaises(ExportError):
                packager.package("site", [])
            with self.assertRaises(ExportError):
                packager.package("site", [ExportFile("../escape.html", "x")])


@pytest.mark.parametrize("text,expected", [
    ("Our Story", "our-story"),
    ("  Café & Bakery!! ", "cafe-bakery"),
    ("aboutUs", "about-us"),
    ("---", ""),
])
def test_slugify(text, expected):
    assert slugify(text) == expected


def test_unique_slug_and_truncate():
    assert unique_slug("home", {"home", "home-2"}) == "home-3"
    assert unique_slug("menu", set()) == "menu"
    assert truncate("abcdef", 3) == "abc\n... (truncated)"
    assert truncate("abc", 10) == "abc"


def test_normalize_export_path():
    assert normalize_export_path("/a/./b.html") == "a/b.html"
    with pytest.raises(ExportError):
        normalize_export_path("/")


def test_config_from_env():
    config = PipelineConfig.from_env({
        "OLLAMA_HOST": "http://gpu-box:11434/",
        "SITESMITH_MAX_FIX_ATTEMPTS": "4",
        "SITESMITH_CALL_TIMEOUT": "0",
        "SITESMITH_BASE_URL": "https://crumb.example/",
        "SITESMITH_VERBOSE": "false",
    })
    assert config.ollama_host == "http://gpu-box:11434"
    assert config.retry.max_fix_attempts == 4
    assert config.retry.page_regenerations == 1
    assert config.call_timeout is None
    assert config.site_base_url == "https://crumb.example"
    assert config.verbose is False


def test_retry_policy_rejects_negative_bounds():
    with pytest.raises(ValueError):
        RetryPolicy(max_fix_attempts=-1)


def test_title_limit_comes_from_config():
    assert PipelineConfig().validation_rules.title_max_length == Limits.TITLE_MAX_LENGTH
    config = PipelineConfig.from_env({"SITESMITH_TITLE_MAX_LENGTH": "90"})
    assert config.validation_rules.title_max_length == 90
