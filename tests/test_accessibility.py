import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import unittest

from sitesmith.mocks import page_html
from sitesmith.pipeline.validators.accessibility import AccessibilityAuditor


def doc(body: str, head: str = "") -> str:
    return f"<!DOCTYPE html><html><head><title>T</title>{head}</head><body>{body}</body></html>"


class TestAccessibilityAuditor(unittest.TestCase):

    def setUp(self):
        self.auditor = AccessibilityAuditor()

    def test_clean_page_passes(self):
        self.assertEqual(self.auditor.audit(page_html("home", ["home", "about"])), [])

    def test_missing_main(self):
        self.assertEqual(self.auditor.audit(doc("<p>hi</p>")), ["Missing <main> landmark element"])

    def test_role_main_counts_as_landmark(self):
        self.assertEqual(self.auditor.audit(doc('<div role="main"><p>hi</p></div>')), [])

    def test_unlabeled_controls_collected_into_one_issue(self):
        body = ('<main><input id="q" type="text"><input type="hidden" name="t">'
                '<input type="submit"><select name="size"></select><textarea></textarea></main>')
        self.assertEqual(self.auditor.audit(doc(body)), [
            "Form controls missing accessible labels: input#q, select[name=size], textarea",
        ])

    def test_each_label_source_is_accepted(self):
        body = ('<main>'
                '<input id="a" aria-label="Search">'
                '<span id="lbl">Email</span><input id="b" aria-labelledby="lbl">'
                '<label for="c">Name</label><input id="c">'
                '<label>Phone <input id="d" type="tel"></label>'
                '<input type="reset"><input type="button">'
                '</main>')
        self.assertEqual(self.auditor.audit(doc(body)), [])

    def test_labelledby_must_reference_existing_element(self):
        body = '<main><input id="e" aria-labelledby="nope"><input aria-label="   " name="x"></main>'
        self.assertEqual(self.auditor.audit(doc(body)), [
            "Form controls missing accessible labels: input#e, input[name=x]",
        ])

    def test_images_missing_alt(self):
        body = ('<main><img src="a.jpg"><img src="b.jpg" alt=""><img src="c.jpg" aria-hidden="true">'
                '<img src="d.jpg" role="presentation"><img src="e.jpg" alt="Loaf"></main>')
        self.assertEqual(self.auditor.audit(doc(body)), ["Images missing alt text: img[src=a.jpg], img[src=b.jpg]"])

    def test_focus_outline_removed_in_style_block(self):
        html = doc("<main></main>", head="<style>a:focus { outline: none; }</style>")
        self.assertEqual(len(self.auditor.audit(html)), 1)
        self.assertIn("outline", self.auditor.audit(html)[0])

    def test_focus_outline_removed_inline(self):
        html = doc('<main><a href="#" style="color: red; outline:0">x</a></main>')
        self.assertEqual(len(self.auditor.audit(html)), 1)

    def test_visible_outline_is_fine(self):
        html = doc("<main></main>", head="<style>a:focus { outline: 2px solid red; outline-offset: 0; }</style>")
        self.assertEqual(self.auditor.audit(html), [])

    def test_issues_follow_check_order(self):
        html = doc('<input id="q"><img src="a.jpg">', head="<style>*{outline:none}</style>")
        issues = self.auditor.audit(html)
        self.assertEqual(len(issues), 4)
        self.assertTrue(issues[0].startswith("Missing <main>"))
        self.assertTrue(issues[1].startswith("Form controls"))
        self.assertTrue(issues[2].startswith("Images"))
        self.assertTrue(issues[3].startswith("CSS removes focus outlines"))


if __name__ == '__main__':
    unittest.main()
