"""
Accessibility audit.
====================
Parses a generated page and reports a fixed set of defects:
missing main landmark, unlabeled form controls, images without alt text,
and CSS that removes focus outlines.
"""
import re
from typing import List

from bs4 import BeautifulSoup, Tag

# input types that do not need a visible/accessible label
_UNLABELED_INPUT_TYPES = {"hidden", "submit", "button", "reset"}
_OUTLINE_REMOVED = re.compile(
    r"outline\s*:\s*(?:none|0(?:\.0+)?(?:px|em|rem)?)\s*(?:!important\s*)?(?:;|\}|\"|'|$)",
    re.IGNORECASE,
)


class AccessibilityAuditor:
    """
    Audits HTML for accessibility defects.

    Each check is independent and contributes at most one issue string.
    An empty list means the page passes. Parser failures are reported as
    a single issue rather than raised.
    """

    def audit(self, html: str) -> List[str]:
        try:
            soup = BeautifulSoup(html or "", "html.parser")
        except Exception as e:
            return [f"Unable to parse HTML for accessibility audit: {e}"]

        issues = []
        for check in (self._check_main, self._check_labels, self._check_images, self._check_focus_outline):
            issue = check(soup)
            if issue:
                issues.append(issue)
        return issues

    def _check_main(self, soup: BeautifulSoup):
        if soup.find("main") is not None:
            return None
        if soup.find(attrs={"role": re.compile(r"^\s*main\s*$", re.IGNORECASE)}) is not None:
            return None
        return "Missing <main> landmark element"

    def _check_labels(self, soup: BeautifulSoup):
        ids_in_doc = {tag.get("id") for tag in soup.find_all(id=True)}
        label_targets = {
            label.get("for").strip()
            for label in soup.find_all("label")
            if label.get("for") and label.get("for").strip()
        }

        offenders = []
        for control in soup.find_all(["input", "select", "textarea"]):
            if control.name == "input":
                input_type = (control.get("type") or "text").strip().lower()
                if input_type in _UNLABELED_INPUT_TYPES:
                    continue
            if self._has_label(control, ids_in_doc, label_targets):
                continue
            offenders.append(self._describe(control))

        if offenders:
            return f"Form controls missing accessible labels: {', '.join(offenders)}"
        return None

    def _has_label(self, control: Tag, ids_in_doc: set, label_targets: set) -> bool:
        aria_label = control.get("aria-label")
        if aria_label and aria_label.strip():
            return True
        labelled_by = control.get("aria-labelledby")
        if labelled_by and any(ref in ids_in_doc for ref in labelled_by.split()):
            return True
        control_id = control.get("id")
        if control_id and control_id.strip() in label_targets:
            return True
        return control.find_parent("label") is not None

    def _check_images(self, soup: BeautifulSoup):
        offenders = []
        for img in soup.find_all("img"):
            if (img.get("aria-hidden") or "").strip().lower() == "true":
                continue
            if (img.get("role") or "").strip().lower() == "presentation":
                continue
            alt = img.get("alt")
            if alt is None or not alt.strip():
                offenders.append(self._describe(img, attr="src"))
        if offenders:
            return f"Images missing alt text: {', '.join(offenders)}"
        return None

    def _check_focus_outline(self, soup: BeautifulSoup):
        for tag in soup.find_all(style=True):
            if _OUTLINE_REMOVED.search(tag.get("style", "") + ";"):
                return "CSS removes focus outlines (outline: none/0); keep a visible focus indicator"
        for style in soup.find_all("style"):
            if _OUTLINE_REMOVED.search(style.get_text()):
                return "CSS removes focus outlines (outline: none/0); keep a visible focus indicator"
        return None

    @staticmethod
    def _describe(tag: Tag, attr: str = "id") -> str:
        if attr == "id" and tag.get("id"):
            return f"{tag.name}#{tag['id']}"
        if attr == "src" and tag.get("src"):
            return f"{tag.name}[src={tag['src']}]"
        if tag.get("name"):
            return f"{tag.name}[name={tag['name']}]"
        return tag.name
