"""
Structural validation of generated HTML documents.
==================================================
Each enabled rule contributes at most one issue. Rules are evaluated in a
fixed order (html, head, body, title, external script) so issue lists are
deterministic.
"""
import re
from dataclasses import dataclass, field
from typing import List, Optional

from bs4 import BeautifulSoup

_EXTERNAL_SRC = re.compile(r"^\s*https?://", re.IGNORECASE)


@dataclass(frozen=True)
class ValidationRules:
    """Boolean rule set for StructuralValidator."""
    require_html: bool = True
    require_head: bool = True
    require_body: bool = True
    require_title: bool = True
    title_max_length: int = 70
    forbid_external_scripts: bool = True

    def describe(self) -> List[str]:
        """Human-readable requirements, used to brief the model."""
        lines = []
        if self.require_html:
            lines.append("The document must have an <html> root element.")
        if self.require_head:
            lines.append("The document must contain a <head> element.")
        if self.require_body:
            lines.append("The document must contain a <body> element.")
        if self.require_title:
            lines.append(f"The <head> must contain a non-empty <title> of at most {self.title_max_length} characters.")
        if self.forbid_external_scripts:
            lines.append("Do NOT load scripts from http:// or https:// URLs; inline any JavaScript.")
        return lines


@dataclass
class ValidationResult:
    valid: bool
    issues: List[str] = field(default_factory=list)


class StructuralValidator:
    """Checks a full HTML document against a ValidationRules set."""

    def __init__(self, rules: Optional[ValidationRules] = None):
        self.rules = rules or ValidationRules()

    def validate(self, html: str) -> ValidationResult:
        rules = self.rules
        issues: List[str] = []
        soup = BeautifulSoup(html or "", "html.parser")

        if rules.require_html and soup.find("html") is None:
            issues.append("Missing <html> element")
        if rules.require_head and soup.find("head") is None:
            issues.append("Missing <head> element")
        if rules.require_body and soup.find("body") is None:
            issues.append("Missing <body> element")
        if rules.require_title:
            title_issue = self._check_title(soup)
            if title_issue:
                issues.append(title_issue)
        if rules.forbid_external_scripts:
            external = [
                tag.get("src", "").strip()
                for tag in soup.find_all("script", src=True)
                if _EXTERNAL_SRC.match(tag.get("src", ""))
            ]
            if external:
                issues.append(f"External scripts are not allowed: {', '.join(external)}")

        return ValidationResult(valid=not issues, issues=issues)

    def _check_title(self, soup: BeautifulSoup) -> Optional[str]:
        title = soup.find("title")
        if title is None:
            return "Missing <title> element"
        text = title.get_text(strip=True)
        if not text:
            return "The <title> element is empty"
        if len(text) > self.rules.title_max_length:
            return f"The <title> is {len(text)} characters long (max {self.rules.title_max_length})"
        return None


def validate(html: str, rules: Optional[ValidationRules] = None) -> ValidationResult:
    """Convenience wrapper around StructuralValidator."""
    return StructuralValidator(rules).validate(html)
