"""
LLMFrontendGenerator - Page Build Implementation

Builds full HTML documents with streaming calls and produces the
full-replacement repair passes (structure fix, accessibility patch,
link fix).
"""
import json
from typing import Dict, List, Optional

from ..domain import SiteBrief, SitePlan, SharedChrome, DesignTokens, PageEntry, PagePlan
from ..interfaces import IFrontendGenerator
from ..prompts.library import (
    PROMPT_PAGE_BUILD, PROMPT_REGENERATION_REMINDER, PROMPT_STRUCTURE_FIX,
    PROMPT_ACCESSIBILITY_PATCH, PROMPT_LINK_FIX,
)
from ..thinking import ThinkingExtraction, extract_html_document
from ..utils import truncate
from ..validation import ValidationRules


def _bullets(items: List[str]) -> str:
    return "\n".join(f"- {item}" for item in items) or "- (none)"


class LLMFrontendGenerator(IFrontendGenerator):
    """Generates and repairs page HTML using LLM."""

    def __init__(self, llm, rules: Optional[ValidationRules] = None,
                 html_truncate_length: int = 24000):
        self.llm = llm
        self.rules = rules or ValidationRules()
        self.html_truncate_length = html_truncate_length

    async def _stream_document(self, prompt: str, phase: str, label: str) -> ThinkingExtraction:
        result = await self.llm.stream_text(prompt, phase=phase, label=label)
        return ThinkingExtraction(cleaned=extract_html_document(result.cleaned), thoughts=result.thoughts)

    def build_prompt(self, brief: SiteBrief, plan: SitePlan, chrome: SharedChrome,
                     tokens: DesignTokens, page_plan: PagePlan) -> str:
        nav_links = "\n".join(f"- {p.filename}: {p.title}" for p in plan.pages)
        return PROMPT_PAGE_BUILD.format(
            topic=brief.topic,
            site_title=plan.site_title,
            page_id=page_plan.id,
            page_title=page_plan.title,
            page_plan_json=json.dumps(page_plan.to_dict(), indent=2),
            design_tokens_json=tokens.to_json(),
            nav_links=nav_links,
            header_html=chrome.header,
            footer_html=chrome.footer,
            structure_rules=_bullets(self.rules.describe()),
        )

    def regeneration_prompt(self, original_prompt: str, issues: List[str]) -> str:
        return original_prompt + PROMPT_REGENERATION_REMINDER.format(issues_list=_bullets(issues))

    async def build_page(self, prompt: str, entry: PageEntry) -> ThinkingExtraction:
        return await self._stream_document(prompt, phase="page-build", label=entry.title)

    async def fix_structure(self, entry: PageEntry, html: str, issues: List[str]) -> ThinkingExtraction:
        prompt = PROMPT_STRUCTURE_FIX.format(
            page_id=entry.id,
            page_title=entry.title,
            issues_list=_bullets(issues),
            structure_rules=_bullets(self.rules.describe()),
            previous_html=truncate(html, self.html_truncate_length),
        )
        return await self._stream_document(prompt, phase="page-fix", label=entry.title)

    async def patch_accessibility(self, entry: PageEntry, html: str, issues: List[str]) -> ThinkingExtraction:
        prompt = PROMPT_ACCESSIBILITY_PATCH.format(
            page_id=entry.id,
            page_title=entry.title,
            issues_list=_bullets(issues),
            previous_html=truncate(html, self.html_truncate_length),
        )
        return await self._stream_document(prompt, phase="a11y-patch", label=entry.title)

    async def fix_links(self, entry: PageEntry, html: str, broken: List,
                        id_title_map: Dict[str, str]) -> ThinkingExtraction:
        broken_lines = [f'href="{link.href}" (text: "{link.link_text}")' for link in broken]
        valid_pages = {f"{page_id}.html": title for page_id, title in id_title_map.items()}
        prompt = PROMPT_LINK_FIX.format(
            page_id=entry.id,
            page_title=entry.title,
            broken_links_list=_bullets(broken_lines),
            valid_pages_json=json.dumps(valid_pages, indent=2),
            previous_html=truncate(html, self.html_truncate_length),
        )
        return await self._stream_document(prompt, phase="link-fix", label=entry.title)
