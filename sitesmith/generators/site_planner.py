"""
LLMSitePlanner - Phase 1 Implementation

Produces the run-wide artifacts with JSON-mode calls:
shared chrome, site map and design tokens.
"""
import json

from ..domain import SiteBrief, SitePlan, SharedChrome, DesignTokens
from ..errors import GenerationError
from ..interfaces import ISitePlanner
from ..prompts.library import PROMPT_SHARED_CHROME, PROMPT_SITE_MAP, PROMPT_DESIGN_TOKENS


class LLMSitePlanner(ISitePlanner):
    """Plans the site. Any unusable response raises GenerationError."""

    def __init__(self, llm):
        self.llm = llm

    async def generate_chrome(self, brief: SiteBrief) -> SharedChrome:
        prompt = PROMPT_SHARED_CHROME.format(topic=brief.topic, page_count=brief.page_count)
        data = await self.llm.prompt_json(prompt, phase="chrome", label="Shared header & footer")
        if data is None:
            raise GenerationError("chrome", "Model did not return a JSON object for the shared chrome")

        chrome = SharedChrome.from_model_output(data)
        if not chrome.is_complete:
            missing = [name for name, value in (("header", chrome.header), ("footer", chrome.footer)) if not value]
            raise GenerationError("chrome", f"Shared chrome is missing: {', '.join(missing)}")
        return chrome

    async def generate_site_map(self, brief: SiteBrief, site_title_hint: str = "") -> SitePlan:
        prompt = PROMPT_SITE_MAP.format(
            topic=brief.topic,
            page_count=brief.page_count,
            site_title_hint=site_title_hint or "(choose one)",
        )
        data = await self.llm.prompt_json(prompt, phase="sitemap", label="Site map")
        if data is None:
            raise GenerationError("sitemap", "Model did not return a JSON object for the site map")

        plan = SitePlan.from_model_output(data, brief.page_count, fallback_title=site_title_hint or brief.topic)
        if not plan.pages:
            raise GenerationError("sitemap", "Site map contains no usable pages")
        return plan

    async def generate_design_tokens(self, brief: SiteBrief, plan: SitePlan) -> DesignTokens:
        pages_summary = json.dumps([{"id": p.id, "title": p.title} for p in plan.pages])
        prompt = PROMPT_DESIGN_TOKENS.format(
            topic=brief.topic,
            site_title=plan.site_title,
            pages_summary=pages_summary,
        )
        data = await self.llm.prompt_json(prompt, phase="tokens", label="Design tokens")
        if data is None:
            raise GenerationError("tokens", "Model did not return a JSON object for the design tokens")
        return DesignTokens.from_model_output(data).with_defaults()
