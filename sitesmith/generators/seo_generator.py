"""
LLMSeoGenerator - SEO Pack Implementation

One JSON-mode call producing sitemap, robots.txt and per-page tags.
"""
import json
from typing import Optional

from ..domain import SiteBrief, SitePlan, SeoArtifacts
from ..interfaces import ISeoGenerator
from ..prompts.library import PROMPT_SEO_PACK


class LLMSeoGenerator(ISeoGenerator):
    """Generates the SEO pack. Unparseable output yields None."""

    def __init__(self, llm):
        self.llm = llm

    async def generate(self, brief: SiteBrief, plan: SitePlan, base_url: str) -> Optional[SeoArtifacts]:
        prompt = PROMPT_SEO_PACK.format(
            topic=brief.topic,
            site_title=plan.site_title,
            base_url=base_url,
            pages_json=json.dumps([p.to_dict() for p in plan.pages]),
        )
        data = await self.llm.prompt_json(prompt, phase="seo", label="SEO pack")
        if data is None:
            return None
        seo = SeoArtifacts.from_model_output(data)
        # Tags for ids outside the plan would never be injected anywhere.
        known = set(plan.page_ids)
        seo.pages = [tags for tags in seo.pages if tags.page_id in known]
        return seo
