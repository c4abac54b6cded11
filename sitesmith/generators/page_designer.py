"""
LLMPageDesigner - Phase 2 Implementation

Plans the content of one page before it is built.
"""
import json
from typing import Optional

from ..domain import SiteBrief, SitePlan, PageEntry, PagePlan
from ..interfaces import IPageDesigner
from ..prompts.library import PROMPT_PAGE_PLAN


class LLMPageDesigner(IPageDesigner):
    """Designs a page."""

    def __init__(self, llm):
        self.llm = llm

    async def design_page(self, brief: SiteBrief, plan: SitePlan, entry: PageEntry) -> Optional[PagePlan]:
        prompt = PROMPT_PAGE_PLAN.format(
            topic=brief.topic,
            site_title=plan.site_title,
            page_id=entry.id,
            page_title=entry.title,
            page_purpose=entry.purpose or "(not specified)",
            site_map_json=json.dumps(plan.to_dict()["pages"]),
        )
        data = await self.llm.prompt_json(prompt, phase="page-plan", label=entry.title)
        if data is None:
            return None
        return PagePlan.from_model_output(data, entry)
