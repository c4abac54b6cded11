"""
Verification phase of the pipeline.
====================================
Cross-page link repair, SEO pack, meta injection, the final validation
sweep, and export handoff.
"""
from typing import Dict, List

from ..artifacts import build_export_files
from ..build_cycle import ACCESSIBILITY_PREFIX
from ..config import PipelineConfig
from ..context import RunState
from ..logger import PipelineLogger
from ..seo import inject_meta_tags, build_sitemap, build_robots, sitemap_covers
from ..validators.accessibility import AccessibilityAuditor
from ..validators.links import BrokenLink, CrossPageLinkChecker
from ...domain import PageEntry
from ...errors import GatewayError, ModelCallTimeout
from ...validation import StructuralValidator


def _describe_broken(broken: Dict[str, List[BrokenLink]]) -> str:
    return "; ".join(
        f"{page_id}: {', '.join(link.href for link in links)}" for page_id, links in broken.items()
    )


class VerificationPhase:
    """
    Executes the site-wide steps that need every page.

    This phase:
    1. Audits cross-page links and runs one corrective pass per affected page
    2. Requests the SEO pack (degraded, never fatal)
    3. Injects meta tags before </head>
    4. Recomputes structural and accessibility validity for every page
    5. Prepares the export file list
    """

    def __init__(self, generators: dict, config: PipelineConfig, logger: PipelineLogger):
        self.frontend = generators.get('frontend')
        self.seo_generator = generators.get('seo')
        self.config = config
        self.logger = logger
        self.validator = StructuralValidator(config.validation_rules)
        self.auditor = AccessibilityAuditor()
        self.link_checker = CrossPageLinkChecker()

    async def execute(self, state: RunState):
        await self._repair_links(state)
        await self._seo_pack(state)
        self._inject_meta(state)
        self._final_sweep(state)

        state.export_files = build_export_files(state.to_result())
        self.logger.info(f"Prepared {len(state.export_files)} export file(s)")

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    async def _repair_links(self, state: RunState):
        self.logger.step("Auditing cross-page links...")
        broken = self.link_checker.check(state.pages)
        if not broken:
            self.logger.success("No broken internal links")
            return
        self.logger.warning(f"Broken internal links: {_describe_broken(broken)}")

        id_title_map = state.plan.id_title_map()
        for _ in range(self.config.retry.link_fix_passes):
            for page_id, links in broken.items():
                page = state.get_page(page_id)
                entry = state.plan.get(page_id) or PageEntry(id=page.id, title=page.title)
                self.logger.step(f"Fixing {len(links)} link(s) on '{page_id}'")
                try:
                    fixed = await self.frontend.fix_links(entry, page.html, links, id_title_map)
                except ModelCallTimeout:
                    raise
                except GatewayError as e:
                    self.logger.warning(f"Link fix for '{page_id}' failed, keeping previous HTML: {e}")
                    continue
                page.thinking.extend(fixed.thoughts)
                if fixed.cleaned.strip():
                    page.html = fixed.cleaned

            broken = self.link_checker.check(state.pages)
            if not broken:
                break

        if broken:
            self.logger.warning(f"Links still broken after repair: {_describe_broken(broken)}")
        else:
            self.logger.success("Link repair resolved every broken link")

    # ------------------------------------------------------------------
    # SEO
    # ------------------------------------------------------------------

    async def _seo_pack(self, state: RunState):
        self.logger.step("Generating SEO pack...")
        base_url = self.config.site_base_url
        try:
            seo = await self.seo_generator.generate(state.brief, state.plan, base_url)
        except ModelCallTimeout:
            raise
        except GatewayError as e:
            self.logger.warning(f"SEO pack request failed, continuing without SEO assets: {e}")
            return
        if seo is None:
            self.logger.warning("SEO pack was not valid JSON, continuing without SEO assets")
            return

        page_ids = [page.id for page in state.pages]
        if not seo.sitemap or not sitemap_covers(seo.sitemap, page_ids):
            self.logger.info("Sitemap missing or incomplete; generating one from the page list")
            seo.sitemap = build_sitemap(page_ids, base_url)
        if not seo.robots:
            seo.robots = build_robots(base_url)
        state.seo = seo
        self.logger.success(f"SEO pack ready ({len(seo.pages)} page tag set(s))")

    def _inject_meta(self, state: RunState):
        if state.seo is None:
            return
        injected = 0
        for page in state.pages:
            tags = state.seo.tags_for(page.id)
            if tags is None or not page.html:
                continue
            updated = inject_meta_tags(page.html, tags.all_tags)
            if updated != page.html:
                page.html = updated
                injected += 1
        self.logger.info(f"Injected meta tags into {injected} page(s)")

    # ------------------------------------------------------------------
    # Final sweep
    # ------------------------------------------------------------------

    def _final_sweep(self, state: RunState):
        self.logger.step("Final validation sweep...")
        for page in state.pages:
            if not page.html:
                # Generation failed; its issue list already says why.
                page.valid = False
                continue
            structural = self.validator.validate(page.html)
            a11y_issues = self.auditor.audit(page.html)
            page.accessibility_issues = a11y_issues
            page.issues = list(structural.issues) + [ACCESSIBILITY_PREFIX + issue for issue in a11y_issues]
            page.valid = structural.valid and not a11y_issues

        valid = [page.id for page in state.pages if page.valid]
        invalid = [page.id for page in state.pages if not page.valid]
        if invalid:
            self.logger.warning(f"{len(valid)}/{len(state.pages)} pages valid; needs attention: {', '.join(invalid)}")
        else:
            self.logger.success(f"All {len(state.pages)} pages valid")
