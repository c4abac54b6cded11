"""
Planning phase of the pipeline.
================================
Generates shared chrome, site map, and design tokens.
"""
from ..config import PipelineConfig
from ..context import RunState
from ..logger import PipelineLogger
from ...errors import GatewayError, GenerationError, ModelCallTimeout


class PlanningPhase:
    """
    Executes the planning phase of generation.

    This phase:
    1. Generates the shared header/footer
    2. Generates the site map, using the chrome's site title as a hint
    3. Generates design tokens

    Every step is fatal to the run: unusable output or a gateway failure
    raises GenerationError and no pages are produced.
    """

    def __init__(self, generators: dict, config: PipelineConfig, logger: PipelineLogger):
        self.site_planner = generators.get('site_planner')
        self.config = config
        self.logger = logger

    async def execute(self, state: RunState):
        brief = state.brief

        # Step 1: Shared chrome
        self.logger.step("Generating shared header & footer...")
        state.chrome = await self._stage("chrome", self.site_planner.generate_chrome(brief))
        self.logger.success(
            f"Shared chrome ready (header {len(state.chrome.header)} chars, footer {len(state.chrome.footer)} chars)")

        # Step 2: Site map
        self.logger.step("Generating site map...")
        hint = state.chrome.site_title or ""
        state.plan = await self._stage("sitemap", self.site_planner.generate_site_map(brief, hint))
        self.logger.success(f"Site map: '{state.plan.site_title}' with pages {', '.join(state.plan.page_ids)}")
        if len(state.plan.pages) < brief.page_count:
            self.logger.warning(
                f"Requested {brief.page_count} pages, model planned {len(state.plan.pages)}; continuing")

        # Step 3: Design tokens
        self.logger.step("Generating design tokens...")
        state.tokens = await self._stage("tokens", self.site_planner.generate_design_tokens(brief, state.plan))
        self.logger.success(f"Design tokens ready ({len(state.tokens.values)} values)")

    async def _stage(self, stage: str, call):
        try:
            return await call
        except ModelCallTimeout:
            raise
        except GatewayError as e:
            raise GenerationError(stage, f"Model service failed: {e}") from e
