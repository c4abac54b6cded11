"""
Generation phase of the pipeline.
==================================
Plans and builds every page, strictly in site-map order.
"""
from ..build_cycle import BuildCycle
from ..config import PipelineConfig
from ..context import RunState
from ..logger import PipelineLogger
from ..validators.accessibility import AccessibilityAuditor
from ...domain import BuiltPage, PageEntry, PagePlan
from ...errors import GatewayError, ModelCallTimeout
from ...validation import StructuralValidator


class GenerationPhase:
    """
    Executes the per-page loop.

    For each page:
    1. Page plan (falls back to a generic outline when unparseable)
    2. Build cycle (generate, validate, fix, audit, patch)
    3. One full regeneration with a reminder of the remaining issues,
       accepted whatever it yields

    A page is appended to the run only once it is finished, so an aborted
    page never reaches the result. Gateway failures are fatal to the page,
    not to the run.
    """

    def __init__(self, generators: dict, config: PipelineConfig, logger: PipelineLogger):
        self.page_designer = generators.get('page_designer')
        self.frontend = generators.get('frontend')
        self.config = config
        self.logger = logger
        self.validator = StructuralValidator(config.validation_rules)
        self.auditor = AccessibilityAuditor()

    def _new_cycle(self) -> BuildCycle:
        return BuildCycle(self.frontend, self.validator, self.auditor, self.config.retry, self.logger)

    async def execute(self, state: RunState):
        total = len(state.plan.pages)
        for index, entry in enumerate(state.plan.pages, start=1):
            self.logger.step(f"Page {index}/{total}: {entry.title} ({entry.filename})")
            page = await self._build_page(state, entry)
            state.pages.append(page)
            if page.valid:
                self.logger.success(f"Page '{page.id}' is ready")
            else:
                self.logger.warning(f"Page '{page.id}' finished with {len(page.issues)} issue(s)")

    async def _build_page(self, state: RunState, entry: PageEntry) -> BuiltPage:
        try:
            page_plan = await self.page_designer.design_page(state.brief, state.plan, entry)
        except ModelCallTimeout:
            raise
        except GatewayError as e:
            return self._failed(entry, e)
        if page_plan is None:
            self.logger.warning(f"Page plan for '{entry.id}' was not valid JSON; using a generic outline")
            page_plan = PagePlan.fallback(entry)

        prompt = self.frontend.build_prompt(state.brief, state.plan, state.chrome, state.tokens, page_plan)
        try:
            result = await self._new_cycle().run(entry, prompt)
        except ModelCallTimeout:
            raise
        except GatewayError as e:
            return self._failed(entry, e)
        thinking = list(result.thoughts)

        regenerations = 0
        while result.needs_regeneration and regenerations < self.config.retry.page_regenerations:
            regenerations += 1
            self.logger.step(f"Regenerating '{entry.id}' to address {len(result.issues)} issue(s)")
            retry_prompt = self.frontend.regeneration_prompt(prompt, result.issues)
            try:
                result = await self._new_cycle().run(entry, retry_prompt)
            except ModelCallTimeout:
                raise
            except GatewayError as e:
                self.logger.warning(f"Regeneration of '{entry.id}' failed, keeping previous attempt: {e}")
                break
            thinking.extend(result.thoughts)

        return BuiltPage(
            id=entry.id,
            title=entry.title,
            html=result.html,
            valid=result.valid,
            issues=list(result.issues),
            thinking=thinking,
            accessibility_issues=list(result.accessibility_issues),
        )

    def _failed(self, entry: PageEntry, error: Exception) -> BuiltPage:
        self.logger.error(f"Generation failed for '{entry.id}': {error}")
        return BuiltPage(
            id=entry.id,
            title=entry.title,
            html="",
            valid=False,
            issues=[f"Generation failed: {error}"],
        )
