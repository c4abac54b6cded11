"""
sitesmith Generation Orchestrator
=================================
Coordinates one site-generation run at a time.

Coordinates three phases:
1. Planning - Shared chrome, site map, design tokens
2. Generation - Page plan and build cycle for each page
3. Verification - Link repair, SEO, meta injection, final sweep, export files

Each run executes as its own asyncio task. Starting a new run cancels the
previous one first; cancelled runs keep whatever stages they completed.
"""
import asyncio
from typing import Callable, Dict, Optional

from ..domain import BuildResult, RunStatus, SiteBrief
from ..errors import ModelCallTimeout, SitesmithError
from ..generators import LLMSitePlanner, LLMPageDesigner, LLMFrontendGenerator, LLMSeoGenerator
from ..interfaces import IModelGateway
from ..streaming import LiveStream
from .config import PipelineConfig
from .context import RunState
from .logger import PipelineLogger
from .model_client import RunModelClient
from .phases import PlanningPhase, GenerationPhase, VerificationPhase

GeneratorFactory = Callable[[RunModelClient, PipelineConfig], Dict[str, object]]


def default_generators(llm: RunModelClient, config: PipelineConfig) -> Dict[str, object]:
    """Bundle generators for phases."""
    return {
        'site_planner': LLMSitePlanner(llm),
        'page_designer': LLMPageDesigner(llm),
        'frontend': LLMFrontendGenerator(llm, config.validation_rules, config.html_truncate_length),
        'seo': LLMSeoGenerator(llm),
        'llm': llm,
    }


class GenerationOrchestrator:
    """
    Runs generation sessions against a model gateway.

    `is_running`, `current_state` and `live` form the observer surface;
    observers must treat them as read-only.
    """

    def __init__(self, gateway: IModelGateway, config: Optional[PipelineConfig] = None,
                 generators: Optional[GeneratorFactory] = None):
        """
        Args:
            gateway: Model service
            config: Pipeline configuration (optional)
            generators: Factory building the generator bundle for a run (optional)
        """
        self.gateway = gateway
        self.config = config or PipelineConfig()
        self._generator_factory = generators or default_generators
        self._task: Optional[asyncio.Task] = None
        self._state: Optional[RunState] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def current_state(self) -> Optional[RunState]:
        return self._state

    @property
    def live(self) -> Optional[LiveStream]:
        return self._state.live if self._state is not None else None

    async def run_generation(self, brief: SiteBrief) -> BuildResult:
        """
        Executes a full generation run.

        Raises BriefError when the brief does not satisfy the preconditions.
        Fatal stage failures come back as status FAILED, cancellation and
        call timeouts as status CANCELLED.
        """
        brief.validate()
        # Another caller may have started a run while we waited; no await
        # may sit between this loop and the assignment of self._task.
        while self.is_running:
            await self.cancel("superseded by a new run")

        state = RunState(brief=brief, logger=PipelineLogger(verbose=self.config.verbose))
        self._state = state
        task = asyncio.create_task(self._execute(state), name=f"sitesmith-run-{state.run_id}")
        self._task = task
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            if not state.finished:
                # Cancelled before its first step ran.
                state.status = RunStatus.CANCELLED
                state.live.close()
            return state.to_result()
        finally:
            if self._task is task:
                self._task = None

    async def cancel(self, reason: str = "cancelled by user") -> bool:
        """
        Aborts the in-flight run, if any, and waits for it to stop.
        Returns True when a run was cancelled.
        """
        task = self._task
        if task is None or task.done():
            return False
        state = self._state
        state.cancel_reason = reason
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
        return True

    async def _execute(self, state: RunState) -> BuildResult:
        logger = state.logger
        brief = state.brief
        llm = RunModelClient(self.gateway, brief, state.live, self.config.call_timeout)
        generators = self._generator_factory(llm, self.config)
        planning = PlanningPhase(generators, self.config, logger)
        generation = GenerationPhase(generators, self.config, logger)
        verification = VerificationPhase(generators, self.config, logger)

        try:
            logger.phase(f"Starting run {state.run_id}: '{brief.topic}' "
                         f"({brief.page_count} page(s), model {brief.model_id})")
            logger.phase("Phase 1: Planning")
            await planning.execute(state)

            logger.phase("Phase 2: Page generation")
            await generation.execute(state)

            logger.phase("Phase 3: Verification")
            await verification.execute(state)

            state.status = RunStatus.COMPLETED
            logger.phase("Run complete")
            self._print_summary(state, llm)
        except ModelCallTimeout as e:
            state.status = RunStatus.CANCELLED
            state.cancel_reason = str(e)
            logger.info(f"Run stopped: {e}")
        except asyncio.CancelledError:
            state.status = RunStatus.CANCELLED
            state.cancel_reason = state.cancel_reason or "cancelled"
            logger.info(f"Run cancelled ({state.cancel_reason}); kept {len(state.pages)} finished page(s)")
            raise
        except SitesmithError as e:
            state.status = RunStatus.FAILED
            state.error = str(e)
            logger.error(f"Run failed: {e}")
        except Exception as e:
            state.status = RunStatus.FAILED
            state.error = f"Unexpected error: {e}"
            logger.error(f"Run failed: {e}")
            raise
        finally:
            state.live.close()

        return state.to_result()

    def _print_summary(self, state: RunState, llm: RunModelClient):
        """Logs the run summary."""
        valid = len([p for p in state.pages if p.valid])
        logger = state.logger
        logger.info(f"Site: {state.plan.site_title}")
        logger.info(f"Pages: {valid}/{len(state.pages)} valid")
        logger.info(f"SEO assets: {'yes' if state.seo is not None else 'no'}")
        logger.info(f"Model calls: {llm.calls}")
