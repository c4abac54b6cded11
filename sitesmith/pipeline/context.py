"""
Run state management.
=====================
One RunState per generation run. Only the run's own task mutates it;
observers read it through the orchestrator.
"""
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from ..domain import (
    SiteBrief, SitePlan, SharedChrome, DesignTokens, BuiltPage, SeoArtifacts,
    ExportFile, RunStatus, BuildResult,
)
from ..streaming import LiveStream
from .logger import PipelineLogger


@dataclass
class RunState:
    """Holds all state during one generation run."""

    brief: SiteBrief
    logger: PipelineLogger
    live: LiveStream = field(default_factory=LiveStream)
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    status: RunStatus = RunStatus.RUNNING

    # Run-wide artifacts, set once
    chrome: Optional[SharedChrome] = None
    plan: Optional[SitePlan] = None
    tokens: Optional[DesignTokens] = None

    # Per-page results, in plan order
    pages: List[BuiltPage] = field(default_factory=list)

    seo: Optional[SeoArtifacts] = None
    export_files: List[ExportFile] = field(default_factory=list)

    error: Optional[str] = None
    cancel_reason: Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.status != RunStatus.RUNNING

    def get_page(self, page_id: str) -> Optional[BuiltPage]:
        for page in self.pages:
            if page.id == page_id:
                return page
        return None

    def to_result(self) -> BuildResult:
        return BuildResult(
            status=self.status,
            pages=list(self.pages),
            plan=self.plan,
            chrome=self.chrome,
            tokens=self.tokens,
            seo=self.seo,
            log=list(self.logger.lines),
            error=self.error,
            cancel_reason=self.cancel_reason,
            export_files=list(self.export_files),
        )
