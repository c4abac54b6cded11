"""
Per-page build cycle.
=====================
generating -> validating -> (fixing)* -> auditing -> (patching)? -> done

Every repair pass replaces the candidate HTML wholesale. The fix loop is
bounded by RetryPolicy.max_fix_attempts and exits on the first passing
validation; the accessibility patch runs at most
RetryPolicy.accessibility_patches times.
"""
from enum import Enum
from typing import List, Optional

from ..domain import BuildCycleResult, PageEntry
from ..errors import GatewayError, ModelCallTimeout
from ..interfaces import IFrontendGenerator
from ..thinking import ThinkingExtraction
from ..validation import StructuralValidator, ValidationResult
from .config import RetryPolicy
from .logger import PipelineLogger
from .validators.accessibility import AccessibilityAuditor

ACCESSIBILITY_PREFIX = "Accessibility: "


class BuildStage(str, Enum):
    GENERATING = "generating"
    VALIDATING = "validating"
    FIXING = "fixing"
    AUDITING = "auditing"
    PATCHING = "patching"
    DONE = "done"


class BuildCycle:
    """Runs one build cycle for one page."""

    def __init__(self, frontend: IFrontendGenerator, validator: StructuralValidator,
                 auditor: AccessibilityAuditor, retry: RetryPolicy, logger: PipelineLogger):
        self.frontend = frontend
        self.validator = validator
        self.auditor = auditor
        self.retry = retry
        self.logger = logger
        self.stages: List[BuildStage] = []

    def _enter(self, stage: BuildStage):
        self.stages.append(stage)

    async def run(self, entry: PageEntry, prompt: str) -> BuildCycleResult:
        """
        Builds, validates and repairs one page.

        A gateway failure of the initial build propagates to the caller.
        Gateway failures of repair passes are logged and the last candidate
        is kept. Timeouts always propagate.
        """
        self.stages = []
        self._enter(BuildStage.GENERATING)
        self.logger.step(f"Building page '{entry.id}'")
        draft = await self.frontend.build_page(prompt, entry)
        html = draft.cleaned
        thoughts = list(draft.thoughts)

        self._enter(BuildStage.VALIDATING)
        validation = self.validator.validate(html)
        if validation.valid:
            self.logger.success(f"'{entry.id}' passed structural validation")
        else:
            self.logger.warning(f"'{entry.id}' failed structural validation: {'; '.join(validation.issues)}")

        html, validation, fix_attempts = await self._fix_loop(entry, html, validation, thoughts)

        self._enter(BuildStage.AUDITING)
        a11y_issues = self.auditor.audit(html)
        if a11y_issues:
            self.logger.warning(f"'{entry.id}' accessibility issues: {'; '.join(a11y_issues)}")
            html, validation, a11y_issues = await self._patch(entry, html, validation, a11y_issues, thoughts)
        else:
            self.logger.success(f"'{entry.id}' passed the accessibility audit")

        self._enter(BuildStage.DONE)
        issues = list(validation.issues) + [ACCESSIBILITY_PREFIX + issue for issue in a11y_issues]
        return BuildCycleResult(
            html=html,
            thoughts=thoughts,
            valid=validation.valid and not a11y_issues,
            issues=issues,
            accessibility_issues=a11y_issues,
            fix_attempts=fix_attempts,
        )

    async def _repair(self, call, entry: PageEntry, what: str) -> Optional[ThinkingExtraction]:
        try:
            return await call
        except ModelCallTimeout:
            raise
        except GatewayError as e:
            self.logger.warning(f"{what} for '{entry.id}' failed, keeping previous HTML: {e}")
            return None

    async def _fix_loop(self, entry: PageEntry, html: str, validation: ValidationResult, thoughts: List[str]):
        limit = self.retry.max_fix_attempts
        attempts = 0
        while not validation.valid and attempts < limit:
            self._enter(BuildStage.FIXING)
            attempts += 1
            self.logger.step(f"Fixing '{entry.id}' (attempt {attempts}/{limit})")
            fixed = await self._repair(
                self.frontend.fix_structure(entry, html, validation.issues), entry, "Structure fix")
            if fixed is None:
                break
            thoughts.extend(fixed.thoughts)
            if fixed.cleaned.strip():
                html = fixed.cleaned
            self._enter(BuildStage.VALIDATING)
            validation = self.validator.validate(html)

        if attempts:
            if validation.valid:
                self.logger.success(f"'{entry.id}' fixed after {attempts} attempt(s)")
            else:
                self.logger.warning(f"'{entry.id}' still invalid after {attempts} fix attempt(s)")
        return html, validation, attempts

    async def _patch(self, entry: PageEntry, html: str, validation: ValidationResult,
                     a11y_issues: List[str], thoughts: List[str]):
        for _ in range(self.retry.accessibility_patches):
            self._enter(BuildStage.PATCHING)
            self.logger.step(f"Patching accessibility for '{entry.id}'")
            patched = await self._repair(
                self.frontend.patch_accessibility(entry, html, a11y_issues), entry, "Accessibility patch")
            if patched is None:
                break
            thoughts.extend(patched.thoughts)
            if patched.cleaned.strip():
                html = patched.cleaned
            validation = self.validator.validate(html)
            a11y_issues = self.auditor.audit(html)
            if not a11y_issues:
                break

        if a11y_issues:
            self.logger.warning(f"Accessibility patch did not fully resolve '{entry.id}': {'; '.join(a11y_issues)}")
        else:
            self.logger.success(f"Accessibility patch resolved all issues on '{entry.id}'")
        return html, validation, a11y_issues
