"""Pipeline module for sitesmith generation."""
from .config import PipelineConfig, RetryPolicy, FileNames, Limits
from .logger import PipelineLogger
from .context import RunState
from .artifacts import build_export_files, ZipExportPackager
from .build_cycle import BuildCycle, BuildStage
from .seo import inject_meta_tags, build_sitemap, build_robots
from .phases import PlanningPhase, GenerationPhase, VerificationPhase
from .validators import AccessibilityAuditor, CrossPageLinkChecker, BrokenLink
from .orchestrator import GenerationOrchestrator, default_generators

__all__ = [
    'PipelineConfig',
    'RetryPolicy',
    'FileNames',
    'Limits',
    'PipelineLogger',
    'RunState',
    'build_export_files',
    'ZipExportPackager',
    'BuildCycle',
    'BuildStage',
    'inject_meta_tags',
    'build_sitemap',
    'build_robots',
    'PlanningPhase',
    'GenerationPhase',
    'VerificationPhase',
    'AccessibilityAuditor',
    'CrossPageLinkChecker',
    'BrokenLink',
    'GenerationOrchestrator',
    'default_generators',
]
