"""
Pipeline configuration constants.
================================
Centralizes retry bounds, file names, and limits.
"""
import os
from dataclasses import dataclass, field
from typing import Optional

from ..validation import ValidationRules

DEFAULT_OLLAMA_HOST = "http://127.0.0.1:11434"


class FileNames:
    """Standard file names for exported artifacts."""
    SITEMAP = "sitemap.xml"
    ROBOTS = "robots.txt"
    TOKENS = "design-tokens.json"


class Limits:
    """Pipeline limits and thresholds."""
    MAX_FIX_ATTEMPTS = 2
    PAGE_REGENERATIONS = 1
    ACCESSIBILITY_PATCHES = 1
    LINK_FIX_PASSES = 1
    HTML_TRUNCATE_LENGTH = 24000
    CALL_TIMEOUT_SECONDS = 600.0
    TITLE_MAX_LENGTH = 70


@dataclass(frozen=True)
class RetryPolicy:
    """
    Every repair bound of a run, in one place.

    The fix loop is the only loop; the other counts are single extra
    attempts that are accepted whatever they yield.
    """
    max_fix_attempts: int = Limits.MAX_FIX_ATTEMPTS
    page_regenerations: int = Limits.PAGE_REGENERATIONS
    accessibility_patches: int = Limits.ACCESSIBILITY_PATCHES
    link_fix_passes: int = Limits.LINK_FIX_PASSES

    def __post_init__(self):
        for name in ("max_fix_attempts", "page_regenerations", "accessibility_patches", "link_fix_passes"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")


@dataclass
class PipelineConfig:
    """Runtime configuration for the pipeline."""
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    validation_rules: ValidationRules = field(
        default_factory=lambda: ValidationRules(title_max_length=Limits.TITLE_MAX_LENGTH))
    call_timeout: Optional[float] = Limits.CALL_TIMEOUT_SECONDS
    site_base_url: str = "https://example.com"
    ollama_host: str = DEFAULT_OLLAMA_HOST
    html_truncate_length: int = Limits.HTML_TRUNCATE_LENGTH
    verbose: bool = True

    @staticmethod
    def from_env(environ=None) -> "PipelineConfig":
        """
        Builds a config from SITESMITH_* variables (plus OLLAMA_HOST).
        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        timeout_raw = env.get("SITESMITH_CALL_TIMEOUT")
        timeout: Optional[float] = Limits.CALL_TIMEOUT_SECONDS
        if timeout_raw:
            timeout = float(timeout_raw)
            if timeout <= 0:
                timeout = None
        return PipelineConfig(
            retry=RetryPolicy(
                max_fix_attempts=int(env.get("SITESMITH_MAX_FIX_ATTEMPTS", Limits.MAX_FIX_ATTEMPTS)),
            ),
            validation_rules=ValidationRules(
                title_max_length=int(env.get("SITESMITH_TITLE_MAX_LENGTH", Limits.TITLE_MAX_LENGTH)),
            ),
            call_timeout=timeout,
            site_base_url=env.get("SITESMITH_BASE_URL", "https://example.com").rstrip("/"),
            ollama_host=(env.get("OLLAMA_HOST") or DEFAULT_OLLAMA_HOST).rstrip("/"),
            verbose=env.get("SITESMITH_VERBOSE", "1").lower() not in ("0", "false", "no"),
        )
