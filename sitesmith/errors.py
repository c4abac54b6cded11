"""
Error taxonomy for site generation.
===================================
Fatal-to-run failures surface as GenerationError, transport problems as
GatewayError. Cancellation is not an error and uses asyncio.CancelledError.
"""
from typing import Optional


class SitesmithError(Exception):
    """Base class for all sitesmith errors."""


class BriefError(SitesmithError, ValueError):
    """Raised when a site brief does not satisfy the run preconditions."""


class GatewayError(SitesmithError):
    """Raised when the model service rejects or fails a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ModelCallTimeout(GatewayError):
    """Raised when a single model call exceeds its deadline."""

    def __init__(self, phase: str, seconds: float):
        super().__init__(f"Model call for '{phase}' timed out after {seconds:g}s")
        self.phase = phase
        self.seconds = seconds


class GenerationError(SitesmithError):
    """A stage failed in a way that terminates the whole run."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"[{stage}] {message}")
        self.stage = stage


class ExportError(SitesmithError):
    """Raised when generated files cannot be packaged."""
