"""
Unified logging for the pipeline.
==================================
Provides consistent log formatting with emoji prefixes and keeps the
ordered, human-readable run log that is handed back with every result.
"""
import logging
from enum import Enum
from typing import List


class LogLevel(Enum):
    """Log level indicators with emoji prefixes."""
    PHASE = "🚀"
    STEP = "📋"
    SUCCESS = "✅"
    WARNING = "⚠️"
    ERROR = "❌"
    DEBUG = "🔍"
    INFO = "ℹ️"


class PipelineLogger:
    """
    Unified logger for pipeline operations.

    Everything except debug output is also appended to `lines`, the run
    log. The run log is narration only; no control flow reads it.
    """

    def __init__(self, name: str = "sitesmith.pipeline", verbose: bool = True):
        self.logger = logging.getLogger(name)
        self.verbose = verbose
        self.lines: List[str] = []
        self._setup_handler()

    def _setup_handler(self):
        """Configure logging handler and formatter."""
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter('%(message)s')
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)
        self.logger.setLevel(logging.DEBUG if self.verbose else logging.INFO)

    def _record(self, level: LogLevel, message: str) -> str:
        line = f"{level.value} {message}"
        self.lines.append(line)
        return line

    def phase(self, message: str):
        """Log a major phase start."""
        line = self._record(LogLevel.PHASE, f"[PHASE] {message}")
        self.logger.info(f"\n{line}")

    def step(self, message: str):
        """Log a step within a phase."""
        self.logger.info(self._record(LogLevel.STEP, message))

    def success(self, message: str):
        self.logger.info(self._record(LogLevel.SUCCESS, message))

    def warning(self, message: str):
        self.logger.warning(self._record(LogLevel.WARNING, message))

    def error(self, message: str):
        self.logger.error(self._record(LogLevel.ERROR, message))

    def debug(self, message: str):
        """Log a debug message (only if verbose). Not part of the run log."""
        if self.verbose:
            self.logger.debug(f"{LogLevel.DEBUG.value} [DEBUG] {message}")

    def info(self, message: str):
        self.logger.info(self._record(LogLevel.INFO, message))
