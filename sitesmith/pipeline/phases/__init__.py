"""Phases module."""
from .planning import PlanningPhase
from .generation import GenerationPhase
from .verification import VerificationPhase

__all__ = ['PlanningPhase', 'GenerationPhase', 'VerificationPhase']
