"""Validators module."""
from .accessibility import AccessibilityAuditor
from .links import BrokenLink, CrossPageLinkChecker, normalize_href

__all__ = ['AccessibilityAuditor', 'BrokenLink', 'CrossPageLinkChecker', 'normalize_href']
