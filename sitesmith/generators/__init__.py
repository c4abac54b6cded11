from .site_planner import LLMSitePlanner
from .page_designer import LLMPageDesigner
from .frontend_generator import LLMFrontendGenerator
from .seo_generator import LLMSeoGenerator

__all__ = [
    "LLMSitePlanner",
    "LLMPageDesigner",
    "LLMFrontendGenerator",
    "LLMSeoGenerator",
]
