from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, Dict, List, Optional

from .domain import (
    SiteBrief, SitePlan, SharedChrome, DesignTokens, PageEntry, PagePlan, SeoArtifacts,
)
from .thinking import ThinkingExtraction


@dataclass
class GatewayRequest:
    """One request to the model service."""
    model_id: str
    prompt: str
    system_preamble: Optional[str] = None
    json_mode: bool = False
    stream: bool = False


# =============================================================================
# Model Gateway
# =============================================================================

class IModelGateway(ABC):
    """
    Text-completion / streaming oracle.

    Implementations raise GatewayError for transport failures and
    non-success statuses.
    """

    @abstractmethod
    async def complete(self, request: GatewayRequest) -> str:
        """Returns the full response text."""
        pass

    @abstractmethod
    def stream(self, request: GatewayRequest) -> AsyncIterator[str]:
        """
        Yields text deltas as they arrive.

        Returns an async generator; callers should close it with
        contextlib.aclosing so an aborted call releases the connection.
        """
        pass

    @abstractmethod
    async def list_models(self) -> List[str]:
        """Names of the models the service can run."""
        pass

    async def aclose(self):
        """Releases transport resources."""
        return None


# =============================================================================
# Phase 1: Planning Interfaces
# =============================================================================

class ISitePlanner(ABC):
    """Produces the run-wide artifacts: chrome, site map, design tokens."""

    @abstractmethod
    async def generate_chrome(self, brief: SiteBrief) -> SharedChrome:
        pass

    @abstractmethod
    async def generate_site_map(self, brief: SiteBrief, site_title_hint: str) -> SitePlan:
        pass

    @abstractmethod
    async def generate_design_tokens(self, brief: SiteBrief, plan: SitePlan) -> DesignTokens:
        pass


# =============================================================================
# Phase 2: Page Interfaces
# =============================================================================

class IPageDesigner(ABC):
    """Plans the content of a single page."""

    @abstractmethod
    async def design_page(self, brief: SiteBrief, plan: SitePlan, entry: PageEntry) -> Optional[PagePlan]:
        """Returns None when the model output could not be parsed."""
        pass


class IFrontendGenerator(ABC):
    """
    Builds and repairs full HTML documents.

    Every model-calling method returns a ThinkingExtraction whose `cleaned`
    field is the candidate HTML document and whose `thoughts` are the
    reasoning removed from it.
    """

    @abstractmethod
    async def build_page(self, prompt: str, entry: PageEntry) -> ThinkingExtraction:
        """Streams one page build."""
        pass

    @abstractmethod
    def build_prompt(self, brief: SiteBrief, plan: SitePlan, chrome: SharedChrome,
                     tokens: DesignTokens, page_plan: PagePlan) -> str:
        pass

    @abstractmethod
    def regeneration_prompt(self, original_prompt: str, issues: List[str]) -> str:
        pass

    @abstractmethod
    async def fix_structure(self, entry: PageEntry, html: str, issues: List[str]) -> ThinkingExtraction:
        pass

    @abstractmethod
    async def patch_accessibility(self, entry: PageEntry, html: str, issues: List[str]) -> ThinkingExtraction:
        pass

    @abstractmethod
    async def fix_links(self, entry: PageEntry, html: str, broken: List,
                        id_title_map: Dict[str, str]) -> ThinkingExtraction:
        pass


# =============================================================================
# Phase 3: SEO Interfaces
# =============================================================================

class ISeoGenerator(ABC):
    """Produces sitemap, robots.txt and per-page social tags."""

    @abstractmethod
    async def generate(self, brief: SiteBrief, plan: SitePlan, base_url: str) -> Optional[SeoArtifacts]:
        """Returns None when the model output could not be parsed."""
        pass
