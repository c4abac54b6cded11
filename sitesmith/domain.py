from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field, asdict
from enum import Enum
import html as html_lib
import json

from .errors import BriefError
from .utils import slugify, unique_slug, as_string_list


@dataclass(frozen=True)
class SiteBrief:
    """User input for one generation run. Never mutated mid-run."""
    topic: str
    page_count: int = 1
    model_id: str = ""
    system_preamble: str = ""

    def validate(self):
        if not self.topic or not self.topic.strip():
            raise BriefError("Brief topic must not be empty")
        if not isinstance(self.page_count, int) or self.page_count < 1:
            raise BriefError(f"Page count must be >= 1 (got {self.page_count!r})")
        if not self.model_id or not self.model_id.strip():
            raise BriefError("A model must be selected before generating")

    @staticmethod
    def from_dict(d):
        return SiteBrief(
            topic=d.get("topic", ""),
            page_count=int(d.get("page_count", d.get("pageCount", 1)) or 1),
            model_id=d.get("model_id", d.get("modelId", "")),
            system_preamble=d.get("system_preamble", d.get("systemPreamble", "")),
        )

    def to_dict(self):
        return asdict(self)


@dataclass
class PageEntry:
    """One page of the site map. `id` is the stable key for the run."""
    id: str
    title: str
    purpose: str = ""

    @property
    def filename(self) -> str:
        return f"{self.id}.html"

    @staticmethod
    def from_dict(d):
        return PageEntry(
            id=d.get("id", ""),
            title=d.get("title", ""),
            purpose=d.get("purpose", "") or "",
        )

    def to_dict(self):
        return asdict(self)


@dataclass
class SitePlan:
    """The site map produced by one JSON-mode call."""
    site_title: str
    pages: List[PageEntry] = field(default_factory=list)

    @property
    def page_ids(self) -> List[str]:
        return [p.id for p in self.pages]

    def id_title_map(self) -> Dict[str, str]:
        return {p.id: p.title for p in self.pages}

    def get(self, page_id: str) -> Optional[PageEntry]:
        for page in self.pages:
            if page.id == page_id:
                return page
        return None

    @staticmethod
    def from_model_output(d: Dict[str, Any], page_count: int, fallback_title: str = "") -> "SitePlan":
        """
        Normalizes a model-produced plan.

        Ids are slugified (falling back to the title) and de-duplicated,
        entries without any usable id are dropped, and the list is cut to
        `page_count`. The result may have an empty page list; callers decide
        whether that is fatal.
        """
        raw_pages = d.get("pages") if isinstance(d, dict) else None
        if not isinstance(raw_pages, list):
            raw_pages = []

        taken = set()
        pages = []
        for raw in raw_pages:
            if not isinstance(raw, dict):
                continue
            title = str(raw.get("title") or "").strip()
            base = slugify(str(raw.get("id") or "")) or slugify(title)
            if not base:
                continue
            page_id = unique_slug(base, taken)
            taken.add(page_id)
            pages.append(PageEntry(
                id=page_id,
                title=title or page_id.replace("-", " ").title(),
                purpose=str(raw.get("purpose") or "").strip(),
            ))
            if len(pages) >= page_count:
                break

        site_title = ""
        if isinstance(d, dict):
            site_title = str(d.get("site_title") or d.get("siteTitle") or "").strip()
        return SitePlan(site_title=site_title or fallback_title, pages=pages)

    @staticmethod
    def from_dict(d):
        return SitePlan(
            site_title=d.get("site_title", ""),
            pages=[PageEntry.from_dict(p) for p in d.get("pages", [])],
        )

    def to_dict(self):
        return {"site_title": self.site_title, "pages": [p.to_dict() for p in self.pages]}


DEFAULT_DESIGN_TOKENS: Dict[str, str] = {
    "color_primary": "#2f5d62",
    "color_secondary": "#5e8b7e",
    "color_accent": "#dfa878",
    "color_background": "#f7f5f2",
    "color_surface": "#ffffff",
    "color_text": "#1f2933",
    "color_muted": "#6b7280",
    "font_heading": "'Georgia', serif",
    "font_body": "'Helvetica Neue', Arial, sans-serif",
    "spacing_unit": "8px",
    "radius_small": "4px",
    "radius_large": "16px",
    "shadow_card": "0 4px 12px rgba(0, 0, 0, 0.08)",
}


@dataclass
class DesignTokens:
    """Flat palette/spacing/radius/shadow/font record shared by every page."""
    values: Dict[str, str] = field(default_factory=dict)

    def with_defaults(self) -> "DesignTokens":
        merged = dict(DEFAULT_DESIGN_TOKENS)
        merged.update(self.values)
        return DesignTokens(values=merged)

    @staticmethod
    def from_model_output(d: Dict[str, Any]) -> "DesignTokens":
        # Nested groups ({"colors": {"primary": ...}}) are flattened to colors_primary.
        values: Dict[str, str] = {}

        def _flatten(prefix, obj):
            for key, value in obj.items():
                name = f"{prefix}_{key}" if prefix else str(key)
                if isinstance(value, dict):
                    _flatten(name, value)
                elif isinstance(value, (str, int, float)) and not isinstance(value, bool):
                    values[name] = str(value)

        if isinstance(d, dict):
            _flatten("", d)
        return DesignTokens(values=values)

    def to_json(self) -> str:
        return json.dumps(self.values, indent=2, sort_keys=True)

    def to_dict(self):
        return dict(self.values)


@dataclass
class SharedChrome:
    """Header/footer fragments reused verbatim across all pages."""
    header: str
    footer: str
    site_title: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.header.strip()) and bool(self.footer.strip())

    @staticmethod
    def from_model_output(d: Dict[str, Any]) -> "SharedChrome":
        d = d if isinstance(d, dict) else {}
        header = d.get("header")
        footer = d.get("footer")
        title = d.get("site_title") or d.get("siteTitle")
        return SharedChrome(
            header=header.strip() if isinstance(header, str) else "",
            footer=footer.strip() if isinstance(footer, str) else "",
            site_title=title.strip() if isinstance(title, str) and title.strip() else None,
        )

    def to_dict(self):
        return asdict(self)


@dataclass
class PagePlan:
    """Per-page content plan consumed only by that page's build prompt."""
    id: str
    title: str
    outline: List[str] = field(default_factory=list)
    components: List[str] = field(default_factory=list)
    copy_points: List[str] = field(default_factory=list)
    interactions: List[str] = field(default_factory=list)
    seo: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_model_output(d: Dict[str, Any], entry: PageEntry) -> "PagePlan":
        d = d if isinstance(d, dict) else {}
        seo = d.get("seo")
        if not isinstance(seo, dict):
            seo = {"description": str(seo)} if seo else {}
        return PagePlan(
            id=entry.id,
            title=str(d.get("title") or entry.title),
            outline=as_string_list(d.get("outline")),
            components=as_string_list(d.get("components")),
            copy_points=as_string_list(d.get("copy_points") or d.get("copyPoints")),
            interactions=as_string_list(d.get("interactions")),
            seo=seo,
        )

    @staticmethod
    def fallback(entry: PageEntry) -> "PagePlan":
        return PagePlan(
            id=entry.id,
            title=entry.title,
            outline=["Hero introducing the page", "Main content section", "Call to action"],
            copy_points=[entry.purpose] if entry.purpose else [],
        )

    def to_dict(self):
        return asdict(self)


@dataclass
class BuiltPage:
    """
    The mutable heart of a run.
    `html` is replaced wholesale by every repair pass; `valid`/`issues` are
    recomputed after each validation; `thinking` only ever grows.
    """
    id: str
    title: str
    html: str = ""
    valid: bool = False
    issues: List[str] = field(default_factory=list)
    thinking: List[str] = field(default_factory=list)
    accessibility_issues: List[str] = field(default_factory=list)

    @property
    def filename(self) -> str:
        return f"{self.id}.html"

    def to_dict(self):
        return asdict(self)


@dataclass
class BuildCycleResult:
    """Outcome of one generate -> validate -> fix -> audit -> patch cycle."""
    html: str
    thoughts: List[str] = field(default_factory=list)
    valid: bool = False
    issues: List[str] = field(default_factory=list)
    accessibility_issues: List[str] = field(default_factory=list)
    fix_attempts: int = 0

    @property
    def needs_regeneration(self) -> bool:
        return not self.valid or bool(self.accessibility_issues)


def _escape_attr(value: Any) -> str:
    return html_lib.escape(str(value), quote=True)


def normalize_meta_tag(item: Any, key_attr: str = "name") -> Optional[str]:
    """
    Normalizes a model-supplied tag to an HTML string.

    Strings are accepted if they already look like <meta>/<link> tags.
    Mappings such as {"property": "og:title", "content": "..."} are rendered;
    {"rel": ..., "href": ...} becomes a <link>.
    """
    if isinstance(item, str):
        text = item.strip()
        lowered = text.lower()
        if lowered.startswith("<meta") or lowered.startswith("<link"):
            return text
        return None
    if not isinstance(item, dict):
        return None
    if item.get("rel") and item.get("href"):
        return f'<link rel="{_escape_attr(item["rel"])}" href="{_escape_attr(item["href"])}">'
    content = item.get("content")
    if content is None:
        return None
    for attr in ("property", "name", key_attr):
        if item.get(attr):
            return f'<meta {attr}="{_escape_attr(item[attr])}" content="{_escape_attr(content)}">'
    return None


@dataclass
class SeoPageTags:
    page_id: str
    open_graph: List[str] = field(default_factory=list)
    twitter: List[str] = field(default_factory=list)
    extra: List[str] = field(default_factory=list)

    @property
    def all_tags(self) -> List[str]:
        return self.open_graph + self.twitter + self.extra

    @staticmethod
    def from_model_output(d: Dict[str, Any]) -> Optional["SeoPageTags"]:
        if not isinstance(d, dict):
            return None
        page_id = slugify(str(d.get("page_id") or d.get("pageId") or d.get("id") or ""))
        if not page_id:
            return None

        def _tags(key, key_attr):
            raw = d.get(key) or []
            if isinstance(raw, dict):
                # {"og:title": "..."} shorthand
                raw = [{key_attr: k, "content": v} for k, v in raw.items()]
            if not isinstance(raw, list):
                raw = [raw]
            tags = [normalize_meta_tag(item, key_attr) for item in raw]
            return [t for t in tags if t]

        return SeoPageTags(
            page_id=page_id,
            open_graph=_tags("open_graph", "property") or _tags("openGraph", "property"),
            twitter=_tags("twitter", "name"),
            extra=_tags("extra", "name"),
        )

    def to_dict(self):
        return asdict(self)


@dataclass
class SeoArtifacts:
    """Sitemap, robots.txt and per-page social/meta tags."""
    sitemap: str = ""
    robots: str = ""
    pages: List[SeoPageTags] = field(default_factory=list)

    def tags_for(self, page_id: str) -> Optional[SeoPageTags]:
        for tags in self.pages:
            if tags.page_id == page_id:
                return tags
        return None

    @staticmethod
    def from_model_output(d: Dict[str, Any]) -> "SeoArtifacts":
        d = d if isinstance(d, dict) else {}
        pages = []
        for raw in d.get("pages") or []:
            tags = SeoPageTags.from_model_output(raw)
            if tags:
                pages.append(tags)
        sitemap = d.get("sitemap")
        robots = d.get("robots")
        return SeoArtifacts(
            sitemap=sitemap.strip() if isinstance(sitemap, str) else "",
            robots=robots.strip() if isinstance(robots, str) else "",
            pages=pages,
        )

    def to_dict(self):
        return asdict(self)


@dataclass
class LiveStreamState:
    """Single-slot view of the in-flight model call."""
    phase: str = ""
    label: str = ""
    raw: str = ""
    cleaned: str = ""
    thoughts: List[str] = field(default_factory=list)
    history: List[str] = field(default_factory=list)


@dataclass
class ExportFile:
    path: str
    contents: str


class RunStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class BuildResult:
    """What a run hands back to its caller (and to the export packager)."""
    status: RunStatus
    pages: List[BuiltPage] = field(default_factory=list)
    plan: Optional[SitePlan] = None
    chrome: Optional[SharedChrome] = None
    tokens: Optional[DesignTokens] = None
    seo: Optional[SeoArtifacts] = None
    log: List[str] = field(default_factory=list)
    error: Optional[str] = None
    cancel_reason: Optional[str] = None
    export_files: List[ExportFile] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == RunStatus.COMPLETED

    @property
    def all_valid(self) -> bool:
        return bool(self.pages) and all(p.valid for p in self.pages)

    @property
    def invalid_pages(self) -> List[str]:
        return [p.id for p in self.pages if not p.valid]

    def summary(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "pages": len(self.pages),
            "valid_pages": len([p for p in self.pages if p.valid]),
            "invalid_pages": self.invalid_pages,
            "seo": self.seo is not None,
            "error": self.error,
            "cancel_reason": self.cancel_reason,
        }
