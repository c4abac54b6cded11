"""
Offline model gateway.
======================
MockModelGateway answers every prompt in the library with a deterministic
bakery site, so the whole pipeline can run without a model service.
Responses can be scripted per task (and per page) for tests.
"""
import asyncio
import json
import re
from collections import Counter
from typing import AsyncIterator, Callable, Dict, List, Optional, Union

from .interfaces import IModelGateway, GatewayRequest

DEFAULT_PAGE_IDS = ["home", "about", "contact", "menu", "gallery"]

_TASK = re.compile(r"### TASK:\s*([A-Z_]+)")
_PAGE_ID = re.compile(r"PAGE_ID:\s*([a-z0-9-]+)")
_PAGE_COUNT = re.compile(r"PAGE_COUNT:\s*(\d+)")
_BASE_URL = re.compile(r"Base URL:\s*(\S+)")

Scripted = Union[str, Exception, Callable[[GatewayRequest], str], List]


def page_title(page_id: str) -> str:
    return page_id.replace("-", " ").title()


def page_html(page_id: str, page_ids: List[str], site_title: str = "Golden Crumb Bakery",
              label: bool = True, extra_links: Optional[List[str]] = None) -> str:
    """A complete page that passes structural validation and the accessibility audit."""
    title = page_title(page_id)
    links = "".join(f'<a href="{pid}.html">{page_title(pid)}</a>' for pid in page_ids)
    links += "".join(f'<a href="{href}">More</a>' for href in (extra_links or []))
    label_html = f'<label for="email-{page_id}">Email</label>' if label else ""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title} | {site_title}</title>
<style>:root {{ --color-primary: #2f5d62; }} a:focus-visible {{ outline: 2px solid #dfa878; }}</style>
</head>
<body>
<header class="site-header"><strong>{site_title}</strong><nav>{links}</nav></header>
<main>
<h1>{title}</h1>
<p>Fresh sourdough, pastries and coffee, baked every morning.</p>
<form>{label_html}<input id="email-{page_id}" type="email" name="email"><button type="submit">Join</button></form>
<img src="images/{page_id}.jpg" alt="{title} at {site_title}">
</main>
<footer class="site-footer"><p>&copy; {site_title}</p></footer>
</body>
</html>"""


class MockModelGateway(IModelGateway):
    """
    Deterministic gateway.

    `responses` maps a task name ("PAGE_BUILD") or task:page key
    ("PAGE_BUILD:about") to a scripted answer: a string, a callable taking
    the request, an exception instance to raise, or a list consumed one
    item per call (the default answer is used once it is exhausted).

    `block_task` makes the first call of that task wait on `gate`; `started`
    is set when that call begins.
    """

    def __init__(self, site_title: str = "Golden Crumb Bakery", page_ids: Optional[List[str]] = None,
                 responses: Optional[Dict[str, Scripted]] = None, chunk_size: int = 64,
                 block_task: Optional[str] = None, models: Optional[List[str]] = None):
        self.site_title = site_title
        self.page_ids = list(page_ids) if page_ids else None
        self.responses = dict(responses or {})
        self.chunk_size = chunk_size
        self.block_task = block_task
        self.models = models or ["mock-model"]
        self.requests: List[GatewayRequest] = []
        self.calls: Counter = Counter()
        self.gate = asyncio.Event()
        self.started = asyncio.Event()
        self.closed = False
        self._planned_ids: List[str] = []

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    @staticmethod
    def task_of(prompt: str) -> str:
        match = _TASK.search(prompt)
        return match.group(1) if match else "UNKNOWN"

    @staticmethod
    def page_of(prompt: str) -> Optional[str]:
        match = _PAGE_ID.search(prompt)
        return match.group(1) if match else None

    def requests_for(self, task: str, page_id: Optional[str] = None) -> List[GatewayRequest]:
        found = []
        for request in self.requests:
            if self.task_of(request.prompt) != task:
                continue
            if page_id is not None and self.page_of(request.prompt) != page_id:
                continue
            found.append(request)
        return found

    def _scripted(self, key: str, request: GatewayRequest) -> Optional[str]:
        if key not in self.responses:
            return None
        value = self.responses[key]
        if isinstance(value, list):
            if not value:
                return None
            value = value.pop(0)
        if isinstance(value, Exception):
            raise value
        if callable(value):
            return value(request)
        return value

    async def _respond(self, request: GatewayRequest) -> str:
        self.requests.append(request)
        task = self.task_of(request.prompt)
        page_id = self.page_of(request.prompt)
        self.calls[task] += 1

        if self.block_task == task and self.calls[task] == 1:
            self.started.set()
            await self.gate.wait()

        for key in ([f"{task}:{page_id}"] if page_id else []) + [task]:
            scripted = self._scripted(key, request)
            if scripted is not None:
                return scripted
        return self._default(task, page_id, request)

    # ------------------------------------------------------------------
    # Default answers
    # ------------------------------------------------------------------

    def _site_ids(self, count: Optional[int] = None) -> List[str]:
        if self.page_ids:
            return list(self.page_ids)
        if count is None:
            return self._planned_ids or DEFAULT_PAGE_IDS[:1]
        ids = DEFAULT_PAGE_IDS[:count]
        ids += [f"page-{n}" for n in range(len(ids) + 1, count + 1)]
        return ids

    def _default(self, task: str, page_id: Optional[str], request: GatewayRequest) -> str:
        if task == "SHARED_CHROME":
            return json.dumps({
                "site_title": self.site_title,
                "header": f'<header class="site-header"><strong>{self.site_title}</strong>'
                          f'<nav><a href="#">Home</a></nav></header>',
                "footer": f'<footer class="site-footer"><p>&copy; {self.site_title}</p></footer>',
            })
        if task == "SITE_MAP":
            match = _PAGE_COUNT.search(request.prompt)
            ids = self._site_ids(int(match.group(1)) if match else 1)
            self._planned_ids = ids
            return json.dumps({
                "site_title": self.site_title,
                "pages": [{"id": pid, "title": page_title(pid), "purpose": f"The {page_title(pid)} page"}
                          for pid in ids],
            })
        if task == "DESIGN_TOKENS":
            return json.dumps({"color_primary": "#7a4b2a", "color_background": "#fffaf3",
                               "font_heading": "'Playfair Display', serif"})
        if task == "PAGE_PLAN":
            title = page_title(page_id or "page")
            return json.dumps({
                "title": title,
                "outline": ["Hero", "Highlights", "Newsletter signup"],
                "components": ["hero", "card grid", "form"],
                "copy_points": [f"{title} at {self.site_title}"],
                "interactions": [],
                "seo": {"description": f"{title} - {self.site_title}"},
            })
        if task in ("PAGE_BUILD", "STRUCTURE_FIX", "ACCESSIBILITY_PATCH", "LINK_FIX"):
            html = page_html(page_id or "home", self._site_ids(), self.site_title)
            return f"<think>Laying out the {page_id} page.</think>\n```html\n{html}\n```"
        if task == "SEO_PACK":
            match = _BASE_URL.search(request.prompt)
            base_url = (match.group(1) if match else "https://example.com").rstrip("/")
            ids = self._site_ids()
            urls = "".join(f"<url><loc>{base_url}/{pid}.html</loc></url>" for pid in ids)
            return json.dumps({
                "sitemap": f'<?xml version="1.0" encoding="UTF-8"?>'
                           f'<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{urls}</urlset>',
                "robots": f"User-agent: *\nAllow: /\nSitemap: {base_url}/sitemap.xml",
                "pages": [{
                    "page_id": pid,
                    "open_graph": [{"property": "og:title", "content": f"{page_title(pid)} | {self.site_title}"}],
                    "twitter": [{"name": "twitter:card", "content": "summary"}],
                    "extra": [{"name": "description", "content": f"{page_title(pid)} at {self.site_title}"}],
                } for pid in ids],
            })
        return "{}"

    # ------------------------------------------------------------------
    # IModelGateway
    # ------------------------------------------------------------------

    async def complete(self, request: GatewayRequest) -> str:
        return await self._respond(request)

    async def stream(self, request: GatewayRequest) -> AsyncIterator[str]:
        text = await self._respond(request)
        size = max(1, self.chunk_size)
        for start in range(0, len(text), size):
            await asyncio.sleep(0)
            yield text[start:start + size]

    async def list_models(self) -> List[str]:
        return list(self.models)

    async def aclose(self):
        self.closed = True
