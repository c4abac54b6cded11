"""
sitesmith Prompt Library
========================
Organized by pipeline stage.

Stages:
1. Planning - Shared chrome, site map, design tokens
2. Page Design - Per-page content plan
3. Page Generation - Full HTML document per page
4. Repair - Structural fixes, accessibility patches, regeneration reminder, link fixes
5. SEO - Sitemap, robots.txt and social meta tags

Every prompt opens with a `### TASK:` line naming the stage. Page-level
prompts also carry a `PAGE_ID:` line.
"""

JSON_SYSTEM_PROMPT = (
    "You output ONLY valid minified JSON. No prose, no code fences, no comments."
)

DEFAULT_SYSTEM_PREAMBLE = (
    "You are a concise front-end engineer. Return a single, production-ready HTML document "
    "with inline CSS and no explanations. Keep the aesthetic anchored to a cohesive colour story."
)

# =============================================================================
# 1. PLANNING
# =============================================================================

PROMPT_SHARED_CHROME = """### TASK: SHARED_CHROME
You are an expert front-end designer creating a unified site experience.
Design a shared site header and footer for a {page_count}-page website.
Website brief: {topic}

Requirements:
1. The header and footer are HTML FRAGMENTS with inline CSS. Do NOT include <html>, <head> or <body> wrappers.
2. The header contains the site name and a <nav> with placeholder links (href="#"). Page builders will point them at real pages later.
3. The footer contains a short tagline and copyright line.
4. Focus on consistency in typography, spacing and call-to-action styling.
5. Never remove focus outlines; links must stay keyboard accessible.
6. Also propose a short site title.

Return JSON format:
{{"site_title": "...", "header": "<header>...</header>", "footer": "<footer>...</footer>"}}
"""

PROMPT_SITE_MAP = """### TASK: SITE_MAP
Create a concise website plan.
Website brief: {topic}
Suggested site title: {site_title_hint}
PAGE_COUNT: {page_count}

Rules:
1. Exactly {page_count} pages.
2. Every id is a unique, lowercase, url-safe kebab-case slug (e.g. "home", "our-story"). It becomes the file name <id>.html.
3. Keep titles short (max 4 words). Purpose is one sentence.
4. The first page is the landing page.

Return JSON format:
{{"site_title": "...", "pages": [{{"id": "home", "title": "Home", "purpose": "..."}}]}}
"""

PROMPT_DESIGN_TOKENS = """### TASK: DESIGN_TOKENS
You are a visual designer. Define the design tokens for a website.
Website brief: {topic}
Site title: {site_title}
Pages: {pages_summary}

Return ONE flat JSON object (no nesting) with these keys, all string values:
color_primary, color_secondary, color_accent, color_background, color_surface, color_text, color_muted,
font_heading, font_body, spacing_unit, radius_small, radius_large, shadow_card.

Colors must keep a text/background contrast ratio of at least 4.5:1.
"""

# =============================================================================
# 2. PAGE DESIGN
# =============================================================================

PROMPT_PAGE_PLAN = """### TASK: PAGE_PLAN
PAGE_ID: {page_id}
You are a UX writer planning one page of a multi-page website.
Website brief: {topic}
Site title: {site_title}
Page: {page_title} ({page_id}.html)
Page purpose: {page_purpose}
Full site map: {site_map_json}

Return JSON format:
{{"title": "...",
"outline": ["section 1", "..."],
"components": ["hero", "card grid", "..."],
"copy_points": ["key message", "..."],
"interactions": ["accordion for FAQ", "..."],
"seo": {{"description": "...", "keywords": ["..."]}}}}
"""

# =============================================================================
# 3. PAGE GENERATION
# =============================================================================

PROMPT_PAGE_BUILD = """### TASK: PAGE_BUILD
PAGE_ID: {page_id}
You are designing the page "{page_title}" of the cohesive multi-page website "{site_title}".
Website brief: {topic}

Page plan:
{page_plan_json}

Design tokens (use them as CSS custom properties in a <style> block):
{design_tokens_json}

Site pages (use ONLY these relative links for internal navigation):
{nav_links}

Shared header (insert verbatim at the top of <body>; only rewrite its nav hrefs to the site pages above):
{header_html}

Shared footer (insert verbatim at the end of <body>):
{footer_html}

Structural rules:
{structure_rules}

Accessibility rules:
- Wrap the page content in a single <main> element.
- Every <input>, <select> and <textarea> needs a <label for="..."> or an aria-label.
- Every informative <img> needs descriptive alt text.
- Never set outline: none or outline: 0; keep visible focus styles.

Return ONLY the complete HTML document starting with <!DOCTYPE html>. No explanations.
"""

# =============================================================================
# 4. REPAIR
# =============================================================================

PROMPT_REGENERATION_REMINDER = """

IMPORTANT - A previous attempt at this page had these problems. Fix ALL of them this time:
{issues_list}
"""

PROMPT_STRUCTURE_FIX = """### TASK: STRUCTURE_FIX
PAGE_ID: {page_id}
Here is your previous HTML for the page "{page_title}". It failed structural validation.

Exact issues:
{issues_list}

Structural rules:
{structure_rules}

Previous HTML:
{previous_html}

Return the FULL corrected HTML document starting with <!DOCTYPE html>. Keep the content, header, footer and styling. No explanations.
"""

PROMPT_ACCESSIBILITY_PATCH = """### TASK: ACCESSIBILITY_PATCH
PAGE_ID: {page_id}
The page "{page_title}" has accessibility problems.

Issues:
{issues_list}

How to fix:
- Missing main landmark: wrap the primary content in <main>.
- Unlabeled form controls: add <label for="id"> elements (give the control an id) or aria-label.
- Missing alt text: describe each informative image; mark decorative ones aria-hidden="true".
- Removed focus outlines: delete outline: none/0 rules and use a visible :focus-visible style.

Current HTML:
{previous_html}

Return the FULL corrected HTML document starting with <!DOCTYPE html>. Change nothing else. No explanations.
"""

PROMPT_LINK_FIX = """### TASK: LINK_FIX
PAGE_ID: {page_id}
The page "{page_title}" links to pages that do not exist.

Broken links:
{broken_links_list}

The ONLY valid internal pages (file -> title):
{valid_pages_json}

Current HTML:
{previous_html}

Point every broken link at the most appropriate valid page (or remove it if none fits).
Return the FULL corrected HTML document starting with <!DOCTYPE html>. No explanations.
"""

# =============================================================================
# 5. SEO
# =============================================================================

PROMPT_SEO_PACK = """### TASK: SEO_PACK
You are an SEO specialist preparing a static website for launch.
Website brief: {topic}
Site title: {site_title}
Base URL: {base_url}
Pages: {pages_json}

Return JSON format:
{{"sitemap": "<?xml version=\\"1.0\\" encoding=\\"UTF-8\\"?><urlset>...</urlset>",
"robots": "User-agent: *\\nAllow: /\\nSitemap: {base_url}/sitemap.xml",
"pages": [{{"page_id": "home",
  "open_graph": [{{"property": "og:title", "content": "..."}}, {{"property": "og:description", "content": "..."}}],
  "twitter": [{{"name": "twitter:card", "content": "summary"}}],
  "extra": [{{"name": "description", "content": "..."}}]}}]}}

The sitemap lists every page as {base_url}/<id>.html. Include one entry in "pages" per page id.
"""
