"""
Export handoff.
===============
Turns a finished run into a flat list of {path, contents} files and
packages them as <slug>.zip.
"""
import os
import zipfile
from typing import List

from ..domain import BuildResult, ExportFile
from ..errors import ExportError
from ..utils import slugify
from .config import FileNames


def build_export_files(result: BuildResult) -> List[ExportFile]:
    """Pages first (plan order), then SEO assets, then design tokens."""
    files = [ExportFile(path=page.filename, contents=page.html) for page in result.pages]
    if result.seo is not None:
        if result.seo.sitemap:
            files.append(ExportFile(path=FileNames.SITEMAP, contents=result.seo.sitemap))
        if result.seo.robots:
            files.append(ExportFile(path=FileNames.ROBOTS, contents=result.seo.robots))
    if result.tokens is not None:
        files.append(ExportFile(path=FileNames.TOKENS, contents=result.tokens.to_json()))
    return files


def normalize_export_path(path: str) -> str:
    """Archive paths are relative; leading slashes and ./ are dropped."""
    value = (path or "").replace("\\", "/").lstrip("/")
    while value.startswith("./"):
        value = value[2:]
    parts = [p for p in value.split("/") if p not in ("", ".")]
    if not parts or ".." in parts:
        raise ExportError(f"Invalid export path: {path!r}")
    return "/".join(parts)


class ZipExportPackager:
    """Writes export files to <output_dir>/<slug>.zip."""

    def __init__(self, output_dir: str):
        self.output_dir = output_dir

    def package(self, site_slug: str, files: List[ExportFile]) -> str:
        slug = slugify(site_slug) or "site"
        if not files:
            raise ExportError("Nothing to export")

        entries = [(normalize_export_path(f.path), f.contents or "") for f in files]
        path = os.path.abspath(os.path.join(self.output_dir, f"{slug}.zip"))
        try:
            os.makedirs(self.output_dir, exist_ok=True)
            with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                for name, contents in entries:
                    archive.writestr(name, contents)
        except OSError as e:
            raise ExportError(f"Could not write {path}: {e}") from e
        return path
