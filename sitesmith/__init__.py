"""sitesmith: multi-stage LLM static-site generation."""

__version__ = "0.1.0"
