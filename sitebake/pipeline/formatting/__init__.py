"""Markup inspection and transformation for post bodies."""

from __future__ import annotations

from .directives import extract_formatting_options, parse_formatting_options
from .embeds import is_visualization_src, scan_embedded_visualizations, visualization_slug
from .formatter import EmbedFallbackFormatter, inline_export_fallbacks

__all__ = [
    "EmbedFallbackFormatter",
    "extract_formatting_options",
    "inline_export_fallbacks",
    "is_visualization_src",
    "parse_formatting_options",
    "scan_embedded_visualizations",
    "visualization_slug",
]
