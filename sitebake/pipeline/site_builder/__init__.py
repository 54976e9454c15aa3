"""Site Builder Pipeline Module.

Centralizes the page and index assemblers, thumbnail selection and the site
runner. All concrete logic resides in child modules; this initializer only
defines the public import surface.

Usage
-----
    >>> from sitebake.pipeline.site_builder import PageAssembler, assemble_blog_index
"""

from .images import (
    UNRESOLVED,
    VariantSelection,
    resolve_thumbnail,
    resolve_thumbnail_async,
    select_image_variant,
)
from .indexes import (
    assemble_blog_index,
    assemble_charts_index,
    assemble_front_page,
    filter_public_tags,
    paginate,
    render_menu_json,
)
from .pages import PageAssembler, query_upstream
from .runner import bake_site, configure_logging, render_to_html_page, write_html_output

__all__ = [
    "PageAssembler",
    "UNRESOLVED",
    "VariantSelection",
    "assemble_blog_index",
    "assemble_charts_index",
    "assemble_front_page",
    "bake_site",
    "configure_logging",
    "filter_public_tags",
    "paginate",
    "query_upstream",
    "render_menu_json",
    "render_to_html_page",
    "resolve_thumbnail",
    "resolve_thumbnail_async",
    "select_image_variant",
    "write_html_output",
]
