"""Bake the static site to disk.

This module provides the headless runner that walks the whole site: the front
page, every page of the blog listing, the charts catalog, every listed post
and long-form entry, and the header menu JSON. Page models are turned into
HTML by a caller-supplied renderer (a pure function), prefixed with a doctype
and written below the output directory.

Usage Examples
--------------
Typical programmatic usage::

    from sitebake.pipeline.site_builder.runner import bake_site, configure_logging

    configure_logging("INFO")
    written = asyncio.run(
        bake_site(assembler, content_store, viz_store, render, Path("baked"),
                  wordpress_dir=Path("wordpress"))
    )
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable

from sitebake.config import (
    BLOG_INDEX_DIRNAME,
    CHARTS_INDEX_DIRNAME,
    HTML_DOCTYPE,
    LOG_DIR,
    LOG_FILENAME_BAKE,
    LOG_FORMAT,
    MENU_JSON_FILENAME,
    POSTS_PER_PAGE,
)
from sitebake.exceptions import NotFoundError

from ..content.models import PageModel
from ..content.store import ContentStore, VisualizationStore
from .indexes import (
    assemble_blog_index,
    assemble_charts_index,
    assemble_front_page,
    render_menu_json,
)
from .pages import PageAssembler, query_upstream

logger = logging.getLogger(__name__)

Renderer = Callable[[PageModel], str]


def configure_logging(log_level: str = "INFO", enable_file: bool = True) -> None:
    r"""Configure logging for a bake run.

    Sets up a stream handler and, unless disabled, a file handler under
    ``LOG_DIR``. File handler creation errors are swallowed so a read-only
    checkout can still bake. Setting ``DISABLE_FILE_LOGS`` in the environment
    also disables the file handler.

    Parameters
    ----------
    log_level : str, optional
        The logging level (e.g., "INFO", "DEBUG"). Defaults to "INFO".
    enable_file : bool, optional
        Whether to also write ``LOG_FILENAME_BAKE``. Defaults to True.

    Examples
    --------
    >>> configure_logging(log_level="DEBUG", enable_file=False)
    """
    for h in logging.root.handlers[:]:
        logging.root.removeHandler(h)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if enable_file and not os.environ.get("DISABLE_FILE_LOGS"):
        try:
            LOG_DIR.mkdir(exist_ok=True)
            handlers.insert(
                0, logging.FileHandler(LOG_DIR / LOG_FILENAME_BAKE, mode="a")
            )
        except Exception:
            pass
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )


def render_to_html_page(page: PageModel, render: Renderer) -> str:
    """Render a page model and prefix the doctype."""
    return f"{HTML_DOCTYPE}{render(page)}"


def write_html_output(html_content: str, output_file: Path) -> bool:
    r"""Write content to disk, creating parent directories automatically.

    Returns
    -------
    bool
        True on success; failures are logged and reported as False.
    """
    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(html_content, encoding="utf-8")
        return True
    except OSError:
        logger.exception("Failed to write %s", output_file)
        return False


def blog_page_path(out_dir: Path, page_num: int) -> Path:
    if page_num == 1:
        return out_dir / BLOG_INDEX_DIRNAME / "index.html"
    return out_dir / BLOG_INDEX_DIRNAME / "page" / str(page_num) / "index.html"


async def bake_site(
    assembler: PageAssembler,
    content_store: ContentStore,
    viz_store: VisualizationStore,
    render: Renderer,
    out_dir: Path,
    *,
    wordpress_dir: Path,
    posts_per_page: int = POSTS_PER_PAGE,
) -> int:
    """Bake every page of the site into ``out_dir``.

    Posts that disappear between listing and baking (``NotFoundError``) are
    logged and skipped. ``ExternalServiceError`` aborts the bake so it can be
    retried.

    Returns
    -------
    int
        Number of files written.
    """
    out_dir = Path(out_dir)
    written = 0

    def emit(page: PageModel, target: Path) -> None:
        nonlocal written
        if write_html_output(render_to_html_page(page, render), target):
            written += 1

    emit(await assemble_front_page(content_store), out_dir / "index.html")

    first = await assemble_blog_index(content_store, 1, wordpress_dir, posts_per_page)
    emit(first, blog_page_path(out_dir, 1))
    for page_num in range(2, first.num_pages + 1):
        page = await assemble_blog_index(
            content_store, page_num, wordpress_dir, posts_per_page
        )
        emit(page, blog_page_path(out_dir, page_num))

    emit(
        await assemble_charts_index(viz_store),
        out_dir / CHARTS_INDEX_DIRNAME / "index.html",
    )

    posts = await query_upstream("blog index", content_store.get_blog_index())
    entries = await query_upstream(
        "entries by category", content_store.get_entries_by_category()
    )
    slugs = list(
        dict.fromkeys(
            [p.slug for p in posts]
            + [e.slug for category in entries for e in category.entries]
        )
    )
    for slug in slugs:
        try:
            page = await assembler.assemble_by_slug(slug)
        except NotFoundError:
            logger.warning("Skipping %s: no longer in the CMS", slug)
            continue
        emit(page, out_dir / f"{slug}.html")

    if write_html_output(
        await render_menu_json(content_store), out_dir / MENU_JSON_FILENAME
    ):
        written += 1
    logger.info("Baked %d file(s) into %s", written, out_dir)
    return written


__all__ = [
    "bake_site",
    "blog_page_path",
    "configure_logging",
    "render_to_html_page",
    "write_html_output",
]
