"""Tests for the site bake runner."""

import logging
from pathlib import Path

import pytest

from sitebake.pipeline.content.models import ContentRow
from sitebake.pipeline.exports.index import ExportIndex
from sitebake.pipeline.exports.store import ExportResolutionStore
from sitebake.pipeline.formatting.formatter import EmbedFallbackFormatter
from sitebake.pipeline.site_builder.pages import PageAssembler
from sitebake.pipeline.site_builder.runner import (
    bake_site,
    blog_page_path,
    configure_logging,
    render_to_html_page,
    write_html_output,
)
from tests._fakes import FakeContentStore, FakeRenderer, FakeVizStore, category, summary


def fake_render(page):
    return f"<html data-kind='{page.kind}'></html>"


def test_render_to_html_page_prefixes_doctype():
    from sitebake.pipeline.content.models import FrontPage

    assert render_to_html_page(FrontPage(), fake_render) == (
        "<!doctype html><html data-kind='front_page'></html>"
    )


def test_blog_page_path_layout(tmp_path: Path):
    assert blog_page_path(tmp_path, 1) == tmp_path / "blog" / "index.html"
    assert blog_page_path(tmp_path, 3) == tmp_path / "blog" / "page" / "3" / "index.html"


def test_write_html_output_reports_failure(tmp_path: Path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    assert write_html_output("<p/>", tmp_path / "out" / "a.html") is True
    assert write_html_output("<p/>", blocker / "a.html") is False


def test_configure_logging_without_file_handler():
    configure_logging("debug", enable_file=False)
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert not any(isinstance(h, logging.FileHandler) for h in root.handlers)


@pytest.mark.asyncio
async def test_bake_site_writes_every_page(tmp_path: Path):
    rows = [
        ContentRow(id=1, post_type="post", slug="a", content="<p>A</p>"),
        ContentRow(id=2, post_type="post", slug="b", content="<p>B</p>"),
        ContentRow(id=3, post_type="page", slug="about", content="About"),
    ]
    content = FakeContentStore(
        rows=rows,
        entries=[category("Site", "about", "gone")],
        blog_index=[summary("a"), summary("b")],
    )
    viz = FakeVizStore()
    exports_dir = tmp_path / "site" / "exports"
    store = ExportResolutionStore(
        ExportIndex(exports_dir, "/grapher"), viz, FakeRenderer(exports_dir)
    )
    assembler = PageAssembler(content, store, EmbedFallbackFormatter())
    out = tmp_path / "site"

    written = await bake_site(
        assembler,
        content,
        viz,
        fake_render,
        out,
        wordpress_dir=tmp_path / "wp",
        posts_per_page=1,
    )

    expected = [
        "index.html",
        "blog/index.html",
        "blog/page/2/index.html",
        "charts/index.html",
        "a.html",
        "b.html",
        "about.html",
        "headerMenu.json",
    ]
    for name in expected:
        assert (out / name).exists(), name
    assert not (out / "gone.html").exists()
    assert written == len(expected)
    assert (out / "about.html").read_text(encoding="utf-8").startswith("<!doctype html>")
    assert "long_form" in (out / "about.html").read_text(encoding="utf-8")
