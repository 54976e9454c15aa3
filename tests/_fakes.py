"""In-memory collaborators shared by the pipeline tests.

The CMS, the visualization store and the render service are external to the
package; these fakes implement their protocols over plain Python data and
record the calls made against them.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from sitebake.pipeline.content.models import (
    CategoryEntry,
    ContentRow,
    EntryMeta,
    FullPost,
    PostSummary,
)


class FakeContentStore:
    def __init__(self, rows=(), posts=None, entries=(), blog_index=(), revisions=None):
        self.rows = {row.id: row for row in rows}
        self.posts = dict(posts or {})
        self.entries = list(entries)
        self.blog_index = list(blog_index)
        self.revisions = dict(revisions or {})
        self.calls: list[str] = []
        self.fail_with: Exception | None = None

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    async def get_row_by_id(self, post_id):
        self._check("get_row_by_id")
        return self.rows.get(post_id)

    async def get_row_by_slug(self, slug):
        self._check("get_row_by_slug")
        return next((r for r in self.rows.values() if r.slug == slug), None)

    async def get_latest_revision(self, post_id):
        self._check("get_latest_revision")
        return self.revisions.get(post_id)

    async def get_full_post(self, row: ContentRow):
        self._check("get_full_post")
        if row.id in self.posts:
            return self.posts[row.id]
        return FullPost(
            id=row.id,
            slug=row.slug,
            title=row.title,
            content=row.content,
            post_type=row.post_type,
        )

    async def get_entries_by_category(self):
        self._check("get_entries_by_category")
        return list(self.entries)

    async def get_blog_index(self):
        self._check("get_blog_index")
        return list(self.blog_index)


class FakeVizStore:
    def __init__(self, versions=None, summaries=(), tags=()):
        self.versions = dict(versions or {})
        self.summaries = list(summaries)
        self.tags = list(tags)
        self.version_queries: list[list[str]] = []

    async def get_chart_summaries(self):
        return list(self.summaries)

    async def get_chart_tags(self):
        return list(self.tags)

    async def get_chart_versions(self, slugs):
        slugs = list(slugs)
        self.version_queries.append(slugs)
        return {s: self.versions[s] for s in slugs if s in self.versions}


class FakeRenderer:
    """Writes an export file for every render, optionally slowly or failing."""

    def __init__(self, exports_dir: Path, delay: float = 0.0, failing=()):
        self.exports_dir = Path(exports_dir)
        self.delay = delay
        self.failing = set(failing)
        self.calls: list[tuple[str, int]] = []

    async def render(self, slug: str, version: int) -> bool:
        self.calls.append((slug, version))
        if self.delay:
            await asyncio.sleep(self.delay)
        if slug in self.failing:
            return False
        self.exports_dir.mkdir(parents=True, exist_ok=True)
        (self.exports_dir / f"{slug}_v{version}_850x600.svg").write_text(
            "<svg/>", encoding="utf-8"
        )
        return True


def category(name: str, *slugs: str) -> CategoryEntry:
    return CategoryEntry(
        name=name,
        slug=name.lower(),
        entries=tuple(EntryMeta(slug=s, title=s.title()) for s in slugs),
    )


def summary(slug: str, image_url: str | None = None) -> PostSummary:
    return PostSummary(slug=slug, title=slug.replace("-", " ").title(), image_url=image_url)
