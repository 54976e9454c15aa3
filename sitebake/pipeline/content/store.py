"""Collaborator contracts consumed by the baking pipeline.

The CMS query layer, the visualization configuration store, the export
renderer and the post formatter all live outside this package. The pipeline
only depends on the protocols below; "not found" is a normal result
(``None``), while an unreachable backend is signalled by raising.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Protocol, Sequence

from .models import (
    CategoryEntry,
    ContentRow,
    ExportRecord,
    FormattedPost,
    FormattingOptions,
    FullPost,
    PostSummary,
)


class ContentStore(Protocol):
    """Queries against the CMS."""

    async def get_row_by_id(self, post_id: int) -> ContentRow | None: ...

    async def get_row_by_slug(self, slug: str) -> ContentRow | None: ...

    async def get_latest_revision(self, post_id: int) -> ContentRow | None:
        """Return the newest revision of ``post_id`` with the parent's type."""
        ...

    async def get_full_post(self, row: ContentRow) -> FullPost: ...

    async def get_entries_by_category(self) -> Sequence[CategoryEntry]: ...

    async def get_blog_index(self) -> Sequence[PostSummary]:
        """Return published articles, most recent first."""
        ...


class VisualizationStore(Protocol):
    """Queries against the visualization configuration store."""

    async def get_chart_summaries(self) -> Sequence[Mapping[str, Any]]:
        """Rows with ``id``, ``slug``, ``title`` and ``variantName``."""
        ...

    async def get_chart_tags(self) -> Sequence[Mapping[str, Any]]:
        """Rows with ``chartId``, ``tagId``, ``tagName`` and ``tagParentId``."""
        ...

    async def get_chart_versions(self, slugs: Iterable[str]) -> Mapping[str, int]:
        """Current config version per known slug; unknown slugs are omitted."""
        ...


class ExportRenderer(Protocol):
    """Out-of-process renderer producing the static export of one chart."""

    async def render(self, slug: str, version: int) -> bool: ...


class PostFormatter(Protocol):
    """Transforms a raw post body into renderer-ready HTML."""

    async def format(
        self,
        post: FullPost,
        options: FormattingOptions,
        exports: Mapping[str, ExportRecord],
    ) -> FormattedPost: ...
