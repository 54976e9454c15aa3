"""CMS-facing types and collaborator contracts for the baking pipeline."""

from __future__ import annotations

from .models import (
    BlogIndexPage,
    BlogPostPage,
    CategoryEntry,
    ChartIndexItem,
    ChartsIndexPage,
    ContentRow,
    EntryMeta,
    ExportRecord,
    FormattedPost,
    FormattingOptions,
    FrontPage,
    FullPost,
    LongFormPage,
    PageModel,
    PostSummary,
    TagEntry,
)
from .store import ContentStore, ExportRenderer, PostFormatter, VisualizationStore

__all__ = [
    "BlogIndexPage",
    "BlogPostPage",
    "CategoryEntry",
    "ChartIndexItem",
    "ChartsIndexPage",
    "ContentRow",
    "ContentStore",
    "EntryMeta",
    "ExportRecord",
    "ExportRenderer",
    "FormattedPost",
    "FormattingOptions",
    "FrontPage",
    "FullPost",
    "LongFormPage",
    "PageModel",
    "PostFormatter",
    "PostSummary",
    "TagEntry",
    "VisualizationStore",
]
