"""Index page assembly: charts catalog, blog listing and front page.

These assemblers build page models from aggregate queries rather than a single
row. The charts catalog only shows tags under the public top-level
categories; the blog listing is paginated and swaps each post image for a
smaller size variant where one can be found.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import pandas as pd

from sitebake.config import POSTS_PER_PAGE, PUBLIC_TAG_PARENT_IDS

from ..content.models import (
    BlogIndexPage,
    ChartIndexItem,
    ChartsIndexPage,
    FrontPage,
    PostSummary,
    TagEntry,
)
from ..content.store import ContentStore, VisualizationStore
from .images import resolve_thumbnail_async
from .pages import query_upstream

logger = logging.getLogger(__name__)

CHART_TAG_COLUMNS = ["chartId", "tagId", "tagName", "tagParentId"]


def filter_public_tags(
    chart_tags: Sequence[Mapping[str, Any]],
    allowed_parent_ids: Iterable[int] = PUBLIC_TAG_PARENT_IDS,
) -> pd.DataFrame:
    """Return the chart/tag associations whose tag parent is allow-listed.

    Parameters
    ----------
    chart_tags : Sequence[Mapping[str, Any]]
        Association rows with ``chartId``, ``tagId``, ``tagName`` and
        ``tagParentId``.
    allowed_parent_ids : Iterable[int], optional
        Parent tag ids of the public top-level categories.

    Returns
    -------
    pd.DataFrame
        The surviving associations, in query order. Rows with a missing or
        unlisted parent are dropped.
    """
    frame = pd.DataFrame(list(chart_tags), columns=CHART_TAG_COLUMNS)
    if frame.empty:
        return frame
    parent_ids = pd.to_numeric(frame["tagParentId"], errors="coerce")
    return frame[parent_ids.isin(set(allowed_parent_ids))]


def group_chart_tags(
    chart_items: Sequence[Mapping[str, Any]], public_tags: pd.DataFrame
) -> list[ChartIndexItem]:
    """Attach the public tags to each chart summary row.

    Every chart is kept, with an empty tag list if none of its tags survived
    filtering. Associations for charts that are not in ``chart_items`` are
    ignored.
    """
    tags_by_chart: dict[int, list[TagEntry]] = {}
    for association in public_tags.itertuples(index=False):
        tags_by_chart.setdefault(int(association.chartId), []).append(
            TagEntry(
                id=int(association.tagId),
                name=str(association.tagName),
                parent_id=int(association.tagParentId),
            )
        )
    return [
        ChartIndexItem(
            id=int(item["id"]),
            slug=str(item.get("slug") or ""),
            title=str(item.get("title") or ""),
            variant_name=item.get("variantName") or None,
            tags=tuple(tags_by_chart.get(int(item["id"]), ())),
        )
        for item in chart_items
    ]


async def assemble_charts_index(
    viz_store: VisualizationStore,
    allowed_parent_ids: Iterable[int] = PUBLIC_TAG_PARENT_IDS,
) -> ChartsIndexPage:
    """Build the charts catalog with tags limited to public categories."""
    chart_items, chart_tags = await asyncio.gather(
        query_upstream("chart summaries", viz_store.get_chart_summaries()),
        query_upstream("chart tags", viz_store.get_chart_tags()),
    )
    public_tags = filter_public_tags(chart_tags, allowed_parent_ids)
    dropped = len(chart_tags) - len(public_tags)
    if dropped:
        logger.debug("Dropped %d non-public chart tag association(s)", dropped)
    return ChartsIndexPage(chart_items=tuple(group_chart_tags(chart_items, public_tags)))


def paginate(
    items: Sequence[PostSummary], page_num: int, per_page: int = POSTS_PER_PAGE
) -> tuple[list[PostSummary], int]:
    """Return the items of page ``page_num`` (1-based) and the page count.

    Examples
    --------
    >>> paginate(list(range(45)), 3, 21)
    ([42, 43, 44], 3)
    >>> paginate(list(range(45)), 4, 21)
    ([], 3)
    """
    num_pages = math.ceil(len(items) / per_page)
    if page_num < 1:
        return [], num_pages
    start = (page_num - 1) * per_page
    return list(items[start : start + per_page]), num_pages


async def _with_thumbnail(post: PostSummary, wordpress_dir: Path) -> PostSummary:
    if not post.image_url:
        return post
    return post.with_image(await resolve_thumbnail_async(post.image_url, wordpress_dir))


async def assemble_blog_index(
    content_store: ContentStore,
    page_num: int,
    wordpress_dir: Path,
    posts_per_page: int = POSTS_PER_PAGE,
) -> BlogIndexPage:
    """Build one page of the chronological blog listing.

    Parameters
    ----------
    content_store : ContentStore
        CMS queries.
    page_num : int
        1-based page number. Pages outside ``1..num_pages`` are empty.
    wordpress_dir : Path
        CMS root used to find image size variants.
    posts_per_page : int, optional
        Listing page size.

    Returns
    -------
    BlogIndexPage
        The page's posts with thumbnails resolved where possible.
    """
    all_posts = await query_upstream("blog index", content_store.get_blog_index())
    posts, num_pages = paginate(all_posts, page_num, posts_per_page)
    posts = await asyncio.gather(*(_with_thumbnail(p, wordpress_dir) for p in posts))
    return BlogIndexPage(posts=tuple(posts), page_num=page_num, num_pages=num_pages)


async def assemble_front_page(content_store: ContentStore) -> FrontPage:
    posts, entries = await asyncio.gather(
        query_upstream("blog index", content_store.get_blog_index()),
        query_upstream("entries by category", content_store.get_entries_by_category()),
    )
    return FrontPage(entries=tuple(entries), posts=tuple(posts))


async def render_menu_json(content_store: ContentStore) -> str:
    """Serialize the category navigation for the site header menu."""
    entries = await query_upstream(
        "entries by category", content_store.get_entries_by_category()
    )
    return json.dumps({"categories": [e.to_dict() for e in entries]}, ensure_ascii=False)
