"""Default post formatter: static fallbacks for embedded charts.

The full editorial formatter is an external collaborator; this module provides
the part of it the baking pipeline owns. Every chart frame whose export exists
is replaced by a ``<figure data-grapher-src=...>`` holding a link to the
interactive chart and the exported image. Frames without an export are left
untouched so the page still renders and the embed degrades to the live frame.
"""

from __future__ import annotations

import logging
from typing import Mapping

from bs4 import BeautifulSoup

from sitebake.config import UNAVAILABLE_EMBED_TEXT, VISUALIZATION_ROUTE_SEGMENT

from ..content.models import ExportRecord, FormattedPost, FormattingOptions, FullPost
from .embeds import is_visualization_src, visualization_slug

logger = logging.getLogger(__name__)


def inline_export_fallbacks(
    html_content: str,
    exports: Mapping[str, ExportRecord],
    route_segment: str = VISUALIZATION_ROUTE_SEGMENT,
) -> str:
    """Replace chart frames that have an export with static preview figures.

    Returns ``html_content`` unchanged when no frame could be replaced.
    """
    soup = BeautifulSoup(html_content, "html.parser")
    replaced = 0
    for frame in soup.find_all("iframe"):
        src = frame.get("src") or ""
        if not is_visualization_src(src, route_segment):
            continue
        record = exports.get(visualization_slug(src))
        if record is None:
            logger.warning("No export available for embed %s; leaving frame", src)
            continue
        figure = soup.new_tag("figure", attrs={"data-grapher-src": src})
        figure["class"] = "grapherPreview"
        link = soup.new_tag("a", href=src, target="_blank")
        image = soup.new_tag(
            "img",
            src=record.svg_url,
            width=str(record.width),
            height=str(record.height),
            alt=UNAVAILABLE_EMBED_TEXT,
        )
        link.append(image)
        figure.append(link)
        frame.replace_with(figure)
        replaced += 1
    if not replaced:
        return html_content
    return str(soup)


class EmbedFallbackFormatter:
    """``PostFormatter`` that inlines export fallbacks.

    The body is otherwise returned as authored; frames are the only nodes
    touched, so ``<pre>`` blocks and line breaks keep their layout.

    The ``raw`` formatting option passes the body through untouched.
    """

    def __init__(self, route_segment: str = VISUALIZATION_ROUTE_SEGMENT) -> None:
        self.route_segment = route_segment

    async def format(
        self,
        post: FullPost,
        options: FormattingOptions,
        exports: Mapping[str, ExportRecord],
    ) -> FormattedPost:
        if options.get("raw") is True:
            return FormattedPost(post=post, html=post.content)
        html = inline_export_fallbacks(post.content, exports, self.route_segment)
        return FormattedPost(post=post, html=html)
