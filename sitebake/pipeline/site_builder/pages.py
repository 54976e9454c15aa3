"""Page assembly: one CMS row in, one renderer-ready page model out.

The assembler runs a fixed pipeline per page. The full post and the category
navigation are fetched concurrently, then the body is scanned for embedded
charts, their exports are brought up to date and looked up, the formatting
directives are read from the raw body, and the external formatter produces
the final HTML. Articles become ``BlogPostPage``; every other type becomes a
``LongFormPage`` carrying the category entries.

Only two failures escape: ``NotFoundError`` when the row does not exist and
``ExternalServiceError`` when the CMS cannot be reached.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, TypeVar

from sitebake.exceptions import AppError, ExternalServiceError, NotFoundError

from ..content.models import BlogPostPage, ContentRow, LongFormPage, PageModel
from ..content.store import ContentStore, PostFormatter
from ..exports.store import ExportResolutionStore
from ..formatting.directives import extract_formatting_options
from ..formatting.embeds import scan_embedded_visualizations

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def query_upstream(description: str, awaitable: Awaitable[T]) -> T:
    """Await a collaborator call, mapping unexpected failures to upstream errors.

    Parameters
    ----------
    description : str
        What is being queried, for the error message.
    awaitable : Awaitable[T]
        The pending collaborator call.

    Raises
    ------
    ExternalServiceError
        For any failure that is not already an ``AppError``.
    """
    try:
        return await awaitable
    except AppError:
        raise
    except Exception as exc:
        raise ExternalServiceError(
            f"CMS query failed: {description}", context={"query": description}
        ) from exc


class PageAssembler:
    """Build page models for single posts and pages.

    Parameters
    ----------
    content_store : ContentStore
        CMS queries.
    export_store : ExportResolutionStore
        Export rendering and lookup.
    formatter : PostFormatter
        Body transformation collaborator.
    """

    def __init__(
        self,
        content_store: ContentStore,
        export_store: ExportResolutionStore,
        formatter: PostFormatter,
    ) -> None:
        self.content_store = content_store
        self.export_store = export_store
        self.formatter = formatter

    async def assemble_by_slug(self, slug: str) -> PageModel:
        row = await query_upstream(
            f"row by slug {slug}", self.content_store.get_row_by_slug(slug)
        )
        if row is None:
            raise NotFoundError(f"No page found by slug {slug}", context={"slug": slug})
        return await self.assemble(row)

    async def assemble_by_id(self, post_id: int, preview: bool = False) -> PageModel:
        """Assemble a post by id; ``preview`` uses its latest revision."""
        if preview:
            row = await query_upstream(
                f"latest revision of {post_id}",
                self.content_store.get_latest_revision(post_id),
            )
        else:
            row = await query_upstream(
                f"row by id {post_id}", self.content_store.get_row_by_id(post_id)
            )
        if row is None:
            raise NotFoundError(
                f"No page found by id {post_id}",
                context={"id": post_id, "preview": preview},
            )
        return await self.assemble(row)

    async def assemble(self, row: ContentRow) -> PageModel:
        """Run the page pipeline for ``row``.

        Parameters
        ----------
        row : ContentRow
            The validated CMS row.

        Returns
        -------
        PageModel
            ``BlogPostPage`` for articles, ``LongFormPage`` otherwise.

        Raises
        ------
        ExternalServiceError
            If the CMS or the visualization store cannot be reached.
        """
        post, entries = await asyncio.gather(
            query_upstream(f"full post {row.id}", self.content_store.get_full_post(row)),
            query_upstream(
                "entries by category", self.content_store.get_entries_by_category()
            ),
        )

        references = scan_embedded_visualizations(post.content)
        if references:
            logger.info("Post %s embeds %d chart(s)", row.slug or row.id, len(references))
        # Slow when charts need rendering.
        await self.export_store.ensure_rendered(references)
        exports = await self.export_store.lookup_all()

        formatting_options = extract_formatting_options(post.content)
        formatted = await self.formatter.format(post, formatting_options, exports)

        if row.is_article:
            return BlogPostPage(post=formatted, formatting_options=formatting_options)
        return LongFormPage(
            post=formatted,
            formatting_options=formatting_options,
            entries=tuple(entries),
        )
