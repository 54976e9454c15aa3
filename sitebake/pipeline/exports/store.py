"""Export resolution: make sure embedded charts have a current static export.

``ExportResolutionStore`` is a read-through cache in front of the export table
on disk. Before a page is formatted, ``ensure_rendered`` compares each
embedded chart's current configuration version with the version of its
newest export and asks the external renderer for the stale or missing ones.

Concurrent page builds often embed the same chart. Each pending render is
tracked as a shared ``asyncio.Future`` keyed by slug and version, so a second
build waits on the first build's render instead of triggering another, and
a finished render is remembered so a build holding an older table snapshot
does not repeat it. Waits are bounded; a render that fails or times out only
means that chart has no export, and the page falls back to the live embed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Mapping

from sitebake.config import DEFAULT_EXPORT_WAIT_TIMEOUT
from sitebake.exceptions import AppError, ExternalServiceError, TimeoutExceededError

from ..content.models import ExportRecord
from ..content.store import ExportRenderer, VisualizationStore
from ..formatting.embeds import visualization_slug
from .index import ExportIndex

logger = logging.getLogger(__name__)


def lookup(exports: Mapping[str, ExportRecord], reference: str) -> ExportRecord | None:
    """Return the export for an embed reference, or ``None`` if there is none."""
    return exports.get(visualization_slug(reference))


class ExportResolutionStore:
    """Coordinate chart renders and expose the current export table.

    Parameters
    ----------
    index : ExportIndex
        The persistent export table.
    versions : VisualizationStore
        Source of current chart configuration versions.
    renderer : ExportRenderer
        External renderer triggered for stale or missing exports.
    wait_timeout : float, optional
        Seconds a build waits for its pending renders before continuing
        without them.
    """

    def __init__(
        self,
        index: ExportIndex,
        versions: VisualizationStore,
        renderer: ExportRenderer,
        *,
        wait_timeout: float = DEFAULT_EXPORT_WAIT_TIMEOUT,
    ) -> None:
        self.index = index
        self.versions = versions
        self.renderer = renderer
        self.wait_timeout = wait_timeout
        self._in_flight: dict[str, tuple[int, asyncio.Future[bool]]] = {}
        # Newest version rendered successfully by this store, per slug.
        self._rendered: dict[str, int] = {}

    async def lookup_all(self) -> dict[str, ExportRecord]:
        """Return the current export table keyed by chart slug."""
        return await self.index.load()

    async def ensure_rendered(self, references: Iterable[str]) -> dict[str, bool]:
        """Render every referenced chart whose export is missing or stale.

        Parameters
        ----------
        references : Iterable[str]
            Embed references (frame sources) found in a page.

        Returns
        -------
        dict[str, bool]
            Outcome per slug that needed a render. Slugs already current are
            not included.

        Raises
        ------
        ExternalServiceError
            If the visualization store cannot be queried for versions.
        """
        slugs = list(dict.fromkeys(s for s in map(visualization_slug, references) if s))
        if not slugs:
            return {}
        try:
            versions = await self.versions.get_chart_versions(slugs)
        except AppError:
            raise
        except Exception as exc:
            raise ExternalServiceError(
                "Could not query chart versions", context={"slugs": slugs}
            ) from exc
        current = await self.lookup_all()

        pending: dict[str, asyncio.Future[bool]] = {}
        for slug in slugs:
            version = versions.get(slug)
            if version is None:
                logger.warning("Embedded chart %s is unknown; not rendering", slug)
                continue
            record = current.get(slug)
            if record is not None and record.version == version:
                continue
            if self._rendered.get(slug, -1) >= version:
                # Rendered by a concurrent build after our table snapshot.
                continue
            pending[slug] = self._render_once(slug, version)

        if not pending:
            return {}
        outcomes = await asyncio.gather(
            *(self._wait(slug, future) for slug, future in pending.items())
        )
        return dict(zip(pending, outcomes))

    def _render_once(self, slug: str, version: int) -> asyncio.Future[bool]:
        entry = self._in_flight.get(slug)
        if entry is not None and entry[0] == version:
            logger.debug("Render of %s (v%s) already in flight; joining it", slug, version)
            return entry[1]
        future = asyncio.ensure_future(self._render(slug, version))
        self._in_flight[slug] = (version, future)

        def _forget(done: asyncio.Future[bool]) -> None:
            current = self._in_flight.get(slug)
            if current is not None and current[1] is done:
                del self._in_flight[slug]

        future.add_done_callback(_forget)
        return future

    async def _render(self, slug: str, version: int) -> bool:
        logger.info("Rendering export for %s (v%s)", slug, version)
        try:
            ok = bool(await self.renderer.render(slug, version))
        except Exception:
            logger.exception("Render of %s failed", slug)
            return False
        if not ok:
            logger.warning("Render of %s did not produce an export", slug)
            return False
        if version > self._rendered.get(slug, -1):
            self._rendered[slug] = version
        return True

    async def _await_bounded(self, slug: str, future: asyncio.Future[bool]) -> bool:
        """Wait for ``future`` without cancelling it for other waiters.

        Raises
        ------
        TimeoutExceededError
            If the render is still running after ``wait_timeout`` seconds.
        """
        try:
            return await asyncio.wait_for(asyncio.shield(future), self.wait_timeout)
        except asyncio.TimeoutError as exc:
            raise TimeoutExceededError(
                f"Export of {slug} not ready after {self.wait_timeout:.1f}s",
                context={"slug": slug, "wait_timeout": self.wait_timeout},
            ) from exc

    async def _wait(self, slug: str, future: asyncio.Future[bool]) -> bool:
        try:
            return await self._await_bounded(slug, future)
        except TimeoutExceededError as err:
            logger.warning("%s; continuing without it", err.message)
            return False
