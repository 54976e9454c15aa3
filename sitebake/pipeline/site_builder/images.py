"""Thumbnail selection for listing pages.

The CMS generates several resized copies of every uploaded image next to the
original (``chart.png``, ``chart-150x150.png``, ``chart-768x512.png``, ...).
Listing pages use a smaller copy: the candidates are sorted by file size and
the one third from the largest is taken. With fewer than three candidates,
or on any filesystem error, the original image is kept.
"""

from __future__ import annotations

import asyncio
import glob
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from sitebake.config import THUMBNAIL_RANK_FROM_LARGEST, THUMBNAIL_SOURCE_SUFFIX

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariantSelection:
    """Outcome of a thumbnail lookup.

    Attributes
    ----------
    resolved_path : str | None
        Site-relative path of the chosen variant, or ``None`` when no variant
        could be selected.
    """

    resolved_path: str | None = None

    @property
    def resolved(self) -> bool:
        return self.resolved_path is not None

    def unwrap(self, original: str) -> str:
        """Return the resolved path, or ``original`` when unresolved."""
        return self.resolved_path if self.resolved_path is not None else original


UNRESOLVED = VariantSelection()


def find_size_variants(image_url: str, wordpress_dir: Path) -> list[str]:
    """Return the on-disk size variants of ``image_url``, smallest file first."""
    pathname = urlparse(image_url).path
    pattern = pathname.replace(
        THUMBNAIL_SOURCE_SUFFIX, f"*{THUMBNAIL_SOURCE_SUFFIX}", 1
    )
    root = str(wordpress_dir).rstrip("/")
    paths = sorted(glob.glob(root + pattern))
    return sorted(paths, key=os.path.getsize)


def select_image_variant(
    image_url: str,
    wordpress_dir: Path,
    rank_from_largest: int = THUMBNAIL_RANK_FROM_LARGEST,
) -> VariantSelection:
    """Pick the thumbnail variant of ``image_url``.

    Parameters
    ----------
    image_url : str
        URL (or site-relative path) of the original image.
    wordpress_dir : Path
        CMS root the URL path is resolved against.
    rank_from_largest : int, optional
        Which candidate to take counting from the largest (1 = largest).

    Returns
    -------
    VariantSelection
        The selected site-relative path, or ``UNRESOLVED`` with fewer than
        ``rank_from_largest`` candidates or when the lookup fails.

    Examples
    --------
    With variants of 10, 20, 30 and 40 bytes, the 20-byte file is chosen;
    with exactly three variants the smallest one is.
    """
    try:
        candidates = find_size_variants(image_url, wordpress_dir)
    except (OSError, ValueError):
        logger.warning("Could not list size variants of %s", image_url, exc_info=True)
        return UNRESOLVED
    index = len(candidates) - rank_from_largest
    if index < 0:
        logger.debug(
            "Only %d size variant(s) of %s; keeping original",
            len(candidates),
            image_url,
        )
        return UNRESOLVED
    root = str(wordpress_dir).rstrip("/")
    chosen = candidates[index]
    return VariantSelection(chosen[len(root):] if chosen.startswith(root) else chosen)


def resolve_thumbnail(image_url: str, wordpress_dir: Path) -> str:
    """Return the thumbnail path for ``image_url``, or the URL itself."""
    return select_image_variant(image_url, wordpress_dir).unwrap(image_url)


async def resolve_thumbnail_async(image_url: str, wordpress_dir: Path) -> str:
    return await asyncio.to_thread(resolve_thumbnail, image_url, wordpress_dir)
