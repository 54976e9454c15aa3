"""Embedded-visualization scanning.

Posts embed interactive charts as inline frames pointing at the chart route,
e.g. ``<iframe src="https://example.org/grapher/co2-emissions">``. The scanner
returns the distinct frame sources in first-occurrence order so each chart is
baked and looked up exactly once per page build.
"""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from sitebake.config import VISUALIZATION_ROUTE_SEGMENT

logger = logging.getLogger(__name__)


def is_visualization_src(src: str, route_segment: str = VISUALIZATION_ROUTE_SEGMENT) -> bool:
    """Return True when an iframe ``src`` points at the visualization route."""
    return bool(src) and route_segment in src


def scan_embedded_visualizations(
    markup: str, route_segment: str = VISUALIZATION_ROUTE_SEGMENT
) -> list[str]:
    """Return the distinct visualization references embedded in ``markup``.

    Parameters
    ----------
    markup : str
        Raw post body.
    route_segment : str, optional
        Path segment identifying visualization frames.

    Returns
    -------
    list[str]
        Frame ``src`` values containing ``route_segment``, duplicates removed,
        first-occurrence order preserved. Empty for markup that cannot be
        parsed.

    Examples
    --------
    >>> html = '<iframe src="/grapher/a"></iframe><iframe src="/x"></iframe>'
    >>> scan_embedded_visualizations(html + '<iframe src="/grapher/a"></iframe>')
    ['/grapher/a']
    """
    if not isinstance(markup, str):
        return []
    try:
        soup = BeautifulSoup(markup, "html.parser")
        frames = soup.find_all("iframe")
    except Exception:
        logger.warning("Could not parse post markup for embeds", exc_info=True)
        return []
    references: list[str] = []
    seen: set[str] = set()
    for frame in frames:
        src = frame.get("src") or ""
        if not is_visualization_src(src, route_segment) or src in seen:
            continue
        seen.add(src)
        references.append(src)
    return references


def visualization_slug(reference: str) -> str:
    """Return the chart slug of a visualization reference.

    The slug is the last non-empty path segment; query string and fragment
    are ignored.

    Examples
    --------
    >>> visualization_slug("https://example.org/grapher/co2-emissions?tab=map")
    'co2-emissions'
    """
    path = urlparse(reference).path
    segments = [segment for segment in path.split("/") if segment]
    return segments[-1] if segments else ""
