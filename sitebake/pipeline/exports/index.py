"""The persistent export table: rendered chart images on disk.

Exports are written by the render service into ``<baked_site>/exports`` as
``{slug}_v{version}_{width}x{height}.svg``. The table is the newest version
per slug; reading it is a directory listing, so it always reflects what has
actually been published.
"""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path

from sitebake.config import EXPORT_FILE_GLOB, EXPORT_FILENAME_PATTERN, EXPORTS_SUBDIR

from ..content.models import ExportRecord

logger = logging.getLogger(__name__)

_EXPORT_FILENAME_RE = re.compile(EXPORT_FILENAME_PATTERN)


def parse_export_filename(filename: str, base_url: str) -> ExportRecord | None:
    """Parse an export filename, returning ``None`` when it does not match.

    Examples
    --------
    >>> parse_export_filename("life-expectancy_v12_850x600.svg", "/grapher")
    ExportRecord(slug='life-expectancy', version=12, svg_url='/grapher/exports/life-expectancy_v12_850x600.svg', width=850, height=600)
    """
    match = _EXPORT_FILENAME_RE.match(filename)
    if match is None:
        return None
    return ExportRecord(
        slug=match.group("slug"),
        version=int(match.group("version")),
        svg_url=f"{base_url.rstrip('/')}/{EXPORTS_SUBDIR}/{filename}",
        width=int(match.group("width")),
        height=int(match.group("height")),
    )


class ExportIndex:
    """Read access to the export directory of a baked site.

    Parameters
    ----------
    exports_dir : Path
        Directory holding rendered exports.
    base_url : str
        Public URL prefix of the baked charts (exports live under
        ``{base_url}/exports``).
    """

    def __init__(self, exports_dir: Path, base_url: str) -> None:
        self.exports_dir = Path(exports_dir)
        self.base_url = base_url

    def scan(self) -> dict[str, ExportRecord]:
        """Return the newest export per slug; empty if the directory is missing."""
        if not self.exports_dir.is_dir():
            logger.debug("Export directory %s does not exist yet", self.exports_dir)
            return {}
        table: dict[str, ExportRecord] = {}
        for path in sorted(self.exports_dir.glob(EXPORT_FILE_GLOB)):
            record = parse_export_filename(path.name, self.base_url)
            if record is None:
                logger.debug("Skipping unrecognised export file %s", path.name)
                continue
            current = table.get(record.slug)
            if current is None or current.version < record.version:
                table[record.slug] = record
        return table

    async def load(self) -> dict[str, ExportRecord]:
        return await asyncio.to_thread(self.scan)
