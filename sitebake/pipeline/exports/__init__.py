"""Chart export resolution for the baking pipeline.

Modules exported
----------------
ExportIndex
    The export table on disk (newest export per chart).
ExportResolutionStore
    Triggers missing or stale renders with per-chart de-duplication.
RenderServiceClient, HttpExportRenderer
    Resilient aiohttp client for the external render service.
BakeConfig
    Environment-driven deployment configuration.
"""

from __future__ import annotations

from .client import HttpExportRenderer, RenderServiceClient
from .config import BakeConfig
from .index import ExportIndex, parse_export_filename
from .store import ExportResolutionStore, lookup

__all__ = [
    "BakeConfig",
    "ExportIndex",
    "ExportResolutionStore",
    "HttpExportRenderer",
    "RenderServiceClient",
    "lookup",
    "parse_export_filename",
]
