"""Global configuration constants for the project.

Defines paths, route segments, listing sizes and the tag allow-list used
across the baking pipeline.
"""

from __future__ import annotations

from pathlib import Path

# Project directories
PROJECT_ROOT: Path = Path(__file__).resolve().parents[1]
PACKAGE_DIR: Path = PROJECT_ROOT / "sitebake"
LOG_DIR: Path = PROJECT_ROOT / "logs"

# Content and baked-site locations (overridable through BakeConfig / .env)
DEFAULT_WORDPRESS_DIR: Path = PROJECT_ROOT / "wordpress"
DEFAULT_BAKED_SITE_DIR: Path = PROJECT_ROOT / "baked"
DEFAULT_BAKED_GRAPHER_URL: str = "/grapher"

# Embedded visualizations
VISUALIZATION_ROUTE_SEGMENT: str = "/grapher/"
EXPORTS_SUBDIR: str = "exports"
EXPORT_FILE_GLOB: str = "*.svg"
# {slug}_v{version}_{width}x{height}.svg
EXPORT_FILENAME_PATTERN: str = r"^(?P<slug>.+)_v(?P<version>\d+)_(?P<width>\d+)x(?P<height>\d+)\.svg$"

# Export rendering defaults
DEFAULT_RENDER_TIMEOUT: int = 120
DEFAULT_EXPORT_WAIT_TIMEOUT: float = 300.0
DEFAULT_MAX_CONCURRENT_RENDERS: int = 4
DEFAULT_RENDER_RPM: int = 600

# Formatting directives: <!-- formatting-options toc:false raw -->
FORMATTING_DIRECTIVE_PATTERN: str = r"<!--\s*formatting-options\s+(.*?)\s*-->"

# Listings
POSTS_PER_PAGE: int = 21
THUMBNAIL_RANK_FROM_LARGEST: int = 3
THUMBNAIL_SOURCE_SUFFIX: str = ".png"

# Public top-level category tags shown on the charts index.
PUBLIC_TAG_PARENT_IDS: frozenset[int] = frozenset(
    {
        1500,
        1501,
        1502,
        1503,
        1504,
        1505,
        1506,
        1507,
        1508,
        1509,
        1510,
        1511,
        1512,
        1513,
        1514,
        1515,
    }
)

# Post types
ARTICLE_POST_TYPE: str = "post"
REVISION_POST_TYPE: str = "revision"

# Output
HTML_DOCTYPE: str = "<!doctype html>"
MENU_JSON_FILENAME: str = "headerMenu.json"
BLOG_INDEX_DIRNAME: str = "blog"
CHARTS_INDEX_DIRNAME: str = "charts"
UNAVAILABLE_EMBED_TEXT: str = "Interactive visualization not available"

# Logging
LOG_FILENAME_BAKE: str = "bake_site.log"
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
