"""Configuration and environment loader for a site bake.

This module provides BakeConfig, which loads, validates, and exposes the
deployment parameters of the baking pipeline: where the CMS uploads and the
baked site live, where chart exports are published, and how the external
render service is reached.

Role in Architecture
--------------------
- Forms the boundary between the process environment (CI, developer `.env`)
  and the pipeline's typed runtime config.
- No business or client logic: only configuration loading and validation.

Examples
--------
>>> from sitebake.pipeline.exports.config import BakeConfig
>>> cfg = BakeConfig()
>>> assert cfg.max_concurrent_renders > 0
"""

import os
from pathlib import Path

from dotenv import load_dotenv

import sitebake.config as _project_config
from sitebake.config import (
    DEFAULT_BAKED_GRAPHER_URL,
    DEFAULT_BAKED_SITE_DIR,
    DEFAULT_EXPORT_WAIT_TIMEOUT,
    DEFAULT_MAX_CONCURRENT_RENDERS,
    DEFAULT_RENDER_RPM,
    DEFAULT_RENDER_TIMEOUT,
    DEFAULT_WORDPRESS_DIR,
    EXPORTS_SUBDIR,
    POSTS_PER_PAGE,
)
from sitebake.exceptions import ConfigurationError


def _env_number(name: str, default: float, cast: type) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return cast(default)
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"Environment variable {name} must be a number",
            context={"variable": name, "value": raw},
        ) from exc
    if value < 0:
        raise ConfigurationError(
            f"Environment variable {name} must not be negative",
            context={"variable": name, "value": raw},
        )
    return value


class BakeConfig:
    r"""Configuration loader and validator for a site bake.

    Attributes
    ----------
    wordpress_dir : Path
        Root of the CMS installation; uploaded images live below it.
    baked_site_dir : Path
        Output directory of the static site.
    baked_grapher_url : str
        Public URL prefix of baked charts and their exports.
    render_endpoint : str
        URL of the chart render service (empty disables rendering).
    render_api_key : str | None
        API key sent to the render service.
    max_concurrent_renders : int
        Maximum parallel render requests.
    target_rpm : int
        Target render requests per minute.
    max_retries : int
        Maximum retries for transient render failures.
    backoff_factor : float
        Exponential backoff base for retries.
    retry_sleep_on_429 : int
        Seconds to sleep on HTTP 429.
    request_timeout : int
        Timeout (seconds) for one render request.
    export_wait_timeout : float
        Upper bound (seconds) a page build waits for pending renders.
    posts_per_page : int
        Page size of the chronological blog listing.

    Examples
    --------
    >>> import os
    >>> os.environ["RENDER_ENDPOINT"] = "http://render.local/export"
    >>> os.environ["RENDER_API_KEY"] = "unit-test"
    >>> c = BakeConfig()
    >>> c.render_endpoint
    'http://render.local/export'
    """

    def __init__(self) -> None:
        """Initialize from the environment and an optional project `.env`.

        Raises
        ------
        ConfigurationError
            If a numeric setting is malformed or negative, or if an API key is
            configured without a render endpoint.
        """
        env_path = Path(_project_config.PROJECT_ROOT) / ".env"
        if env_path.exists():
            load_dotenv(env_path, override=True)
        self.wordpress_dir: Path = Path(
            os.getenv("WORDPRESS_DIR", str(DEFAULT_WORDPRESS_DIR))
        )
        self.baked_site_dir: Path = Path(
            os.getenv("BAKED_SITE_DIR", str(DEFAULT_BAKED_SITE_DIR))
        )
        self.baked_grapher_url: str = os.getenv(
            "BAKED_GRAPHER_URL", DEFAULT_BAKED_GRAPHER_URL
        ).rstrip("/")
        self.render_endpoint: str = os.getenv("RENDER_ENDPOINT", "")
        self.render_api_key: str | None = os.getenv("RENDER_API_KEY") or None
        self.max_concurrent_renders = int(
            _env_number("MAX_CONCURRENT_RENDERS", DEFAULT_MAX_CONCURRENT_RENDERS, int)
        )
        self.target_rpm = int(_env_number("TARGET_RPM", DEFAULT_RENDER_RPM, int))
        self.max_retries = int(_env_number("MAX_RETRIES", 3, int))
        self.backoff_factor = float(_env_number("BACKOFF_FACTOR", 2.0, float))
        self.retry_sleep_on_429 = int(_env_number("RETRY_SLEEP_ON_429", 30, int))
        self.request_timeout = int(
            _env_number("REQUEST_TIMEOUT", DEFAULT_RENDER_TIMEOUT, int)
        )
        self.export_wait_timeout = float(
            _env_number("EXPORT_WAIT_TIMEOUT", DEFAULT_EXPORT_WAIT_TIMEOUT, float)
        )
        self.posts_per_page = int(_env_number("POSTS_PER_PAGE", POSTS_PER_PAGE, int))
        if self.max_concurrent_renders < 1 or self.posts_per_page < 1:
            raise ConfigurationError(
                "MAX_CONCURRENT_RENDERS and POSTS_PER_PAGE must be at least 1"
            )
        if self.render_api_key and not self.render_endpoint:
            raise ConfigurationError("RENDER_API_KEY is set but RENDER_ENDPOINT is missing")

    @property
    def exports_dir(self) -> Path:
        return self.baked_site_dir / EXPORTS_SUBDIR
