"""exports.client module.

This module defines the asynchronous networking boundary to the external chart
render service. `RenderServiceClient` posts one render request, handling
transient network failures, rate limiting and timeouts according to the
configured retry policy. It never raises: every outcome is reported as an
``(ok, raw)`` tuple so the export store can log and absorb failures per chart.

`HttpExportRenderer` adapts the client to the ``ExportRenderer`` protocol,
owning the HTTP session and bounding fan-out with an `aiolimiter` rate limiter
and a semaphore.

Examples
--------
>>> from sitebake.pipeline.exports.client import HttpExportRenderer
>>> from sitebake.pipeline.exports.config import BakeConfig
>>> async def main():
...     async with HttpExportRenderer(BakeConfig()) as renderer:
...         return await renderer.render("life-expectancy", 12)
>>> # import asyncio; asyncio.run(main())
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import aiohttp
from aiolimiter import AsyncLimiter

logger = logging.getLogger(__name__)


class RenderServiceClient:
    r"""Asynchronous client for the chart render service.

    Attributes
    ----------
    config : Any
        Configuration object (e.g., `BakeConfig`) providing ``render_endpoint``,
        ``render_api_key``, ``max_retries``, ``backoff_factor``,
        ``retry_sleep_on_429`` and ``request_timeout``. Optional attributes are
        read with ``getattr`` defaults.

    See Also
    --------
    sitebake.pipeline.exports.store.ExportResolutionStore : Consumer of render
        outcomes.
    """

    def __init__(self, config: Any) -> None:
        self.config = config

    async def request_render(
        self, session: aiohttp.ClientSession, payload: dict[str, Any]
    ) -> tuple[bool, dict[str, Any] | None]:
        r"""Send one render request and return a normalized outcome.

        Handles:
          * Configuration errors (no endpoint configured)
          * Network issues (retries on aiohttp.ClientError and TimeoutError)
          * HTTP 429 with sleep-and-retry
          * Other non-2xx codes, retried with exponential backoff

        Parameters
        ----------
        session : aiohttp.ClientSession
            Session used for the POST; not closed by this method.
        payload : dict[str, Any]
            JSON body, ``{"slug": ..., "version": ...}``.

        Returns
        -------
        tuple[bool, dict[str, Any] or None]
            ``ok`` is True when the service acknowledged the render with a 2xx
            status. The second element is the parsed JSON response, or a dict
            describing the error.

        Notes
        -----
        No exceptions propagate to the caller.
        """
        endpoint = getattr(self.config, "render_endpoint", "")
        if not endpoint:
            return (
                False,
                {
                    "error_type": "ConfigurationError",
                    "message": "Render endpoint not set.",
                },
            )

        headers = {"Content-Type": "application/json"}
        api_key = getattr(self.config, "render_api_key", None)
        if api_key:
            headers["api-key"] = str(api_key)
        max_retries = getattr(self.config, "max_retries", 3)
        backoff = getattr(self.config, "backoff_factor", 2.0)

        for attempt in range(max_retries + 1):
            try:
                async with session.post(
                    endpoint,
                    json=payload,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(
                        total=getattr(self.config, "request_timeout", 120)
                    ),
                ) as response:
                    status = response.status
                    text = await response.text()

                    if 200 <= status < 300:
                        try:
                            data = json.loads(text) if text else {}
                        except json.JSONDecodeError:
                            data = {"raw_response_text": text}
                        if isinstance(data, dict) and data.get("ok") is False:
                            return False, data
                        return True, data if isinstance(data, dict) else {"data": data}

                    if status == 429:
                        await asyncio.sleep(
                            getattr(self.config, "retry_sleep_on_429", 30)
                            * (attempt + 1)
                        )
                        continue

                    if attempt < max_retries:
                        await asyncio.sleep(backoff**attempt)
                        continue
                    return False, {"status_code": status, "error_body": text}

            except aiohttp.ClientError as e:
                if attempt < max_retries:
                    await asyncio.sleep(backoff**attempt)
                    continue
                return False, {"error_type": "ClientError", "message": str(e)}
            except TimeoutError:
                if attempt < max_retries:
                    await asyncio.sleep(backoff**attempt)
                    continue
                return False, {"error_type": "TimeoutError"}

        return False, None


class HttpExportRenderer:
    """``ExportRenderer`` backed by the HTTP render service.

    Use as an async context manager so the session is closed after the bake.
    """

    def __init__(self, config: Any, client: RenderServiceClient | None = None) -> None:
        self.config = config
        self.client = client or RenderServiceClient(config)
        self.rate_limiter = AsyncLimiter(getattr(config, "target_rpm", 600), 60)
        self.semaphore = asyncio.Semaphore(
            getattr(config, "max_concurrent_renders", 4)
        )
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "HttpExportRenderer":
        connector = aiohttp.TCPConnector(
            limit=getattr(self.config, "max_concurrent_renders", 4)
        )
        self.session = aiohttp.ClientSession(connector=connector)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session is not None:
            await self.session.close()
            self.session = None

    async def render(self, slug: str, version: int) -> bool:
        if self.session is None:
            raise RuntimeError("HttpExportRenderer must be used as an async context manager")
        async with self.semaphore:
            async with self.rate_limiter:
                ok, raw = await self.client.request_render(
                    self.session, {"slug": slug, "version": version}
                )
        if not ok:
            logger.warning("Render service failed for %s (v%s): %s", slug, version, raw)
        return ok
