"""Tests for export resolution and render de-duplication."""

import asyncio
from pathlib import Path

import pytest

from sitebake.exceptions import ExternalServiceError, TimeoutExceededError
from sitebake.pipeline.exports.index import ExportIndex
from sitebake.pipeline.exports.store import ExportResolutionStore, lookup
from tests._fakes import FakeRenderer, FakeVizStore


def make_store(tmp_path: Path, versions, renderer=None, wait_timeout=5.0):
    exports = tmp_path / "exports"
    renderer = renderer or FakeRenderer(exports)
    store = ExportResolutionStore(
        ExportIndex(exports, "/grapher"),
        FakeVizStore(versions=versions),
        renderer,
        wait_timeout=wait_timeout,
    )
    return store, renderer


@pytest.mark.asyncio
async def test_renders_missing_exports_once_per_slug(tmp_path: Path):
    store, renderer = make_store(tmp_path, {"co2": 3, "gdp": 1})
    outcome = await store.ensure_rendered(
        ["/grapher/co2", "https://x.org/grapher/gdp", "/grapher/co2?tab=map"]
    )
    assert outcome == {"co2": True, "gdp": True}
    assert sorted(renderer.calls) == [("co2", 3), ("gdp", 1)]
    table = await store.lookup_all()
    assert table["co2"].version == 3
    assert lookup(table, "/grapher/gdp").slug == "gdp"


@pytest.mark.asyncio
async def test_current_exports_are_skipped(tmp_path: Path):
    store, renderer = make_store(tmp_path, {"co2": 3})
    await renderer.render("co2", 3)
    renderer.calls.clear()
    assert await store.ensure_rendered(["/grapher/co2"]) == {}
    assert renderer.calls == []


@pytest.mark.asyncio
async def test_stale_export_is_rerendered(tmp_path: Path):
    store, renderer = make_store(tmp_path, {"co2": 4})
    await renderer.render("co2", 3)
    renderer.calls.clear()
    await store.ensure_rendered(["/grapher/co2"])
    assert renderer.calls == [("co2", 4)]
    assert (await store.lookup_all())["co2"].version == 4


@pytest.mark.asyncio
async def test_concurrent_builds_share_in_flight_renders(tmp_path: Path):
    exports = tmp_path / "exports"
    renderer = FakeRenderer(exports, delay=0.05)
    store, _ = make_store(tmp_path, {"a": 1, "b": 1, "c": 1}, renderer)
    await asyncio.gather(
        store.ensure_rendered(["/grapher/a", "/grapher/b"]),
        store.ensure_rendered(["/grapher/b", "/grapher/c"]),
    )
    slugs = [slug for slug, _ in renderer.calls]
    assert sorted(slugs) == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_failed_render_does_not_abort_others(tmp_path: Path):
    renderer = FakeRenderer(tmp_path / "exports", failing={"bad"})
    store, _ = make_store(tmp_path, {"bad": 1, "good": 1}, renderer)
    outcome = await store.ensure_rendered(["/grapher/bad", "/grapher/good"])
    assert outcome == {"bad": False, "good": True}
    table = await store.lookup_all()
    assert "good" in table and "bad" not in table


@pytest.mark.asyncio
async def test_renderer_exception_is_absorbed(tmp_path: Path):
    class ExplodingRenderer:
        async def render(self, slug, version):
            raise RuntimeError("render service down")

    store, _ = make_store(tmp_path, {"co2": 1}, ExplodingRenderer())
    assert await store.ensure_rendered(["/grapher/co2"]) == {"co2": False}
    assert store._in_flight == {}


@pytest.mark.asyncio
async def test_hung_render_is_bounded(tmp_path: Path):
    renderer = FakeRenderer(tmp_path / "exports", delay=1.0)
    store, _ = make_store(tmp_path, {"co2": 1}, renderer, wait_timeout=0.01)
    assert await store.ensure_rendered(["/grapher/co2"]) == {"co2": False}
    assert "co2" in store._in_flight
    await asyncio.sleep(1.1)
    assert store._in_flight == {}


@pytest.mark.asyncio
async def test_unknown_charts_are_not_rendered(tmp_path: Path):
    store, renderer = make_store(tmp_path, {})
    assert await store.ensure_rendered(["/grapher/deleted-chart"]) == {}
    assert renderer.calls == []


@pytest.mark.asyncio
async def test_no_references_skips_version_query(tmp_path: Path):
    store, _ = make_store(tmp_path, {"co2": 1})
    assert await store.ensure_rendered([]) == {}
    assert store.versions.version_queries == []


@pytest.mark.asyncio
async def test_version_query_failure_is_upstream_error(tmp_path: Path):
    class BrokenVersions(FakeVizStore):
        async def get_chart_versions(self, slugs):
            raise ConnectionError("mysql gone")

    store = ExportResolutionStore(
        ExportIndex(tmp_path, "/grapher"), BrokenVersions(), FakeRenderer(tmp_path)
    )
    with pytest.raises(ExternalServiceError):
        await store.ensure_rendered(["/grapher/co2"])


class LaggingIndex(ExportIndex):
    """Export index whose second load returns a snapshot taken before a delay."""

    def __init__(self, exports_dir, base_url, lag=0.2):
        super().__init__(exports_dir, base_url)
        self.lag = lag
        self.loads = 0

    async def load(self):
        self.loads += 1
        table = self.scan()
        if self.loads == 2:
            await asyncio.sleep(self.lag)
        return table


@pytest.mark.asyncio
async def test_concurrent_build_with_stale_snapshot_does_not_rerender(tmp_path: Path):
    exports = tmp_path / "exports"
    renderer = FakeRenderer(exports, delay=0.05)
    store = ExportResolutionStore(
        LaggingIndex(exports, "/grapher"), FakeVizStore(versions={"co2": 1}), renderer
    )
    first, second = await asyncio.gather(
        store.ensure_rendered(["/grapher/co2"]),
        store.ensure_rendered(["/grapher/co2"]),
    )
    assert renderer.calls == [("co2", 1)]
    assert first == {"co2": True}
    assert second == {}


@pytest.mark.asyncio
async def test_newer_version_does_not_join_older_render(tmp_path: Path):
    renderer = FakeRenderer(tmp_path / "exports", delay=0.05)
    store, _ = make_store(tmp_path, {"co2": 4}, renderer)

    async def later_build():
        await asyncio.sleep(0.01)
        store.versions.versions["co2"] = 5
        return await store.ensure_rendered(["/grapher/co2"])

    first, second = await asyncio.gather(
        store.ensure_rendered(["/grapher/co2"]), later_build()
    )
    assert renderer.calls == [("co2", 4), ("co2", 5)]
    assert first == {"co2": True} and second == {"co2": True}
    assert (await store.lookup_all())["co2"].version == 5
    assert store._in_flight == {}


@pytest.mark.asyncio
async def test_bounded_wait_raises_timeout_exceeded(tmp_path: Path):
    store, _ = make_store(tmp_path, {}, wait_timeout=0.01)
    never_done = asyncio.get_running_loop().create_future()
    with pytest.raises(TimeoutExceededError) as excinfo:
        await store._await_bounded("co2", never_done)
    assert excinfo.value.context["slug"] == "co2"
    assert excinfo.value.transient is True
    assert not never_done.cancelled()
    never_done.cancel()
