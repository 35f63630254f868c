"""Tests for live reload of the navigation source."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from guidenav.core.source import TocLoader
from guidenav.live import LiveReloadManager
from watchfiles import Change


class TestIsTocChange:
    """Tests for LiveReloadManager.is_toc_change()."""

    def test__toc_modified__detected(self, toc_file: Path) -> None:
        manager = LiveReloadManager(TocLoader(toc_file))

        assert manager.is_toc_change(Change.modified, str(toc_file))
        assert manager.is_toc_change(Change.added, str(toc_file))

    def test__toc_deleted__ignored(self, toc_file: Path) -> None:
        manager = LiveReloadManager(TocLoader(toc_file))

        assert not manager.is_toc_change(Change.deleted, str(toc_file))

    def test__other_file__ignored(self, toc_file: Path) -> None:
        manager = LiveReloadManager(TocLoader(toc_file))

        assert not manager.is_toc_change(Change.modified, str(toc_file.parent / "other.toml"))


class TestBroadcast:
    """Tests for reload broadcasting."""

    @pytest.mark.asyncio
    async def test__connected_clients__receive_reload(self, toc_file: Path) -> None:
        manager = LiveReloadManager(TocLoader(toc_file))
        ws = MagicMock()
        ws.closed = False
        ws.send_str = AsyncMock()
        manager._connections.add(ws)

        await manager._broadcast_reload()

        ws.send_str.assert_awaited_once()
        message = json.loads(ws.send_str.await_args.args[0])
        assert message == {"type": "reload", "path": str(toc_file)}

    @pytest.mark.asyncio
    async def test__closed_clients__skipped(self, toc_file: Path) -> None:
        manager = LiveReloadManager(TocLoader(toc_file))
        ws = MagicMock()
        ws.closed = True
        ws.send_str = AsyncMock()
        manager._connections.add(ws)

        await manager._broadcast_reload()

        ws.send_str.assert_not_awaited()

    @pytest.mark.asyncio
    async def test__stop_without_start__noop(self, toc_file: Path) -> None:
        manager = LiveReloadManager(TocLoader(toc_file))

        await manager.stop()
