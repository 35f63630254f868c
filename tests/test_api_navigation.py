"""Tests for navigation API endpoints."""

from pathlib import Path
from typing import Any

import pytest
from guidenav.config import Config
from guidenav.core.language import MemoryPreferenceStore
from guidenav.server import create_app


@pytest.fixture
def app(test_config: Config):
    return create_app(test_config, preference_store=MemoryPreferenceStore())


class TestGetNavigation:
    """Tests for GET /api/navigation."""

    @pytest.mark.asyncio
    async def test__no_params__returns_collapsed_tree(self, aiohttp_client: Any, app) -> None:
        """Return top-level entries, all collapsed, in the current language."""
        client = await aiohttp_client(app)
        response = await client.get("/api/navigation")

        assert response.status == 200
        data = await response.json()
        assert data["language"] == "en"
        assert data["active"] is None
        assert [item["label"] for item in data["items"]] == [
            "Components",
            "User Interface",
            "Permissions",
        ]
        assert all(item["children"] == [] for item in data["items"])

    @pytest.mark.asyncio
    async def test__active_and_lang__expands_chain(self, aiohttp_client: Any, app) -> None:
        """Expand the active page's section and label it in the requested language."""
        client = await aiohttp_client(app)
        response = await client.get("/api/navigation", params={"active": "/a/x", "lang": "zh"})

        data = await response.json()
        section = data["items"][0]
        assert data["active"] == "/a/x"
        assert section["label"] == "组件"
        assert section["expanded"] is True
        assert section["children"][0]["label"] == "片段"
        assert section["children"][0]["active"] is True

    @pytest.mark.asyncio
    async def test__unconfigured_language__falls_back(self, aiohttp_client: Any, app) -> None:
        """Labels fall back to the default language."""
        client = await aiohttp_client(app)
        response = await client.get("/api/navigation", params={"active": "/a/x", "lang": "fr"})

        data = await response.json()
        leaf = data["items"][0]["children"][0]
        assert leaf["label"] == "Fragments"
        assert leaf["language"] == "en"

    @pytest.mark.asyncio
    async def test__unknown_active__renders_collapsed(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/api/navigation", params={"active": "/missing.html"})

        assert response.status == 200
        data = await response.json()
        assert data["active"] is None
        assert not any(item["expanded"] for item in data["items"])

    @pytest.mark.asyncio
    async def test__missing_toc__returns_503(
        self,
        aiohttp_client: Any,
        test_config: Config,
        tmp_path: Path,
    ) -> None:
        config = test_config.with_overrides(toc_file=tmp_path / "missing.toml")
        client = await aiohttp_client(create_app(config, preference_store=MemoryPreferenceStore()))

        response = await client.get("/api/navigation")

        assert response.status == 503
        data = await response.json()
        assert data["error"] == "Navigation unavailable"


class TestGetNavigationSubtree:
    """Tests for GET /api/navigation/{path}."""

    @pytest.mark.asyncio
    async def test__existing_section__returns_children(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/api/navigation/b/index.html")

        assert response.status == 200
        data = await response.json()
        assert [item["label"] for item in data["items"]] == ["Layouts", "Menus"]

    @pytest.mark.asyncio
    async def test__leaf__returns_empty_items(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/api/navigation/c.html")

        assert response.status == 200
        data = await response.json()
        assert data["items"] == []

    @pytest.mark.asyncio
    async def test__nonexistent_section__returns_404(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/api/navigation/nonexistent")

        assert response.status == 404
        data = await response.json()
        assert data["error"] == "Section not found"
        assert data["path"] == "nonexistent"
