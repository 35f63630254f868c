"""Tests for page view API endpoints."""

from typing import Any

import pytest
from guidenav.app_keys import views_key
from guidenav.config import Config
from guidenav.core.language import MemoryPreferenceStore
from guidenav.server import create_app


@pytest.fixture
def app(test_config: Config):
    return create_app(test_config, preference_store=MemoryPreferenceStore())


async def _open_view(client: Any, active: str | None = "/a/x") -> dict[str, Any]:
    response = await client.post("/api/views", json={"active": active})
    assert response.status == 201
    return await response.json()


class TestCreateView:
    """Tests for POST /api/views."""

    @pytest.mark.asyncio
    async def test__active_page__returns_expanded_render(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)

        data = await _open_view(client)

        assert data["id"]
        assert data["active"] == "/a/x"
        assert data["items"][0]["expanded"] is True
        assert len(app[views_key]) == 1

    @pytest.mark.asyncio
    async def test__empty_body__opens_collapsed_view(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)

        response = await client.post("/api/views")

        assert response.status == 201
        data = await response.json()
        assert data["active"] is None

    @pytest.mark.asyncio
    async def test__invalid_active__returns_400(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)

        response = await client.post("/api/views", json={"active": 5})

        assert response.status == 400

    @pytest.mark.asyncio
    async def test__non_object_body__returns_400(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)

        response = await client.post("/api/views", json=["/a/x"])

        assert response.status == 400
        data = await response.json()
        assert data["error"] == "JSON body must be an object"


class TestToggleSection:
    """Tests for POST /api/views/{id}/toggle."""

    @pytest.mark.asyncio
    async def test__toggle_by_url__returns_subtree(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)
        view = await _open_view(client)

        response = await client.post(
            f"/api/views/{view['id']}/toggle",
            json={"url": "/b/index.html"},
        )

        assert response.status == 200
        data = await response.json()
        assert data["item"]["expanded"] is True
        assert [child["label"] for child in data["item"]["children"]] == ["Layouts", "Menus"]

    @pytest.mark.asyncio
    async def test__state_persists_between_requests(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)
        view = await _open_view(client)
        await client.post(f"/api/views/{view['id']}/toggle", json={"id": 7})
        await client.post(f"/api/views/{view['id']}/toggle", json={"url": "/b/index.html"})

        response = await client.get(f"/api/views/{view['id']}")

        data = await response.json()
        interface = data["items"][1]
        assert interface["expanded"] is True
        assert interface["children"][1]["expanded"] is True

    @pytest.mark.asyncio
    async def test__double_toggle__restores_render(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)
        view = await _open_view(client)
        path = f"/api/views/{view['id']}/toggle"

        await client.post(path, json={"url": "/a/index.html"})
        await client.post(path, json={"url": "/a/index.html"})

        response = await client.get(f"/api/views/{view['id']}")
        data = await response.json()
        assert data["items"] == view["items"]

    @pytest.mark.asyncio
    async def test__leaf__returns_400(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)
        view = await _open_view(client)

        response = await client.post(f"/api/views/{view['id']}/toggle", json={"url": "/a/x"})

        assert response.status == 400
        data = await response.json()
        assert data["error"] == "Not a section"

    @pytest.mark.asyncio
    async def test__unknown_node__returns_404(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)
        view = await _open_view(client)

        response = await client.post(
            f"/api/views/{view['id']}/toggle",
            json={"url": "/missing.html"},
        )

        assert response.status == 404
        data = await response.json()
        assert data["target"] == "/missing.html"

    @pytest.mark.asyncio
    async def test__invalid_id__returns_400(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)
        view = await _open_view(client)

        response = await client.post(f"/api/views/{view['id']}/toggle", json={"id": "7"})

        assert response.status == 400

    @pytest.mark.asyncio
    async def test__unknown_view__returns_404(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)

        response = await client.post("/api/views/nope/toggle", json={"url": "/a/index.html"})

        assert response.status == 404
        data = await response.json()
        assert data["error"] == "View not found"


class TestViewHtmlAndDelete:
    """Tests for GET /api/views/{id}/html and DELETE /api/views/{id}."""

    @pytest.mark.asyncio
    async def test__html__renders_nav_list(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)
        view = await _open_view(client)

        response = await client.get(f"/api/views/{view['id']}/html")

        assert response.status == 200
        assert "text/html" in response.headers["Content-Type"]
        html = await response.text()
        assert '<ul id="nav">' in html
        assert '<li class="selected"><a href="/a/x">' in html

    @pytest.mark.asyncio
    async def test__delete__discards_view(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)
        view = await _open_view(client)

        response = await client.delete(f"/api/views/{view['id']}")

        assert response.status == 204
        assert len(app[views_key]) == 0
        follow_up = await client.get(f"/api/views/{view['id']}")
        assert follow_up.status == 404

    @pytest.mark.asyncio
    async def test__delete_unknown__returns_404(self, aiohttp_client: Any, app) -> None:
        client = await aiohttp_client(app)

        response = await client.delete("/api/views/nope")

        assert response.status == 404
